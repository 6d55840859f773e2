from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable

from django.conf import settings
from django.utils import timezone
import requests

from screening.models import ErrorCode, VatSource
from screening.risk_engine.types import VatValidationResult

logger = logging.getLogger(__name__)

DEFAULT_VIES_API_URL = 'https://ec.europa.eu/taxation_customs/vies/rest-api'

# Registry fault identifiers -> error taxonomy. Longer identifiers first so the
# substring scan never picks a shorter one out of a longer name.
FAULT_CODES: tuple[tuple[str, str], ...] = (
    ('GLOBAL_MAX_CONCURRENT_REQ', ErrorCode.SERVER_BUSY),
    ('MS_MAX_CONCURRENT_REQ', ErrorCode.SERVER_BUSY),
    ('INVALID_REQUESTER_INFO', ErrorCode.INVALID_INPUT),
    ('SERVICE_UNAVAILABLE', ErrorCode.SERVICE_UNAVAILABLE),
    ('MS_UNAVAILABLE', ErrorCode.MS_UNAVAILABLE),
    ('INVALID_INPUT', ErrorCode.INVALID_INPUT),
    ('SERVER_BUSY', ErrorCode.SERVER_BUSY),
    ('TIMEOUT', ErrorCode.TIMEOUT),
)

ERROR_MESSAGES = {
    ErrorCode.INVALID_INPUT: 'Invalid country code or VAT number format',
    ErrorCode.SERVICE_UNAVAILABLE: 'VIES service is currently unavailable',
    ErrorCode.MS_UNAVAILABLE: 'Member State service is unavailable',
    ErrorCode.TIMEOUT: 'Request timeout - please try again later',
    ErrorCode.SERVER_BUSY: 'VIES server is busy - please try again later',
}

RETRYABLE_CODES = frozenset({
    ErrorCode.SERVICE_UNAVAILABLE,
    ErrorCode.MS_UNAVAILABLE,
    ErrorCode.SERVER_BUSY,
    ErrorCode.TIMEOUT,
})

UNDISCLOSED_VALUES = {'', '---'}


class RegistryError(Exception):
    def __init__(self, code: str, message: str, detail: str = ''):
        super().__init__(message)
        self.code = code
        self.message = message
        self.detail = detail


def registry_error(code: str, detail: str = '') -> RegistryError:
    if code in ERROR_MESSAGES:
        return RegistryError(code, ERROR_MESSAGES[code], detail=detail)
    return RegistryError(ErrorCode.ERROR, f'VIES service error: {detail}', detail=detail)


def map_registry_fault(fault_text: str) -> RegistryError:
    upper_text = str(fault_text or '').upper()
    for identifier, code in FAULT_CODES:
        if identifier in upper_text:
            return registry_error(code, detail=str(fault_text))
    return registry_error(ErrorCode.ERROR, detail=str(fault_text))


def _fault_text(payload: dict[str, Any]) -> str:
    wrappers = payload.get('errorWrappers') or []
    parts = []
    for wrapper in wrappers:
        if isinstance(wrapper, dict):
            parts.append(' '.join(str(wrapper.get(key) or '') for key in ('error', 'message')).strip())
        else:
            parts.append(str(wrapper))
    if payload.get('userError') and payload.get('userError') not in {'VALID', 'INVALID'}:
        parts.append(str(payload['userError']))
    return '; '.join(part for part in parts if part)


def _clean(value: Any) -> str | None:
    text = str(value or '').strip()
    return None if text in UNDISCLOSED_VALUES else text


class RegistryClient:
    def __init__(
        self,
        base_url: str = DEFAULT_VIES_API_URL,
        timeout: float = 10.0,
        retry_attempts: int = 2,
        retry_backoff_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = float(timeout)
        self.retry_attempts = max(int(retry_attempts), 1)
        self.retry_backoff_seconds = max(float(retry_backoff_seconds), 0.0)
        self.sleep = sleep
        self._session: requests.Session | None = None
        self._session_lock = threading.Lock()

    @classmethod
    def from_settings(cls) -> RegistryClient:
        return cls(
            base_url=getattr(settings, 'VIES_API_URL', DEFAULT_VIES_API_URL),
            timeout=getattr(settings, 'VIES_TIMEOUT_SECONDS', 10.0),
            retry_attempts=getattr(settings, 'VIES_RETRY_ATTEMPTS', 2),
            retry_backoff_seconds=getattr(settings, 'VIES_RETRY_BACKOFF_SECONDS', 1.0),
        )

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            with self._session_lock:
                if self._session is None:
                    self._session = self._create_session()
                    logger.info('VIES session initialized for %s.', self.base_url)
        return self._session

    @property
    def has_session(self) -> bool:
        return self._session is not None

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update({
            'Accept': 'application/json',
            'Content-Type': 'application/json',
            'User-Agent': 'PartnerScreening/1.0',
        })
        return session

    def close(self) -> None:
        with self._session_lock:
            if self._session is not None:
                self._session.close()
                self._session = None

    def __enter__(self) -> RegistryClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def validate(
        self,
        jurisdiction: str,
        normalized_identifier: str,
        timeout: float | None = None,
    ) -> VatValidationResult:
        budget = self.timeout if timeout is None else float(timeout)
        deadline = time.monotonic() + budget
        attempt = 0

        while True:
            attempt += 1
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                error = registry_error(ErrorCode.TIMEOUT, detail=f'deadline of {budget}s exhausted')
                break

            try:
                payload = self._check_vat(jurisdiction, normalized_identifier, remaining)
                return self._build_result(jurisdiction, normalized_identifier, payload)
            except RegistryError as exc:
                error = exc
            except Exception as exc:
                logger.exception('Unexpected VIES failure for %s%s.', jurisdiction, normalized_identifier)
                error = registry_error(ErrorCode.ERROR, detail=str(exc))
                break

            if error.code not in RETRYABLE_CODES or attempt >= self.retry_attempts:
                break

            backoff = self.retry_backoff_seconds * (2 ** (attempt - 1))
            if backoff >= deadline - time.monotonic():
                break
            logger.warning(
                'VIES attempt %s/%s for %s%s failed with %s, retrying in %ss.',
                attempt,
                self.retry_attempts,
                jurisdiction,
                normalized_identifier,
                error.code,
                backoff,
            )
            self.sleep(backoff)

        logger.warning(
            'VIES validation for %s%s failed: %s (%s).',
            jurisdiction,
            normalized_identifier,
            error.code,
            error.detail or error.message,
        )
        return VatValidationResult(
            valid=False,
            jurisdiction=jurisdiction,
            normalized_identifier=normalized_identifier,
            source=VatSource.ERROR,
            error_message=error.message,
            error_code=str(error.code),
            request_date=timezone.now().isoformat(),
        )

    def check_service_status(self, timeout: float | None = None) -> dict[str, Any]:
        try:
            response = self.session.get(
                f'{self.base_url}/check-status',
                timeout=self.timeout if timeout is None else timeout,
            )
            payload = self._parse_payload(response)
        except requests.Timeout as exc:
            error = registry_error(ErrorCode.TIMEOUT, detail=str(exc))
            return {'available': False, 'message': f'VIES service unavailable: {error.message}'}
        except requests.RequestException as exc:
            error = registry_error(ErrorCode.SERVICE_UNAVAILABLE, detail=str(exc))
            return {'available': False, 'message': f'VIES service unavailable: {error.message}'}
        except RegistryError as error:
            return {'available': False, 'message': f'VIES service unavailable: {error.message}'}

        available = bool((payload.get('vow') or {}).get('available', response.ok))
        countries = {
            str(item.get('countryCode')): str(item.get('availability'))
            for item in (payload.get('countries') or [])
            if isinstance(item, dict) and item.get('countryCode')
        }
        return {
            'available': available,
            'message': 'VIES service is available' if available else 'VIES service reports an outage',
            'countries': countries,
        }

    def _check_vat(self, jurisdiction: str, normalized_identifier: str, timeout: float) -> dict[str, Any]:
        try:
            response = self.session.post(
                f'{self.base_url}/check-vat-number',
                json={'countryCode': jurisdiction, 'vatNumber': normalized_identifier},
                timeout=timeout,
            )
        except requests.Timeout as exc:
            raise registry_error(ErrorCode.TIMEOUT, detail=str(exc)) from exc
        except requests.ConnectionError as exc:
            raise registry_error(ErrorCode.SERVICE_UNAVAILABLE, detail=str(exc)) from exc
        except requests.RequestException as exc:
            raise registry_error(ErrorCode.ERROR, detail=str(exc)) from exc

        payload = self._parse_payload(response)
        fault_text = _fault_text(payload)
        if fault_text or payload.get('actionSucceed') is False:
            raise map_registry_fault(fault_text or f'HTTP {response.status_code}')

        if response.status_code >= 500:
            raise registry_error(ErrorCode.SERVICE_UNAVAILABLE, detail=f'HTTP {response.status_code}')
        if response.status_code >= 400:
            raise registry_error(ErrorCode.INVALID_INPUT, detail=f'HTTP {response.status_code}')
        if 'valid' not in payload:
            raise registry_error(ErrorCode.ERROR, detail='response did not include a validity flag')
        return payload

    def _parse_payload(self, response: requests.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if isinstance(payload, dict):
            return payload

        # Unreadable bodies are a distinct outcome, not a silent default.
        if response.status_code >= 500:
            raise registry_error(ErrorCode.SERVICE_UNAVAILABLE, detail=f'HTTP {response.status_code}')
        raise registry_error(
            ErrorCode.ERROR,
            detail=f'unreadable response (HTTP {response.status_code})',
        )

    def _build_result(
        self,
        jurisdiction: str,
        normalized_identifier: str,
        payload: dict[str, Any],
    ) -> VatValidationResult:
        valid = payload.get('valid') is True
        return VatValidationResult(
            valid=valid,
            jurisdiction=jurisdiction,
            normalized_identifier=normalized_identifier,
            source=VatSource.REGISTRY,
            registered_name=_clean(payload.get('name') or payload.get('traderName')),
            registered_address=_clean(payload.get('address') or payload.get('traderAddress')),
            error_message=None if valid else 'VAT number not found in VIES database',
            request_identifier=_clean(payload.get('requestIdentifier')),
            request_date=_clean(payload.get('requestDate')) or timezone.now().isoformat(),
        )


class MockRegistryClient(RegistryClient):
    # Identifiers containing 999 or 000 are unknown to the development registry.
    def _check_vat(self, jurisdiction, normalized_identifier, timeout):
        if '999' in normalized_identifier or '000' in normalized_identifier:
            return {'valid': False, 'requestDate': timezone.now().isoformat()}
        return {
            'valid': True,
            'name': f'Mock Company for {normalized_identifier}',
            'address': f'Mock Address, {jurisdiction}-12345 Mock City',
            'requestDate': timezone.now().isoformat(),
            'requestIdentifier': f'MOCK-{jurisdiction}{normalized_identifier}',
        }

    def check_service_status(self, timeout=None):
        return {'available': True, 'message': 'VIES mock registry is available', 'countries': {}}
