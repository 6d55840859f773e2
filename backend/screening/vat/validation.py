from __future__ import annotations

from dataclasses import asdict, dataclass
import logging

from django.core.cache import caches

from screening.models import ErrorCode, VatSource
from screening.risk_engine.types import VatValidationResult
from screening.vat.formats import (
    expected_format,
    is_supported_jurisdiction,
    normalize_identifier,
    normalize_jurisdiction,
    validate_format,
)

logger = logging.getLogger(__name__)

VAT_STATUS_VALID = 'VALID'
VAT_STATUS_INVALID = 'INVALID'
VAT_STATUSES = (VAT_STATUS_VALID, VAT_STATUS_INVALID, VatSource.FORMAT_CHECK, VatSource.ERROR)


def vat_status(result: VatValidationResult) -> str:
    if result.valid:
        return VAT_STATUS_VALID
    if result.source == VatSource.REGISTRY:
        return VAT_STATUS_INVALID
    return str(result.source)


def format_rejection(jurisdiction: str, identifier: str) -> VatValidationResult:
    if is_supported_jurisdiction(jurisdiction):
        message = f'VAT number format invalid for {jurisdiction}. Expected pattern: {expected_format(jurisdiction)}'
    else:
        message = f'No validation pattern available for country code: {jurisdiction or "(empty)"}'
    return VatValidationResult(
        valid=False,
        jurisdiction=jurisdiction,
        normalized_identifier=identifier,
        source=VatSource.FORMAT_CHECK,
        error_message=message,
        error_code=ErrorCode.FORMAT_CHECK,
    )


@dataclass
class VatValidator:
    client: object
    cache_ttl_seconds: int = 0
    cache_alias: str = 'default'

    def validate(
        self,
        jurisdiction: str,
        raw_identifier: str,
        timeout: float | None = None,
    ) -> VatValidationResult:
        code = normalize_jurisdiction(jurisdiction)
        identifier = normalize_identifier(raw_identifier)

        if not validate_format(code, identifier):
            logger.info('VAT %s%s rejected by format check.', code, identifier)
            return format_rejection(code, identifier)

        cached = self._get_cached(code, identifier)
        if cached is not None:
            return cached

        result = self.client.validate(code, identifier, timeout=timeout)
        if result.source == VatSource.REGISTRY:
            self._store(result)
        return result

    def _cache_key(self, jurisdiction: str, identifier: str) -> str:
        return f'vies:{jurisdiction}:{identifier}'

    def _get_cached(self, jurisdiction: str, identifier: str) -> VatValidationResult | None:
        if self.cache_ttl_seconds <= 0:
            return None
        try:
            payload = caches[self.cache_alias].get(self._cache_key(jurisdiction, identifier))
        except Exception:
            logger.exception('VIES cache lookup failed for %s%s, asking the registry.', jurisdiction, identifier)
            return None
        if payload is None:
            return None
        logger.debug('Returning cached VIES result for %s%s.', jurisdiction, identifier)
        return VatValidationResult(**{**payload, 'from_cache': True})

    def _store(self, result: VatValidationResult) -> None:
        if self.cache_ttl_seconds <= 0:
            return
        try:
            caches[self.cache_alias].set(
                self._cache_key(result.jurisdiction, result.normalized_identifier),
                asdict(result),
                timeout=self.cache_ttl_seconds,
            )
        except Exception:
            logger.exception(
                'VIES cache write failed for %s%s.',
                result.jurisdiction,
                result.normalized_identifier,
            )
