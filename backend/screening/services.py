from __future__ import annotations

import logging
import threading
from typing import Any, Iterable

from django.conf import settings
from django.core.cache import caches
from django.utils import timezone

from screening.models import CheckKind
from screening.risk_engine.batch import BatchRunner
from screening.risk_engine.checks import get_enabled_checks
from screening.risk_engine.data_sources import ScreeningDataError, get_screening_data
from screening.risk_engine.engine import ScreeningEngine
from screening.risk_engine.policy import (
    AUTO_APPROVAL_STATUS,
    MANUAL_REVIEW_STATUSES,
    STATUS_PRECEDENCE,
    requires_action,
)
from screening.risk_engine.types import (
    BatchItemResult,
    BatchSummary,
    CheckResult,
    ScreeningResult,
    Subject,
    VatValidationRequest,
    VatValidationResult,
)
from screening.vat.formats import supported_jurisdictions
from screening.vat.registry import MockRegistryClient, RegistryClient
from screening.vat.validation import VAT_STATUSES, VatValidator, vat_status

logger = logging.getLogger(__name__)

_registry_client: RegistryClient | None = None
_registry_client_lock = threading.Lock()


def get_registry_client() -> RegistryClient:
    global _registry_client
    if _registry_client is None:
        with _registry_client_lock:
            if _registry_client is None:
                client_class = MockRegistryClient if getattr(settings, 'VIES_USE_MOCK', False) else RegistryClient
                _registry_client = client_class.from_settings()
    return _registry_client


def close_registry_client() -> None:
    global _registry_client
    with _registry_client_lock:
        if _registry_client is not None:
            _registry_client.close()
            _registry_client = None


def _vat_cache_alias() -> str:
    return getattr(settings, 'VIES_CACHE_ALIAS', 'default')


def get_vat_validator(client: RegistryClient | None = None) -> VatValidator:
    return VatValidator(
        client=client or get_registry_client(),
        cache_ttl_seconds=int(getattr(settings, 'VIES_CACHE_TTL_SECONDS', 0)),
        cache_alias=_vat_cache_alias(),
    )


def clear_vat_cache() -> None:
    caches[_vat_cache_alias()].clear()


def _screening_timeout(timeout: float | None) -> float | None:
    if timeout is not None:
        return timeout
    configured = getattr(settings, 'SCREENING_CHECK_TIMEOUT_SECONDS', None)
    return float(configured) if configured else None


def screen_subject(subject: Subject, timeout: float | None = None) -> ScreeningResult:
    return ScreeningEngine().run(subject, timeout=_screening_timeout(timeout))


def validate_vat_id(
    jurisdiction: str,
    raw_identifier: str,
    timeout: float | None = None,
) -> VatValidationResult:
    return get_vat_validator().validate(jurisdiction, raw_identifier, timeout=timeout)


def screen_subjects(
    subjects: Iterable[Subject],
    cancel_event: threading.Event | None = None,
    delay_seconds: float | None = None,
) -> BatchSummary:
    engine = ScreeningEngine()
    timeout = _screening_timeout(None)
    runner = BatchRunner(
        process=lambda subject: engine.run(subject, timeout=timeout),
        status_of=lambda result: result.overall_status,
        item_key=lambda subject: subject.reference or subject.name,
        requires_action=lambda result: requires_action(result.overall_status),
        known_statuses=STATUS_PRECEDENCE,
        delay_seconds=_delay(delay_seconds, 'SCREENING_BATCH_DELAY_SECONDS', 1.0),
        cancel_event=cancel_event,
    )
    return runner.run(subjects)


def validate_vat_ids(
    vat_requests: Iterable[VatValidationRequest],
    cancel_event: threading.Event | None = None,
    delay_seconds: float | None = None,
) -> BatchSummary:
    validator = get_vat_validator()
    runner = BatchRunner(
        process=lambda request: validator.validate(request.jurisdiction, request.raw_identifier),
        status_of=vat_status,
        item_key=lambda request: f'{request.jurisdiction}{request.raw_identifier}',
        requires_action=lambda result: not result.valid,
        known_statuses=VAT_STATUSES,
        delay_seconds=_delay(delay_seconds, 'VIES_BATCH_DELAY_SECONDS', 0.2),
        cancel_event=cancel_event,
    )
    return runner.run(vat_requests)


def _delay(value: float | None, setting_name: str, default: float) -> float:
    if value is not None:
        return max(float(value), 0.0)
    return max(float(getattr(settings, setting_name, default)), 0.0)


def get_screening_configuration() -> dict[str, Any]:
    enabled_checks = get_enabled_checks(getattr(settings, 'SCREENING_ENABLED_CHECKS', None))
    try:
        data = get_screening_data()
        enabled_lists = [item.label for item in data.sanctions_lists]
        data_origin = data.origin
    except ScreeningDataError as exc:
        logger.error('Screening configuration requested while data is unavailable: %s', exc)
        enabled_lists = []
        data_origin = 'unavailable'

    return {
        'enabled_lists': enabled_lists,
        'enabled_checks': [CheckKind(check.kind).label for check in enabled_checks],
        'review_frequency_days': {
            'standard': int(getattr(settings, 'SCREENING_REVIEW_INTERVAL_DAYS', 365)),
            'elevated': int(getattr(settings, 'SCREENING_HIGH_RISK_REVIEW_INTERVAL_DAYS', 182)),
        },
        'status_precedence': [str(status) for status in STATUS_PRECEDENCE],
        'auto_approval_threshold': str(AUTO_APPROVAL_STATUS),
        'manual_review_required': [str(status) for status in MANUAL_REVIEW_STATUSES],
        'parallel_checks': bool(getattr(settings, 'SCREENING_PARALLEL_CHECKS', False)),
        'data_origin': data_origin,
        'supported_vat_jurisdictions': [item['code'] for item in supported_jurisdictions()],
        'version': settings.APP_VERSION,
    }


def check_screening_service_status() -> dict[str, Any]:
    try:
        data = get_screening_data()
    except ScreeningDataError as exc:
        return {
            'available': False,
            'message': f'Screening service unavailable: {exc}',
            'timestamp': timezone.now(),
        }

    return {
        'available': True,
        'message': 'Screening service is available',
        'version': settings.APP_VERSION,
        'lists_status': {item.key: 'ONLINE' for item in data.sanctions_lists},
        'timestamp': timezone.now(),
    }


def check_registry_service_status() -> dict[str, Any]:
    status = get_registry_client().check_service_status()
    return {**status, 'timestamp': timezone.now()}


def serialize_check_result(check: CheckResult) -> dict[str, Any]:
    return {
        'check_kind': str(check.check_kind),
        'status': str(check.status),
        'has_match': check.has_match,
        'confidence': check.confidence,
        'matched_entity': check.matched_entity,
        'source_label': check.source_label,
        'list_version': check.list_version,
        'details': check.details,
        'evidence': dict(check.evidence),
    }


def serialize_screening_result(result: ScreeningResult) -> dict[str, Any]:
    subject = result.subject
    return {
        'screening_id': result.screening_id,
        'subject': {
            'name': subject.name,
            'address': subject.address,
            'country': subject.country,
            'tax_identifiers': list(subject.tax_identifiers),
            'business_description': subject.business_description,
            'reference': subject.reference,
        },
        'checks': {kind: serialize_check_result(check) for kind, check in result.checks.items()},
        'overall_status': str(result.overall_status),
        'requires_action': requires_action(result.overall_status),
        'recommendations': [
            {
                'severity': str(item.severity),
                'message': item.message,
                'suggested_action': item.suggested_action,
            }
            for item in result.recommendations
        ],
        'next_review_date': result.next_review_date,
        'screening_timestamp': result.screening_timestamp,
    }


def serialize_vat_result(result: VatValidationResult) -> dict[str, Any]:
    return {
        'valid': result.valid,
        'jurisdiction': result.jurisdiction,
        'normalized_identifier': result.normalized_identifier,
        'registered_name': result.registered_name,
        'registered_address': result.registered_address,
        'error_message': result.error_message,
        'error_code': str(result.error_code) if result.error_code else None,
        'source': str(result.source),
        'request_identifier': result.request_identifier,
        'request_date': result.request_date,
        'from_cache': result.from_cache,
    }


def _serialize_batch_item(item: BatchItemResult) -> dict[str, Any]:
    payload: dict[str, Any] = {
        'item_key': item.item_key,
        'status': item.status,
        'requires_action': item.requires_action,
    }
    if item.failed:
        payload['error'] = item.error
    elif isinstance(item.result, ScreeningResult):
        payload['result'] = serialize_screening_result(item.result)
    elif isinstance(item.result, VatValidationResult):
        payload['result'] = serialize_vat_result(item.result)
    return payload


def serialize_batch_summary(summary: BatchSummary) -> dict[str, Any]:
    return {
        'total_items': summary.total_items,
        'requested_items': summary.requested_items,
        'per_status_counts': dict(summary.per_status_counts),
        'error_count': summary.error_count,
        'cancelled': summary.cancelled,
        'started_at': summary.started_at,
        'finished_at': summary.finished_at,
        'results': [_serialize_batch_item(item) for item in summary.items],
    }
