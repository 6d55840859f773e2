from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
import logging
from typing import Any
import uuid

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils import timezone

from screening.models import ErrorCode
from screening.risk_engine.checks import get_enabled_checks
from screening.risk_engine.checks.base import BaseScreeningCheck, CheckContext
from screening.risk_engine.data_sources import ScreeningData, ScreeningDataError, get_screening_data
from screening.risk_engine.policy import aggregate_status, build_recommendations, next_review_date
from screening.risk_engine.types import CheckResult, ScreeningResult, Subject

logger = logging.getLogger(__name__)


def generate_screening_id() -> str:
    return f'SCR-{uuid.uuid4().hex.upper()}'


@dataclass
class ScreeningEngine:
    data: ScreeningData | None = None
    pep_scorer: Any = None
    check_classes: list | None = None
    parallel: bool | None = None
    version: int = 1

    def run(self, subject: Subject, timeout: float | None = None) -> ScreeningResult:
        screened_at = timezone.now()
        checks = self._build_checks()

        try:
            data = self.data or get_screening_data()
        except ScreeningDataError as exc:
            logger.error('Screening data unavailable, all checks resolve to ERROR: %s', exc)
            results = [check.error(f'Screening data unavailable: {exc}') for check in checks]
        else:
            context = CheckContext(data=data, pep_scorer=self.pep_scorer)
            results = self._run_checks(checks, subject, context, timeout)

        check_map: dict[str, CheckResult] = {str(result.check_kind): result for result in results}
        overall_status = aggregate_status(result.status for result in results)

        result = ScreeningResult(
            screening_id=generate_screening_id(),
            subject=subject,
            checks=check_map,
            overall_status=overall_status,
            recommendations=build_recommendations(check_map),
            next_review_date=next_review_date(overall_status, screened_at),
            screening_timestamp=screened_at,
        )
        logger.info(
            'Screening %s for %r completed with status %s.',
            result.screening_id,
            subject.name,
            overall_status,
        )
        return result

    def _build_checks(self) -> list[BaseScreeningCheck]:
        if self.check_classes is not None:
            check_classes = list(self.check_classes)
        else:
            check_classes = get_enabled_checks(getattr(settings, 'SCREENING_ENABLED_CHECKS', None))

        if not check_classes:
            raise ImproperlyConfigured('At least one screening check must be enabled.')
        return [check_class() for check_class in check_classes]

    def _run_checks(
        self,
        checks: list[BaseScreeningCheck],
        subject: Subject,
        context: CheckContext,
        timeout: float | None,
    ) -> list[CheckResult]:
        parallel = self.parallel
        if parallel is None:
            parallel = bool(getattr(settings, 'SCREENING_PARALLEL_CHECKS', False))

        if not parallel and timeout is None:
            return [check.run(subject, context) for check in checks]

        # A single worker keeps the checks sequential while still honouring the deadline.
        executor = ThreadPoolExecutor(
            max_workers=len(checks) if parallel else 1,
            thread_name_prefix='screening-check',
        )
        try:
            futures = [(executor.submit(check.run, subject, context), check) for check in checks]
            done, _ = wait([future for future, _check in futures], timeout=timeout)

            results = []
            for future, check in futures:
                if future in done:
                    results.append(future.result())
                    continue
                future.cancel()
                logger.warning('%s check for %r exceeded the %ss deadline.', check.kind, subject.name, timeout)
                results.append(
                    check.error(
                        f'{check.source_label} check did not finish within {timeout}s (timeout).',
                        error_code=ErrorCode.TIMEOUT,
                    ),
                )
            return results
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
