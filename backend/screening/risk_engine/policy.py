from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Mapping

from django.conf import settings

from screening.models import CHECK_KIND_ORDER, CheckKind, CheckStatus, RecommendationSeverity
from screening.risk_engine.types import CheckResult, Recommendation

STATUS_PRECEDENCE = (
    CheckStatus.FAIL,
    CheckStatus.ERROR,
    CheckStatus.WARNING,
    CheckStatus.PASS,
)

AUTO_APPROVAL_STATUS = CheckStatus.PASS
MANUAL_REVIEW_STATUSES = (CheckStatus.FAIL, CheckStatus.ERROR, CheckStatus.WARNING)

# (kind, triggering status) -> recommendation
RECOMMENDATION_RULES: dict[tuple[str, str], Recommendation] = {
    (CheckKind.SANCTIONS, CheckStatus.FAIL): Recommendation(
        severity=RecommendationSeverity.CRITICAL,
        message='DO NOT PROCEED - Sanctions list match found',
        suggested_action='Contact compliance team immediately',
    ),
    (CheckKind.EXPORT_CONTROL, CheckStatus.WARNING): Recommendation(
        severity=RecommendationSeverity.WARNING,
        message='Enhanced due diligence required',
        suggested_action='Review export control regulations',
    ),
    (CheckKind.PEP, CheckStatus.WARNING): Recommendation(
        severity=RecommendationSeverity.WARNING,
        message='PEPs connection identified',
        suggested_action='Conduct enhanced KYC procedures',
    ),
    (CheckKind.ADVERSE_MEDIA, CheckStatus.WARNING): Recommendation(
        severity=RecommendationSeverity.INFO,
        message='Adverse media found',
        suggested_action='Review media articles and assess risk',
    ),
    (CheckKind.COUNTRY_RISK, CheckStatus.WARNING): Recommendation(
        severity=RecommendationSeverity.WARNING,
        message='High-risk jurisdiction',
        suggested_action='Apply enhanced monitoring procedures',
    ),
}


def aggregate_status(statuses: Iterable[str]) -> str:
    present = {str(status) for status in statuses}
    if not present:
        raise ValueError('Cannot aggregate an empty set of check statuses.')

    unknown = present - {str(status) for status in STATUS_PRECEDENCE}
    if unknown:
        raise ValueError(f'Unknown check status: {", ".join(sorted(unknown))}')

    return next(status for status in STATUS_PRECEDENCE if status in present)


def build_recommendations(checks: Mapping[str, CheckResult]) -> list[Recommendation]:
    recommendations = []
    for kind in CHECK_KIND_ORDER:
        check = checks.get(kind)
        if check is None:
            continue
        recommendation = RECOMMENDATION_RULES.get((kind, check.status))
        if recommendation is not None:
            recommendations.append(recommendation)
    return recommendations


def review_interval_days(overall_status: str) -> int:
    if overall_status == CheckStatus.PASS:
        return int(getattr(settings, 'SCREENING_REVIEW_INTERVAL_DAYS', 365))
    return int(getattr(settings, 'SCREENING_HIGH_RISK_REVIEW_INTERVAL_DAYS', 182))


def next_review_date(overall_status: str, screened_at: datetime) -> datetime:
    return screened_at + timedelta(days=review_interval_days(overall_status))


def requires_action(overall_status: str) -> bool:
    return overall_status != AUTO_APPROVAL_STATUS
