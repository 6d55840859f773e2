from screening.models import CheckKind
from screening.risk_engine.checks.adverse_media import AdverseMediaCheck
from screening.risk_engine.checks.country_risk import CountryRiskCheck
from screening.risk_engine.checks.export_control import ExportControlCheck
from screening.risk_engine.checks.pep import PepCheck
from screening.risk_engine.checks.sanctions import SanctionsCheck

DEFAULT_CHECKS = [
    SanctionsCheck,
    ExportControlCheck,
    PepCheck,
    AdverseMediaCheck,
    CountryRiskCheck,
]

CHECKS_BY_KIND = {check.kind: check for check in DEFAULT_CHECKS}


def get_enabled_checks(enabled_kinds=None) -> list:
    if enabled_kinds is None:
        return list(DEFAULT_CHECKS)
    wanted = {str(kind).upper() for kind in enabled_kinds}
    unknown = wanted - {str(kind) for kind in CheckKind.values}
    if unknown:
        raise ValueError(f'Unknown check kinds: {", ".join(sorted(unknown))}')
    return [check for check in DEFAULT_CHECKS if str(check.kind) in wanted]
