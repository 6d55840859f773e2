from screening.models import CheckKind, CheckStatus, RiskTier
from screening.risk_engine.checks.base import BaseScreeningCheck


def country_risk_tier(country_code: str, data) -> str:
    if country_code in data.high_risk_countries:
        return RiskTier.HIGH
    if country_code in data.medium_risk_countries:
        return RiskTier.MEDIUM
    return RiskTier.LOW


class CountryRiskCheck(BaseScreeningCheck):
    kind = CheckKind.COUNTRY_RISK
    source_label = 'Country Risk Assessment'
    version = 1

    def evaluate(self, subject, context):
        country_code = str(subject.country or '').strip().upper()
        tier = country_risk_tier(country_code, context.data)
        evidence = {
            'country': country_code,
            'risk_tier': str(tier),
            'sanctions': tier == RiskTier.HIGH,
            'export_controls': tier == RiskTier.HIGH,
        }

        if tier == RiskTier.HIGH:
            return self.output(
                status=CheckStatus.WARNING,
                has_match=True,
                confidence=0.9,
                matched_entity=country_code,
                details='High-risk jurisdiction - enhanced due diligence required.',
                evidence=evidence,
            )

        return self.output(
            status=CheckStatus.PASS,
            has_match=False,
            details='Elevated-risk jurisdiction.' if tier == RiskTier.MEDIUM else 'Standard risk jurisdiction.',
            evidence=evidence,
        )
