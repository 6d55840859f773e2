from screening.models import CheckKind, CheckStatus
from screening.risk_engine.checks.base import BaseScreeningCheck, find_keyword


class ExportControlCheck(BaseScreeningCheck):
    kind = CheckKind.EXPORT_CONTROL
    source_label = 'Export Control Lists'
    version = 1

    def evaluate(self, subject, context):
        keywords = context.data.high_risk_keywords
        keyword = find_keyword(subject.name, keywords)
        field = 'name'
        if keyword is None:
            keyword = find_keyword(subject.business_description, keywords)
            field = 'business_description'

        if keyword:
            return self.output(
                status=CheckStatus.WARNING,
                has_match=True,
                confidence=0.7,
                matched_entity=keyword,
                details='Entity may be involved in controlled technology sectors.',
                evidence={
                    'matched_keyword': keyword,
                    'matched_field': field,
                    'follow_up': [
                        'Enhanced due diligence recommended',
                        'Review export license requirements',
                    ],
                },
            )

        return self.output(
            status=CheckStatus.PASS,
            has_match=False,
            details='No export control concerns identified.',
        )
