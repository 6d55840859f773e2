from screening.models import CheckKind, CheckStatus
from screening.risk_engine.checks.base import BaseScreeningCheck, find_keyword

ILLUSTRATIVE_ARTICLE_DATE = '2024-09-15'


class AdverseMediaCheck(BaseScreeningCheck):
    kind = CheckKind.ADVERSE_MEDIA
    source_label = 'Adverse Media'
    version = 1

    def evaluate(self, subject, context):
        keyword = find_keyword(subject.name, context.data.high_risk_keywords)
        if not keyword:
            return self.output(
                status=CheckStatus.PASS,
                has_match=False,
                details='No adverse media identified.',
                evidence={'articles': []},
            )

        articles = [
            {
                'title': f'Investigation into {subject.name}',
                'source': context.data.media_source,
                'date': ILLUSTRATIVE_ARTICLE_DATE,
                'severity': 'MEDIUM',
            },
        ]
        return self.output(
            status=CheckStatus.WARNING,
            has_match=True,
            confidence=0.6,
            matched_entity=keyword,
            details='Adverse media coverage found - manual review recommended.',
            evidence={'matched_keyword': keyword, 'articles': articles},
        )
