from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from django.conf import settings
from django.utils.module_loading import import_string

from screening.models import CheckKind, CheckStatus
from screening.risk_engine.checks.base import BaseScreeningCheck, find_keyword
from screening.risk_engine.types import Subject

DEFAULT_PEP_SCORER = 'screening.risk_engine.checks.pep.KeywordPepScorer'


@dataclass(frozen=True)
class PepAssessment:
    status: str
    confidence: float = 0.0
    matched_entity: str | None = None
    source: str = ''


class PepRiskScorer(Protocol):
    def score(self, subject: Subject) -> PepAssessment:
        ...


class KeywordPepScorer:
    source = 'PEP watch list'

    def __init__(self, data=None):
        self.indicators = tuple(getattr(data, 'pep_indicators', ()) or ())

    def score(self, subject: Subject) -> PepAssessment:
        matched = find_keyword(subject.name, self.indicators)
        if matched:
            return PepAssessment(
                status=CheckStatus.WARNING,
                confidence=0.75,
                matched_entity=matched,
                source=self.source,
            )
        return PepAssessment(status=CheckStatus.PASS, source=self.source)


def get_pep_scorer(data=None) -> PepRiskScorer:
    scorer_path = getattr(settings, 'SCREENING_PEP_SCORER', '') or DEFAULT_PEP_SCORER
    return import_string(scorer_path)(data)


class PepCheck(BaseScreeningCheck):
    kind = CheckKind.PEP
    source_label = 'PEPs Check'
    version = 1

    def evaluate(self, subject, context):
        scorer = context.pep_scorer or get_pep_scorer(context.data)
        assessment = scorer.score(subject)

        if assessment.status not in {CheckStatus.WARNING, CheckStatus.PASS}:
            raise ValueError(f'PEP scorer returned unsupported status {assessment.status!r}.')

        evidence = {'scorer': type(scorer).__name__, 'source': assessment.source}
        if assessment.status == CheckStatus.WARNING:
            return self.output(
                status=CheckStatus.WARNING,
                has_match=True,
                confidence=assessment.confidence,
                matched_entity=assessment.matched_entity,
                details='Potential connection to politically exposed person identified.',
                evidence=evidence,
            )

        return self.output(
            status=CheckStatus.PASS,
            has_match=False,
            details='No PEPs connections identified.',
            evidence=evidence,
        )
