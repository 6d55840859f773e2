from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from typing import Any

from screening.models import CheckStatus, ErrorCode
from screening.risk_engine.types import CheckResult, Subject

logger = logging.getLogger(__name__)

_PUNCTUATION_PATTERN = re.compile(r'[^\w\s&]')
_WHITESPACE_PATTERN = re.compile(r'\s+')


def normalize_name(value: str | None) -> str:
    cleaned = _PUNCTUATION_PATTERN.sub(' ', str(value or '').upper())
    return _WHITESPACE_PATTERN.sub(' ', cleaned).strip()


def find_keyword(text: str | None, keywords) -> str | None:
    normalized = normalize_name(text)
    if not normalized:
        return None
    for keyword in keywords:
        if keyword and keyword in normalized:
            return keyword
    return None


@dataclass
class CheckContext:
    data: Any
    pep_scorer: Any = None


class BaseScreeningCheck:
    kind = ''
    source_label = ''
    version = 1

    def run(self, subject: Subject, context: CheckContext) -> CheckResult:
        try:
            return self.evaluate(subject, context)
        except Exception as exc:
            logger.exception('%s check failed for subject %r.', self.kind, subject.name)
            return self.error(f'{self.source_label} check failed: {exc}', error_code=ErrorCode.ERROR)

    def evaluate(self, subject: Subject, context: CheckContext) -> CheckResult:
        raise NotImplementedError

    def output(
        self,
        *,
        status: str,
        has_match: bool,
        details: str,
        confidence: float = 0.0,
        matched_entity: str | None = None,
        list_version: str | None = None,
        evidence: dict[str, Any] | None = None,
    ) -> CheckResult:
        return CheckResult(
            check_kind=self.kind,
            status=status,
            has_match=has_match,
            confidence=max(0.0, min(1.0, confidence)) if has_match else 0.0,
            source_label=self.source_label,
            details=details,
            matched_entity=matched_entity,
            list_version=list_version,
            evidence=evidence or {},
        )

    def error(self, details: str, error_code: str = ErrorCode.ERROR) -> CheckResult:
        return self.output(
            status=CheckStatus.ERROR,
            has_match=False,
            details=details,
            evidence={'error_code': str(error_code)},
        )
