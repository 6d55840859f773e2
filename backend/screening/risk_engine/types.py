from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Subject:
    name: str
    address: str = ''
    country: str = ''
    tax_identifiers: tuple[str, ...] = ()
    business_description: str | None = None
    reference: str | None = None


@dataclass
class CheckResult:
    check_kind: str
    status: str
    has_match: bool
    confidence: float
    source_label: str
    details: str
    matched_entity: str | None = None
    list_version: str | None = None
    evidence: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Recommendation:
    severity: str
    message: str
    suggested_action: str


@dataclass
class ScreeningResult:
    screening_id: str
    subject: Subject
    checks: dict[str, CheckResult]
    overall_status: str
    recommendations: list[Recommendation]
    next_review_date: datetime
    screening_timestamp: datetime


@dataclass(frozen=True)
class VatValidationRequest:
    jurisdiction: str
    raw_identifier: str


@dataclass
class VatValidationResult:
    valid: bool
    jurisdiction: str
    normalized_identifier: str
    source: str
    registered_name: str | None = None
    registered_address: str | None = None
    error_message: str | None = None
    error_code: str | None = None
    request_identifier: str | None = None
    request_date: str | None = None
    from_cache: bool = False


@dataclass
class BatchItemResult:
    item_key: str
    result: Any = None
    error: str | None = None
    status: str | None = None
    requires_action: bool = True

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class BatchSummary:
    total_items: int
    per_status_counts: dict[str, int]
    items: list[BatchItemResult]
    requested_items: int
    cancelled: bool = False
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def error_count(self) -> int:
        return sum(1 for item in self.items if item.failed)
