from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
import time
from typing import Any, Callable, Iterable

from django.utils import timezone

from screening.risk_engine.types import BatchItemResult, BatchSummary

logger = logging.getLogger(__name__)


@dataclass
class BatchRunner:
    process: Callable[[Any], Any]
    status_of: Callable[[Any], str]
    item_key: Callable[[Any], str] | None = None
    requires_action: Callable[[Any], bool] | None = None
    known_statuses: tuple[str, ...] = ()
    delay_seconds: float = 0.0
    cancel_event: threading.Event | None = None
    sleep: Callable[[float], None] = time.sleep

    def run(self, items: Iterable[Any]) -> BatchSummary:
        items = list(items)
        started_at = timezone.now()
        counts: dict[str, int] = {str(status): 0 for status in self.known_statuses}
        results: list[BatchItemResult] = []
        cancelled = False

        logger.info('Starting batch of %s item(s).', len(items))
        for index, item in enumerate(items):
            if self._is_cancelled() or (index and self._pause()):
                cancelled = True
                logger.info('Batch cancelled after %s of %s item(s).', len(results), len(items))
                break

            key = f'item-{index + 1}'
            try:
                if self.item_key is not None:
                    key = str(self.item_key(item))
                result = self.process(item)
                status = str(self.status_of(result))
                needs_action = bool(self.requires_action(result)) if self.requires_action else False
            except Exception as exc:
                logger.exception('Batch item %s failed.', key)
                results.append(
                    BatchItemResult(
                        item_key=key,
                        error=str(exc) or type(exc).__name__,
                        requires_action=True,
                    ),
                )
                continue

            counts[status] = counts.get(status, 0) + 1
            results.append(
                BatchItemResult(
                    item_key=key,
                    result=result,
                    status=status,
                    requires_action=needs_action,
                ),
            )

        summary = BatchSummary(
            total_items=len(results),
            per_status_counts=counts,
            items=results,
            requested_items=len(items),
            cancelled=cancelled,
            started_at=started_at,
            finished_at=timezone.now(),
        )
        logger.info(
            'Batch finished: %s processed, %s error(s), counts=%s.',
            summary.total_items,
            summary.error_count,
            counts,
        )
        return summary

    def _is_cancelled(self) -> bool:
        return bool(self.cancel_event is not None and self.cancel_event.is_set())

    def _pause(self) -> bool:
        if self.delay_seconds <= 0:
            return False
        if self.cancel_event is not None:
            return self.cancel_event.wait(self.delay_seconds)
        self.sleep(self.delay_seconds)
        return False
