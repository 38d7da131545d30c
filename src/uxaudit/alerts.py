"""Alert decisions for audit history.

The engine only decides *whether* something is worth an alert; delivery
(email, Slack, webhooks) belongs to the channels registered on an
AlertDispatcher.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Union

from uxaudit.config import ScoringThresholds
from uxaudit.logging_config import format_event
from uxaudit.models import AuditRecord, to_jsonable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreDropEvent:
    """Overall or health score fell noticeably between consecutive audits."""

    url: str
    old_score: int
    new_score: int
    old_health_score: Optional[int] = None
    new_health_score: Optional[int] = None
    severity: str = "warning"  # "warning" or "critical"
    kind: str = "score_drop"

    @property
    def score_drop(self) -> int:
        return self.old_score - self.new_score

    @property
    def health_drop(self) -> Optional[int]:
        if self.old_health_score is None or self.new_health_score is None:
            return None
        return self.old_health_score - self.new_health_score

    def to_dict(self) -> dict:
        return to_jsonable(self)


@dataclass(frozen=True)
class AuditCompleteEvent:
    """A scheduled audit finished."""

    url: str
    score: int
    health_score: Optional[int] = None
    source: str = "scheduled"
    completed_at: datetime = field(default_factory=datetime.now)
    kind: str = "audit_complete"

    def to_dict(self) -> dict:
        return to_jsonable(self)


@dataclass(frozen=True)
class AuditFailedEvent:
    """An analysis failed; carries the single human-readable message."""

    url: str
    error: str
    source: str = "unknown"
    kind: str = "audit_failed"

    def to_dict(self) -> dict:
        return to_jsonable(self)


AlertEvent = Union[ScoreDropEvent, AuditCompleteEvent, AuditFailedEvent]
AlertChannel = Callable[[AlertEvent], None]


def is_scheduled(source: str) -> bool:
    """Whether an analysis source names a scheduled run ("scheduled", "scheduled.audit")."""
    return (source or "").lower().startswith("scheduled")


def evaluate_score_drop(
    previous: Optional[AuditRecord],
    current: AuditRecord,
    thresholds: Optional[ScoringThresholds] = None,
) -> Optional[ScoreDropEvent]:
    """Decide whether the change between two audits warrants a score-drop alert.

    Args:
        previous: Earlier audit of the same URL (None for a first audit)
        current: Latest audit
        thresholds: Warning and critical drop thresholds

    Returns:
        ScoreDropEvent when the overall or health score dropped by at least
        the warning threshold, otherwise None
    """
    if previous is None:
        return None

    t = thresholds or ScoringThresholds()
    score_drop = previous.score - current.score
    health_drop = None
    if previous.health_score is not None and current.health_score is not None:
        health_drop = previous.health_score - current.health_score

    largest_drop = max(score_drop, health_drop if health_drop is not None else score_drop)
    if largest_drop < t.score_drop_warning:
        return None

    severity = "critical" if largest_drop >= t.score_drop_critical else "warning"
    return ScoreDropEvent(
        url=current.url,
        old_score=previous.score,
        new_score=current.score,
        old_health_score=previous.health_score,
        new_health_score=current.health_score,
        severity=severity,
    )


class AlertDispatcher:
    """Fans alert events out to registered delivery channels."""

    def __init__(self, channels: Optional[List[AlertChannel]] = None):
        self.channels: List[AlertChannel] = list(channels or [])

    def register(self, channel: AlertChannel) -> None:
        self.channels.append(channel)

    def dispatch(self, event: AlertEvent) -> int:
        """Send an event to every channel.

        A failing channel is logged and skipped; the others still receive
        the event.

        Args:
            event: Alert event

        Returns:
            Number of channels that accepted the event
        """
        delivered = 0
        for channel in self.channels:
            try:
                channel(event)
                delivered += 1
            except Exception as e:
                logger.error(format_event(
                    "alert.channel.error",
                    kind=event.kind,
                    url=event.url,
                    channel=getattr(channel, "__name__", type(channel).__name__),
                    error=str(e),
                ))

        logger.info(format_event(
            f"alert.{event.kind}",
            url=event.url,
            channels=len(self.channels),
            delivered=delivered,
        ))
        return delivered
