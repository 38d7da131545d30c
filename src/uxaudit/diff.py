"""Audit diff - compare two chronologically ordered audits of one URL."""

import logging
import re
from typing import List, Optional

from uxaudit.config import ScoringThresholds
from uxaudit.constants import DIFF_METRICS, METRIC_CLS
from uxaudit.models import (
    AuditDiff,
    AuditRecord,
    Issue,
    MetricHighlight,
    MetricStatus,
    PerformanceReport,
)

logger = logging.getLogger(__name__)

MAX_DIFF_ISSUES = 8
NUMBER_PATTERN = re.compile(r"(\d+(?:\.\d+)?)")


def normalize_title(title: str) -> str:
    return " ".join(title.lower().split())


def issue_key(issue: Issue) -> str:
    """Identity of an issue across audits: category plus normalized title."""
    return f"{issue.category.value}|{normalize_title(issue.title)}"


def parse_time_to_seconds(value: str) -> Optional[float]:
    """Parse a Lighthouse display value such as "2.4 s" or "1,250 ms".

    Unitless values (CLS) are returned as-is.

    Args:
        value: Display value string

    Returns:
        Seconds (or the bare number), None when no number is present
    """
    if not value:
        return None
    normalized = value.lower().strip().replace(",", "")
    match = NUMBER_PATTERN.search(normalized)
    if not match:
        return None
    amount = float(match.group(1))
    if "ms" in normalized:
        return amount / 1000
    return amount


def _display_value(report: Optional[PerformanceReport], metric_id: str) -> Optional[str]:
    if report is None:
        return None
    metric = report.metric(metric_id)
    if metric is None or not metric.display_value:
        return None
    return metric.display_value


def metric_highlights(
    previous: Optional[PerformanceReport],
    current: Optional[PerformanceReport],
    thresholds: Optional[ScoringThresholds] = None,
) -> List[MetricHighlight]:
    """Trend of LCP, FCP and CLS between two performance reports."""
    t = thresholds or ScoringThresholds()
    highlights = []

    for metric_id, label in DIFF_METRICS:
        before = _display_value(previous, metric_id)
        after = _display_value(current, metric_id)
        if before is None or after is None:
            continue

        before_value = parse_time_to_seconds(before)
        after_value = parse_time_to_seconds(after)
        status = MetricStatus.STABLE
        if before_value is not None and after_value is not None:
            tolerance = t.cls_tolerance if metric_id == METRIC_CLS else t.timing_tolerance_seconds
            if after_value < before_value - tolerance:
                status = MetricStatus.IMPROVED
            elif after_value > before_value + tolerance:
                status = MetricStatus.REGRESSED

        highlights.append(MetricHighlight(metric=label, before=before, after=after, status=status))

    return highlights


def build_audit_diff(
    previous: Optional[AuditRecord],
    current: AuditRecord,
    thresholds: Optional[ScoringThresholds] = None,
) -> Optional[AuditDiff]:
    """Compare two audits of the same URL.

    Args:
        previous: Earlier audit, or None when there is no prior audit
        current: Later audit
        thresholds: Tolerances for metric trends

    Returns:
        AuditDiff, or None when there is nothing to compare against
    """
    if previous is None:
        return None

    previous_issues = previous.review.issues
    current_issues = current.review.issues
    previous_keys = {issue_key(issue) for issue in previous_issues}
    current_keys = {issue_key(issue) for issue in current_issues}

    new_issues = [
        issue.title for issue in current_issues if issue_key(issue) not in previous_keys
    ][:MAX_DIFF_ISSUES]
    resolved_issues = [
        issue.title for issue in previous_issues if issue_key(issue) not in current_keys
    ][:MAX_DIFF_ISSUES]

    health_delta = None
    if previous.health_score is not None and current.health_score is not None:
        health_delta = current.health_score - previous.health_score

    diff = AuditDiff(
        score_delta=current.review.score - previous.review.score,
        health_delta=health_delta,
        accessibility_delta=current.review.accessibility.score - previous.review.accessibility.score,
        seo_delta=current.review.seo.score - previous.review.seo.score,
        visual_delta=current.review.visual.score - previous.review.visual.score,
        previous_issue_count=len(previous_issues),
        current_issue_count=len(current_issues),
        new_issues=new_issues,
        resolved_issues=resolved_issues,
        metric_highlights=metric_highlights(previous.performance, current.performance, thresholds),
        previous_created_at=previous.created_at,
        current_created_at=current.created_at,
    )

    logger.debug(
        f"diff.build url={current.url} score_delta={diff.score_delta} "
        f"new={len(new_issues)} resolved={len(resolved_issues)}"
    )
    return diff
