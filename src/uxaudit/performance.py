"""Performance report assembly from PageSpeed Insights results."""

import logging
import time
from typing import Any, Dict, List, Optional

from uxaudit.constants import (
    FALLBACK_METRIC_DISPLAY,
    FALLBACK_PERFORMANCE_SCORE,
    KEY_PERFORMANCE_METRICS,
)
from uxaudit.models import PerformanceCategory, PerformanceMetric, PerformanceReport
from uxaudit.utils import clamp_score, round_half_up, to_number

logger = logging.getLogger(__name__)

CATEGORY_TITLES = {
    "performance": "Performance",
    "accessibility": "Accessibility",
    "best-practices": "Best Practices",
    "seo": "SEO",
}

FALLBACK_METRICS = [
    ("fallback-metric-1", "First Contentful Paint", "Time until first content is painted"),
    ("fallback-metric-2", "Largest Contentful Paint", "Time to render largest content"),
    ("fallback-metric-3", "Cumulative Layout Shift", "Visual stability score"),
]


def _now_ms() -> int:
    return int(time.time() * 1000)


def normalize_score(value: Any) -> int:
    """Convert a Lighthouse 0-1 score into 0-100 (missing or non-numeric scores are 0)."""
    number = to_number(value)
    if number is None:
        return 0
    return clamp_score(number * 100)


def extract_metrics(audits: Any) -> List[PerformanceMetric]:
    """Pick the key Lighthouse metrics out of the audits map."""
    metrics = []
    if not isinstance(audits, dict):
        return metrics
    for key in KEY_PERFORMANCE_METRICS:
        audit = audits.get(key)
        if not audit or not isinstance(audit, dict):
            continue
        metrics.append(PerformanceMetric(
            id=str(audit.get("id") or key),
            title=str(audit.get("title") or ""),
            description=str(audit.get("description") or ""),
            score=normalize_score(audit.get("score")),
            display_value=str(audit.get("displayValue") or "N/A"),
        ))
    return metrics


def _lighthouse(response: Any) -> Dict[str, Any]:
    if not isinstance(response, dict):
        return {}
    result = response.get("lighthouseResult")
    return result if isinstance(result, dict) else {}


def _category_score(lighthouse: Dict[str, Any], category_id: str) -> int:
    categories = lighthouse.get("categories") or {}
    if not isinstance(categories, dict):
        return 0
    category = categories.get(category_id) or {}
    if not isinstance(category, dict):
        return 0
    return normalize_score(category.get("score"))


def _category(category_id: str, score: int, metrics: Optional[List[PerformanceMetric]] = None):
    return PerformanceCategory(
        id=category_id,
        title=CATEGORY_TITLES[category_id],
        score=score,
        metrics=metrics or [],
    )


def report_from_pagespeed(
    desktop: Any, mobile: Any, timestamp: Optional[int] = None
) -> PerformanceReport:
    """Build a report from desktop and mobile PageSpeed responses.

    Category scores and metrics come from the desktop run; the overall
    performance score is the mean of desktop and mobile performance.
    Missing or malformed sections score 0.

    Args:
        desktop: Raw desktop API response
        mobile: Raw mobile API response
        timestamp: Epoch milliseconds (default: now)

    Returns:
        PerformanceReport
    """
    lh_desktop = _lighthouse(desktop)
    lh_mobile = _lighthouse(mobile)

    performance = _category_score(lh_desktop, "performance")
    overall = round_half_up(
        performance * 0.5 + _category_score(lh_mobile, "performance") * 0.5
    )

    return PerformanceReport(
        performance=_category(
            "performance", performance, extract_metrics(lh_desktop.get("audits"))
        ),
        accessibility=_category("accessibility", _category_score(lh_desktop, "accessibility")),
        best_practices=_category("best-practices", _category_score(lh_desktop, "best-practices")),
        seo=_category("seo", _category_score(lh_desktop, "seo")),
        overall_performance_score=overall,
        timestamp=timestamp if timestamp is not None else _now_ms(),
    )


def create_fallback_performance_report(
    url: str = "", timestamp: Optional[int] = None
) -> PerformanceReport:
    """Degraded but valid report with uniform scores of 50.

    Args:
        url: URL the report stands in for (logging only)
        timestamp: Epoch milliseconds (default: now)

    Returns:
        PerformanceReport
    """
    logger.warning(f"performance.fallback url={url}")
    score = FALLBACK_PERFORMANCE_SCORE
    metrics = [
        PerformanceMetric(
            id=metric_id,
            title=title,
            description=description,
            score=score,
            display_value=FALLBACK_METRIC_DISPLAY,
        )
        for metric_id, title, description in FALLBACK_METRICS
    ]
    return PerformanceReport(
        performance=_category("performance", score, metrics),
        accessibility=_category("accessibility", score),
        best_practices=_category("best-practices", score),
        seo=_category("seo", score),
        overall_performance_score=score,
        timestamp=timestamp if timestamp is not None else _now_ms(),
    )
