"""Normalize untyped model output into a strict Review.

Each entity has one normalizer that takes an untyped mapping and returns
either the strict entity or a well-defined default. Nothing raises past
this boundary except `parse_model_json` when no JSON object exists at all.
"""

import json
import logging
import re
from enum import Enum
from typing import Any, List, Mapping, Optional, Type, TypeVar

from uxaudit.config import ScoringThresholds
from uxaudit.constants import (
    DEFAULT_FINDING_TITLE,
    DEFAULT_ISSUE_TITLE,
    DEFAULT_WHY,
    FALLBACK_SECTION_FINDINGS,
    MAX_REVIEW_ISSUES,
    MAX_SECTION_FINDINGS,
    MAX_TOP_IMPROVEMENTS,
)
from uxaudit.exceptions import ReviewParseError
from uxaudit.models import (
    AuditSection,
    ConfidenceLevel,
    Finding,
    Improvement,
    Issue,
    IssueCategory,
    PriorityLabel,
    Review,
    Severity,
    SourceType,
    UXSection,
)
from uxaudit.utils import clamp_score, to_number, to_text, with_default

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
TRAILING_FENCE = re.compile(r"\s*```$")


# ============================================================================
# JSON extraction
# ============================================================================

def extract_json_candidate(text: str) -> str:
    """Strip code fences and cut the outermost {...} span if there is one."""
    cleaned = TRAILING_FENCE.sub("", LEADING_FENCE.sub("", (text or "").strip()))
    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first != -1 and last > first:
        return cleaned[first:last + 1]
    return cleaned


def parse_model_json(text: str) -> Any:
    """Parse a possibly fenced or chatty model response as JSON.

    Args:
        text: Raw model response text

    Returns:
        Parsed JSON value

    Raises:
        ReviewParseError: If no JSON object can be recovered
    """
    candidate = extract_json_candidate(text)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        start = candidate.find("{")
        end = candidate.rfind("}")
        if start == -1 or end <= start:
            raise ReviewParseError("Model response did not contain JSON.")
        try:
            return json.loads(candidate[start:end + 1])
        except json.JSONDecodeError as e:
            raise ReviewParseError(f"Model response JSON is malformed: {e}") from e


# ============================================================================
# Field normalizers
# ============================================================================

def _get(item: Mapping, camel: str, snake: Optional[str] = None) -> Any:
    if camel in item:
        return item[camel]
    if snake and snake in item:
        return item[snake]
    return None


def normalize_enum(value: Any, enum_type: Type[E], default: E) -> E:
    """Coerce a loose value into an enum member, or the default."""
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).strip().lower())
    except ValueError:
        return default


def optional_enum(value: Any, enum_type: Type[E], default: E) -> Optional[E]:
    """Like normalize_enum, but an absent value stays unset."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return normalize_enum(value, enum_type, default)


def optional_score(value: Any) -> Optional[int]:
    """Clamp numeric values into [0, 100]; anything else stays unset."""
    number = to_number(value)
    return clamp_score(number) if number is not None else None


def _finding_fields(item: Mapping, default_title: str) -> dict:
    fix_snippet = to_text(_get(item, "fixSnippet", "fix_snippet"))
    return {
        "title": to_text(item.get("title"), default_title),
        "why": to_text(item.get("why"), DEFAULT_WHY),
        "evidence": to_text(item.get("evidence")),
        "severity": normalize_enum(item.get("severity"), Severity, Severity.MEDIUM),
        "confidence": optional_enum(
            item.get("confidence"), ConfidenceLevel, ConfidenceLevel.MEDIUM
        ),
        "evidence_weight": optional_score(_get(item, "evidenceWeight", "evidence_weight")),
        "source_type": optional_enum(
            _get(item, "sourceType", "source_type"), SourceType, SourceType.AI_INFERRED
        ),
        "impact_score": optional_score(_get(item, "impactScore", "impact_score")),
        "effort_score": optional_score(_get(item, "effortScore", "effort_score")),
        "priority_score": optional_score(_get(item, "priorityScore", "priority_score")),
        "priority_label": optional_enum(
            _get(item, "priorityLabel", "priority_label"), PriorityLabel, PriorityLabel.MEDIUM
        ),
        "fix_snippet": fix_snippet or None,
    }


def normalize_issue(value: Any) -> Optional[Issue]:
    """Normalize one untyped issue; non-objects are dropped."""
    if not isinstance(value, Mapping):
        return None
    return Issue(
        category=normalize_enum(value.get("category"), IssueCategory, IssueCategory.CLARITY),
        **_finding_fields(value, DEFAULT_ISSUE_TITLE),
    )


def normalize_finding(value: Any) -> Optional[Finding]:
    """Normalize one untyped section finding; non-objects are dropped."""
    if not isinstance(value, Mapping):
        return None
    return Finding(**_finding_fields(value, DEFAULT_FINDING_TITLE))


def normalize_improvement(value: Any) -> Optional[Improvement]:
    if not isinstance(value, Mapping):
        return None
    return Improvement(
        before=to_text(value.get("before")),
        after=to_text(value.get("after")),
    )


def _normalize_list(values: Any, normalizer, limit: int) -> list:
    if not isinstance(values, list):
        return []
    items = [normalizer(value) for value in values]
    return [item for item in items if item is not None][:limit]


def normalize_section(
    value: Any, default_score: int, fallback_findings: List[Finding]
) -> AuditSection:
    """Normalize an audit section, defaulting its score and findings."""
    section = value if isinstance(value, Mapping) else {}
    score = with_default(to_number(section.get("score")), default_score)
    findings = _normalize_list(section.get("findings"), normalize_finding, MAX_SECTION_FINDINGS)
    return AuditSection(
        score=clamp_score(score),
        findings=findings or list(fallback_findings),
    )


# ============================================================================
# Review
# ============================================================================

def sanitize_review(
    value: Any, thresholds: Optional[ScoringThresholds] = None
) -> Review:
    """Normalize an arbitrary untyped object into a strict Review.

    Missing or invalid enum values fall back to documented defaults,
    numbers are clamped to [0, 100], arrays are bounded, and unset section
    scores are derived from the overall score minus a fixed offset.

    Args:
        value: Parsed model JSON (or anything else)
        thresholds: Scoring thresholds holding the section offsets

    Returns:
        Review satisfying all shape invariants
    """
    t = thresholds or ScoringThresholds()
    source = value if isinstance(value, Mapping) else {}

    raw_score = None
    for key in ("score", "website_health_score", "health_score"):
        if source.get(key) is not None:
            raw_score = source.get(key)
            break
    score = clamp_score(with_default(to_number(raw_score), 0))

    issues = _normalize_list(source.get("issues"), normalize_issue, MAX_REVIEW_ISSUES)
    improvements = _normalize_list(
        source.get("top_improvements"), normalize_improvement, MAX_TOP_IMPROVEMENTS
    )

    ux_source = source.get("ux") if isinstance(source.get("ux"), Mapping) else {}
    if isinstance(ux_source.get("issues"), list):
        ux_issues = _normalize_list(ux_source["issues"], normalize_issue, MAX_REVIEW_ISSUES)
    else:
        ux_issues = issues
    if isinstance(ux_source.get("top_improvements"), list):
        ux_improvements = _normalize_list(
            ux_source["top_improvements"], normalize_improvement, MAX_TOP_IMPROVEMENTS
        )
    else:
        ux_improvements = improvements

    final_issues = ux_issues or issues
    final_improvements = ux_improvements or improvements

    fallback_findings = [issue.as_finding() for issue in final_issues[:FALLBACK_SECTION_FINDINGS]]

    accessibility = source.get("accessibility")
    if accessibility is None:
        accessibility = source.get("a11y")
    visual = source.get("visual")
    if visual is None:
        visual = source.get("visual_findings")

    return Review(
        score=score,
        issues=final_issues,
        top_improvements=final_improvements,
        ux=UXSection(
            score=clamp_score(with_default(to_number(ux_source.get("score")), score)),
            issues=list(final_issues),
            top_improvements=list(final_improvements),
        ),
        accessibility=normalize_section(
            accessibility, score - t.accessibility_offset, fallback_findings
        ),
        seo=normalize_section(source.get("seo"), score - t.seo_offset, fallback_findings),
        visual=normalize_section(visual, score - t.visual_offset, fallback_findings),
    )
