"""Issue enrichment - confidence, impact, effort, priority and fix snippets.

Enrichment is additive only: fields that are already set are never
overwritten, so enriching an enriched review is a no-op.
"""

import dataclasses
import logging
import re
from typing import List, Optional, TypeVar

from uxaudit.constants import (
    ARCHITECTURE_FIX_EFFORT,
    COPY_FIX_EFFORT,
    CRITICAL_PRIORITY,
    DEFAULT_EFFORT,
    DETERMINISTIC_EVIDENCE_BONUS,
    EVIDENCE_LENGTH_CAP,
    EVIDENCE_LENGTH_WEIGHT,
    HEURISTIC_EVIDENCE_BONUS,
    HIGH_CONFIDENCE_WEIGHT,
    HIGH_PRIORITY,
    LAYOUT_FIX_EFFORT,
    LOW_CONFIDENCE_WEIGHT,
    MEDIUM_PRIORITY,
    NUMERIC_EVIDENCE_BONUS,
    QUICK_WIN_MAX_EFFORT,
    QUICK_WIN_MIN_IMPACT,
    SEVERITY_IMPACT,
    UNKNOWN_SEVERITY_IMPACT,
)
from uxaudit.models import (
    AuditSection,
    ConfidenceLevel,
    Finding,
    Issue,
    PriorityLabel,
    Review,
    SourceType,
)
from uxaudit.utils import clamp_score, with_default

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Finding)

# Selectors, attributes and tags quoted from the page
CODE_LIKE = re.compile(r"(#[\w-]+|(?:^|\s)\.[a-z][\w-]*|\[[\w-]+|aria-|role=|<\w+)", re.IGNORECASE)
HEDGING = re.compile(r"(might|may|likely|appears|seems|could)", re.IGNORECASE)
DIGIT = re.compile(r"\d")

# Ordered: the first matching rule wins
EFFORT_RULES = [
    (
        re.compile(
            r"(rename|update copy|alt text|label|contrast|heading|h1|aria-label|button text|link text)"
        ),
        COPY_FIX_EFFORT,
    ),
    (
        re.compile(r"(spacing|alignment|responsive|layout|navigation|hierarchy|form flow)"),
        LAYOUT_FIX_EFFORT,
    ),
    (
        re.compile(
            r"(re-architect|rewrite|major redesign|information architecture|checkout flow|auth flow)"
        ),
        ARCHITECTURE_FIX_EFFORT,
    ),
]

FIX_SNIPPETS = [
    (
        re.compile(r"(contrast|button)"),
        ".button-primary {\n  background-color: #0052cc;\n  color: #ffffff;\n}",
    ),
    (
        re.compile(r"(alt|image|hero)"),
        '<img src="hero.jpg" alt="Online booking dashboard preview" />',
    ),
    (
        re.compile(r"(h1|heading|title)"),
        "<h1>Book appointments faster with real-time availability</h1>",
    ),
    (
        re.compile(r"(form|label|input)"),
        '<label for="email">Work email</label>\n<input id="email" name="email" type="email" required />',
    ),
]


def infer_source_type(evidence: str, why: str) -> SourceType:
    """Classify where the evidence comes from.

    Args:
        evidence: Evidence text
        why: Explanation text

    Returns:
        DETERMINISTIC for code-like tokens, HEURISTIC for hedging language,
        otherwise AI_INFERRED
    """
    text = f"{evidence} {why}".lower()
    if CODE_LIKE.search(text):
        return SourceType.DETERMINISTIC
    if HEDGING.search(text):
        return SourceType.HEURISTIC
    return SourceType.AI_INFERRED


def estimate_evidence_weight(evidence: str, source_type: SourceType) -> int:
    base = min(EVIDENCE_LENGTH_CAP, len(evidence.strip()) * EVIDENCE_LENGTH_WEIGHT)
    if source_type == SourceType.DETERMINISTIC:
        base += DETERMINISTIC_EVIDENCE_BONUS
    elif source_type == SourceType.HEURISTIC:
        base += HEURISTIC_EVIDENCE_BONUS
    if DIGIT.search(evidence):
        base += NUMERIC_EVIDENCE_BONUS
    return clamp_score(base)


def infer_confidence(source_type: SourceType, evidence_weight: int) -> ConfidenceLevel:
    if source_type == SourceType.DETERMINISTIC and evidence_weight >= HIGH_CONFIDENCE_WEIGHT:
        return ConfidenceLevel.HIGH
    if evidence_weight < LOW_CONFIDENCE_WEIGHT or source_type == SourceType.AI_INFERRED:
        return ConfidenceLevel.LOW
    return ConfidenceLevel.MEDIUM


def infer_effort(title: str, why: str) -> int:
    """Estimate fix effort from the wording of the issue."""
    text = f"{title} {why}".lower()
    for pattern, effort in EFFORT_RULES:
        if pattern.search(text):
            return effort
    return DEFAULT_EFFORT


def infer_fix_snippet(category: str, title: str) -> Optional[str]:
    """Pick a snippet from the fixed library; None when nothing matches."""
    text = f"{category} {title}".lower()
    for pattern, snippet in FIX_SNIPPETS:
        if pattern.search(text):
            return snippet
    return None


def priority_score(impact: int, effort: int) -> int:
    return clamp_score(impact * (110 - effort) / 100)


def priority_label(score: int, impact: int, effort: int) -> PriorityLabel:
    """Bucket a priority; quick wins are checked first."""
    if impact >= QUICK_WIN_MIN_IMPACT and effort <= QUICK_WIN_MAX_EFFORT:
        return PriorityLabel.QUICK_WIN
    if score >= CRITICAL_PRIORITY:
        return PriorityLabel.CRITICAL
    if score >= HIGH_PRIORITY:
        return PriorityLabel.HIGH
    if score >= MEDIUM_PRIORITY:
        return PriorityLabel.MEDIUM
    return PriorityLabel.LOW


def enrich_finding(item: F) -> F:
    """Fill in every unset enrichment field of an issue or finding.

    Args:
        item: Issue or Finding

    Returns:
        New object of the same type; set fields are kept as they are
    """
    source_type = with_default(
        item.source_type, lambda: infer_source_type(item.evidence, item.why)
    )
    evidence_weight = with_default(
        item.evidence_weight, lambda: estimate_evidence_weight(item.evidence, source_type)
    )
    confidence = with_default(
        item.confidence, lambda: infer_confidence(source_type, evidence_weight)
    )
    impact = with_default(
        item.impact_score,
        lambda: SEVERITY_IMPACT.get(item.severity.value, UNKNOWN_SEVERITY_IMPACT),
    )
    effort = with_default(item.effort_score, lambda: infer_effort(item.title, item.why))
    priority = with_default(item.priority_score, lambda: priority_score(impact, effort))
    label = with_default(item.priority_label, lambda: priority_label(priority, impact, effort))

    category = item.category.value if isinstance(item, Issue) else ""
    fix_snippet = with_default(item.fix_snippet, lambda: infer_fix_snippet(category, item.title))

    return dataclasses.replace(
        item,
        source_type=source_type,
        evidence_weight=evidence_weight,
        confidence=confidence,
        impact_score=impact,
        effort_score=effort,
        priority_score=priority,
        priority_label=label,
        fix_snippet=fix_snippet,
    )


def _enrich_section(section: AuditSection) -> AuditSection:
    return dataclasses.replace(
        section, findings=[enrich_finding(finding) for finding in section.findings]
    )


def enrich_review(review: Review) -> Review:
    """Enrich every issue and section finding of a review.

    Args:
        review: Sanitized or fallback review

    Returns:
        New Review; the input is left untouched
    """
    issues: List[Issue] = [enrich_finding(issue) for issue in review.issues]
    enriched = dataclasses.replace(
        review,
        issues=issues,
        ux=dataclasses.replace(
            review.ux, issues=[enrich_finding(issue) for issue in review.ux.issues]
        ),
        accessibility=_enrich_section(review.accessibility),
        seo=_enrich_section(review.seo),
        visual=_enrich_section(review.visual),
    )

    quick_wins = sum(1 for issue in issues if issue.priority_label == PriorityLabel.QUICK_WIN)
    logger.debug(f"review.enrich issues={len(issues)} quick_wins={quick_wins}")
    return enriched
