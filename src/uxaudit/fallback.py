"""Deterministic review used when the model provider is out of quota."""

import logging
import re
from typing import List, Optional

from uxaudit.config import ScoringThresholds
from uxaudit.constants import NO_EVIDENCE_TEXT
from uxaudit.models import (
    AuditSection,
    Improvement,
    Issue,
    IssueCategory,
    Review,
    Severity,
    UXSection,
)
from uxaudit.utils import clamp_score

logger = logging.getLogger(__name__)

TRUST_CUES = re.compile(
    r"(testimonial|reviews?|secure|privacy|trusted|guarantee|contact|about)", re.IGNORECASE
)
EMPTY_MARKER = "None"

# (category, title, why, payload key, severity)
ISSUE_TEMPLATES = [
    (
        IssueCategory.CLARITY,
        "Value proposition could be clearer above the fold",
        "Users may not immediately understand what the product does.",
        "TITLE",
        Severity.HIGH,
    ),
    (
        IssueCategory.LAYOUT,
        "Content hierarchy is hard to scan",
        "Heading structure may not guide users through key information.",
        "HEADINGS",
        Severity.MEDIUM,
    ),
    (
        IssueCategory.NAVIGATION,
        "Primary action emphasis is unclear",
        "Multiple similar actions can increase decision friction.",
        "BUTTONS",
        Severity.MEDIUM,
    ),
    (
        IssueCategory.ACCESSIBILITY,
        "Form fields may lack clear context",
        "Ambiguous labels can reduce completion and accessibility.",
        "FORMS",
        Severity.HIGH,
    ),
    (
        IssueCategory.TRUST,
        "Trust indicators are not prominent",
        "Users look for signals like proof, policy clarity, and contact confidence.",
        "MAIN_TEXT",
        Severity.MEDIUM,
    ),
    (
        IssueCategory.CLARITY,
        "Copy appears dense in key sections",
        "Long paragraphs can reduce comprehension and increase bounce.",
        "MAIN_TEXT",
        Severity.LOW,
    ),
]

IMPROVEMENT_TEMPLATES = [
    (
        "Generic headline and dense intro text",
        "Use a single-sentence value proposition with one supporting line.",
    ),
    (
        "Multiple competing actions",
        "Prioritize one primary CTA and de-emphasize secondary actions.",
    ),
    (
        "Forms with unclear context",
        "Add explicit labels, helper text, and clearer field intent.",
    ),
]


def extract_section(payload: str, key: str) -> str:
    """Value on the first `KEY:` line of the payload, or an empty string."""
    match = re.search(rf"{re.escape(key)}:[ \t]*(.*)", payload or "", re.IGNORECASE)
    return match.group(1).strip() if match else ""


def split_pipe_list(value: str) -> List[str]:
    """Split a ` || ` joined payload list; the None marker means empty."""
    if not value or value == EMPTY_MARKER:
        return []
    return [item.strip() for item in value.split("||") if item.strip()]


class FallbackReviewGenerator:
    """Builds a complete Review from the payload alone, with no randomness."""

    def __init__(self, thresholds: Optional[ScoringThresholds] = None):
        self.thresholds = thresholds or ScoringThresholds()

    def generate(self, payload: str) -> Review:
        """Generate the fallback review.

        Args:
            payload: Flattened extractor payload (URL:, TITLE:, HEADINGS: ...)

        Returns:
            Review with the same shape as a sanitized model review
        """
        t = self.thresholds
        score = self.score(payload)

        issues = [
            Issue(
                category=category,
                title=title,
                why=why,
                evidence=self._evidence(payload, key),
                severity=severity,
            )
            for category, title, why, key, severity in ISSUE_TEMPLATES
        ]
        improvements = [Improvement(before=b, after=a) for b, a in IMPROVEMENT_TEMPLATES]
        findings = [issue.as_finding() for issue in issues]

        logger.info(f"review.fallback.generated score={score} issues={len(issues)}")

        return Review(
            score=score,
            issues=issues,
            top_improvements=improvements,
            ux=UXSection(
                score=score,
                issues=list(issues),
                top_improvements=list(improvements),
            ),
            accessibility=AuditSection(
                score=clamp_score(score - t.accessibility_offset), findings=list(findings)
            ),
            seo=AuditSection(score=clamp_score(score - t.seo_offset), findings=list(findings)),
            visual=AuditSection(
                score=clamp_score(score - t.visual_offset), findings=list(findings)
            ),
        )

    def score(self, payload: str) -> int:
        """Deterministic 0-100 score from payload presence and size buckets."""
        title = extract_section(payload, "TITLE")
        headings = split_pipe_list(extract_section(payload, "HEADINGS"))
        buttons = split_pipe_list(extract_section(payload, "BUTTONS"))
        forms = split_pipe_list(extract_section(payload, "FORMS"))
        main_text = extract_section(payload, "MAIN_TEXT")

        score = 50
        score += 8 if title and title != EMPTY_MARKER else -10

        if not headings:
            score -= 12
        elif len(headings) <= 2:
            score += 2
        elif len(headings) <= 8:
            score += 8
        else:
            score += 4

        if not buttons:
            score -= 8
        elif len(buttons) <= 2:
            score += 2
        elif len(buttons) <= 8:
            score += 6
        else:
            score += 3

        if 1 <= len(forms) <= 3:
            score += 6
        elif len(forms) > 3:
            score += 3

        if len(main_text) < 200:
            score -= 10
        elif len(main_text) <= 1200:
            score += 8
        else:
            score += 4

        score += 6 if TRUST_CUES.search(main_text) else -4

        return clamp_score(score)

    def _evidence(self, payload: str, key: str) -> str:
        value = extract_section(payload, key)
        if not value or value == EMPTY_MARKER:
            return NO_EVIDENCE_TEXT
        return value[:self.thresholds.fallback_evidence_length]
