"""Audit prompt and audit input assembly."""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from uxaudit.constants import MAX_AUDIT_INPUT_CHARS, MAX_VISUAL_REFERENCE_LENGTH
from uxaudit.models import (
    ExtractedPage,
    MotionAnalysis,
    SEOContentAnalysis,
    UXIntelligenceAnalysis,
)

logger = logging.getLogger(__name__)

UX_AUDIT_PROMPT = """You are a senior UX auditor.

Analyze the website using both:
1) DOM/text extraction data
2) screenshots (above-the-fold, mobile, full-page)

Return a JSON response with:

{
  "score": number (0-100),
  "ux": {
    "score": number (0-100),
    "issues": [
      {
        "category": "clarity | layout | navigation | accessibility | trust",
        "title": "",
        "why": "",
        "evidence": "",
        "severity": "low | medium | high"
      }
    ],
    "top_improvements": [
      {
        "before": "",
        "after": ""
      }
    ]
  },
  "accessibility": {
    "score": number (0-100),
    "findings": [
      {"title": "", "why": "", "evidence": "", "severity": "low | medium | high"}
    ]
  },
  "seo": {
    "score": number (0-100),
    "findings": [
      {"title": "", "why": "", "evidence": "", "severity": "low | medium | high"}
    ]
  },
  "visual": {
    "score": number (0-100),
    "findings": [
      {"title": "", "why": "", "evidence": "", "severity": "low | medium | high"}
    ]
  },
  "issues": [
    {
      "category": "clarity | layout | navigation | accessibility | trust",
      "title": "",
      "why": "",
      "evidence": "",
      "severity": "low | medium | high"
    }
  ],
  "top_improvements": [
    {"before": "", "after": ""}
  ]
}

Provide 8-12 issues.
Evidence should prefer exact text or clear visual references.
Use CONTENT_INTELLIGENCE, MOTION_INTELLIGENCE and UX_INTELLIGENCE as measured
signals; do not contradict them.
Do not return explanations outside JSON."""

USER_INSTRUCTION = (
    "Analyze the website using DOM summary, baseline accessibility/SEO signals, "
    "and screenshots."
)


def _compact(data: Dict[str, Any]) -> str:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def build_audit_input(
    page: ExtractedPage,
    content: Optional[SEOContentAnalysis] = None,
    motion: Optional[MotionAnalysis] = None,
    ux: Optional[UXIntelligenceAnalysis] = None,
) -> str:
    """Append compact analyzer summaries to the extractor payload.

    Args:
        page: Extracted page with its flattened payload
        content: Content analysis
        motion: Motion analysis
        ux: UX intelligence analysis

    Returns:
        Audit input text handed to the model (and to the fallback generator)
    """
    blocks = [page.payload]

    if content is not None:
        blocks.append("CONTENT_INTELLIGENCE: " + _compact({
            "readability_score": content.readability_score,
            "readability_grade": content.readability_grade,
            "primary_keyword": content.primary_keyword_analysis.keyword,
            "density": content.primary_keyword_analysis.density,
            "stuffing_risk": content.primary_keyword_analysis.stuffing_risk.value,
            "semantic_coverage_score": content.semantic_coverage_score,
            "intent_alignment_score": content.intent_alignment_score,
            "findings": content.findings,
        }))

    if motion is not None:
        blocks.append("MOTION_INTELLIGENCE: " + _compact({
            "animation_count": motion.animation_count,
            "types": [t.value for t in motion.types],
            "risk_score": motion.risk_score,
            "accessibility_support": motion.accessibility_support,
            "potential_risks": motion.potential_risks,
        }))

    if ux is not None:
        blocks.append("UX_INTELLIGENCE: " + _compact({
            "first_impression_score": ux.first_impression_score,
            "risk_level": ux.risk_level.value,
            "cognitive_load_index": ux.cognitive_load.cognitive_load_index,
            "cta_strength_score": ux.cta_quality.cta_strength_score,
            "conversion_friction_score": ux.conversion_friction.conversion_friction_score,
            "trust_score": ux.trust_signals.trust_score,
            "findings": ux.findings,
        }))

    return "\n\n".join(blocks)


def trim_audit_input(text: str, max_chars: int = MAX_AUDIT_INPUT_CHARS) -> Tuple[str, bool]:
    """Cut the audit input to max_chars.

    Returns:
        Tuple of (value, truncated)
    """
    if len(text) <= max_chars:
        return text, False
    return text[:max_chars], True


def build_audit_messages(
    page: ExtractedPage, audit_input: str, supports_vision: bool = True
) -> List[Dict[str, Any]]:
    """Build the system + user message pair for the audit call.

    Screenshot references are attached only when the provider supports
    vision and the reference is short enough to send inline.

    Args:
        page: Extracted page holding the visual references
        audit_input: Trimmed audit input
        supports_vision: Whether the provider accepts image parts

    Returns:
        Chat messages in OpenAI format
    """
    parts: List[Dict[str, Any]] = [{
        "type": "text",
        "text": "\n\n".join([USER_INSTRUCTION, "DOM_SUMMARY:", audit_input]),
    }]

    visuals = [
        ("Above-the-fold screenshot", page.visual.above_the_fold),
        ("Mobile screenshot", page.visual.mobile),
        ("Full-page screenshot", page.visual.full_page),
    ]
    for label, reference in visuals:
        if not supports_vision or not reference:
            continue
        if len(reference) > MAX_VISUAL_REFERENCE_LENGTH:
            logger.debug(f"prompt.visual.skipped label='{label}' length={len(reference)}")
            continue
        parts.append({"type": "text", "text": label})
        parts.append({"type": "image_url", "image_url": {"url": reference}})

    return [
        {"role": "system", "content": UX_AUDIT_PROMPT},
        {"role": "user", "content": parts},
    ]
