# src/uxaudit/constants.py
"""Centralized constants for the UX audit engine.

This module contains magic numbers and lookup tables that are used across
multiple modules. For user-tunable thresholds, see config.py and
ScoringThresholds.
"""

# =============================================================================
# Review Shape Constants
# =============================================================================

MAX_REVIEW_ISSUES = 12
MAX_SECTION_FINDINGS = 10
MAX_TOP_IMPROVEMENTS = 3
FALLBACK_SECTION_FINDINGS = 6

DEFAULT_ISSUE_TITLE = "Untitled issue"
DEFAULT_FINDING_TITLE = "Untitled finding"
DEFAULT_WHY = "No explanation provided."
NO_EVIDENCE_TEXT = "No clear evidence found in extracted text."


# =============================================================================
# Content Analysis Constants
# =============================================================================

STOP_WORDS = frozenset({
    "the", "a", "an", "to", "for", "with", "of", "in", "on", "at", "and",
    "or", "is", "are", "your", "you", "our",
})

MAX_PRIMARY_KEYWORD_WORDS = 4
FIRST_WORDS_WINDOW = 100
REPEATED_PHRASE_WORDS = 3
REPEATED_PHRASE_MIN_OCCURRENCES = 3
MAX_REPEATED_PHRASE_FLAGS = 5
NO_SUBHEADING_WORD_LIMIT = 300
RECOMMENDED_DENSITY_RANGE = "0.8-1.5"

# Flesch Reading Ease formula components (for documentation)
FLESCH_FORMULA = "206.835 - 1.015 * (words/sentences) - 84.6 * (syllables/words)"

INTENT_PATTERNS = {
    "transactional": r"(buy|price|pricing|book|order|quote|demo|trial|plan|plans|subscribe|purchase)",
    "informational": r"(what is|how to|guide|tips|learn|overview|benefits|why|blog|article)",
    "navigational": r"(login|sign in|contact|about|location|address|support|help|near me)",
}

INTENT_MATCH_SCORE = 90
INTENT_AMBIGUOUS_SCORE = 75
INTENT_MISMATCH_SCORE = 45

# Domain lexicon used for semantic coverage
RELATED_TERMS = {
    "booking": ["scheduling", "appointments", "calendar", "automation", "booking management"],
    "software": ["platform", "dashboard", "integration", "workflow", "system"],
    "ecommerce": ["checkout", "cart", "payment", "conversion", "catalog"],
    "seo": ["ranking", "keywords", "backlinks", "search intent", "content quality"],
}


# =============================================================================
# Motion Analysis Constants
# =============================================================================

CAROUSEL_RISK_PER_ITEM = 12
CAROUSEL_RISK_CAP = 20
INFINITE_RISK_PER_ITEM = 4
INFINITE_RISK_CAP = 18
LONG_DURATION_RISK_PER_ITEM = 4
LONG_DURATION_RISK_CAP = 14
SCROLL_REVEAL_ALLOWANCE = 2
SCROLL_REVEAL_RISK_PER_ITEM = 2
SCROLL_REVEAL_RISK_CAP = 8
FLASHING_RISK = 24
LCP_ANIMATED_RISK = 10
MISSING_REDUCED_MOTION_RISK = 12
MISSING_PAUSE_CONTROL_RISK = 8
FULL_MOTION_SUPPORT_CREDIT = 6

# Correlation with performance metrics
CORRELATION_SCORE_THRESHOLD = 75
CLS_CORRELATION_RISK = 8
LCP_CORRELATION_RISK = 10

# Default motion risk used by the UX radar when no motion analysis exists
DEFAULT_MOTION_RISK = 40


# =============================================================================
# UX Intelligence Constants
# =============================================================================

HIGH_RISK_THRESHOLD = 70
MEDIUM_RISK_THRESHOLD = 45

PRIMARY_CTA_CONFLICT_COUNT = 3
CROWDED_HERO_ELEMENTS = 14
CROWDED_HERO_INTERACTIVE = 5

F_PATTERN_LEFT_BIAS = 0.7
Z_PATTERN_LEFT_BIAS = 0.45
LEFT_BIAS_BONUS_THRESHOLD = 0.5
READING_ISSUE_PENALTY = 14
LEFT_BIAS_BONUS = 8
SCAN_RISK_THRESHOLD = 60

CTA_BASE_STRENGTH = 60
MAX_UX_FINDINGS = 8

# Default readability used by the UX radar when no content analysis exists
DEFAULT_CONTENT_READABILITY = 60

# Headline length bounds for a clear first impression
HEADLINE_MIN_LENGTH = 20
HEADLINE_MAX_LENGTH = 85


# =============================================================================
# Enrichment Constants
# =============================================================================

SEVERITY_IMPACT = {
    "high": 90,
    "medium": 65,
    "low": 40,
}
UNKNOWN_SEVERITY_IMPACT = 55

EVIDENCE_LENGTH_WEIGHT = 0.8
EVIDENCE_LENGTH_CAP = 70
DETERMINISTIC_EVIDENCE_BONUS = 25
HEURISTIC_EVIDENCE_BONUS = 10
NUMERIC_EVIDENCE_BONUS = 8

HIGH_CONFIDENCE_WEIGHT = 75
LOW_CONFIDENCE_WEIGHT = 45

COPY_FIX_EFFORT = 25
LAYOUT_FIX_EFFORT = 50
ARCHITECTURE_FIX_EFFORT = 80
DEFAULT_EFFORT = 45

QUICK_WIN_MIN_IMPACT = 65
QUICK_WIN_MAX_EFFORT = 35
CRITICAL_PRIORITY = 70
HIGH_PRIORITY = 55
MEDIUM_PRIORITY = 40


# =============================================================================
# Health Score Constants
# =============================================================================

HEALTH_WEIGHTS = {
    "ux": 0.35,
    "performance": 0.30,
    "accessibility": 0.20,
    "seo": 0.15,
}


# =============================================================================
# Model Call Constants
# =============================================================================

MAX_AUDIT_INPUT_CHARS = 5000
MAX_AUDIT_COMPLETION_TOKENS = 900
MAX_VISUAL_REFERENCE_LENGTH = 2_000_000
RETRYABLE_STATUS_CODES = frozenset({408, 409, 429, 500, 502, 503, 504})


# =============================================================================
# Performance Constants
# =============================================================================

METRIC_LCP = "largest-contentful-paint"
METRIC_FCP = "first-contentful-paint"
METRIC_CLS = "cumulative-layout-shift"

KEY_PERFORMANCE_METRICS = [
    "first-contentful-paint",
    "largest-contentful-paint",
    "total-blocking-time",
    "cumulative-layout-shift",
    "speed-index",
    "interactive",
]

DIFF_METRICS = [
    (METRIC_LCP, "LCP"),
    (METRIC_FCP, "FCP"),
    (METRIC_CLS, "CLS"),
]

FALLBACK_PERFORMANCE_SCORE = 50
FALLBACK_METRIC_DISPLAY = "N/A (PageSpeed API unavailable)"
PAGESPEED_RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


# =============================================================================
# Extraction Constants
# =============================================================================

MAX_HEADINGS = 30
MAX_BUTTONS = 40
MAX_FORMS = 15
MAX_MAIN_TEXT_LENGTH = 4000
DEFAULT_VIEWPORT_HEIGHT = 768
