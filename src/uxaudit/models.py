"""Data models for UX audits."""

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Tuple

from uxaudit.utils import clamp_score, to_number


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses, enums and containers into JSON-ready values."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    return value


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


# ============================================================================
# Enumerations
# ============================================================================

class IssueCategory(str, Enum):
    """UX issue categories."""
    CLARITY = "clarity"
    LAYOUT = "layout"
    NAVIGATION = "navigation"
    ACCESSIBILITY = "accessibility"
    TRUST = "trust"


class Severity(str, Enum):
    """Severity reported for an issue or finding."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ConfidenceLevel(str, Enum):
    """How much an issue can be trusted."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SourceType(str, Enum):
    """Where the evidence behind an issue comes from."""
    DETERMINISTIC = "deterministic"  # Measured directly from markup
    HEURISTIC = "heuristic"  # Pattern-based guess
    AI_INFERRED = "ai_inferred"  # Model judgement only


class PriorityLabel(str, Enum):
    """Priority bucket derived from impact and effort."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    QUICK_WIN = "quick_win"


class MotionType(str, Enum):
    CSS = "css"
    JS = "js"
    SCROLL = "scroll"
    CAROUSEL = "carousel"
    LOTTIE = "lottie"
    VIDEO = "video"


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class StuffingRisk(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class IntentType(str, Enum):
    TRANSACTIONAL = "transactional"
    INFORMATIONAL = "informational"
    NAVIGATIONAL = "navigational"
    MIXED = "mixed"


class FlowPattern(str, Enum):
    F_PATTERN = "f-pattern"
    Z_PATTERN = "z-pattern"
    MIXED = "mixed"


class MetricStatus(str, Enum):
    IMPROVED = "improved"
    REGRESSED = "regressed"
    STABLE = "stable"


# ============================================================================
# Signal Snapshot Models
# ============================================================================

class _SignalGroup:
    """Shared camelCase (de)serialization and count validation."""

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool):
                continue
            if isinstance(value, (int, float)) and value < 0:
                raise ValueError(
                    f"{type(self).__name__}.{f.name} must be >= 0, got {value}"
                )

    @classmethod
    def from_dict(cls, data: Optional[dict]):
        data = data or {}
        kwargs = {}
        for f in fields(cls):
            for key in (_camel(f.name), f.name):
                if key in data:
                    value = data[key]
                    if isinstance(value, list):
                        value = tuple(value)
                    kwargs[f.name] = value
                    break
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return {_camel(f.name): to_jsonable(getattr(self, f.name)) for f in fields(self)}


@dataclass(frozen=True)
class AccessibilitySignals(_SignalGroup):
    """Accessibility baseline counted from the DOM."""

    missing_alt_count: int = 0
    unlabeled_input_count: int = 0
    heading_order_issue: bool = False


@dataclass(frozen=True)
class SeoSignals(_SignalGroup):
    """SEO baseline counted from the DOM."""

    title_length: int = 0
    has_meta_description: bool = False
    h1_count: int = 0
    cta_count: int = 0


@dataclass(frozen=True)
class MotionSignals(_SignalGroup):
    """Raw animation counts and motion accessibility flags."""

    css_animations: int = 0
    css_transitions: int = 0
    js_animation_hooks: int = 0
    scroll_reveal_elements: int = 0
    auto_carousels: int = 0
    lottie_instances: int = 0
    video_like_animations: int = 0
    infinite_animations: int = 0
    long_duration_animations: int = 0
    reduced_motion_support: bool = False
    pause_control_present: bool = False
    flashing_risk: bool = False
    lcp_element_likely_animated: bool = False
    potential_risks: Tuple[str, ...] = ()


@dataclass(frozen=True)
class UXSignals(_SignalGroup):
    """Layout, CTA, form, trust and navigation signals."""

    # Hero / above the fold
    cta_count_above_fold: int = 0
    primary_cta_count_above_fold: int = 0
    cta_color_variant_count_above_fold: int = 0
    hero_element_count: int = 0
    hero_interactive_count: int = 0

    # Geometry ratios (0-1)
    h1_dominance_ratio: float = 0.0
    cta_visual_dominance_ratio: float = 0.0
    left_aligned_key_elements_ratio: float = 0.0
    flow_reading_issue_count: int = 0

    # CTA copy
    vague_cta_count: int = 0
    benefit_cta_count: int = 0
    urgency_cta_count: int = 0

    # Forms and trust
    max_form_field_count: int = 0
    requires_phone_and_email: bool = False
    progress_indicator_present: bool = False
    trust_badge_present: bool = False
    testimonials_present: bool = False
    social_proof_present: bool = False
    about_or_contact_visible: bool = False

    # Interaction and navigation
    hover_feedback_signals: int = 0
    input_focus_signals: int = 0
    primary_cta_min_y: float = 0.0
    viewport_height: float = 0.0
    menu_items_count: int = 0
    nav_max_depth: int = 0
    has_hamburger: bool = False
    has_visible_desktop_like_nav: bool = False

    # Headline
    headline_length: int = 0
    has_value_prop_hint: bool = False


@dataclass(frozen=True)
class SignalSnapshot:
    """Structured feature set captured once per page."""

    title: str = ""
    headings: Tuple[str, ...] = ()
    buttons: Tuple[str, ...] = ()
    forms: Tuple[str, ...] = ()
    main_text: str = ""
    meta_description: str = ""
    accessibility: AccessibilitySignals = field(default_factory=AccessibilitySignals)
    seo: SeoSignals = field(default_factory=SeoSignals)
    motion: MotionSignals = field(default_factory=MotionSignals)
    ux: UXSignals = field(default_factory=UXSignals)

    @classmethod
    def from_dict(cls, data: dict) -> "SignalSnapshot":
        """Build a snapshot from the extractor's camelCase JSON shape."""
        return cls(
            title=str(data.get("title") or ""),
            headings=tuple(data.get("headings") or ()),
            buttons=tuple(data.get("buttons") or ()),
            forms=tuple(data.get("forms") or ()),
            main_text=str(data.get("mainText") or data.get("main_text") or ""),
            meta_description=str(
                data.get("metaDescription") or data.get("meta_description") or ""
            ),
            accessibility=AccessibilitySignals.from_dict(data.get("accessibility")),
            seo=SeoSignals.from_dict(data.get("seo")),
            motion=MotionSignals.from_dict(data.get("motion")),
            ux=UXSignals.from_dict(data.get("ux")),
        )

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "headings": list(self.headings),
            "buttons": list(self.buttons),
            "forms": list(self.forms),
            "mainText": self.main_text,
            "metaDescription": self.meta_description,
            "accessibility": self.accessibility.to_dict(),
            "seo": self.seo.to_dict(),
            "motion": self.motion.to_dict(),
            "ux": self.ux.to_dict(),
        }


@dataclass(frozen=True)
class VisualAssets:
    """Opaque screenshot references; never interpreted by the engine."""

    full_page: str = ""
    above_the_fold: str = ""
    mobile: str = ""


@dataclass(frozen=True)
class ExtractedPage:
    """Everything the extractor hands over for one page capture."""

    url: str
    snapshot: SignalSnapshot
    payload: str
    visual: VisualAssets = field(default_factory=VisualAssets)


# ============================================================================
# Review Models
# ============================================================================

ENRICHMENT_FIELDS = (
    "confidence",
    "evidence_weight",
    "source_type",
    "impact_score",
    "effort_score",
    "priority_score",
    "priority_label",
    "fix_snippet",
)


@dataclass(frozen=True)
class Finding:
    """A single reported problem inside an audit section."""

    title: str
    why: str
    evidence: str
    severity: Severity = Severity.MEDIUM

    # Enrichment fields, unset until inferred or supplied
    confidence: Optional[ConfidenceLevel] = None
    evidence_weight: Optional[int] = None  # 0-100
    source_type: Optional[SourceType] = None
    impact_score: Optional[int] = None  # 0-100
    effort_score: Optional[int] = None  # 0-100
    priority_score: Optional[int] = None  # 0-100
    priority_label: Optional[PriorityLabel] = None
    fix_snippet: Optional[str] = None

    @property
    def is_enriched(self) -> bool:
        """True when every enrichment field except the snippet is set."""
        return all(
            getattr(self, name) is not None
            for name in ENRICHMENT_FIELDS
            if name != "fix_snippet"
        )

    def to_dict(self) -> dict:
        data = {
            "title": self.title,
            "why": self.why,
            "evidence": self.evidence,
            "severity": self.severity.value,
        }
        for name in ENRICHMENT_FIELDS:
            value = getattr(self, name)
            if value is not None:
                data[_camel(name)] = to_jsonable(value)
        return data


@dataclass(frozen=True)
class Issue(Finding):
    """A top-level UX issue; a finding with a category."""

    category: IssueCategory = IssueCategory.CLARITY

    def as_finding(self) -> Finding:
        """Reshape into a section finding, dropping the category."""
        return Finding(**{
            f.name: getattr(self, f.name)
            for f in fields(Finding)
        })

    def to_dict(self) -> dict:
        return {"category": self.category.value, **super().to_dict()}


@dataclass(frozen=True)
class Improvement:
    """A before/after improvement suggestion."""

    before: str
    after: str

    def to_dict(self) -> dict:
        return {"before": self.before, "after": self.after}


@dataclass(frozen=True)
class AuditSection:
    """Score and findings for one audit dimension."""

    score: int
    findings: list[Finding] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "findings": [finding.to_dict() for finding in self.findings],
        }


@dataclass(frozen=True)
class UXSection:
    """UX dimension; may mirror the top-level issues."""

    score: int
    issues: list[Issue] = field(default_factory=list)
    top_improvements: list[Improvement] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "issues": [issue.to_dict() for issue in self.issues],
            "top_improvements": [item.to_dict() for item in self.top_improvements],
        }


@dataclass(frozen=True)
class Review:
    """Complete audit output for one analysis request."""

    score: int
    issues: list[Issue]
    top_improvements: list[Improvement]
    ux: UXSection
    accessibility: AuditSection
    seo: AuditSection
    visual: AuditSection

    def sections(self) -> dict[str, AuditSection]:
        return {
            "accessibility": self.accessibility,
            "seo": self.seo,
            "visual": self.visual,
        }

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "issues": [issue.to_dict() for issue in self.issues],
            "top_improvements": [item.to_dict() for item in self.top_improvements],
            "ux": self.ux.to_dict(),
            "accessibility": self.accessibility.to_dict(),
            "seo": self.seo.to_dict(),
            "visual": self.visual.to_dict(),
        }


# ============================================================================
# Performance Models
# ============================================================================

@dataclass(frozen=True)
class PerformanceMetric:
    """A single Lighthouse metric."""

    id: str
    title: str
    description: str = ""
    score: int = 0  # 0-100
    display_value: str = "N/A"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "score": self.score,
            "displayValue": self.display_value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PerformanceMetric":
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            score=clamp_score(to_number(data.get("score")) or 0),
            display_value=str(data.get("displayValue", data.get("display_value", "N/A"))),
        )


@dataclass(frozen=True)
class PerformanceCategory:
    """One Lighthouse category score with its metrics."""

    id: str
    title: str
    score: int
    metrics: list[PerformanceMetric] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "score": self.score,
            "metrics": [metric.to_dict() for metric in self.metrics],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PerformanceCategory":
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title", "")),
            score=clamp_score(to_number(data.get("score")) or 0),
            metrics=[PerformanceMetric.from_dict(m) for m in data.get("metrics") or []],
        )


@dataclass(frozen=True)
class PerformanceReport:
    """Per-audit performance snapshot from the performance collaborator."""

    performance: PerformanceCategory
    accessibility: PerformanceCategory
    best_practices: PerformanceCategory
    seo: PerformanceCategory
    overall_performance_score: int
    timestamp: int = 0  # epoch milliseconds

    def metric(self, metric_id: str) -> Optional[PerformanceMetric]:
        """Find a performance metric by its Lighthouse audit id."""
        for metric in self.performance.metrics:
            if metric.id == metric_id:
                return metric
        return None

    def to_dict(self) -> dict:
        return {
            "performance": self.performance.to_dict(),
            "accessibility": self.accessibility.to_dict(),
            "bestPractices": self.best_practices.to_dict(),
            "seo": self.seo.to_dict(),
            "overallPerformanceScore": self.overall_performance_score,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PerformanceReport":
        return cls(
            performance=PerformanceCategory.from_dict(data["performance"]),
            accessibility=PerformanceCategory.from_dict(data["accessibility"]),
            best_practices=PerformanceCategory.from_dict(
                data.get("bestPractices", data.get("best_practices", {}))
            ),
            seo=PerformanceCategory.from_dict(data["seo"]),
            overall_performance_score=clamp_score(to_number(
                data.get("overallPerformanceScore", data.get("overall_performance_score"))
            ) or 0),
            timestamp=int(to_number(data.get("timestamp")) or 0),
        )


# ============================================================================
# Content Analysis Models
# ============================================================================

@dataclass(frozen=True)
class KeywordPlacement:
    in_h1: bool = False
    in_first_100_words: bool = False
    in_meta: bool = False
    subheading_matches: int = 0


@dataclass(frozen=True)
class PrimaryKeywordAnalysis:
    keyword: str
    keyword_count: int
    density: float  # percentage, 2 decimals
    recommended_density_range: str
    placement: KeywordPlacement
    stuffing_risk: StuffingRisk
    repeated_phrase_flags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class StructureAnalysis:
    long_paragraphs: int = 0
    wall_of_text_paragraphs: int = 0
    no_subheading_after_300_words: bool = False
    bullet_list_presence: bool = False
    passive_voice_percent: float = 0.0
    long_sentence_percent: float = 0.0
    complex_sentence_percent: float = 0.0


@dataclass(frozen=True)
class SEOContentAnalysis:
    """Readability, keyword and structure analysis of the main text."""

    word_count: int
    sentence_count: int
    avg_sentence_length: float
    readability_score: int  # Flesch Reading Ease, 0-100
    readability_grade: str
    primary_keyword_analysis: PrimaryKeywordAnalysis
    structure_analysis: StructureAnalysis
    semantic_coverage_score: int
    intent_alignment_score: int
    findings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return to_jsonable(self)


# ============================================================================
# Motion Analysis Models
# ============================================================================

@dataclass(frozen=True)
class MotionAnalysis:
    """Typed motion risk classification."""

    animation_count: int
    animations_detected: int
    types: list[MotionType]
    infinite_animations: int
    auto_carousels: int
    scroll_reveal_elements: int
    long_duration_animations: int
    accessibility_support: bool
    reduced_motion_css_present: bool
    pause_control_present: bool
    flashing_risk: bool
    lcp_element_likely_animated: bool
    potential_risks: list[str] = field(default_factory=list)
    performance_correlation: list[str] = field(default_factory=list)
    risk_score: int = 0

    def to_dict(self) -> dict:
        return to_jsonable(self)


# ============================================================================
# UX Intelligence Models
# ============================================================================

@dataclass(frozen=True)
class CognitiveLoadAnalysis:
    cta_count_above_fold: int
    primary_cta_conflict: bool
    competing_color_count: int
    overcrowded_hero: bool
    risk: str
    risk_level: RiskLevel
    cognitive_load_index: int


@dataclass(frozen=True)
class VisualHierarchyAnalysis:
    h1_dominance_ratio: float
    cta_visual_dominance_ratio: float
    color_hierarchy_score: int
    visual_dominance_ratio: int
    score: int


@dataclass(frozen=True)
class FlowAnalysis:
    estimated_pattern: FlowPattern
    reading_flow_score: int
    reading_order_issues: int
    cta_scan_risk: bool


@dataclass(frozen=True)
class CTAQualityAnalysis:
    vague_cta_count: int
    benefit_cta_count: int
    urgency_cta_count: int
    cta_strength_score: int
    findings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ConversionFrictionAnalysis:
    max_form_fields: int
    form_fields_over_8: bool
    requires_phone_and_email: bool
    missing_progress_indicator: bool
    trust_badge_missing_on_checkout: bool
    conversion_friction_score: int
    findings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TrustSignalAnalysis:
    testimonials_present: bool
    social_proof_present: bool
    security_badges_present: bool
    about_or_contact_visible: bool
    trust_score: int


@dataclass(frozen=True)
class ExperienceQualityAnalysis:
    microinteraction_score: int
    cta_visibility_score: int
    navigation_simplicity_score: int
    findings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class UXRiskRadar:
    clarity: int
    conversion: int
    trust: int
    content: int
    interaction: int
    navigation: int


@dataclass(frozen=True)
class UXIntelligenceAnalysis:
    """Seven UX sub-analyses plus the composite first impression and radar."""

    cognitive_load: CognitiveLoadAnalysis
    visual_hierarchy: VisualHierarchyAnalysis
    flow_analysis: FlowAnalysis
    cta_quality: CTAQualityAnalysis
    conversion_friction: ConversionFrictionAnalysis
    trust_signals: TrustSignalAnalysis
    experience_quality: ExperienceQualityAnalysis
    first_impression_score: int
    ux_risk_radar: UXRiskRadar
    risk_level: RiskLevel
    findings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return to_jsonable(self)


# ============================================================================
# Audit History Models
# ============================================================================

@dataclass(frozen=True)
class AuditRecord:
    """One persisted audit of a URL."""

    url: str
    review: Review
    performance: Optional[PerformanceReport] = None
    health_score: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def score(self) -> int:
        return self.review.score

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "score": self.review.score,
            "review": self.review.to_dict(),
            "performance": self.performance.to_dict() if self.performance else None,
            "healthScore": self.health_score,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class MetricHighlight:
    """Trend of one performance metric between two audits."""

    metric: str
    before: str
    after: str
    status: MetricStatus


@dataclass(frozen=True)
class AuditDiff:
    """Read-only comparison of two audits of the same URL."""

    score_delta: int
    health_delta: Optional[int]
    accessibility_delta: int
    seo_delta: int
    visual_delta: int
    previous_issue_count: int
    current_issue_count: int
    new_issues: list[str] = field(default_factory=list)
    resolved_issues: list[str] = field(default_factory=list)
    metric_highlights: list[MetricHighlight] = field(default_factory=list)
    previous_created_at: Optional[datetime] = None
    current_created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {_camel(f.name): to_jsonable(getattr(self, f.name)) for f in fields(self)}
