"""UX Health Audit - website UX, accessibility, SEO and performance scoring."""

__version__ = "0.1.0"

from uxaudit.config import Config, RetryPolicy, ScoringThresholds
from uxaudit.content import ContentAnalyzer
from uxaudit.motion import MotionAnalyzer
from uxaudit.ux_intelligence import UXIntelligenceAnalyzer
from uxaudit.sanitizer import sanitize_review, parse_model_json
from uxaudit.fallback import FallbackReviewGenerator
from uxaudit.enrichment import enrich_finding, enrich_review
from uxaudit.health import compute_health_score, health_score_for
from uxaudit.diff import build_audit_diff
from uxaudit.llm import LLMClient
from uxaudit.auditor import AuditRunner
from uxaudit.extractor import PageExtractor, build_payload, extract_page
from uxaudit.external.pagespeed import PageSpeedClient
from uxaudit.alerts import AlertDispatcher, evaluate_score_drop
from uxaudit.store import AuditStore, InMemoryAuditStore, LocalSqliteAuditStore
from uxaudit.pipeline import AnalysisResult, AuditPipeline
from uxaudit.models import (
    SignalSnapshot,
    ExtractedPage,
    Issue,
    Finding,
    Review,
    PerformanceReport,
    AuditRecord,
    AuditDiff,
)
from uxaudit.exceptions import (
    UXAuditError,
    ExtractionError,
    ReviewParseError,
    ModelCallError,
    ModelQuotaExceededError,
    ModelRetryableError,
    ModelFatalError,
    AuditFailedError,
)

__all__ = [
    # Configuration
    "Config",
    "RetryPolicy",
    "ScoringThresholds",
    # Analyzers
    "ContentAnalyzer",
    "MotionAnalyzer",
    "UXIntelligenceAnalyzer",
    # Review
    "sanitize_review",
    "parse_model_json",
    "FallbackReviewGenerator",
    "enrich_finding",
    "enrich_review",
    "compute_health_score",
    "health_score_for",
    "build_audit_diff",
    # Collaborators
    "LLMClient",
    "AuditRunner",
    "PageExtractor",
    "build_payload",
    "extract_page",
    "PageSpeedClient",
    "AlertDispatcher",
    "evaluate_score_drop",
    "AuditStore",
    "InMemoryAuditStore",
    "LocalSqliteAuditStore",
    "AnalysisResult",
    "AuditPipeline",
    # Models
    "SignalSnapshot",
    "ExtractedPage",
    "Issue",
    "Finding",
    "Review",
    "PerformanceReport",
    "AuditRecord",
    "AuditDiff",
    # Errors
    "UXAuditError",
    "ExtractionError",
    "ReviewParseError",
    "ModelCallError",
    "ModelQuotaExceededError",
    "ModelRetryableError",
    "ModelFatalError",
    "AuditFailedError",
]
