"""End-to-end analysis of one page: signals, review, health, history and alerts."""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from uxaudit.alerts import (
    AlertDispatcher,
    AlertEvent,
    AuditCompleteEvent,
    AuditFailedEvent,
    evaluate_score_drop,
    is_scheduled,
)
from uxaudit.auditor import AuditRunner
from uxaudit.config import Config, RetryPolicy, ScoringThresholds
from uxaudit.constants import MAX_AUDIT_INPUT_CHARS
from uxaudit.content import ContentAnalyzer
from uxaudit.diff import build_audit_diff
from uxaudit.enrichment import enrich_review
from uxaudit.extractor import extract_page, fetch_html
from uxaudit.external.pagespeed import PageSpeedClient
from uxaudit.fallback import FallbackReviewGenerator
from uxaudit.health import health_score_for
from uxaudit.llm import LLMClient
from uxaudit.logging_config import format_event
from uxaudit.models import (
    AuditDiff,
    AuditRecord,
    ExtractedPage,
    MotionAnalysis,
    PerformanceReport,
    Review,
    SEOContentAnalysis,
    UXIntelligenceAnalysis,
)
from uxaudit.motion import MotionAnalyzer
from uxaudit.performance import create_fallback_performance_report
from uxaudit.prompt import build_audit_input, build_audit_messages, trim_audit_input
from uxaudit.store import AuditStore, InMemoryAuditStore
from uxaudit.ux_intelligence import UXIntelligenceAnalyzer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Everything one analysis produced."""

    record: AuditRecord
    content: SEOContentAnalysis
    motion: MotionAnalysis
    ux: UXIntelligenceAnalysis
    diff: Optional[AuditDiff] = None
    audit_input_truncated: bool = False
    alerts: List[AlertEvent] = field(default_factory=list)

    @property
    def review(self) -> Review:
        return self.record.review

    def to_dict(self) -> dict:
        return {
            **self.record.to_dict(),
            "contentIntelligence": self.content.to_dict(),
            "motionIntelligence": self.motion.to_dict(),
            "uxIntelligence": self.ux.to_dict(),
            "diff": self.diff.to_dict() if self.diff else None,
            "auditInputTruncated": self.audit_input_truncated,
        }


class AuditPipeline:
    """Runs the full analysis flow for extracted pages.

    Without an AuditRunner the review comes from the deterministic
    fallback generator, so the pipeline also serves offline scoring.
    Without a performance client the uniform fallback report is used.
    """

    def __init__(
        self,
        runner: Optional[AuditRunner] = None,
        store: Optional[AuditStore] = None,
        performance: Optional[PageSpeedClient] = None,
        alerts: Optional[AlertDispatcher] = None,
        thresholds: Optional[ScoringThresholds] = None,
        max_audit_input_chars: int = MAX_AUDIT_INPUT_CHARS,
        supports_vision: Optional[bool] = None,
    ):
        self.runner = runner
        self.store = store if store is not None else InMemoryAuditStore()
        self.performance = performance
        self.alerts = alerts or AlertDispatcher()
        self.thresholds = thresholds or ScoringThresholds()
        self.max_audit_input_chars = max_audit_input_chars
        if supports_vision is None:
            supports_vision = runner.llm.supports_vision if runner is not None else False
        self.supports_vision = supports_vision

        self.content_analyzer = ContentAnalyzer(self.thresholds)
        self.motion_analyzer = MotionAnalyzer()
        self.ux_analyzer = UXIntelligenceAnalyzer()
        self.fallback = FallbackReviewGenerator(self.thresholds)

    @classmethod
    def from_config(
        cls,
        config: Config,
        store: Optional[AuditStore] = None,
        alerts: Optional[AlertDispatcher] = None,
        thresholds: Optional[ScoringThresholds] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> "AuditPipeline":
        """Wire the model caller and PageSpeed client from configuration."""
        thresholds = thresholds or ScoringThresholds()
        runner = AuditRunner(
            LLMClient.from_config(config),
            retry_policy=retry_policy,
            allow_fallback=config.allow_llm_fallback,
            thresholds=thresholds,
        )
        return cls(
            runner=runner,
            store=store,
            performance=PageSpeedClient(config.pagespeed_api_key),
            alerts=alerts,
            thresholds=thresholds,
            max_audit_input_chars=config.max_audit_input_chars,
        )

    async def analyze_url(
        self,
        url: str,
        source: str = "unknown",
        user_agent: str = "UX-Health-Audit-Bot/1.0",
        primary_keyword: Optional[str] = None,
    ) -> AnalysisResult:
        """Fetch a page, extract it and analyze it."""
        html = await fetch_html(url, user_agent=user_agent)
        return await self.analyze(extract_page(url, html), source, primary_keyword)

    async def analyze(
        self,
        page: ExtractedPage,
        source: str = "unknown",
        primary_keyword: Optional[str] = None,
    ) -> AnalysisResult:
        """Analyze one extracted page and record the audit.

        Args:
            page: Extracted page (snapshot, payload, visual references)
            source: Who asked for the analysis ("api", "cli", "scheduled.audit", ...)
            primary_keyword: Optional keyword override for the content analysis

        Returns:
            AnalysisResult

        Raises:
            UXAuditError: Any failure; it is logged once and re-raised
        """
        start = time.monotonic()
        try:
            previous = self.store.latest(page.url)

            content = self.content_analyzer.analyze_snapshot(page.snapshot, primary_keyword)
            motion = self.motion_analyzer.analyze(page.snapshot.motion)
            ux = self.ux_analyzer.analyze(
                page.snapshot.ux, motion=motion, readability_score=content.readability_score
            )

            audit_input, truncated = trim_audit_input(
                build_audit_input(page, content, motion, ux), self.max_audit_input_chars
            )
            review = enrich_review(await self._review(page, audit_input))

            performance = await self._performance_report(page.url)
            motion = self.motion_analyzer.correlate(motion, performance)
            health_score = health_score_for(review, performance)

            record = AuditRecord(
                url=page.url,
                review=review,
                performance=performance,
                health_score=health_score,
            )
            self.store.save(record)

            alerts = self._emit_alerts(previous, record, source)
            diff = build_audit_diff(previous, record, self.thresholds)

            logger.info(format_event(
                "review.analyze.success",
                url=page.url,
                source=source,
                score=review.score,
                health_score=health_score,
                issues=len(review.issues),
                truncated=truncated,
                duration_ms=int((time.monotonic() - start) * 1000),
            ))

            return AnalysisResult(
                record=record,
                content=content,
                motion=motion,
                ux=ux,
                diff=diff,
                audit_input_truncated=truncated,
                alerts=alerts,
            )

        except Exception as e:
            logger.error(format_event(
                "review.analyze.error",
                url=page.url,
                source=source,
                error_type=type(e).__name__,
                error=str(e),
            ))
            if is_scheduled(source):
                self.alerts.dispatch(AuditFailedEvent(url=page.url, error=str(e), source=source))
            raise

    async def _review(self, page: ExtractedPage, audit_input: str) -> Review:
        if self.runner is None:
            logger.info(format_event("review.offline", url=page.url))
            return self.fallback.generate(audit_input)

        messages = build_audit_messages(page, audit_input, self.supports_vision)
        return await self.runner.run(audit_input, messages)

    async def _performance_report(self, url: str) -> PerformanceReport:
        if self.performance is None:
            return create_fallback_performance_report(url)
        return await self.performance.get_report(url)

    def _emit_alerts(
        self, previous: Optional[AuditRecord], record: AuditRecord, source: str
    ) -> List[AlertEvent]:
        events: List[AlertEvent] = []

        drop = evaluate_score_drop(previous, record, self.thresholds)
        if drop is not None:
            logger.warning(format_event(
                "alert.score_drop",
                url=record.url,
                score_drop=drop.score_drop,
                health_drop=drop.health_drop,
                severity=drop.severity,
            ))
            events.append(drop)

        if is_scheduled(source):
            events.append(AuditCompleteEvent(
                url=record.url,
                score=record.score,
                health_score=record.health_score,
                source=source,
            ))

        for event in events:
            self.alerts.dispatch(event)
        return events
