"""Motion risk analysis - animations, carousels and motion accessibility."""

import dataclasses
import logging

from uxaudit.constants import (
    CAROUSEL_RISK_CAP,
    CAROUSEL_RISK_PER_ITEM,
    CLS_CORRELATION_RISK,
    CORRELATION_SCORE_THRESHOLD,
    FLASHING_RISK,
    FULL_MOTION_SUPPORT_CREDIT,
    INFINITE_RISK_CAP,
    INFINITE_RISK_PER_ITEM,
    LCP_ANIMATED_RISK,
    LCP_CORRELATION_RISK,
    LONG_DURATION_RISK_CAP,
    LONG_DURATION_RISK_PER_ITEM,
    METRIC_CLS,
    METRIC_LCP,
    MISSING_PAUSE_CONTROL_RISK,
    MISSING_REDUCED_MOTION_RISK,
    SCROLL_REVEAL_ALLOWANCE,
    SCROLL_REVEAL_RISK_CAP,
    SCROLL_REVEAL_RISK_PER_ITEM,
)
from uxaudit.models import MotionAnalysis, MotionSignals, MotionType, PerformanceReport
from uxaudit.utils import clamp_score, unique

logger = logging.getLogger(__name__)


class MotionAnalyzer:
    """Classifies page motion and scores its UX and accessibility risk."""

    def analyze(self, signals: MotionSignals) -> MotionAnalysis:
        """Classify motion types and compute the additive risk score.

        Args:
            signals: Raw motion counts and flags from the snapshot

        Returns:
            MotionAnalysis with an empty performance correlation
        """
        animation_count = (
            signals.css_animations
            + signals.css_transitions
            + signals.js_animation_hooks
            + signals.scroll_reveal_elements
            + signals.auto_carousels
            + signals.lottie_instances
            + signals.video_like_animations
        )

        return MotionAnalysis(
            animation_count=animation_count,
            animations_detected=animation_count,
            types=self._classify(signals),
            infinite_animations=signals.infinite_animations,
            auto_carousels=signals.auto_carousels,
            scroll_reveal_elements=signals.scroll_reveal_elements,
            long_duration_animations=signals.long_duration_animations,
            accessibility_support=signals.reduced_motion_support and (
                signals.pause_control_present or signals.auto_carousels == 0
            ),
            reduced_motion_css_present=signals.reduced_motion_support,
            pause_control_present=signals.pause_control_present,
            flashing_risk=signals.flashing_risk,
            lcp_element_likely_animated=signals.lcp_element_likely_animated,
            potential_risks=unique(signals.potential_risks),
            performance_correlation=[],
            risk_score=clamp_score(self._risk_score(signals)),
        )

    def correlate(
        self, analysis: MotionAnalysis, performance: PerformanceReport
    ) -> MotionAnalysis:
        """Raise motion risk where motion coincides with weak CLS or LCP.

        Args:
            analysis: Motion analysis to extend
            performance: Performance report for the same audit

        Returns:
            New MotionAnalysis with correlation notes and adjusted risk
        """
        notes = list(analysis.performance_correlation)
        risk = analysis.risk_score

        cls = performance.metric(METRIC_CLS)
        high_motion = (
            analysis.infinite_animations > 0
            or analysis.auto_carousels > 0
            or analysis.scroll_reveal_elements > 0
        )
        if cls and cls.score < CORRELATION_SCORE_THRESHOLD and high_motion:
            notes.append(
                f"High-motion sections align with weaker CLS ({cls.display_value}); "
                "check animated hero/reveal blocks for layout instability."
            )
            risk += CLS_CORRELATION_RISK

        lcp = performance.metric(METRIC_LCP)
        if lcp and lcp.score < CORRELATION_SCORE_THRESHOLD and analysis.lcp_element_likely_animated:
            notes.append(
                f"Likely animated hero/LCP candidate with slower LCP ({lcp.display_value}); "
                "reduce intro motion on first viewport."
            )
            risk += LCP_CORRELATION_RISK

        if risk != analysis.risk_score:
            logger.info(
                f"motion.correlate risk_before={analysis.risk_score} risk_after={clamp_score(risk)}"
            )

        return dataclasses.replace(
            analysis,
            performance_correlation=unique(notes),
            risk_score=clamp_score(risk),
        )

    def _classify(self, signals: MotionSignals) -> list[MotionType]:
        types = []
        if signals.css_animations > 0 or signals.css_transitions > 0:
            types.append(MotionType.CSS)
        if signals.js_animation_hooks > 0:
            types.append(MotionType.JS)
        if signals.scroll_reveal_elements > 0:
            types.append(MotionType.SCROLL)
        if signals.auto_carousels > 0:
            types.append(MotionType.CAROUSEL)
        if signals.lottie_instances > 0:
            types.append(MotionType.LOTTIE)
        if signals.video_like_animations > 0:
            types.append(MotionType.VIDEO)
        return types

    def _risk_score(self, signals: MotionSignals) -> int:
        risk = 0
        risk += min(CAROUSEL_RISK_CAP, signals.auto_carousels * CAROUSEL_RISK_PER_ITEM)
        risk += min(INFINITE_RISK_CAP, signals.infinite_animations * INFINITE_RISK_PER_ITEM)
        risk += min(
            LONG_DURATION_RISK_CAP,
            signals.long_duration_animations * LONG_DURATION_RISK_PER_ITEM,
        )
        excess_reveals = max(0, signals.scroll_reveal_elements - SCROLL_REVEAL_ALLOWANCE)
        risk += min(SCROLL_REVEAL_RISK_CAP, excess_reveals * SCROLL_REVEAL_RISK_PER_ITEM)

        if signals.flashing_risk:
            risk += FLASHING_RISK
        if signals.lcp_element_likely_animated:
            risk += LCP_ANIMATED_RISK
        if not signals.reduced_motion_support:
            risk += MISSING_REDUCED_MOTION_RISK
        # Pause control only matters when something auto-advances
        if not signals.pause_control_present and signals.auto_carousels > 0:
            risk += MISSING_PAUSE_CONTROL_RISK

        if signals.reduced_motion_support and signals.pause_control_present:
            risk -= FULL_MOTION_SUPPORT_CREDIT

        return risk
