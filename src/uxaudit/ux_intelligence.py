"""UX intelligence - cognitive load, hierarchy, flow, CTAs, friction and trust."""

import logging
from typing import Optional

from uxaudit.constants import (
    CROWDED_HERO_ELEMENTS,
    CROWDED_HERO_INTERACTIVE,
    CTA_BASE_STRENGTH,
    DEFAULT_CONTENT_READABILITY,
    DEFAULT_MOTION_RISK,
    F_PATTERN_LEFT_BIAS,
    HEADLINE_MAX_LENGTH,
    HEADLINE_MIN_LENGTH,
    HIGH_RISK_THRESHOLD,
    LEFT_BIAS_BONUS,
    LEFT_BIAS_BONUS_THRESHOLD,
    MAX_UX_FINDINGS,
    MEDIUM_RISK_THRESHOLD,
    PRIMARY_CTA_CONFLICT_COUNT,
    READING_ISSUE_PENALTY,
    SCAN_RISK_THRESHOLD,
    Z_PATTERN_LEFT_BIAS,
)
from uxaudit.models import (
    CognitiveLoadAnalysis,
    ConversionFrictionAnalysis,
    CTAQualityAnalysis,
    ExperienceQualityAnalysis,
    FlowAnalysis,
    FlowPattern,
    MotionAnalysis,
    RiskLevel,
    TrustSignalAnalysis,
    UXIntelligenceAnalysis,
    UXRiskRadar,
    UXSignals,
    VisualHierarchyAnalysis,
)
from uxaudit.utils import clamp_score, unique, with_default

logger = logging.getLogger(__name__)


def to_risk_level(score: int) -> RiskLevel:
    """Map a 0-100 risk score onto Low/Medium/High."""
    if score >= HIGH_RISK_THRESHOLD:
        return RiskLevel.HIGH
    if score >= MEDIUM_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


class UXIntelligenceAnalyzer:
    """Runs the seven UX sub-analyses and blends them into composite scores.

    Every sub-analysis is a pure function of the UX signals. The content
    readability and motion risk scores are optional inputs used only by
    the risk radar.
    """

    def analyze(
        self,
        signals: UXSignals,
        motion: Optional[MotionAnalysis] = None,
        readability_score: Optional[int] = None,
    ) -> UXIntelligenceAnalysis:
        """Analyze UX signals.

        Args:
            signals: UX signals from the snapshot
            motion: Motion analysis feeding the interaction axis
            readability_score: Content readability feeding the content axis

        Returns:
            UXIntelligenceAnalysis
        """
        cognitive = self._cognitive_load(signals)
        hierarchy = self._visual_hierarchy(signals)
        flow = self._flow(signals)
        cta = self._cta_quality(signals)
        friction = self._conversion_friction(signals)
        trust = self._trust_signals(signals)
        experience = self._experience_quality(signals)

        first_impression = self._first_impression(signals, cognitive, hierarchy, cta)

        motion_risk = with_default(
            motion.risk_score if motion is not None else None, DEFAULT_MOTION_RISK
        )
        radar = UXRiskRadar(
            clarity=clamp_score(
                (100 - cognitive.cognitive_load_index) * 0.5 + hierarchy.score * 0.5
            ),
            conversion=clamp_score(
                (100 - friction.conversion_friction_score) * 0.6
                + cta.cta_strength_score * 0.4
            ),
            trust=trust.trust_score,
            content=clamp_score(with_default(readability_score, DEFAULT_CONTENT_READABILITY)),
            interaction=clamp_score(
                (100 - motion_risk) * 0.5 + experience.microinteraction_score * 0.5
            ),
            navigation=clamp_score(
                flow.reading_flow_score * 0.5 + experience.navigation_simplicity_score * 0.5
            ),
        )

        overall_risk = clamp_score(
            cognitive.cognitive_load_index * 0.2
            + friction.conversion_friction_score * 0.25
            + (100 - trust.trust_score) * 0.2
            + (100 - cta.cta_strength_score) * 0.15
            + (100 - flow.reading_flow_score) * 0.2
        )

        findings = []
        if cognitive.primary_cta_conflict:
            findings.append("Multiple primary CTAs above the fold are creating decision fatigue.")
        if cognitive.overcrowded_hero:
            findings.append("Hero section appears visually crowded and may reduce message clarity.")
        findings.extend(cta.findings)
        findings.extend(friction.findings)
        findings.extend(experience.findings)
        if not trust.about_or_contact_visible:
            findings.append("About/Contact visibility is weak; trust confidence may drop.")
        if first_impression < 65:
            findings.append("First impression is weak in the first 5-second scan.")

        risk_level = to_risk_level(overall_risk)
        logger.debug(
            f"ux.analyze first_impression={first_impression} overall_risk={overall_risk} "
            f"risk_level={risk_level.value}"
        )

        return UXIntelligenceAnalysis(
            cognitive_load=cognitive,
            visual_hierarchy=hierarchy,
            flow_analysis=flow,
            cta_quality=cta,
            conversion_friction=friction,
            trust_signals=trust,
            experience_quality=experience,
            first_impression_score=first_impression,
            ux_risk_radar=radar,
            risk_level=risk_level,
            findings=unique(findings)[:MAX_UX_FINDINGS],
        )

    def _cognitive_load(self, s: UXSignals) -> CognitiveLoadAnalysis:
        primary_conflict = s.primary_cta_count_above_fold >= PRIMARY_CTA_CONFLICT_COUNT
        overcrowded = (
            s.hero_element_count >= CROWDED_HERO_ELEMENTS
            or s.hero_interactive_count >= CROWDED_HERO_INTERACTIVE
        )

        index = min(35, max(0, s.cta_count_above_fold - 1) * 10)
        index += 20 if primary_conflict else 0
        index += min(20, max(0, s.cta_color_variant_count_above_fold - 2) * 8)
        index += 20 if overcrowded else 0

        load = clamp_score(index)
        level = to_risk_level(load)
        return CognitiveLoadAnalysis(
            cta_count_above_fold=s.cta_count_above_fold,
            primary_cta_conflict=primary_conflict,
            competing_color_count=s.cta_color_variant_count_above_fold,
            overcrowded_hero=overcrowded,
            risk=f"{level.value} cognitive load in hero section",
            risk_level=level,
            cognitive_load_index=load,
        )

    def _visual_hierarchy(self, s: UXSignals) -> VisualHierarchyAnalysis:
        color_score = clamp_score(
            100 - max(0, s.cta_color_variant_count_above_fold - 2) * 15
        )
        h1_percent = clamp_score(s.h1_dominance_ratio * 100)
        cta_percent = clamp_score(s.cta_visual_dominance_ratio * 100)

        return VisualHierarchyAnalysis(
            h1_dominance_ratio=round(s.h1_dominance_ratio, 2),
            cta_visual_dominance_ratio=round(s.cta_visual_dominance_ratio, 2),
            color_hierarchy_score=color_score,
            visual_dominance_ratio=clamp_score((h1_percent + cta_percent) / 2),
            score=clamp_score(h1_percent * 0.4 + cta_percent * 0.4 + color_score * 0.2),
        )

    def _flow(self, s: UXSignals) -> FlowAnalysis:
        left_bias = s.left_aligned_key_elements_ratio
        if left_bias >= F_PATTERN_LEFT_BIAS:
            pattern = FlowPattern.F_PATTERN
        elif left_bias >= Z_PATTERN_LEFT_BIAS:
            pattern = FlowPattern.Z_PATTERN
        else:
            pattern = FlowPattern.MIXED

        bonus = LEFT_BIAS_BONUS if left_bias >= LEFT_BIAS_BONUS_THRESHOLD else 0
        score = clamp_score(100 - s.flow_reading_issue_count * READING_ISSUE_PENALTY + bonus)

        return FlowAnalysis(
            estimated_pattern=pattern,
            reading_flow_score=score,
            reading_order_issues=s.flow_reading_issue_count,
            cta_scan_risk=score < SCAN_RISK_THRESHOLD,
        )

    def _cta_quality(self, s: UXSignals) -> CTAQualityAnalysis:
        strength = CTA_BASE_STRENGTH
        strength += min(25, s.benefit_cta_count * 8)
        strength += min(10, s.urgency_cta_count * 4)
        strength -= min(35, s.vague_cta_count * 9)

        findings = []
        if s.vague_cta_count > 0:
            findings.append("CTA lacks benefit framing. Consider adding outcome-driven language.")
        if s.benefit_cta_count == 0:
            findings.append("No benefit-driven CTA detected above the fold.")
        if s.urgency_cta_count == 0 and s.primary_cta_count_above_fold > 0:
            findings.append("Primary CTA has weak urgency cues.")

        return CTAQualityAnalysis(
            vague_cta_count=s.vague_cta_count,
            benefit_cta_count=s.benefit_cta_count,
            urgency_cta_count=s.urgency_cta_count,
            cta_strength_score=clamp_score(strength),
            findings=findings,
        )

    def _conversion_friction(self, s: UXSignals) -> ConversionFrictionAnalysis:
        friction = 20
        friction += 25 if s.max_form_field_count > 8 else 0
        friction += 22 if s.requires_phone_and_email else 0
        friction += 0 if s.progress_indicator_present else 15
        friction += 0 if s.trust_badge_present else 10

        findings = []
        if s.max_form_field_count > 8:
            findings.append("Form has more than 8 fields; likely conversion drop.")
        if s.requires_phone_and_email:
            findings.append("Form asks both phone and email; high perceived effort.")
        if not s.progress_indicator_present and s.max_form_field_count >= 6:
            findings.append("Multi-step style form lacks progress indicator.")
        if not s.trust_badge_present and s.max_form_field_count >= 4:
            findings.append("Trust/security indicator missing near conversion path.")

        return ConversionFrictionAnalysis(
            max_form_fields=s.max_form_field_count,
            form_fields_over_8=s.max_form_field_count > 8,
            requires_phone_and_email=s.requires_phone_and_email,
            missing_progress_indicator=not s.progress_indicator_present,
            trust_badge_missing_on_checkout=not s.trust_badge_present,
            conversion_friction_score=clamp_score(friction),
            findings=findings,
        )

    def _trust_signals(self, s: UXSignals) -> TrustSignalAnalysis:
        trust = 25
        trust += 25 if s.testimonials_present else 0
        trust += 20 if s.social_proof_present else 0
        trust += 20 if s.trust_badge_present else 0
        trust += 20 if s.about_or_contact_visible else 0

        return TrustSignalAnalysis(
            testimonials_present=s.testimonials_present,
            social_proof_present=s.social_proof_present,
            security_badges_present=s.trust_badge_present,
            about_or_contact_visible=s.about_or_contact_visible,
            trust_score=clamp_score(trust),
        )

    def _experience_quality(self, s: UXSignals) -> ExperienceQualityAnalysis:
        micro = clamp_score(45 + s.hover_feedback_signals * 8 + s.input_focus_signals * 10)

        if s.viewport_height > 0:
            depth = (s.primary_cta_min_y - s.viewport_height) / s.viewport_height
            cta_visibility = clamp_score(100 - max(0.0, depth * 70))
        else:
            cta_visibility = 60

        nav_penalty = (
            max(0, s.menu_items_count - 7) * 5
            + max(0, s.nav_max_depth - 2) * 12
            + (10 if s.has_hamburger and s.has_visible_desktop_like_nav else 0)
        )
        navigation = clamp_score(100 - nav_penalty)

        findings = []
        if cta_visibility < 65:
            findings.append("Important CTA appears too deep in scroll path.")
        if navigation < 60:
            findings.append("Navigation complexity may increase cognitive overhead.")
        if micro < 50:
            findings.append("Limited hover/focus feedback detected for interactive elements.")

        return ExperienceQualityAnalysis(
            microinteraction_score=micro,
            cta_visibility_score=cta_visibility,
            navigation_simplicity_score=navigation,
            findings=findings,
        )

    def _first_impression(
        self,
        s: UXSignals,
        cognitive: CognitiveLoadAnalysis,
        hierarchy: VisualHierarchyAnalysis,
        cta: CTAQualityAnalysis,
    ) -> int:
        """Blend of headline, value proposition, CTA, load and hierarchy."""
        headline_clarity = (
            80 if HEADLINE_MIN_LENGTH < s.headline_length < HEADLINE_MAX_LENGTH else 55
        )
        value_prop = 85 if s.has_value_prop_hint else 55

        return clamp_score(
            headline_clarity * 0.2
            + value_prop * 0.2
            + cta.cta_strength_score * 0.2
            + (100 - cognitive.cognitive_load_index) * 0.2
            + hierarchy.score * 0.2
        )
