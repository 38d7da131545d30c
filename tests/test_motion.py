"""Tests for motion risk analysis."""

import pytest

from uxaudit.models import MotionSignals, MotionType
from uxaudit.motion import MotionAnalyzer


@pytest.fixture
def analyzer():
    return MotionAnalyzer()


class TestMotionAnalyzer:
    """Test cases for MotionAnalyzer."""

    def test_no_motion_without_reduced_motion_support(self, analyzer):
        """Missing reduced-motion CSS is the only risk on a static page."""
        result = analyzer.analyze(MotionSignals())

        assert result.animation_count == 0
        assert result.types == []
        assert result.risk_score == 12
        assert result.accessibility_support is False

    def test_supported_carousel(self, analyzer):
        """A pausable carousel with reduced-motion CSS gets the support credit."""
        result = analyzer.analyze(MotionSignals(
            auto_carousels=1,
            reduced_motion_support=True,
            pause_control_present=True,
        ))

        assert result.risk_score == 6
        assert result.accessibility_support is True
        assert result.types == [MotionType.CAROUSEL]

    def test_unsupported_carousel(self, analyzer):
        """Carousel without pause control or reduced-motion CSS."""
        result = analyzer.analyze(MotionSignals(auto_carousels=1))
        assert result.risk_score == 12 + 12 + 8
        assert result.accessibility_support is False

    def test_pause_control_ignored_without_carousel(self, analyzer):
        """Missing pause control only counts when something auto-advances."""
        result = analyzer.analyze(MotionSignals(css_animations=3, reduced_motion_support=True))
        assert result.risk_score == 0
        assert result.accessibility_support is True

    def test_flashing_and_animated_lcp(self, analyzer):
        result = analyzer.analyze(MotionSignals(flashing_risk=True, lcp_element_likely_animated=True))
        assert result.risk_score == 24 + 10 + 12

    def test_risk_is_capped_at_100(self, analyzer):
        result = analyzer.analyze(MotionSignals(
            auto_carousels=5,
            infinite_animations=10,
            long_duration_animations=10,
            scroll_reveal_elements=12,
            flashing_risk=True,
            lcp_element_likely_animated=True,
        ))
        assert result.risk_score == 100

    def test_scroll_reveal_allowance(self, analyzer):
        """The first two reveal elements are free."""
        base = analyzer.analyze(MotionSignals(reduced_motion_support=True, scroll_reveal_elements=2))
        more = analyzer.analyze(MotionSignals(reduced_motion_support=True, scroll_reveal_elements=5))

        assert base.risk_score == 0
        assert more.risk_score == 6

    def test_classification_order(self, analyzer):
        result = analyzer.analyze(MotionSignals(
            css_transitions=1,
            js_animation_hooks=1,
            scroll_reveal_elements=1,
            auto_carousels=1,
            lottie_instances=1,
            video_like_animations=1,
        ))
        assert result.types == [
            MotionType.CSS,
            MotionType.JS,
            MotionType.SCROLL,
            MotionType.CAROUSEL,
            MotionType.LOTTIE,
            MotionType.VIDEO,
        ]
        assert result.animation_count == 6
        assert result.animations_detected == 6

    def test_potential_risks_deduplicated(self, analyzer):
        result = analyzer.analyze(MotionSignals(
            potential_risks=("Autoplay video", " Autoplay video ", "", "Parallax hero"),
        ))
        assert result.potential_risks == ["Autoplay video", "Parallax hero"]

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError, match="css_animations"):
            MotionSignals(css_animations=-1)

    def test_snapshot_motion(self, analyzer, snapshot):
        result = analyzer.analyze(snapshot.motion)

        assert result.animation_count == 5
        assert result.types == [MotionType.CSS, MotionType.CAROUSEL]
        assert result.risk_score == 24
        assert result.performance_correlation == []


class TestMotionCorrelation:
    """Test cases for MotionAnalyzer.correlate."""

    def test_weak_cls_and_lcp_raise_risk(self, analyzer, report_factory):
        """Motion next to weak CLS and an animated LCP candidate adds both penalties."""
        analysis = analyzer.analyze(MotionSignals(
            auto_carousels=1,
            reduced_motion_support=True,
            pause_control_present=True,
            lcp_element_likely_animated=True,
        ))
        assert analysis.risk_score == 16

        correlated = analyzer.correlate(analysis, report_factory(metric_score=60, lcp="4.1 s", cls="0.31"))

        assert correlated.risk_score == 16 + 8 + 10
        assert len(correlated.performance_correlation) == 2
        assert "0.31" in correlated.performance_correlation[0]
        assert "4.1 s" in correlated.performance_correlation[1]
        # Input is left untouched
        assert analysis.performance_correlation == []

    def test_good_metrics_leave_risk_alone(self, analyzer, report_factory):
        analysis = analyzer.analyze(MotionSignals(auto_carousels=1, lcp_element_likely_animated=True))
        correlated = analyzer.correlate(analysis, report_factory(metric_score=90))

        assert correlated.risk_score == analysis.risk_score
        assert correlated.performance_correlation == []

    def test_weak_cls_without_high_motion(self, analyzer, report_factory):
        analysis = analyzer.analyze(MotionSignals(css_transitions=2, reduced_motion_support=True))
        correlated = analyzer.correlate(analysis, report_factory(metric_score=40))
        assert correlated.risk_score == 0

    def test_correlation_is_clamped(self, analyzer, report_factory):
        analysis = analyzer.analyze(MotionSignals(
            auto_carousels=5,
            infinite_animations=10,
            flashing_risk=True,
            lcp_element_likely_animated=True,
        ))
        correlated = analyzer.correlate(analysis, report_factory(metric_score=10))
        assert correlated.risk_score == 100
