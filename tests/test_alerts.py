"""Tests for alert decisions and dispatch."""

import dataclasses
import logging
from unittest.mock import Mock

import pytest

from uxaudit.alerts import (
    AlertDispatcher,
    AuditCompleteEvent,
    AuditFailedEvent,
    ScoreDropEvent,
    evaluate_score_drop,
    is_scheduled,
)
from uxaudit.config import ScoringThresholds


def rescored(record, score, health_score):
    return dataclasses.replace(
        record,
        review=dataclasses.replace(record.review, score=score),
        health_score=health_score,
    )


class TestEvaluateScoreDrop:
    """Test cases for evaluate_score_drop (previous record scores 72, health 77)."""

    def test_first_audit(self, record):
        assert evaluate_score_drop(None, record) is None

    def test_small_drop(self, record):
        assert evaluate_score_drop(record, rescored(record, 63, 70)) is None

    def test_improvement(self, record):
        assert evaluate_score_drop(record, rescored(record, 90, 88)) is None

    def test_warning(self, record):
        event = evaluate_score_drop(record, rescored(record, 60, 70))

        assert event.severity == "warning"
        assert event.score_drop == 12
        assert event.health_drop == 7
        assert event.old_score == 72
        assert event.new_score == 60
        assert event.url == record.url

    def test_critical(self, record):
        event = evaluate_score_drop(record, rescored(record, 50, 70))
        assert event.severity == "critical"
        assert event.score_drop == 22

    def test_health_only_drop(self, record):
        """A large health drop alerts even when the overall score held."""
        event = evaluate_score_drop(record, rescored(record, 72, 55))

        assert event.severity == "critical"
        assert event.score_drop == 0
        assert event.health_drop == 22

    def test_missing_health_scores(self, record):
        event = evaluate_score_drop(rescored(record, 72, None), rescored(record, 61, 30))

        assert event.severity == "warning"
        assert event.health_drop is None

    def test_custom_thresholds(self, record):
        thresholds = ScoringThresholds(score_drop_warning=3, score_drop_critical=5)
        event = evaluate_score_drop(record, rescored(record, 67, 77), thresholds)
        assert event.severity == "critical"

    def test_to_dict(self, record):
        data = evaluate_score_drop(record, rescored(record, 60, 70)).to_dict()
        assert data["kind"] == "score_drop"
        assert data["severity"] == "warning"
        assert data["old_health_score"] == 77


class TestIsScheduled:

    @pytest.mark.parametrize("source,expected", [
        ("scheduled", True),
        ("scheduled.audit", True),
        ("Scheduled", True),
        ("cli", False),
        ("api", False),
        ("", False),
        (None, False),
    ])
    def test_is_scheduled(self, source, expected):
        assert is_scheduled(source) is expected


class TestAlertDispatcher:
    """Test cases for AlertDispatcher."""

    def test_no_channels(self):
        assert AlertDispatcher().dispatch(AuditFailedEvent(url="https://x.example/", error="boom")) == 0

    def test_dispatch_to_every_channel(self):
        first, second = Mock(), Mock()
        dispatcher = AlertDispatcher([first])
        dispatcher.register(second)
        event = AuditCompleteEvent(url="https://x.example/", score=80, health_score=75)

        assert dispatcher.dispatch(event) == 2
        first.assert_called_once_with(event)
        second.assert_called_once_with(event)

    def test_failing_channel_is_skipped(self, caplog):
        def broken(event):
            raise RuntimeError("SMTP unavailable")

        healthy = Mock()
        dispatcher = AlertDispatcher([broken, healthy])
        event = ScoreDropEvent(url="https://x.example/", old_score=80, new_score=55, severity="critical")

        with caplog.at_level(logging.ERROR):
            delivered = dispatcher.dispatch(event)

        assert delivered == 1
        healthy.assert_called_once_with(event)
        assert "alert.channel.error" in caplog.text
        assert "channel=broken" in caplog.text
        assert "SMTP unavailable" in caplog.text

    def test_event_kinds(self):
        assert ScoreDropEvent(url="u", old_score=1, new_score=0).kind == "score_drop"
        assert AuditCompleteEvent(url="u", score=1).kind == "audit_complete"
        assert AuditFailedEvent(url="u", error="e").kind == "audit_failed"
