"""Tests for the end-to-end analysis pipeline."""

import dataclasses
from datetime import datetime
from unittest.mock import AsyncMock, Mock

import pytest

from uxaudit.alerts import AlertDispatcher
from uxaudit.exceptions import AuditFailedError
from uxaudit.pipeline import AuditPipeline
from uxaudit.store import InMemoryAuditStore


@pytest.fixture
def store():
    return InMemoryAuditStore()


@pytest.fixture
def channel():
    return Mock()


@pytest.fixture
def pipeline(store, channel):
    return AuditPipeline(store=store, alerts=AlertDispatcher([channel]))


class TestOfflineAnalysis:
    """Analysis without a model caller or PageSpeed client."""

    @pytest.mark.asyncio
    async def test_analyze(self, pipeline, store, page):
        result = await pipeline.analyze(page, source="cli")

        assert result.record.url == page.url
        assert 0 <= result.review.score <= 100
        assert result.record.performance.overall_performance_score == 50
        assert result.record.health_score is not None
        assert result.diff is None
        assert result.alerts == []
        assert result.audit_input_truncated is False
        assert store.latest(page.url) == result.record

    @pytest.mark.asyncio
    async def test_intelligence_blocks(self, pipeline, page):
        result = await pipeline.analyze(page)

        assert result.content.readability_score >= 0
        assert result.motion.risk_score >= 0
        assert result.ux.ux_risk_radar.clarity >= 0

        data = result.to_dict()
        assert data["url"] == page.url
        assert "contentIntelligence" in data
        assert "motionIntelligence" in data
        assert "uxIntelligence" in data
        assert data["diff"] is None

    @pytest.mark.asyncio
    async def test_second_run_builds_diff(self, pipeline, store, page):
        await pipeline.analyze(page)
        result = await pipeline.analyze(page)

        assert result.diff is not None
        assert result.diff.score_delta == 0
        assert result.alerts == []
        assert len(store.history(page.url)) == 2

    @pytest.mark.asyncio
    async def test_small_input_budget_truncates(self, store, page):
        pipeline = AuditPipeline(store=store, max_audit_input_chars=200)
        result = await pipeline.analyze(page)
        assert result.audit_input_truncated is True


class TestAlerts:

    @pytest.mark.asyncio
    async def test_score_drop_alert(self, pipeline, store, channel, page, record):
        store.save(dataclasses.replace(
            record,
            review=dataclasses.replace(record.review, score=100),
            health_score=100,
            created_at=datetime(2020, 1, 1),
        ))

        result = await pipeline.analyze(page, source="cli")

        assert [event.kind for event in result.alerts] == ["score_drop"]
        drop = result.alerts[0]
        assert drop.old_score == 100
        assert drop.new_score == result.review.score
        channel.assert_called_once_with(drop)

    @pytest.mark.asyncio
    async def test_scheduled_run_reports_completion(self, pipeline, channel, page):
        result = await pipeline.analyze(page, source="scheduled.audit")

        assert [event.kind for event in result.alerts] == ["audit_complete"]
        event = channel.call_args[0][0]
        assert event.kind == "audit_complete"
        assert event.score == result.review.score
        assert event.source == "scheduled.audit"

    @pytest.mark.asyncio
    async def test_scheduled_failure_is_reported_and_raised(self, store, channel, page):
        runner = Mock()
        runner.run = AsyncMock(side_effect=AuditFailedError("model unavailable"))
        pipeline = AuditPipeline(
            runner=runner,
            store=store,
            alerts=AlertDispatcher([channel]),
            supports_vision=False,
        )

        with pytest.raises(AuditFailedError):
            await pipeline.analyze(page, source="scheduled")

        event = channel.call_args[0][0]
        assert event.kind == "audit_failed"
        assert event.error == "model unavailable"
        assert store.latest(page.url) is None

    @pytest.mark.asyncio
    async def test_interactive_failure_is_not_reported(self, store, channel, page):
        runner = Mock()
        runner.run = AsyncMock(side_effect=AuditFailedError("model unavailable"))
        pipeline = AuditPipeline(
            runner=runner, store=store, alerts=AlertDispatcher([channel]), supports_vision=False
        )

        with pytest.raises(AuditFailedError):
            await pipeline.analyze(page, source="api")

        channel.assert_not_called()


class TestModelReview:

    @pytest.mark.asyncio
    async def test_runner_review_is_enriched(self, store, page, review):
        runner = Mock()
        runner.run = AsyncMock(return_value=review)
        pipeline = AuditPipeline(runner=runner, store=store, supports_vision=False)

        result = await pipeline.analyze(page)

        audit_input, messages = runner.run.await_args[0]
        assert audit_input.startswith("URL: https://bookly.example/")
        assert "CONTENT_INTELLIGENCE: " in audit_input
        assert messages
        assert result.review.score == 72
        assert all(issue.priority_score is not None for issue in result.review.issues)

    @pytest.mark.asyncio
    async def test_performance_client_is_used(self, store, page, report):
        performance = Mock()
        performance.get_report = AsyncMock(return_value=report)
        pipeline = AuditPipeline(store=store, performance=performance)

        result = await pipeline.analyze(page)

        performance.get_report.assert_awaited_once_with(page.url)
        assert result.record.performance == report
