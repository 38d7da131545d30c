"""Tests for audit history storage."""

import dataclasses
from datetime import datetime, timedelta

import pytest

from uxaudit.store import InMemoryAuditStore, LocalSqliteAuditStore, record_from_dict


def audits_of(record, count):
    """Audits of the same URL one day apart, with increasing scores."""
    return [
        dataclasses.replace(
            record,
            review=dataclasses.replace(record.review, score=50 + i),
            created_at=record.created_at + timedelta(days=i),
        )
        for i in range(count)
    ]


@pytest.fixture(params=["memory", "sqlite"])
def store(request):
    if request.param == "memory":
        yield InMemoryAuditStore()
    else:
        sqlite_store = LocalSqliteAuditStore(":memory:")
        yield sqlite_store
        sqlite_store.close()


class TestAuditStore:
    """Behavior shared by every store backend."""

    def test_empty(self, store):
        assert store.history("https://bookly.example/") == []
        assert store.latest("https://bookly.example/") is None
        assert store.previous_and_latest("https://bookly.example/") == (None, None)

    def test_round_trip(self, store, record):
        store.save(record)
        assert store.latest(record.url) == record

    def test_history_newest_first(self, store, record):
        for audit in audits_of(record, 3):
            store.save(audit)

        assert [r.score for r in store.history(record.url)] == [52, 51, 50]
        assert [r.score for r in store.history(record.url, limit=2)] == [52, 51]

    def test_out_of_order_saves(self, store, record):
        first, second = audits_of(record, 2)
        store.save(second)
        store.save(first)

        assert store.latest(record.url).score == 51

    def test_previous_and_latest(self, store, record):
        first, second, third = audits_of(record, 3)
        store.save(first)
        previous, latest = store.previous_and_latest(record.url)
        assert previous is None
        assert latest.score == 50

        store.save(second)
        store.save(third)
        previous, latest = store.previous_and_latest(record.url)
        assert previous.score == 51
        assert latest.score == 52

    def test_urls_are_isolated(self, store, record):
        store.save(record)
        store.save(dataclasses.replace(record, url="https://other.example/"))

        assert len(store.history(record.url)) == 1
        assert len(store.history("https://other.example/")) == 1

    def test_record_without_performance(self, store, record):
        bare = dataclasses.replace(record, performance=None, health_score=None)
        store.save(bare)

        latest = store.latest(record.url)
        assert latest.performance is None
        assert latest.health_score is None


class TestMaxHistory:

    def test_in_memory(self, record):
        store = InMemoryAuditStore(max_history=2)
        for audit in audits_of(record, 4):
            store.save(audit)
        assert [r.score for r in store.history(record.url)] == [53, 52]

    def test_sqlite(self, record):
        store = LocalSqliteAuditStore(":memory:", max_history=2)
        for audit in audits_of(record, 4):
            store.save(audit)
        assert [r.score for r in store.history(record.url)] == [53, 52]
        count = store.conn.execute("SELECT COUNT(*) FROM audit_records").fetchone()[0]
        assert count == 2
        store.close()


class TestLocalSqliteAuditStore:

    def test_persists_to_file(self, tmp_path, record):
        db_path = str(tmp_path / "audits.db")
        store = LocalSqliteAuditStore(db_path)
        store.save(record)
        store.close()
        assert store.conn is None

        reopened = LocalSqliteAuditStore(db_path)
        assert reopened.latest(record.url) == record
        reopened.close()


class TestRecordFromDict:
    """Test cases for record_from_dict."""

    def test_round_trip(self, record):
        assert record_from_dict(record.to_dict()) == record

    def test_snake_case_keys(self, record):
        data = record.to_dict()
        data["health_score"] = data.pop("healthScore")
        data["created_at"] = data.pop("createdAt")
        assert record_from_dict(data) == record

    def test_url_required(self):
        with pytest.raises(ValueError, match="url"):
            record_from_dict({"review": {"score": 70}})

    def test_loose_review_is_sanitized(self):
        restored = record_from_dict({
            "url": "https://bookly.example/",
            "review": {"score": "91", "issues": "none"},
            "createdAt": "2026-02-01T10:30:00",
        })

        assert restored.score == 91
        assert restored.review.issues == []
        assert restored.performance is None
        assert restored.created_at == datetime(2026, 2, 1, 10, 30)

    def test_null_performance_scores(self, record):
        data = record.to_dict()
        data["performance"]["overallPerformanceScore"] = None
        data["performance"]["seo"]["score"] = None
        data["performance"]["performance"]["metrics"][0]["score"] = None
        data["performance"]["accessibility"]["metrics"] = None

        restored = record_from_dict(data)

        assert restored.performance.overall_performance_score == 0
        assert restored.performance.seo.score == 0
        assert restored.performance.performance.metrics[0].score == 0
        assert restored.performance.accessibility.metrics == []
        assert restored.performance.performance.score == record.performance.performance.score
