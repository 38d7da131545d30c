# src/uxaudit/store.py
"""Audit history storage: in-memory and local SQLite backends."""

import json
import sqlite3
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import logging

from uxaudit.models import AuditRecord, PerformanceReport
from uxaudit.sanitizer import sanitize_review

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS audit_records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    url TEXT NOT NULL,
    created_at TIMESTAMP NOT NULL,
    score INTEGER NOT NULL,
    health_score INTEGER,
    review_json TEXT NOT NULL,
    performance_json TEXT
);
"""

CREATE_INDEX_SQL = (
    "CREATE INDEX IF NOT EXISTS idx_audit_records_url ON audit_records (url, created_at);"
)


def record_from_dict(data: Dict[str, Any]) -> AuditRecord:
    """Rebuild an AuditRecord from its `to_dict()` form.

    The review goes back through the sanitizer, so hand-edited or older
    records still load into a valid Review.

    Args:
        data: Serialized record

    Returns:
        AuditRecord
    """
    if not data.get("url"):
        raise ValueError("The 'url' field is required.")

    performance = data.get("performance")
    created_at = data.get("createdAt") or data.get("created_at")
    return AuditRecord(
        url=data["url"],
        review=sanitize_review(data.get("review")),
        performance=PerformanceReport.from_dict(performance) if performance else None,
        health_score=data.get("healthScore", data.get("health_score")),
        created_at=datetime.fromisoformat(created_at) if created_at else datetime.now(),
    )


class AuditStore(ABC):
    """Abstract base class defining the audit history interface."""

    @abstractmethod
    def save(self, record: AuditRecord) -> None:
        """Persist one audit record.

        Args:
            record: Audit to store
        """
        pass

    @abstractmethod
    def history(self, url: str, limit: Optional[int] = None) -> List[AuditRecord]:
        """Retrieve audits of a URL, newest first.

        Args:
            url: The URL to query.
            limit: Maximum number of records to return.

        Returns:
            List of records ordered by created_at descending.
        """
        pass

    def latest(self, url: str) -> Optional[AuditRecord]:
        """Most recent audit of a URL, if any."""
        records = self.history(url, limit=1)
        return records[0] if records else None

    def previous_and_latest(
        self, url: str
    ) -> Tuple[Optional[AuditRecord], Optional[AuditRecord]]:
        """The two most recent audits of a URL as (previous, latest)."""
        records = self.history(url, limit=2)
        latest = records[0] if records else None
        previous = records[1] if len(records) > 1 else None
        return previous, latest


class InMemoryAuditStore(AuditStore):
    """Process-local store, mainly for tests and one-shot CLI runs."""

    def __init__(self, max_history: Optional[int] = None):
        """Initialize the store.

        Args:
            max_history: Keep only the newest N records per URL (None keeps all)
        """
        self.max_history = max_history
        self._records: Dict[str, List[AuditRecord]] = defaultdict(list)

    def save(self, record: AuditRecord) -> None:
        records = self._records[record.url]
        records.append(record)
        records.sort(key=lambda item: item.created_at)
        if self.max_history is not None and len(records) > self.max_history:
            del records[: len(records) - self.max_history]
        logger.debug(f"Saved audit for url: {record.url} (score={record.score})")

    def history(self, url: str, limit: Optional[int] = None) -> List[AuditRecord]:
        records = list(reversed(self._records.get(url, [])))
        return records[:limit] if limit is not None else records


class LocalSqliteAuditStore(AuditStore):
    """SQLite audit history for local runs."""

    def __init__(self, db_path: str = "uxaudit.db", max_history: Optional[int] = None):
        """Initialize local SQLite store.

        Args:
            db_path: Path to the database file (":memory:" for a throwaway store)
            max_history: Keep only the newest N records per URL (None keeps all)
        """
        self.db_path = db_path
        self.max_history = max_history
        self.conn: Optional[sqlite3.Connection] = None
        self.connect()
        self.create_schema()

    def connect(self) -> None:
        """Establish SQLite connection."""
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        logger.debug(f"Connected to local SQLite database: {self.db_path}")

    def close(self) -> None:
        """Close SQLite connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.debug("Closed local SQLite connection")

    def create_schema(self) -> None:
        """Create the audit table if it doesn't exist."""
        with self.conn:
            self.conn.execute(CREATE_TABLE_SQL)
            self.conn.execute(CREATE_INDEX_SQL)
        logger.debug("Schema verified/created for local SQLite")

    def save(self, record: AuditRecord) -> None:
        """Save an audit record to SQLite."""
        insert_sql = (
            "INSERT INTO audit_records "
            "(url, created_at, score, health_score, review_json, performance_json) "
            "VALUES (?, ?, ?, ?, ?, ?)"
        )
        performance_json = (
            json.dumps(record.performance.to_dict()) if record.performance else None
        )
        with self.conn:
            self.conn.execute(insert_sql, (
                record.url,
                record.created_at.isoformat(),
                record.score,
                record.health_score,
                json.dumps(record.review.to_dict()),
                performance_json,
            ))
            if self.max_history is not None:
                self.conn.execute(
                    "DELETE FROM audit_records WHERE url = ? AND id NOT IN ("
                    "SELECT id FROM audit_records WHERE url = ? "
                    "ORDER BY created_at DESC, id DESC LIMIT ?)",
                    (record.url, record.url, self.max_history),
                )
        logger.debug(f"Saved audit for url: {record.url} (score={record.score})")

    def history(self, url: str, limit: Optional[int] = None) -> List[AuditRecord]:
        """Retrieve audits of a URL from SQLite, newest first."""
        query_sql = (
            "SELECT * FROM audit_records WHERE url = ? ORDER BY created_at DESC, id DESC"
        )
        params: Tuple[Any, ...] = (url,)
        if limit is not None:
            query_sql += " LIMIT ?"
            params = (url, limit)

        cursor = self.conn.cursor()
        cursor.execute(query_sql, params)
        return [self._row_to_record(row) for row in cursor.fetchall()]

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> AuditRecord:
        performance = json.loads(row["performance_json"]) if row["performance_json"] else None
        return record_from_dict({
            "url": row["url"],
            "review": json.loads(row["review_json"]),
            "performance": performance,
            "healthScore": row["health_score"],
            "createdAt": row["created_at"],
        })
