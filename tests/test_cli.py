"""Tests for the command-line interface."""

import dataclasses
import json
from datetime import timedelta
from unittest.mock import patch

import pytest

from uxaudit.cli import main, page_from_snapshot_file
from uxaudit.store import LocalSqliteAuditStore


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("uxaudit.cli.setup_logging") as mock_setup:
        yield mock_setup


@pytest.fixture
def snapshot_file(tmp_path, snapshot):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps({"url": "https://bookly.example/", "snapshot": snapshot.to_dict()}))
    return str(path)


class TestPageFromSnapshotFile:

    def test_wrapped_document(self, snapshot):
        page = page_from_snapshot_file({"url": "https://bookly.example/", "snapshot": snapshot.to_dict()})

        assert page.url == "https://bookly.example/"
        assert page.snapshot == snapshot
        assert page.payload.startswith("URL: https://bookly.example/")

    def test_bare_snapshot_with_url_override(self, snapshot):
        page = page_from_snapshot_file(snapshot.to_dict(), url="https://other.example/")
        assert page.url == "https://other.example/"
        assert page.snapshot.title == snapshot.title

    def test_saved_payload_is_kept(self, snapshot):
        page = page_from_snapshot_file({"snapshot": snapshot.to_dict(), "payload": "URL: saved"})
        assert page.url == "about:blank"
        assert page.payload == "URL: saved"


class TestScoreCommand:
    """Test cases for the offline score command."""

    def test_json_output_file(self, snapshot_file, tmp_path, capsys):
        out = tmp_path / "result.json"
        main(["score", snapshot_file, "-o", "json", "-f", str(out)])

        data = json.loads(out.read_text())
        assert data["url"] == "https://bookly.example/"
        assert 0 <= data["score"] <= 100
        assert data["performance"]["overallPerformanceScore"] == 50
        assert "uxIntelligence" in data
        assert f"Results written to {out}" in capsys.readouterr().out

    def test_text_output(self, snapshot_file, capsys):
        main(["score", snapshot_file])

        output = capsys.readouterr().out
        assert "UX Audit for: https://bookly.example/" in output
        assert "📊 UX Score:" in output
        assert "🩺 Website Health Score:" in output
        assert "First impression:" in output

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["score", str(tmp_path / "missing.json")])

        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().out

    def test_logging_flags(self, snapshot_file, quiet_logging):
        main(["--log-level", "DEBUG", "--log-file", "audit.log", "score", snapshot_file, "-o", "json"])
        quiet_logging.assert_called_once_with(level="DEBUG", log_file="audit.log")


class TestDiffCommand:

    @pytest.fixture
    def record_files(self, tmp_path, record):
        kept = record.review.issues[:1]
        later = dataclasses.replace(
            record,
            review=dataclasses.replace(
                record.review,
                score=80,
                issues=kept,
                ux=dataclasses.replace(record.review.ux, issues=list(kept)),
            ),
            health_score=82,
            created_at=record.created_at + timedelta(days=7),
        )
        previous_path = tmp_path / "previous.json"
        current_path = tmp_path / "current.json"
        previous_path.write_text(json.dumps(record.to_dict()))
        current_path.write_text(json.dumps(later.to_dict()))
        return str(previous_path), str(current_path)

    def test_json(self, record_files, tmp_path):
        out = tmp_path / "diff.json"
        main(["diff", *record_files, "-o", "json", "-f", str(out)])

        data = json.loads(out.read_text())
        assert data["scoreDelta"] == 8
        assert data["healthDelta"] == 5
        assert data["resolvedIssues"] == ["Menu has too many items"]

    def test_text(self, record_files, capsys):
        main(["diff", *record_files])

        output = capsys.readouterr().out
        assert "Audit diff for: https://bookly.example/" in output
        assert "Score: +8" in output
        assert "- Menu has too many items" in output

    def test_null_metric_score(self, record_files, capsys):
        previous_path, current_path = record_files
        with open(previous_path) as f:
            data = json.load(f)
        data["performance"]["performance"]["metrics"][0]["score"] = None
        with open(previous_path, "w") as f:
            json.dump(data, f)

        main(["diff", previous_path, current_path])
        assert "Score: +8" in capsys.readouterr().out

    def test_invalid_record(self, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"review": {}}))

        with pytest.raises(SystemExit) as exc_info:
            main(["diff", str(bad), str(bad)])
        assert exc_info.value.code == 1


class TestHistoryCommand:

    def test_history(self, tmp_path, record, capsys):
        db_path = str(tmp_path / "audits.db")
        store = LocalSqliteAuditStore(db_path)
        store.save(record)
        store.close()

        main(["history", "bookly.example", "--db", db_path])

        output = capsys.readouterr().out
        assert "Audit history for: https://bookly.example/" in output
        assert "Audited: 2026-01-01T09:00:00" in output
        assert "UX Score: 72" in output
        assert "Health Score: 77" in output

    def test_empty_history(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["history", "https://nothing.example/", "--db", str(tmp_path / "empty.db")])

        assert exc_info.value.code == 0
        assert "No audit history found" in capsys.readouterr().out


class TestAnalyzeCommand:

    @patch("uxaudit.config.load_dotenv")
    def test_requires_api_key(self, mock_load_dotenv, capsys):
        with patch.dict("os.environ", {}, clear=True):
            with pytest.raises(SystemExit) as exc_info:
                main(["analyze", "bookly.example"])

        assert exc_info.value.code == 1
        assert "LLM API key is required" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        main([])
        assert "usage:" in capsys.readouterr().out
