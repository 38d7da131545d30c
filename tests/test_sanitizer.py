"""Tests for model output sanitization."""

import pytest

from uxaudit.config import ScoringThresholds
from uxaudit.exceptions import ReviewParseError
from uxaudit.models import (
    ConfidenceLevel,
    IssueCategory,
    PriorityLabel,
    Severity,
    SourceType,
)
from uxaudit.sanitizer import (
    extract_json_candidate,
    normalize_enum,
    normalize_issue,
    optional_score,
    parse_model_json,
    sanitize_review,
)


class TestParseModelJson:
    """Test cases for parse_model_json."""

    def test_plain_json(self):
        assert parse_model_json('{"score": 80}') == {"score": 80}

    def test_fenced_json(self):
        text = '```json\n{"score": 80, "issues": []}\n```'
        assert parse_model_json(text) == {"score": 80, "issues": []}

    def test_chatty_response(self):
        text = 'Here is the audit:\n{"score": 61}\nLet me know if you need more.'
        assert parse_model_json(text) == {"score": 61}

    def test_extract_json_candidate_without_braces(self):
        assert extract_json_candidate("```\nnothing here\n```") == "nothing here"

    def test_no_json_raises(self):
        with pytest.raises(ReviewParseError, match="did not contain JSON"):
            parse_model_json("I could not audit this page.")

    def test_malformed_json_raises(self):
        with pytest.raises(ReviewParseError, match="malformed"):
            parse_model_json("{score: eighty}")


class TestFieldNormalizers:

    def test_normalize_enum(self):
        assert normalize_enum("HIGH", Severity, Severity.MEDIUM) == Severity.HIGH
        assert normalize_enum(" low ", Severity, Severity.MEDIUM) == Severity.LOW
        assert normalize_enum("critical", Severity, Severity.MEDIUM) == Severity.MEDIUM
        assert normalize_enum(None, Severity, Severity.MEDIUM) == Severity.MEDIUM

    def test_optional_score(self):
        assert optional_score(150) == 100
        assert optional_score(-4) == 0
        assert optional_score("72.5") == 73
        assert optional_score("n/a") is None
        assert optional_score(True) is None
        assert optional_score(None) is None

    def test_normalize_issue_defaults(self):
        issue = normalize_issue({"category": "weird", "severity": "urgent"})

        assert issue.category == IssueCategory.CLARITY
        assert issue.severity == Severity.MEDIUM
        assert issue.title == "Untitled issue"
        assert issue.why == "No explanation provided."
        assert issue.evidence == ""
        assert issue.confidence is None
        assert issue.priority_label is None

    def test_normalize_issue_reads_enrichment(self):
        issue = normalize_issue({
            "title": "  Low contrast  ",
            "confidence": "HIGH",
            "sourceType": "deterministic",
            "impact_score": 140,
            "priorityLabel": "quick_win",
            "fixSnippet": "  .btn { color: #fff; }  ",
        })

        assert issue.title == "Low contrast"
        assert issue.confidence == ConfidenceLevel.HIGH
        assert issue.source_type == SourceType.DETERMINISTIC
        assert issue.impact_score == 100
        assert issue.priority_label == PriorityLabel.QUICK_WIN
        assert issue.fix_snippet == ".btn { color: #fff; }"

    def test_non_object_issue_is_dropped(self):
        assert normalize_issue("Hero is vague") is None


class TestSanitizeReview:
    """Test cases for sanitize_review."""

    def test_model_review(self, model_review_data):
        review = sanitize_review(model_review_data)

        assert review.score == 72
        assert review.ux.score == 70
        assert [issue.title for issue in review.issues] == [
            "Hero headline is vague",
            "Menu has too many items",
        ]
        assert review.issues[0].severity == Severity.HIGH
        assert review.issues[1].category == IssueCategory.NAVIGATION
        assert len(review.top_improvements) == 1
        assert review.accessibility.score == 64
        assert [f.title for f in review.accessibility.findings] == ["Images missing alt text"]

    def test_empty_sections_reuse_issues(self, model_review_data):
        """Sections with no findings fall back to the issues as findings."""
        review = sanitize_review(model_review_data)

        assert review.seo.score == 80
        assert [f.title for f in review.seo.findings] == [
            "Hero headline is vague",
            "Menu has too many items",
        ]
        assert review.visual.findings == review.seo.findings

    def test_garbage_input(self):
        for value in (None, "not json", 42, [1, 2, 3]):
            review = sanitize_review(value)
            assert review.score == 0
            assert review.issues == []
            assert review.top_improvements == []
            assert review.accessibility.score == 0
            assert review.seo.findings == []

    def test_section_scores_default_from_overall(self):
        review = sanitize_review({"score": 90})

        assert review.ux.score == 90
        assert review.accessibility.score == 82
        assert review.seo.score == 84
        assert review.visual.score == 85

    def test_custom_offsets(self):
        thresholds = ScoringThresholds(accessibility_offset=20, seo_offset=0, visual_offset=1)
        review = sanitize_review({"score": 90}, thresholds)

        assert review.accessibility.score == 70
        assert review.seo.score == 90
        assert review.visual.score == 89

    @pytest.mark.parametrize("data,expected", [
        ({"score": "88"}, 88),
        ({"score": 150}, 100),
        ({"score": -3}, 0),
        ({"score": 71.5}, 72),
        ({"website_health_score": 64}, 64),
        ({"health_score": 55}, 55),
        ({"score": "high"}, 0),
    ])
    def test_overall_score(self, data, expected):
        assert sanitize_review(data).score == expected

    def test_alternate_section_keys(self):
        review = sanitize_review({
            "score": 70,
            "a11y": {"score": 40},
            "visual_findings": {"score": 30},
        })
        assert review.accessibility.score == 40
        assert review.visual.score == 30

    def test_top_level_issues_used_when_ux_has_none(self):
        review = sanitize_review({
            "score": 70,
            "issues": [{"title": "Top-level issue"}],
            "ux": {"score": 60, "issues": []},
        })
        assert [issue.title for issue in review.issues] == ["Top-level issue"]
        assert review.ux.issues == review.issues

    def test_arrays_are_bounded(self):
        review = sanitize_review({
            "score": 70,
            "issues": [{"title": f"Issue {i}"} for i in range(20)] + ["junk"],
            "top_improvements": [{"before": "a", "after": "b"}] * 5,
            "seo": {"findings": [{"title": f"Finding {i}"} for i in range(15)]},
        })

        assert len(review.issues) == 12
        assert len(review.top_improvements) == 3
        assert len(review.seo.findings) == 10
        # Section fallbacks use at most six issues
        assert len(review.accessibility.findings) == 6

    def test_idempotent(self, model_review_data):
        once = sanitize_review(model_review_data)
        twice = sanitize_review(once.to_dict())
        assert twice == once
