"""Tests for the deterministic fallback review."""

import pytest

from uxaudit.config import ScoringThresholds
from uxaudit.constants import NO_EVIDENCE_TEXT
from uxaudit.fallback import FallbackReviewGenerator, extract_section, split_pipe_list
from uxaudit.models import IssueCategory, Severity


def make_payload(
    title="None",
    headings="None",
    buttons="None",
    forms="None",
    main_text="None",
):
    return "\n\n".join([
        "URL: https://example.com/",
        f"TITLE: {title}",
        f"HEADINGS: {headings}",
        f"BUTTONS: {buttons}",
        f"FORMS: {forms}",
        f"MAIN_TEXT: {main_text}",
    ])


@pytest.fixture
def generator():
    return FallbackReviewGenerator()


class TestPayloadHelpers:

    def test_extract_section(self):
        payload = make_payload(title="Acme Widgets", headings="One || Two")
        assert extract_section(payload, "TITLE") == "Acme Widgets"
        assert extract_section(payload, "headings") == "One || Two"
        assert extract_section(payload, "SEO_BASELINE") == ""

    def test_extract_section_empty_value_stays_on_its_line(self):
        payload = "TITLE: \n\nHEADINGS: Pricing"
        assert extract_section(payload, "TITLE") == ""

    def test_split_pipe_list(self):
        assert split_pipe_list("Start || Learn more ||  ") == ["Start", "Learn more"]
        assert split_pipe_list("None") == []
        assert split_pipe_list("") == []


class TestFallbackScore:
    """Test cases for FallbackReviewGenerator.score."""

    def test_bare_page(self, generator):
        """No title, headings, buttons or forms and a short untrusted text."""
        payload = make_payload(title="", main_text="x" * 120)
        assert generator.score(payload) == 6

    def test_snapshot_page(self, generator, page):
        # title +8, 3 headings +8, 2 buttons +2, 1 form +6, short text -10, trust cue +6
        assert generator.score(page.payload) == 70

    def test_size_buckets(self, generator):
        payload = make_payload(
            title="Acme",
            headings=" || ".join(f"H{i}" for i in range(10)),
            buttons=" || ".join(f"B{i}" for i in range(5)),
            forms=" || ".join(f"F{i}" for i in range(4)),
            main_text="Our secure checkout. " + "word " * 300,
        )
        # 50 + 8 + 4 + 6 + 3 + 4 + 6
        assert generator.score(payload) == 81

    def test_empty_payload(self, generator):
        assert generator.score("") == 50 - 10 - 12 - 8 - 10 - 4


class TestFallbackReview:
    """Test cases for FallbackReviewGenerator.generate."""

    def test_review_shape(self, generator, page):
        review = generator.generate(page.payload)

        assert review.score == 70
        assert len(review.issues) == 6
        assert len(review.top_improvements) == 3
        assert review.ux.score == 70
        assert review.ux.issues == review.issues
        assert review.accessibility.score == 62
        assert review.seo.score == 64
        assert review.visual.score == 65
        assert len(review.seo.findings) == 6

    def test_issue_templates(self, generator, page):
        issues = generator.generate(page.payload).issues

        assert [issue.category for issue in issues] == [
            IssueCategory.CLARITY,
            IssueCategory.LAYOUT,
            IssueCategory.NAVIGATION,
            IssueCategory.ACCESSIBILITY,
            IssueCategory.TRUST,
            IssueCategory.CLARITY,
        ]
        assert issues[0].severity == Severity.HIGH
        assert issues[0].evidence == "Salon Booking Software | Bookly"
        assert issues[2].evidence == "Start free trial || Learn more"
        assert all(issue.confidence is None for issue in issues)

    def test_missing_evidence(self, generator):
        review = generator.generate(make_payload())
        assert review.issues[1].evidence == NO_EVIDENCE_TEXT

    def test_evidence_is_truncated(self):
        generator = FallbackReviewGenerator(ScoringThresholds(fallback_evidence_length=10))
        review = generator.generate(make_payload(main_text="a" * 50))
        assert review.issues[4].evidence == "a" * 10

    def test_low_score_sections_clamped(self, generator):
        review = generator.generate("")
        assert review.score == 6
        assert review.accessibility.score == 0
        assert review.seo.score == 0
        assert review.visual.score == 1

    def test_deterministic(self, generator, page):
        assert generator.generate(page.payload) == generator.generate(page.payload)
