"""Shared fixtures for the UX audit tests."""

from datetime import datetime

import pytest

from uxaudit.config import ScoringThresholds
from uxaudit.extractor import build_payload
from uxaudit.models import (
    AccessibilitySignals,
    AuditRecord,
    ExtractedPage,
    MotionSignals,
    PerformanceCategory,
    PerformanceMetric,
    PerformanceReport,
    SeoSignals,
    SignalSnapshot,
    UXSignals,
)
from uxaudit.sanitizer import sanitize_review


MODEL_REVIEW = {
    "score": 72,
    "ux": {
        "score": 70,
        "issues": [
            {
                "category": "clarity",
                "title": "Hero headline is vague",
                "why": "Visitors cannot tell what the product does.",
                "evidence": "H1 reads 'Welcome to the future'",
                "severity": "high",
            },
            {
                "category": "navigation",
                "title": "Menu has too many items",
                "why": "Eleven top-level links compete for attention.",
                "evidence": "nav ul has 11 items",
                "severity": "medium",
            },
        ],
        "top_improvements": [
            {"before": "Welcome to the future", "after": "Book salon appointments in 30 seconds"},
        ],
    },
    "accessibility": {
        "score": 64,
        "findings": [
            {
                "title": "Images missing alt text",
                "why": "Screen readers skip them.",
                "evidence": "3 img elements without alt",
                "severity": "medium",
            }
        ],
    },
    "seo": {"score": 80, "findings": []},
    "visual": {"score": 75, "findings": []},
}


def make_report(
    performance: int = 80,
    accessibility: int = 90,
    seo: int = 85,
    overall: int = 80,
    lcp: str = "2.5 s",
    fcp: str = "1.2 s",
    cls: str = "0.05",
    metric_score: int = 90,
) -> PerformanceReport:
    """Performance report with the three diffed metrics."""
    metrics = [
        PerformanceMetric("first-contentful-paint", "First Contentful Paint", "", metric_score, fcp),
        PerformanceMetric("largest-contentful-paint", "Largest Contentful Paint", "", metric_score, lcp),
        PerformanceMetric("cumulative-layout-shift", "Cumulative Layout Shift", "", metric_score, cls),
    ]
    return PerformanceReport(
        performance=PerformanceCategory("performance", "Performance", performance, metrics),
        accessibility=PerformanceCategory("accessibility", "Accessibility", accessibility),
        best_practices=PerformanceCategory("best-practices", "Best Practices", 95),
        seo=PerformanceCategory("seo", "SEO", seo),
        overall_performance_score=overall,
        timestamp=1_700_000_000_000,
    )


@pytest.fixture
def thresholds():
    return ScoringThresholds()


@pytest.fixture
def snapshot():
    return SignalSnapshot(
        title="Salon Booking Software | Bookly",
        headings=("Booking software for busy salons", "How it works", "Pricing"),
        buttons=("Start free trial", "Learn more"),
        forms=("Email | Name",),
        main_text=(
            "Bookly is booking software for salons. Clients book appointments online "
            "and your calendar stays in sync. Trusted by 2,000 salons. "
            "Start a free trial today."
        ),
        meta_description="Booking software that fills your salon calendar.",
        accessibility=AccessibilitySignals(missing_alt_count=2, unlabeled_input_count=1),
        seo=SeoSignals(title_length=31, has_meta_description=True, h1_count=1, cta_count=2),
        motion=MotionSignals(css_transitions=4, auto_carousels=1, pause_control_present=True),
        ux=UXSignals(
            cta_count_above_fold=2,
            primary_cta_count_above_fold=1,
            cta_color_variant_count_above_fold=2,
            hero_element_count=6,
            hero_interactive_count=3,
            h1_dominance_ratio=0.6,
            cta_visual_dominance_ratio=0.5,
            left_aligned_key_elements_ratio=0.6,
            benefit_cta_count=1,
            vague_cta_count=1,
            max_form_field_count=2,
            testimonials_present=True,
            social_proof_present=True,
            about_or_contact_visible=True,
            headline_length=32,
            has_value_prop_hint=True,
        ),
    )


@pytest.fixture
def page(snapshot):
    url = "https://bookly.example/"
    return ExtractedPage(url=url, snapshot=snapshot, payload=build_payload(url, snapshot))


@pytest.fixture
def model_review_data():
    return MODEL_REVIEW


@pytest.fixture
def review():
    return sanitize_review(MODEL_REVIEW)


@pytest.fixture
def report():
    return make_report()


@pytest.fixture
def report_factory():
    """Build performance reports with custom scores and metric values."""
    return make_report


@pytest.fixture
def record(review, report):
    return AuditRecord(
        url="https://bookly.example/",
        review=review,
        performance=report,
        health_score=77,
        created_at=datetime(2026, 1, 1, 9, 0, 0),
    )
