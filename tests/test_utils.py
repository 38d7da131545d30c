"""Tests for the shared scoring helpers."""

import pytest

from uxaudit.utils import (
    clamp_score,
    normalize_url,
    round_half_up,
    to_number,
    to_text,
    unique,
    with_default,
)


class TestScoreHelpers:

    @pytest.mark.parametrize("value,expected", [
        (2.5, 3),
        (2.4999, 2),
        (-0.5, 0),
        (-1.5, -1),
        (7, 7),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (49.5, 50),
        (104.6, 100),
        (-3, 0),
        (100, 100),
    ])
    def test_clamp_score(self, value, expected):
        assert clamp_score(value) == expected

    def test_clamp_score_custom_bounds(self):
        assert clamp_score(3, low=10, high=90) == 10
        assert clamp_score(95, low=10, high=90) == 90


class TestCoercion:
    """Test cases for untyped value coercion."""

    @pytest.mark.parametrize("value,expected", [
        (12, 12.0),
        ("12", 12.0),
        (" 3.5 ", 3.5),
        (True, None),
        ("abc", None),
        (float("nan"), None),
        (float("inf"), None),
        ([1], None),
        (None, None),
    ])
    def test_to_number(self, value, expected):
        assert to_number(value) == expected

    def test_to_text(self):
        assert to_text("  hello ") == "hello"
        assert to_text(None, "n/a") == "n/a"
        assert to_text(False, "n/a") == "n/a"
        assert to_text("   ", "n/a") == "n/a"
        assert to_text(42) == "42"

    def test_with_default(self):
        assert with_default(0, 5) == 0
        assert with_default(None, 5) == 5
        assert with_default(None, list) == []

    def test_unique(self):
        """Trims, drops empties and keeps first-seen order."""
        assert unique([" Pricing", "Pricing", "", None, "About", "pricing"]) == [
            "Pricing",
            "About",
            "pricing",
        ]


class TestNormalizeUrl:
    """Test cases for normalize_url."""

    @pytest.mark.parametrize("value,expected", [
        ("example.com", "https://example.com/"),
        ("  example.com/pricing  ", "https://example.com/pricing"),
        ("HTTP://Example.COM/Path?q=1", "http://example.com/Path?q=1"),
        ("https://bookly.example", "https://bookly.example/"),
    ])
    def test_valid(self, value, expected):
        assert normalize_url(value) == expected

    @pytest.mark.parametrize("value,message", [
        ("", "required"),
        ("   ", "required"),
        ("ftp://example.com/file", "Only HTTP and HTTPS"),
        ("https://", "Invalid URL format"),
    ])
    def test_invalid(self, value, message):
        with pytest.raises(ValueError, match=message):
            normalize_url(value)
