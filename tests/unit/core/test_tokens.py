"""Unit tests for token estimation."""

from __future__ import annotations

import pytest

from repolens.core.tokens import compression_ratio, estimate_tokens


class TestEstimateTokens:
    """Tests for the character-based estimate."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("", 0), ("a", 1), ("abcd", 1), ("abcde", 2), ("x" * 400, 100)],
    )
    def test_rounds_up(self, text, expected):
        assert estimate_tokens(text) == expected


class TestCompressionRatio:
    """Tests for the clamped ratio."""

    def test_fraction_removed(self):
        assert compression_ratio(1000, 250) == 0.75

    def test_no_change(self):
        assert compression_ratio(100, 100) == 0.0

    def test_growth_clamped_to_zero(self):
        assert compression_ratio(10, 40) == 0.0

    def test_empty_original(self):
        assert compression_ratio(0, 5) == 0.0

    def test_everything_removed(self):
        assert compression_ratio(100, 0) == 1.0
