"""
Tests for visibility_scorer/scoring/curves.py.

What we test
------------
piecewise_linear():
  - Exact anchors return their score; midpoints interpolate linearly.
  - Negative input is treated as 0; values past the last anchor saturate.
  - ``saturate_at`` jumps to 100.

Named curves:
  - Anchor values for description / review / spec / feature / FAQ curves.
  - Rating step bands, including missing and zero ratings.
  - Every curve is monotone non-decreasing over a sample range.

clamp_subscore():
  - None -> 0; out-of-range collector values are clamped.
"""

from __future__ import annotations

import pytest

from visibility_scorer.scoring import curves


class TestPiecewiseLinear:
    ANCHORS = ((0, 0), (10, 50), (20, 80))

    def test_anchor_values(self):
        assert curves.piecewise_linear(0, self.ANCHORS) == 0
        assert curves.piecewise_linear(10, self.ANCHORS) == 50
        assert curves.piecewise_linear(20, self.ANCHORS) == 80

    def test_interpolates_between_anchors(self):
        assert curves.piecewise_linear(5, self.ANCHORS) == pytest.approx(25)
        assert curves.piecewise_linear(15, self.ANCHORS) == pytest.approx(65)

    def test_negative_treated_as_zero(self):
        assert curves.piecewise_linear(-3, self.ANCHORS) == 0

    def test_saturates_at_last_anchor(self):
        assert curves.piecewise_linear(1_000, self.ANCHORS) == 80

    def test_saturate_at_jumps_to_100(self):
        assert curves.piecewise_linear(20, self.ANCHORS, saturate_at=20) == 100
        assert curves.piecewise_linear(19.9, self.ANCHORS, saturate_at=20) < 80


class TestNamedCurves:
    @pytest.mark.parametrize(
        "words, expected",
        [(0, 0), (50, 25), (100, 50), (150, 65), (200, 80), (300, 90), (400, 100), (900, 100)],
    )
    def test_description_length(self, words, expected):
        assert curves.description_length_score(words) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "count, expected",
        [(0, 0), (10, 25), (50, 60), (125, 72.5), (199, 84.8333), (200, 100), (5_000, 100)],
    )
    def test_review_count(self, count, expected):
        assert curves.review_count_score(count) == pytest.approx(expected, abs=1e-3)

    @pytest.mark.parametrize("length, expected", [(0, 0), (50, 40), (100, 70), (200, 100), (400, 100)])
    def test_review_depth(self, length, expected):
        assert curves.review_depth_score(length) == pytest.approx(expected)

    @pytest.mark.parametrize("count, expected", [(0, 0), (5, 25), (10, 50), (15, 65), (20, 100)])
    def test_spec_count(self, count, expected):
        assert curves.spec_count_score(count) == pytest.approx(expected)

    @pytest.mark.parametrize("count, expected", [(0, 0), (3, 25), (5, 50), (10, 100)])
    def test_feature_count(self, count, expected):
        assert curves.feature_count_score(count) == pytest.approx(expected)

    @pytest.mark.parametrize("count, expected", [(0, 0), (3, 50), (4, 62.5), (5, 100)])
    def test_faq_count(self, count, expected):
        assert curves.faq_count_score(count) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "rating, expected",
        [(None, 0), (0, 0), (2.9, 25), (3.0, 50), (3.49, 50), (3.5, 75),
         (3.99, 75), (4.0, 90), (4.49, 90), (4.5, 100), (5.0, 100)],
    )
    def test_rating_bands(self, rating, expected):
        assert curves.rating_score(rating) == expected

    @pytest.mark.parametrize(
        "curve",
        [
            curves.description_length_score,
            curves.review_count_score,
            curves.review_depth_score,
            curves.spec_count_score,
            curves.feature_count_score,
            curves.faq_count_score,
        ],
    )
    def test_monotone(self, curve):
        values = [curve(x) for x in range(0, 500, 7)]
        assert values == sorted(values)
        assert all(0 <= v <= 100 for v in values)


class TestClampSubscore:
    def test_none_is_zero(self):
        assert curves.clamp_subscore(None) == 0

    def test_clamps_range(self):
        assert curves.clamp_subscore(-5) == 0
        assert curves.clamp_subscore(140) == 100
        assert curves.clamp_subscore(42.5) == 42.5
