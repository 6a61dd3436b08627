"""Tests for fused relevance scoring."""

import pytest

from litquery.models.domain import FusionWeights
from litquery.scoring.fusion import fused_score, normalize_lexical


@pytest.mark.parametrize("v,l", [(0.0, 0.0), (0.2, 0.9), (0.75, 0.1), (1.0, 1.0)])
def test_pure_vector_weighting(v, l):
    assert fused_score(v, l, FusionWeights(vector=1.0, lexical=0.0)) == v


@pytest.mark.parametrize("v,l", [(0.0, 0.0), (0.2, 0.9), (0.75, 0.1), (1.0, 1.0)])
def test_pure_lexical_weighting(v, l):
    assert fused_score(v, l, FusionWeights(vector=0.0, lexical=1.0)) == l


@pytest.mark.parametrize("v,l", [(0.0, 0.0), (0.2, 0.9), (0.75, 0.1), (1.0, 1.0)])
def test_default_blend(v, l):
    score = fused_score(v, l, FusionWeights(vector=0.7, lexical=0.3))
    assert score == pytest.approx(0.7 * v + 0.3 * l)


def test_zero_vector_weight_wins_over_zero_lexical_weight():
    assert fused_score(0.9, 0.4, FusionWeights(vector=0.0, lexical=0.0)) == 0.4


def test_normalize_lexical():
    assert normalize_lexical(0.0) == 0.0
    assert normalize_lexical(-3.0) == 0.0
    assert normalize_lexical(5.0) == 0.5
    assert normalize_lexical(25.0) == 1.0
    assert normalize_lexical(4.0, normalizer=8.0) == 0.5
