"""
Weighted random draw tests.
"""

from __future__ import annotations

from collections import Counter

import numpy as np
import pytest

from topicus.errors import InvalidArgumentError
from topicus.sampling import document_random_source, weighted_draw, worker_random_source


def test_empty_weights_are_rejected():
    """
    There is nothing to draw from zero categories.
    """
    with pytest.raises(InvalidArgumentError):
        weighted_draw([], np.random.default_rng(0))


def test_negative_weight_is_rejected():
    """
    Negative weights are invalid arguments.
    """
    with pytest.raises(InvalidArgumentError, match="negative"):
        weighted_draw([0.5, -0.1, 0.2], np.random.default_rng(0))


def test_all_zero_weights_fall_back_to_uniform():
    """
    An all-zero weight vector is drawn uniformly.
    """
    rng = np.random.default_rng(1234)
    trials = 30000
    counts = Counter(weighted_draw([0.0, 0.0, 0.0], rng) for _ in range(trials))
    assert set(counts) == {0, 1, 2}
    for index in range(3):
        assert counts[index] / trials == pytest.approx(1 / 3, abs=0.02)


def test_draw_is_proportional_to_weights():
    """
    Indices are drawn in proportion to their weight.
    """
    rng = np.random.default_rng(99)
    trials = 20000
    counts = Counter(weighted_draw(np.array([1.0, 3.0]), rng) for _ in range(trials))
    assert counts[1] / trials == pytest.approx(0.75, abs=0.02)


def test_zero_weight_index_is_never_drawn():
    """
    A zero weight next to positive weights is never chosen.
    """
    rng = np.random.default_rng(5)
    draws = {weighted_draw([0.0, 2.0, 0.0, 1.0], rng) for _ in range(5000)}
    assert draws <= {1, 3}


def test_single_category_always_wins():
    """
    One category is always drawn.
    """
    rng = np.random.default_rng(0)
    assert {weighted_draw([0.3], rng) for _ in range(100)} == {0}


def test_seeded_random_sources_are_reproducible():
    """
    Seeded worker and document sources repeat their streams.
    """
    first = worker_random_source(7, worker_index=2).random(4)
    second = worker_random_source(7, worker_index=2).random(4)
    other_worker = worker_random_source(7, worker_index=3).random(4)
    assert first.tolist() == second.tolist()
    assert first.tolist() != other_worker.tolist()

    doc_a = document_random_source(7, round_index=1, document_index=4).random(3)
    doc_b = document_random_source(7, round_index=1, document_index=4).random(3)
    next_round = document_random_source(7, round_index=2, document_index=4).random(3)
    assert doc_a.tolist() == doc_b.tolist()
    assert doc_a.tolist() != next_round.tolist()


def test_unseeded_worker_sources_are_independent():
    """
    Without a seed every worker draws fresh entropy.
    """
    first = worker_random_source(None, worker_index=0).random(4)
    second = worker_random_source(None, worker_index=0).random(4)
    assert first.tolist() != second.tolist()
