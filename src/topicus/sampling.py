"""
Random draws for the Gibbs sampler.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np

from .errors import InvalidArgumentError

Weights = Union[Sequence[float], np.ndarray]


def weighted_draw(weights: Weights, rng: np.random.Generator) -> int:
    """
    Draw an index with probability proportional to its weight.

    When every weight is exactly zero the draw falls back to a uniform choice, which
    keeps degenerate conditionals (for example right after initialization) sampleable.

    :param weights: Non-negative weights, one per category.
    :type weights: Sequence[float] or numpy.ndarray
    :param rng: Random source owned by the caller.
    :type rng: numpy.random.Generator
    :return: Drawn index.
    :rtype: int
    :raises InvalidArgumentError: If there are no weights or any weight is negative.
    """
    values = np.asarray(weights, dtype=np.float64)
    if values.size == 0:
        raise InvalidArgumentError("Cannot pick element from an empty distribution.")
    if np.any(values < 0):
        negative = float(values[values < 0][0])
        raise InvalidArgumentError(f"Got negative value in distribution: {negative}")
    total = float(values.sum())
    if total == 0:
        return int(rng.integers(values.size))
    cumulative = np.cumsum(values)
    point = rng.random() * total
    index = int(np.searchsorted(cumulative, point, side="right"))
    return min(index, values.size - 1)


def worker_random_source(seed: Optional[int], *, worker_index: int) -> np.random.Generator:
    """
    Build the private random source of one worker.

    Without a seed the generator draws fresh operating system entropy, so workers never
    share or wait on a common generator.

    :param seed: Optional base seed.
    :type seed: int or None
    :param worker_index: Zero-based worker number.
    :type worker_index: int
    :return: Random generator.
    :rtype: numpy.random.Generator
    """
    if seed is None:
        return np.random.default_rng()
    return np.random.default_rng([seed, worker_index, 0])


def document_random_source(
    seed: int, *, round_index: int, document_index: int
) -> np.random.Generator:
    """
    Build a random source keyed by document rather than by worker.

    Used when a seed is configured so a document's draws do not depend on which worker
    picked it up.

    :param seed: Base seed.
    :type seed: int
    :param round_index: Zero-based round number.
    :type round_index: int
    :param document_index: Document position in the corpus.
    :type document_index: int
    :return: Random generator.
    :rtype: numpy.random.Generator
    """
    return np.random.default_rng([seed, round_index, document_index, 1])
