"""
Smoothed categorical count tables.

A :class:`Distribution` is the only numeric primitive the sampler shares between
stages. Each topic owns one table over the vocabulary, and each document gets an
ephemeral table over the topics while its tokens are resampled.
"""

from __future__ import annotations

from typing import Iterable, List

import numpy as np

from .errors import CountInvariantError, InvalidArgumentError


class Distribution:
    """
    Category count table with a fixed smoothing parameter.

    The running ``total`` always equals the sum of ``counts`` and no count is ever
    negative.

    :param categories: Number of categories in the table.
    :type categories: int
    :param alpha: Smoothing parameter. ``alphas`` is derived as ``alpha * categories``.
    :type alpha: float
    """

    __slots__ = ("_counts", "_total", "alpha", "alphas")

    def __init__(self, categories: int, alpha: float) -> None:
        if categories < 0:
            raise InvalidArgumentError(f"categories must be non-negative. Got {categories}.")
        self._counts = np.zeros(categories, dtype=np.float64)
        self._total = 0.0
        self.alpha = float(alpha)
        self.alphas = float(alpha) * categories

    @classmethod
    def many(cls, tables: int, categories: int, alpha: float) -> List["Distribution"]:
        """
        Build a list of empty tables sharing one shape and smoothing parameter.

        :param tables: Number of tables.
        :type tables: int
        :param categories: Number of categories per table.
        :type categories: int
        :param alpha: Smoothing parameter.
        :type alpha: float
        :return: Empty tables.
        :rtype: list[Distribution]
        """
        return [cls(categories, alpha) for _ in range(tables)]

    def __len__(self) -> int:
        return int(self._counts.shape[0])

    def __repr__(self) -> str:
        return f"Distribution(categories={len(self)}, total={self._total:g}, alpha={self.alpha:g})"

    @property
    def total(self) -> float:
        return self._total

    @property
    def counts(self) -> np.ndarray:
        """
        Read-only view of the raw counts.

        :return: Count vector.
        :rtype: numpy.ndarray
        """
        view = self._counts.view()
        view.flags.writeable = False
        return view

    def count(self, category: int) -> float:
        return float(self._counts[category])

    def add(self, category: int) -> None:
        self._counts[category] += 1.0
        self._total += 1.0

    def subtract(self, category: int) -> None:
        """
        Remove one observation of a category.

        :param category: Category to decrement.
        :type category: int
        :raises CountInvariantError: If the category count would go negative.
        """
        current = self._counts[category]
        if current < 1.0:
            raise CountInvariantError(category=int(category), count=float(current))
        self._counts[category] = current - 1.0
        self._total -= 1.0

    def probability(self, category: int) -> float:
        """
        Smoothed probability estimate of a category.

        Both the numerator and the denominator are scaled by the table's own running
        total: ``(count + alpha * total) / (total + alphas * total)``. An empty table
        reports zero for every category.

        :param category: Category index.
        :type category: int
        :return: Probability estimate.
        :rtype: float
        """
        total = self._total
        if total == 0:
            return 0.0
        return (float(self._counts[category]) + self.alpha * total) / (total + self.alphas * total)

    def probabilities(self) -> np.ndarray:
        total = self._total
        if total == 0:
            return np.zeros_like(self._counts)
        return (self._counts + self.alpha * total) / (total + self.alphas * total)

    def normalized_frequencies(self) -> np.ndarray:
        """
        Plain relative frequencies ``count / total``, ignoring smoothing.

        An empty table yields a zero vector.

        :return: Frequency vector.
        :rtype: numpy.ndarray
        """
        if self._total == 0:
            return np.zeros_like(self._counts)
        return self._counts / self._total

    def top_n(self, n: int) -> List[int]:
        """
        Return the categories with the largest counts, largest first.

        ``n`` is clipped to the table size. The order among equal counts is not
        specified.

        :param n: Number of categories to return.
        :type n: int
        :return: Category indices.
        :rtype: list[int]
        """
        if n <= 0:
            return []
        order = np.argsort(-self._counts, kind="stable")
        return [int(category) for category in order[: min(n, len(self))]]

    def clone(self) -> "Distribution":
        copied = Distribution.__new__(Distribution)
        copied._counts = self._counts.copy()
        copied._total = self._total
        copied.alpha = self.alpha
        copied.alphas = self.alphas
        return copied

    def merge(self, other: "Distribution") -> None:
        """
        Add another table's counts into this one.

        :param other: Table with the same number of categories.
        :type other: Distribution
        :raises InvalidArgumentError: If the shapes differ.
        """
        if len(other) != len(self):
            raise InvalidArgumentError(
                f"Cannot merge tables of {len(other)} and {len(self)} categories"
            )
        self._counts += other._counts
        self._total += other._total


def clone_all(tables: Iterable[Distribution]) -> List[Distribution]:
    """
    Deep-copy a list of tables.

    :param tables: Tables to copy.
    :type tables: Iterable[Distribution]
    :return: Independent copies in the same order.
    :rtype: list[Distribution]
    """
    return [table.clone() for table in tables]
