"""
Error types for Topicus.
"""

from __future__ import annotations


class InvalidArgumentError(ValueError):
    """
    Invalid caller input detected before any sampling work starts.

    Raised for a non-positive topic count or worker count, an empty vocabulary, and
    malformed weighted-draw requests.
    """


class CountInvariantError(RuntimeError):
    """
    Fatal count table defect.

    A count table was asked to drop a category below zero. This only happens when two
    workers mutate the same document, so the run must abort without a result.

    :param category: Category whose count would have gone negative.
    :type category: int
    :param count: Count held by the category at the time of the request.
    :type count: float
    """

    def __init__(self, *, category: int, count: float) -> None:
        self.category = category
        self.count = count
        super().__init__(f"Reached negative count for category={category} (count={count})")


class SamplingCancelledError(RuntimeError):
    """
    Sampling stopped early because the caller's stop check fired.

    :param round_index: Round that was in progress when the stop was observed.
    :type round_index: int
    """

    def __init__(self, *, round_index: int) -> None:
        self.round_index = round_index
        super().__init__(f"Sampling cancelled during round {round_index}")
