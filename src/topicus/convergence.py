"""
Plateau-based halting rule for the sampling loop.
"""

from __future__ import annotations

from .constants import STAGNATION_LIMIT


class ConvergenceMonitor:
    """
    Halt once the number of changed words stops shrinking.

    Each round reports how many distinct words changed topic. A round that fails to
    reduce that number below the previous round's increments a stagnation counter, and
    any reduction resets it. Sampling halts after ``limit`` consecutive stagnant rounds.
    This is a heuristic plateau detector, not a likelihood-based convergence test.

    :param initial_change: Change count the first round is compared against.
    :type initial_change: int
    :param limit: Consecutive stagnant rounds required to halt.
    :type limit: int
    """

    def __init__(self, initial_change: int, limit: int = STAGNATION_LIMIT) -> None:
        self.last_change = initial_change
        self.limit = limit
        self.stagnant_rounds = 0
        self.rounds = 0

    @property
    def converged(self) -> bool:
        return self.stagnant_rounds >= self.limit

    def observe(self, changed: int) -> bool:
        """
        Record one round's change count.

        :param changed: Number of distinct words whose topic changed this round.
        :type changed: int
        :return: Whether sampling should halt.
        :rtype: bool
        """
        if changed >= self.last_change:
            self.stagnant_rounds += 1
        else:
            self.stagnant_rounds = 0
        self.last_change = changed
        self.rounds += 1
        return self.converged
