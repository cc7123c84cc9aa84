"""
Fan-out/fan-in execution of one sampling round.

A distributor thread feeds document indices into a shared queue, a fixed pool of
worker tasks drains it, and two reducers fold the partial results (topic-word counts
and changed words) before the round returns. Returning from :meth:`run_round` is the
round barrier.
"""

from __future__ import annotations

import queue
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

import numpy as np

from .assignment import AssignmentState, Corpus, topic_word_tables
from .distribution import Distribution
from .errors import InvalidArgumentError
from .sampling import worker_random_source
from .worker import StopCheck, WorkerResult, WorkerTask


@dataclass
class RoundResult:
    """
    Merged output of one round.

    :ivar topics: Topic-word tables built from end-of-round labels.
    :vartype topics: list[Distribution]
    :ivar changed_words: Union of the workers' changed word identifiers.
    :vartype changed_words: set[int]
    :ivar documents_per_worker: Documents each worker processed, by worker index.
    :vartype documents_per_worker: list[int]
    """

    topics: List[Distribution]
    changed_words: Set[int]
    documents_per_worker: List[int]


def merge_topic_counts(target: List[Distribution], partial: Iterable[Distribution]) -> None:
    """
    Add one worker's accumulator into the round's merged tables.

    Summation is commutative, so the order workers finish in does not matter.

    :param target: Merged tables, updated in place.
    :type target: list[Distribution]
    :param partial: One worker's accumulator tables.
    :type partial: Iterable[Distribution]
    """
    for merged, table in zip(target, partial):
        merged.merge(table)


def union_change_sets(target: Set[int], partial: Iterable[int]) -> None:
    target.update(partial)


class DistributionPipeline:
    """
    Fixed pool of worker tasks reused across rounds.

    Use as a context manager so the thread pool is shut down when sampling ends. Each
    pool thread builds its random source once, the first time it runs a worker task.

    :param workers: Number of parallel worker tasks.
    :type workers: int
    :param seed: Optional base seed forwarded to the random sources.
    :type seed: int or None
    :raises InvalidArgumentError: If ``workers`` is less than one.
    """

    def __init__(self, workers: int, *, seed: Optional[int] = None) -> None:
        if workers < 1:
            raise InvalidArgumentError(f"Number of workers must be positive. Got {workers}.")
        self.workers = workers
        self.seed = seed
        self._executor: Optional[ThreadPoolExecutor] = None
        self._local = threading.local()
        self._started = 0
        self._start_lock = threading.Lock()

    def __enter__(self) -> "DistributionPipeline":
        self._executor = ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="topicus-worker"
        )
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _thread_random_source(self) -> np.random.Generator:
        rng = getattr(self._local, "rng", None)
        if rng is None:
            with self._start_lock:
                worker_index = self._started
                self._started += 1
            rng = worker_random_source(self.seed, worker_index=worker_index)
            self._local.rng = rng
        return rng

    def run_round(
        self,
        *,
        snapshot: List[Distribution],
        corpus: Corpus,
        assignment: AssignmentState,
        round_index: int,
        should_stop: Optional[StopCheck] = None,
    ) -> RoundResult:
        """
        Resample every document once and merge the workers' partial results.

        The snapshot is only read, through per-worker clones.

        :param snapshot: Topic-word tables frozen for this round.
        :type snapshot: list[Distribution]
        :param corpus: Word identifier arrays.
        :type corpus: Sequence[numpy.ndarray]
        :param assignment: Label matrix, mutated in place.
        :type assignment: AssignmentState
        :param round_index: Zero-based round number.
        :type round_index: int
        :param should_stop: Optional check run before each queue pull.
        :type should_stop: Callable[[], bool] or None
        :return: Merged round output.
        :rtype: RoundResult
        :raises RuntimeError: If the pipeline is used outside its context manager.
        """
        if self._executor is None:
            raise RuntimeError("DistributionPipeline must be entered before running rounds")

        work: "queue.Queue[Optional[int]]" = queue.Queue()

        def distribute() -> None:
            for document_index in range(len(corpus)):
                work.put(document_index)
            for _ in range(self.workers):
                work.put(None)

        def run_worker() -> WorkerResult:
            task = WorkerTask(
                snapshot=snapshot,
                corpus=corpus,
                assignment=assignment,
                rng=self._thread_random_source(),
                round_index=round_index,
                seed=self.seed,
                should_stop=should_stop,
            )
            return task.drain(work)

        distributor = threading.Thread(target=distribute, daemon=True)
        distributor.start()

        vocabulary_size = len(snapshot[0])
        merged = topic_word_tables(assignment.topic_count, vocabulary_size)
        changed: Set[int] = set()
        documents_per_worker = [0] * self.workers
        futures = {
            self._executor.submit(run_worker): worker_index
            for worker_index in range(self.workers)
        }
        try:
            for future in as_completed(futures):
                result = future.result()
                merge_topic_counts(merged, result.accumulator)
                union_change_sets(changed, result.changed_words)
                documents_per_worker[futures[future]] = result.documents
        finally:
            for future in futures:
                future.cancel()
            distributor.join()
        return RoundResult(
            topics=merged,
            changed_words=changed,
            documents_per_worker=documents_per_worker,
        )
