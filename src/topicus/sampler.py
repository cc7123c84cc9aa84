"""
Collapsed Gibbs sampler driver for Latent Dirichlet Allocation.
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from .assignment import AssignmentState, Corpus
from .constants import LOG_PREFIX, STAGNATION_LIMIT
from .convergence import ConvergenceMonitor
from .distribution import Distribution
from .errors import InvalidArgumentError
from .pipeline import DistributionPipeline
from .vocabulary import Vocabulary
from .worker import StopCheck


class SamplerState(str, Enum):
    """
    Lifecycle of a sampler run.
    """

    INITIALIZING = "initializing"
    ITERATING = "iterating"
    CONVERGED = "converged"


@dataclass
class RoundReport:
    """
    Progress record emitted after each merged round.

    :ivar round_index: Zero-based round number.
    :vartype round_index: int
    :ivar changed_words: Distinct words whose topic changed in the round.
    :vartype changed_words: int
    :ivar stagnant_rounds: Consecutive rounds without a reduction in changed words.
    :vartype stagnant_rounds: int
    :ivar elapsed_seconds: Wall time of the round.
    :vartype elapsed_seconds: float
    :ivar documents_per_worker: Documents processed by each worker.
    :vartype documents_per_worker: list[int]
    """

    round_index: int
    changed_words: int
    stagnant_rounds: int
    elapsed_seconds: float
    documents_per_worker: List[int] = field(default_factory=list)


RoundCallback = Callable[[RoundReport], None]


@dataclass
class SamplerResult:
    """
    Final state of a converged sampler.

    :ivar topics: Final topic-word tables.
    :vartype topics: list[Distribution]
    :ivar assignment: Final label matrix.
    :vartype assignment: AssignmentState
    :ivar rounds: Number of rounds run.
    :vartype rounds: int
    :ivar changes: Changed word count of every round.
    :vartype changes: list[int]
    """

    topics: List[Distribution]
    assignment: AssignmentState
    rounds: int
    changes: List[int]

    def topic_word_frequencies(self) -> np.ndarray:
        return np.vstack([table.normalized_frequencies() for table in self.topics])


@dataclass
class LdaResult:
    """
    Output of :func:`lda`.

    :ivar topics: ``K x V`` matrix of per-topic normalized word frequencies.
    :vartype topics: numpy.ndarray
    :ivar assignments: Topic label of every token, shaped like the input corpus.
    :vartype assignments: list[list[int]]
    :ivar words: Word of each column in ``topics``.
    :vartype words: list[str]
    :ivar rounds: Number of sampling rounds run.
    :vartype rounds: int
    :ivar tables: Final topic-word count tables.
    :vartype tables: list[Distribution]
    """

    topics: np.ndarray
    assignments: List[List[int]]
    words: List[str]
    rounds: int
    tables: List[Distribution]


def validate_arguments(
    *,
    topic_count: int,
    workers: int,
    vocabulary_size: Optional[int] = None,
    seed: Optional[int] = None,
) -> None:
    """
    Check sampler preconditions. The vocabulary check is skipped when its size is not
    known yet.

    :raises InvalidArgumentError: If any precondition fails.
    """
    if topic_count < 1:
        raise InvalidArgumentError(f"k must be positive. Got {topic_count}.")
    if workers < 1:
        raise InvalidArgumentError(f"Number of threads must be positive. Got {workers}.")
    if seed is not None and seed < 0:
        raise InvalidArgumentError(f"Seed must be non-negative. Got {seed}.")
    if vocabulary_size is not None and vocabulary_size <= 0:
        raise InvalidArgumentError("Corpus produced zero distinct words.")


def _log(message: str) -> None:
    print(f"{LOG_PREFIX} {message}", flush=True, file=sys.stderr)


class GibbsSampler:
    """
    Drives sampling rounds from random initialization to the plateau halt.

    Every round treats the current topic-word tables as a read-only snapshot and swaps
    in the tables merged from the workers once all of them are done.

    :param corpus: Word identifier arrays, one per document.
    :type corpus: Sequence[numpy.ndarray]
    :param vocabulary_size: Number of distinct words. Every identifier is below it.
    :type vocabulary_size: int
    :param topic_count: Number of topics.
    :type topic_count: int
    :param workers: Number of parallel worker tasks.
    :type workers: int
    :param seed: Optional seed. Runs with one worker and a seed are reproducible.
    :type seed: int or None
    :param on_round: Optional callback invoked after each merged round.
    :type on_round: Callable[[RoundReport], None] or None
    :param should_stop: Optional check run before each document is pulled.
    :type should_stop: Callable[[], bool] or None
    :raises InvalidArgumentError: If a precondition fails.
    """

    def __init__(
        self,
        corpus: Corpus,
        vocabulary_size: int,
        topic_count: int,
        *,
        workers: int = 1,
        seed: Optional[int] = None,
        on_round: Optional[RoundCallback] = None,
        should_stop: Optional[StopCheck] = None,
    ) -> None:
        validate_arguments(
            topic_count=topic_count,
            workers=workers,
            vocabulary_size=vocabulary_size,
            seed=seed,
        )
        self.corpus = corpus
        self.vocabulary_size = vocabulary_size
        self.topic_count = topic_count
        self.workers = workers
        self.seed = seed
        self.on_round = on_round
        self.should_stop = should_stop
        self.state = SamplerState.INITIALIZING

    def initialize(self) -> Tuple[AssignmentState, List[Distribution]]:
        rng = np.random.default_rng(self.seed)
        assignment = AssignmentState.random(self.corpus, self.topic_count, rng)
        topics = assignment.topic_word_counts(self.corpus, self.vocabulary_size)
        tokens = sum(len(document) for document in self.corpus)
        _log(
            f"initialized documents={len(self.corpus)} tokens={tokens} "
            f"words={self.vocabulary_size} topics={self.topic_count} workers={self.workers}"
        )
        return assignment, topics

    def run(self) -> SamplerResult:
        """
        Sample until the changed word count plateaus.

        :return: Final tables and labels.
        :rtype: SamplerResult
        :raises CountInvariantError: If a worker drove a count negative.
        :raises SamplingCancelledError: If ``should_stop`` fired.
        """
        self.state = SamplerState.INITIALIZING
        assignment, topics = self.initialize()
        monitor = ConvergenceMonitor(self.vocabulary_size, STAGNATION_LIMIT)
        changes: List[int] = []
        start_time = time.perf_counter()

        self.state = SamplerState.ITERATING
        with DistributionPipeline(self.workers, seed=self.seed) as pipeline:
            round_index = 0
            while True:
                round_start = time.perf_counter()
                result = pipeline.run_round(
                    snapshot=topics,
                    corpus=self.corpus,
                    assignment=assignment,
                    round_index=round_index,
                    should_stop=self.should_stop,
                )
                topics = result.topics
                changed = len(result.changed_words)
                changes.append(changed)
                halt = monitor.observe(changed)
                report = RoundReport(
                    round_index=round_index,
                    changed_words=changed,
                    stagnant_rounds=monitor.stagnant_rounds,
                    elapsed_seconds=time.perf_counter() - round_start,
                    documents_per_worker=result.documents_per_worker,
                )
                _log(
                    f"round {round_index} changed={changed} "
                    f"stagnant={monitor.stagnant_rounds}/{monitor.limit} "
                    f"elapsed={report.elapsed_seconds:.2f}s"
                )
                if self.on_round is not None:
                    self.on_round(report)
                round_index += 1
                if halt:
                    break

        self.state = SamplerState.CONVERGED
        _log(f"converged rounds={round_index} elapsed={time.perf_counter() - start_time:.1f}s")
        return SamplerResult(
            topics=topics, assignment=assignment, rounds=round_index, changes=changes
        )


def lda(
    doc_tokens: Sequence[Sequence[str]],
    topic_count: int,
    *,
    workers: int = 1,
    seed: Optional[int] = None,
    on_round: Optional[RoundCallback] = None,
    should_stop: Optional[StopCheck] = None,
) -> LdaResult:
    """
    Fit Latent Dirichlet Allocation to tokenized documents.

    ``doc_tokens[i][j]`` is the j'th token of the i'th document. The call returns only
    after sampling converged.

    :param doc_tokens: Tokenized documents.
    :type doc_tokens: Sequence[Sequence[str]]
    :param topic_count: Number of topics.
    :type topic_count: int
    :param workers: Number of parallel worker tasks.
    :type workers: int
    :param seed: Optional seed.
    :type seed: int or None
    :param on_round: Optional per-round progress callback.
    :type on_round: Callable[[RoundReport], None] or None
    :param should_stop: Optional early termination check.
    :type should_stop: Callable[[], bool] or None
    :return: Topic word frequencies, token labels and the word list.
    :rtype: LdaResult
    :raises InvalidArgumentError: If ``topic_count`` or ``workers`` is below one, ``seed``
        is negative or the documents contain no tokens.
    """
    validate_arguments(topic_count=topic_count, workers=workers, seed=seed)
    vocabulary = Vocabulary.from_documents(doc_tokens)
    corpus = vocabulary.encode(doc_tokens)
    sampler = GibbsSampler(
        corpus,
        len(vocabulary),
        topic_count,
        workers=workers,
        seed=seed,
        on_round=on_round,
        should_stop=should_stop,
    )
    result = sampler.run()
    return LdaResult(
        topics=result.topic_word_frequencies(),
        assignments=result.assignment.to_lists(),
        words=list(vocabulary.words),
        rounds=result.rounds,
        tables=result.topics,
    )


def lda_threads(
    doc_tokens: Sequence[Sequence[str]], topic_count: int, workers: int
) -> LdaResult:
    """
    Like :func:`lda` with an explicit worker count. One worker is equivalent to
    :func:`lda`.
    """
    return lda(doc_tokens, topic_count, workers=workers)


def topic_keywords(result: LdaResult, top: int) -> List[List[Tuple[str, float]]]:
    """
    Most frequent words of each topic with their normalized frequency.

    :param result: Output of :func:`lda`.
    :type result: LdaResult
    :param top: Words per topic.
    :type top: int
    :return: ``(word, frequency)`` pairs per topic, most frequent first.
    :rtype: list[list[tuple[str, float]]]
    """
    keywords: List[List[Tuple[str, float]]] = []
    for topic_index, table in enumerate(result.tables):
        row = result.topics[topic_index]
        keywords.append([(result.words[word], float(row[word])) for word in table.top_n(top)])
    return keywords
