"""
Worker task that resamples the tokens of the documents it pulls from the work queue.
"""

from __future__ import annotations

import queue
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set

import numpy as np

from .assignment import AssignmentState, Corpus, topic_word_tables
from .constants import DOCUMENT_TOPIC_SMOOTHING
from .distribution import Distribution, clone_all
from .errors import SamplingCancelledError
from .sampling import document_random_source, weighted_draw

StopCheck = Callable[[], bool]


@dataclass
class WorkerResult:
    """
    Partial output of one worker for one round.

    :ivar accumulator: Topic-word counts of the documents this worker finished.
    :vartype accumulator: list[Distribution]
    :ivar changed_words: Word identifiers whose topic changed at least once.
    :vartype changed_words: set[int]
    :ivar documents: Number of documents this worker processed.
    :vartype documents: int
    """

    accumulator: List[Distribution]
    changed_words: Set[int] = field(default_factory=set)
    documents: int = 0


def document_topic_counts(row: Sequence[int], topic_count: int) -> Distribution:
    """
    Build the document-topic table from a document's current labels.

    :param row: Topic label of each token in the document.
    :type row: Sequence[int]
    :param topic_count: Number of topics.
    :type topic_count: int
    :return: Table smoothed with ``0.1 / topic_count``.
    :rtype: Distribution
    """
    table = Distribution(topic_count, DOCUMENT_TOPIC_SMOOTHING / topic_count)
    for topic in row:
        table.add(topic)
    return table


class WorkerTask:
    """
    One worker's private state for one round.

    The worker reads through its own clone of the round snapshot and never touches the
    shared tables. Finished documents are folded into a private accumulator so the
    merged counts reflect end-of-round labels.

    :param snapshot: Topic-word tables frozen for the round.
    :type snapshot: list[Distribution]
    :param corpus: Word identifier arrays.
    :type corpus: Sequence[numpy.ndarray]
    :param assignment: Shared label matrix; only rows pulled by this worker are written.
    :type assignment: AssignmentState
    :param rng: Worker-local random source.
    :type rng: numpy.random.Generator
    :param round_index: Zero-based round number.
    :type round_index: int
    :param seed: When set, each document draws from a document-keyed source instead.
    :type seed: int or None
    :param should_stop: Optional check run before each pull from the work queue.
    :type should_stop: Callable[[], bool] or None
    """

    def __init__(
        self,
        *,
        snapshot: List[Distribution],
        corpus: Corpus,
        assignment: AssignmentState,
        rng: np.random.Generator,
        round_index: int = 0,
        seed: Optional[int] = None,
        should_stop: Optional[StopCheck] = None,
    ) -> None:
        self.corpus = corpus
        self.assignment = assignment
        self.topic_count = assignment.topic_count
        self.topics = clone_all(snapshot)
        vocabulary_size = len(snapshot[0]) if snapshot else 0
        self.result = WorkerResult(accumulator=topic_word_tables(self.topic_count, vocabulary_size))
        self.rng = rng
        self.round_index = round_index
        self.seed = seed
        self.should_stop = should_stop
        self._weights = np.zeros(self.topic_count, dtype=np.float64)

    def drain(self, work: "queue.Queue[Optional[int]]") -> WorkerResult:
        """
        Process documents from the shared queue until the end marker arrives.

        :param work: Queue of document indices terminated by ``None``.
        :type work: queue.Queue
        :return: This worker's partial result.
        :rtype: WorkerResult
        :raises SamplingCancelledError: If the stop check fires.
        """
        while True:
            if self.should_stop is not None and self.should_stop():
                raise SamplingCancelledError(round_index=self.round_index)
            document_index = work.get()
            if document_index is None:
                return self.result
            self.process_document(document_index)

    def process_document(self, document_index: int) -> None:
        row = self.assignment.rows[document_index]
        words = self.corpus[document_index]
        rng = self.rng
        if self.seed is not None:
            rng = document_random_source(
                self.seed, round_index=self.round_index, document_index=document_index
            )
        document_topics = document_topic_counts(row, self.topic_count)
        for position in range(len(row)):
            self.resample_token(document_topics, row, words, position, rng)
        self.assignment.accumulate(self.result.accumulator, self.corpus, document_index)
        self.result.documents += 1

    def resample_token(
        self,
        document_topics: Distribution,
        row: np.ndarray,
        words: np.ndarray,
        position: int,
        rng: np.random.Generator,
    ) -> int:
        """
        Draw a new topic for one token given every other current label.

        :param document_topics: Running document-topic table, updated in place.
        :type document_topics: Distribution
        :param row: Label row of the document, updated in place.
        :type row: numpy.ndarray
        :param words: Word identifiers of the document.
        :type words: numpy.ndarray
        :param position: Token position.
        :type position: int
        :param rng: Random source for the draw.
        :type rng: numpy.random.Generator
        :return: The drawn topic.
        :rtype: int
        """
        previous = int(row[position])
        word = int(words[position])

        document_topics.subtract(previous)
        self.topics[previous].subtract(word)

        word_given_topic = self._weights
        for topic, table in enumerate(self.topics):
            word_given_topic[topic] = table.probability(word)
        weights = document_topics.probabilities() * word_given_topic
        drawn = weighted_draw(weights, rng)
        if drawn != previous:
            self.result.changed_words.add(word)

        row[position] = drawn
        document_topics.add(drawn)
        self.topics[drawn].add(word)
        return drawn
