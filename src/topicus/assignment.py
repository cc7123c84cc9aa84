"""
Per-token topic labels.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .constants import TOPIC_WORD_SMOOTHING
from .distribution import Distribution

Corpus = Sequence[np.ndarray]


def topic_word_tables(topic_count: int, vocabulary_size: int) -> List[Distribution]:
    """
    Build an empty topic-word table set, one table per topic over the vocabulary.

    :param topic_count: Number of topics.
    :type topic_count: int
    :param vocabulary_size: Number of distinct words.
    :type vocabulary_size: int
    :return: Empty tables smoothed with ``0.1 / vocabulary_size``.
    :rtype: list[Distribution]
    """
    return Distribution.many(
        topic_count, vocabulary_size, TOPIC_WORD_SMOOTHING / vocabulary_size
    )


class AssignmentState:
    """
    Topic label of every token, one row per document.

    During a round each row is written by exactly one worker.

    :ivar rows: Topic label arrays, shaped like the corpus.
    :vartype rows: list[numpy.ndarray]
    :ivar topic_count: Number of topics.
    :vartype topic_count: int
    """

    def __init__(self, rows: List[np.ndarray], topic_count: int) -> None:
        self.rows = rows
        self.topic_count = topic_count

    @classmethod
    def random(
        cls, corpus: Corpus, topic_count: int, rng: np.random.Generator
    ) -> "AssignmentState":
        rows = [
            rng.integers(topic_count, size=len(document), dtype=np.int64) for document in corpus
        ]
        return cls(rows, topic_count)

    def __len__(self) -> int:
        return len(self.rows)

    def accumulate(self, tables: List[Distribution], corpus: Corpus, document_index: int) -> None:
        """
        Fold one document's current labels into a topic-word table set.

        :param tables: Topic-word tables to update in place.
        :type tables: list[Distribution]
        :param corpus: Word identifier arrays.
        :type corpus: Sequence[numpy.ndarray]
        :param document_index: Document to fold in.
        :type document_index: int
        """
        for topic, word in zip(self.rows[document_index], corpus[document_index]):
            tables[topic].add(word)

    def topic_word_counts(self, corpus: Corpus, vocabulary_size: int) -> List[Distribution]:
        tables = topic_word_tables(self.topic_count, vocabulary_size)
        for document_index in range(len(self.rows)):
            self.accumulate(tables, corpus, document_index)
        return tables

    def to_lists(self) -> List[List[int]]:
        return [[int(topic) for topic in row] for row in self.rows]
