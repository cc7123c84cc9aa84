"""
Word to identifier mapping for tokenized corpora.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

import numpy as np


class Vocabulary:
    """
    Stable bijection between word strings and integer identifiers.

    Identifiers are assigned in first-seen order.

    :ivar words: Identifier to word lookup.
    :vartype words: list[str]
    """

    def __init__(self) -> None:
        self._ids: Dict[str, int] = {}
        self.words: List[str] = []

    @classmethod
    def from_documents(cls, doc_tokens: Iterable[Iterable[str]]) -> "Vocabulary":
        vocabulary = cls()
        for document in doc_tokens:
            for word in document:
                vocabulary.add(word)
        return vocabulary

    def __len__(self) -> int:
        return len(self.words)

    def __contains__(self, word: object) -> bool:
        return word in self._ids

    def add(self, word: str) -> int:
        word_id = self._ids.get(word)
        if word_id is None:
            word_id = len(self.words)
            self._ids[word] = word_id
            self.words.append(word)
        return word_id

    def id_of(self, word: str) -> int:
        """
        :raises KeyError: If the word is unknown.
        """
        return self._ids[word]

    def encode(self, doc_tokens: Iterable[Sequence[str]]) -> List[np.ndarray]:
        """
        Convert tokenized documents to word identifier arrays.

        :param doc_tokens: Documents as token sequences.
        :type doc_tokens: Iterable[Sequence[str]]
        :return: One identifier array per document.
        :rtype: list[numpy.ndarray]
        :raises KeyError: If a token is not in the vocabulary.
        """
        return [
            np.array([self._ids[word] for word in document], dtype=np.int64)
            for document in doc_tokens
        ]
