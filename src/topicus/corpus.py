"""
Reading tokenized corpora from disk.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Union


def _token_list(value: object, *, location: str) -> List[str]:
    if not isinstance(value, list):
        raise ValueError(f"Document at {location} must be a list of tokens")
    return [str(token) for token in value]


def read_corpus(path: Union[str, Path]) -> List[List[str]]:
    """
    Read tokenized documents from a file.

    ``.json`` files hold a list of token lists, ``.jsonl`` files hold one token list
    per line, and any other file holds one document per line with whitespace-separated
    tokens. A blank text line is an empty document.

    :param path: Corpus file path.
    :type path: str or Path
    :return: Tokenized documents.
    :rtype: list[list[str]]
    :raises FileNotFoundError: If the file does not exist.
    :raises ValueError: If a JSON document is not a list of tokens.
    """
    corpus_path = Path(path)
    if not corpus_path.is_file():
        raise FileNotFoundError(f"Corpus file not found: {corpus_path}")
    text = corpus_path.read_text(encoding="utf-8")
    suffix = corpus_path.suffix.lower()
    if suffix == ".json":
        payload = json.loads(text)
        if not isinstance(payload, list):
            raise ValueError("Corpus JSON must be a list of token lists")
        return [
            _token_list(document, location=f"index {index}")
            for index, document in enumerate(payload)
        ]
    if suffix == ".jsonl":
        documents: List[List[str]] = []
        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            documents.append(_token_list(json.loads(line), location=f"line {line_number}"))
        return documents
    return [line.split() for line in text.splitlines()]
