from __future__ import annotations

from collections import Counter
from typing import Any, Callable, List

import numpy as np
from behave import given, then, when

from topicus.errors import InvalidArgumentError
from topicus.sampler import lda


def _record_error(context, func: Callable[[], Any]) -> None:
    try:
        context.result = func()
        context.last_error = None
    except Exception as exc:  # noqa: BLE001 - scenarios assert the error type explicitly
        context.last_error = exc


@given("the documents:")
def step_given_documents(context) -> None:
    context.documents = [row["text"].split() for row in context.table]


@given("a synthetic corpus of {count:d} documents over {groups:d} word groups")
def step_given_synthetic_corpus(context, count: int, groups: int) -> None:
    rng = np.random.default_rng(17)
    documents: List[List[str]] = []
    for index in range(count):
        group = index % groups
        documents.append([f"g{group}w{int(word)}" for word in rng.integers(6, size=10)])
    context.documents = documents


@when("I fit {topics:d} topics with {workers:d} worker over {seeds:d} seeds")
def step_fit_over_seeds(context, topics: int, workers: int, seeds: int) -> None:
    context.results = [
        lda(context.documents, topics, workers=workers, seed=seed) for seed in range(seeds)
    ]


@when("I fit {topics:d} topics with {workers:d} workers and record each round")
def step_fit_recording_rounds(context, topics: int, workers: int) -> None:
    context.round_reports = []
    context.result = lda(
        context.documents,
        topics,
        workers=workers,
        on_round=context.round_reports.append,
    )


@when("I try to fit {topics:d} topics with {workers:d} worker")
@when("I try to fit {topics:d} topics with {workers:d} workers")
def step_try_fit(context, topics: int, workers: int) -> None:
    _record_error(context, lambda: lda(context.documents, topics, workers=workers))


@then('most runs give the "a b" documents one topic and the "c d" documents another')
def step_then_groups_separate(context) -> None:
    separated = 0
    for result in context.results:
        first = {topic for document in result.assignments[:2] for topic in document}
        second = {topic for document in result.assignments[2:] for topic in document}
        if len(first) == 1 and len(second) == 1 and first != second:
            separated += 1
    assert separated * 2 >= len(context.results), separated


@then("every word's count across topics equals its corpus frequency")
def step_then_counts_conserved(context) -> None:
    occurrences = Counter(word for document in context.documents for word in document)
    for column, word in enumerate(context.result.words):
        total = sum(table.count(column) for table in context.result.tables)
        assert total == occurrences[word], (word, total, occurrences[word])


@then("the last round report shows {count:d} stagnant rounds")
def step_then_last_round_stagnant(context, count: int) -> None:
    assert context.round_reports
    assert context.round_reports[-1].stagnant_rounds == count


@then('the fit fails with an invalid argument error mentioning "{text}"')
def step_then_invalid_argument(context, text: str) -> None:
    assert isinstance(context.last_error, InvalidArgumentError), context.last_error
    assert text in str(context.last_error)
