"""
Sampler driver tests, from argument checks to converged output.
"""

from __future__ import annotations

import itertools
from collections import Counter

import numpy as np
import pytest

from topicus import sampler as sampler_module
from topicus.errors import InvalidArgumentError, SamplingCancelledError
from topicus.sampler import GibbsSampler, SamplerState, lda, lda_threads, topic_keywords
from topicus.vocabulary import Vocabulary

PAIRED_CORPUS = [["a", "b"], ["a", "b"], ["c", "d"], ["c", "d"]]


def _synthetic_corpus(seed: int = 2024):
    rng = np.random.default_rng(seed)
    documents = []
    for index in range(20):
        group = "a" if index % 2 == 0 else "b"
        documents.append([f"{group}{int(word)}" for word in rng.integers(10, size=20)])
    return documents


def _groups_separated(assignments) -> bool:
    first = {topic for document in assignments[:2] for topic in document}
    second = {topic for document in assignments[2:] for topic in document}
    return len(first) == 1 and len(second) == 1 and first != second


def _topic_separation(result) -> float:
    in_group_a = np.array([word.startswith("a") for word in result.words])
    shares = [float(row[in_group_a].sum()) for row in result.topics]
    return abs(shares[0] - shares[1])


def _matched_similarity(left: np.ndarray, right: np.ndarray) -> float:
    best = 0.0
    for order in itertools.permutations(range(left.shape[0])):
        similarities = []
        for topic, other in enumerate(order):
            numerator = float(left[topic] @ right[other])
            denominator = float(np.linalg.norm(left[topic]) * np.linalg.norm(right[other]))
            similarities.append(numerator / denominator if denominator else 0.0)
        best = max(best, float(np.mean(similarities)))
    return best


def test_zero_topics_fail_before_assignment(monkeypatch):
    """
    K=0 is rejected before any token is assigned.
    """

    def _fail(*_args, **_kwargs):
        raise AssertionError("assignment must not start")

    monkeypatch.setattr(sampler_module.AssignmentState, "random", _fail)
    with pytest.raises(InvalidArgumentError, match="k must be positive"):
        lda(PAIRED_CORPUS, 0)


def test_zero_workers_fail_before_assignment(monkeypatch):
    """
    A worker count of zero is rejected before any token is assigned.
    """

    def _fail(*_args, **_kwargs):
        raise AssertionError("assignment must not start")

    monkeypatch.setattr(sampler_module.AssignmentState, "random", _fail)
    with pytest.raises(InvalidArgumentError, match="threads must be positive"):
        lda(PAIRED_CORPUS, 2, workers=0)


def test_negative_seed_fails_before_assignment(monkeypatch):
    """
    A negative seed is an invalid argument on the library path too.
    """

    def _fail(*_args, **_kwargs):
        raise AssertionError("assignment must not start")

    monkeypatch.setattr(sampler_module.AssignmentState, "random", _fail)
    with pytest.raises(InvalidArgumentError, match="Seed must be non-negative. Got -1."):
        lda(PAIRED_CORPUS, 2, seed=-1)
    with pytest.raises(InvalidArgumentError, match="Seed must be non-negative"):
        GibbsSampler([np.array([0], dtype=np.int64)], 1, 2, seed=-5)


@pytest.mark.parametrize("documents", [[], [[], []]])
def test_corpus_without_tokens_fails_on_vocabulary(documents):
    """
    No tokens means zero distinct words.
    """
    with pytest.raises(InvalidArgumentError, match="zero distinct words"):
        lda(documents, 2)


def test_sampler_constructor_checks_vocabulary():
    """
    The driver itself refuses an empty vocabulary.
    """
    with pytest.raises(InvalidArgumentError):
        GibbsSampler([np.array([], dtype=np.int64)], 0, 2)


def test_paired_documents_share_topics_within_groups():
    """
    Identical documents end up sharing one topic that differs from the other group.

    A run can absorb every token into a single topic, so several seeds are tried and
    at least half of them must separate the groups.
    """
    results = [lda(PAIRED_CORPUS, 2, seed=seed) for seed in range(60)]
    separated = [result for result in results if _groups_separated(result.assignments)]
    assert len(separated) >= len(results) // 2, len(separated)
    for result in separated:
        ab_topic = result.assignments[0][0]
        a_column = result.words.index("a")
        b_column = result.words.index("b")
        assert result.topics[ab_topic][a_column] == pytest.approx(0.5)
        assert result.topics[ab_topic][b_column] == pytest.approx(0.5)


def test_output_shapes_and_conservation():
    """
    Output matrices follow the corpus and vocabulary, and counts are conserved.
    """
    documents = _synthetic_corpus()
    result = lda(documents, 3, workers=2, seed=1)
    assert result.topics.shape == (3, len(result.words))
    assert [len(row) for row in result.assignments] == [len(doc) for doc in documents]
    assert all(0 <= topic < 3 for row in result.assignments for topic in row)
    occurrences = Counter(word for document in documents for word in document)
    for column, word in enumerate(result.words):
        assert sum(table.count(column) for table in result.tables) == occurrences[word]
    for table, row in zip(result.tables, result.topics):
        if table.total:
            assert float(row.sum()) == pytest.approx(1.0)
        else:
            assert float(row.sum()) == 0.0
    assert result.words[0] == documents[0][0]
    assert result.rounds >= 5


def test_seeded_single_worker_runs_are_reproducible():
    """
    With one worker and a seed, two runs agree exactly.
    """
    first = lda(_synthetic_corpus(), 2, seed=13)
    second = lda(_synthetic_corpus(), 2, seed=13)
    assert first.assignments == second.assignments
    assert first.rounds == second.rounds
    assert np.array_equal(first.topics, second.topics)


def test_worker_count_gives_similar_topics():
    """
    One worker and four workers recover nearly the same topic-word vectors.
    """
    documents = _synthetic_corpus()
    single = max(
        (lda(documents, 2, workers=1, seed=seed) for seed in range(4)), key=_topic_separation
    )
    parallel = max(
        (lda(documents, 2, workers=4) for _ in range(4)), key=_topic_separation
    )
    assert _matched_similarity(single.topics, parallel.topics) > 0.9


def test_round_callback_and_state():
    """
    The driver reports every round and ends converged.
    """
    reports = []
    documents = _synthetic_corpus()
    vocabulary = Vocabulary.from_documents(documents)
    sampler = GibbsSampler(
        vocabulary.encode(documents),
        len(vocabulary),
        2,
        workers=3,
        seed=4,
        on_round=reports.append,
    )
    assert sampler.state == SamplerState.INITIALIZING
    result = sampler.run()
    assert sampler.state == SamplerState.CONVERGED
    assert len(reports) == result.rounds == len(result.changes)
    assert [report.round_index for report in reports] == list(range(result.rounds))
    assert reports[-1].stagnant_rounds == 5
    assert all(sum(report.documents_per_worker) == len(documents) for report in reports)
    assert [report.changed_words for report in reports] == result.changes


def test_stop_check_cancels_run():
    """
    An external stop check aborts the run with no result.
    """
    with pytest.raises(SamplingCancelledError):
        lda(PAIRED_CORPUS, 2, workers=2, should_stop=lambda: True)


def test_lda_threads_and_keywords():
    """
    The positional worker variant returns the same structure and keywords resolve words.
    """
    result = lda_threads(PAIRED_CORPUS, 2, 2)
    assert result.topics.shape == (2, 4)
    keywords = topic_keywords(result, 10)
    assert len(keywords) == 2
    for topic_keywords_list, table in zip(keywords, result.tables):
        assert len(topic_keywords_list) == 4
        words = [word for word, _ in topic_keywords_list]
        assert sorted(words) == ["a", "b", "c", "d"]
        weights = [weight for _, weight in topic_keywords_list]
        assert weights == sorted(weights, reverse=True)
