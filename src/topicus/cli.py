"""
Command-line interface for Topicus.
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import ValidationError

from .configuration import apply_overrides, load_configuration_view, parse_overrides
from .corpus import read_corpus
from .models import LdaConfiguration, LdaKeyword, LdaOutput, LdaReport, LdaTopic
from .sampler import LdaResult, lda, topic_keywords


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def _resolve_configuration(arguments: argparse.Namespace) -> LdaConfiguration:
    """
    Compose configuration files, key=value overrides and explicit flags, in that order.

    :param arguments: Parsed command-line interface arguments.
    :type arguments: argparse.Namespace
    :return: Validated configuration.
    :rtype: LdaConfiguration
    :raises ValueError: If the composed configuration is invalid.
    """
    configuration_data: Dict[str, object] = {}
    if arguments.configuration:
        configuration_data = load_configuration_view(
            arguments.configuration,
            configuration_label="Configuration file",
            mapping_error_message="LDA configuration must be a mapping/object",
        )
    overrides = parse_overrides(arguments.override)
    configuration_data = apply_overrides(configuration_data, overrides)
    for key in ("topic_count", "workers", "seed", "top_words"):
        value = getattr(arguments, key, None)
        if value is not None:
            configuration_data[key] = value
    try:
        return LdaConfiguration.model_validate(configuration_data)
    except ValidationError as exc:
        raise ValueError(f"Invalid LDA configuration: {exc}") from exc


def build_output(
    *, result: LdaResult, configuration: LdaConfiguration, document_count: int
) -> LdaOutput:
    """
    Assemble the serializable output of a run.

    :param result: Sampler result.
    :type result: LdaResult
    :param configuration: Configuration the run used.
    :type configuration: LdaConfiguration
    :param document_count: Documents in the corpus.
    :type document_count: int
    :return: Output model.
    :rtype: LdaOutput
    """
    topics = [
        LdaTopic(
            topic_id=topic_id,
            keywords=[LdaKeyword(word=word, weight=weight) for word, weight in keywords],
            token_count=int(result.tables[topic_id].total),
        )
        for topic_id, keywords in enumerate(
            topic_keywords(result, configuration.top_words)
        )
    ]
    report = LdaReport(
        topics=topics,
        document_count=document_count,
        vocabulary_size=len(result.words),
        rounds=result.rounds,
        workers=configuration.workers,
    )
    return LdaOutput(
        generated_at=_utc_now_iso(),
        configuration=configuration,
        report=report,
        topic_word_frequencies=result.topics.tolist(),
        assignments=result.assignments,
        words=result.words,
    )


def cmd_lda(arguments: argparse.Namespace) -> int:
    """
    Fit topics to a tokenized corpus and print the output as JSON.

    :param arguments: Parsed command-line interface arguments.
    :type arguments: argparse.Namespace
    :return: Exit code.
    :rtype: int
    """
    configuration = _resolve_configuration(arguments)
    documents = read_corpus(arguments.corpus)
    result = lda(
        documents,
        configuration.topic_count,
        workers=configuration.workers,
        seed=configuration.seed,
    )
    output = build_output(
        result=result, configuration=configuration, document_count=len(documents)
    )
    print(output.model_dump_json(indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the command-line interface argument parser.

    :return: Argument parser instance.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="topicus",
        description="Topicus: parallel collapsed Gibbs sampling for topic models.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_lda = sub.add_parser("lda", help="Fit Latent Dirichlet Allocation topics.")
    p_lda.add_argument(
        "--corpus",
        required=True,
        help="Tokenized corpus (.json, .jsonl, or one whitespace-tokenized document per line).",
    )
    p_lda.add_argument(
        "--configuration",
        action="append",
        default=None,
        help="Path to a YAML configuration file. Repeatable; later files take precedence.",
    )
    p_lda.add_argument(
        "--override",
        action="append",
        default=None,
        help="Override a configuration value as key=value. Repeatable.",
    )
    p_lda.add_argument(
        "--topics",
        dest="topic_count",
        type=int,
        default=None,
        help="Number of topics.",
    )
    p_lda.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of parallel worker tasks (default: 1).",
    )
    p_lda.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random sources. Reproducible with a single worker.",
    )
    p_lda.add_argument(
        "--top-words",
        dest="top_words",
        type=int,
        default=None,
        help="Keywords reported per topic (default: 10).",
    )
    p_lda.set_defaults(func=cmd_lda)

    return parser


def main(argument_list: Optional[List[str]] = None) -> int:
    """
    Entry point for the Topicus command-line interface.

    :param argument_list: Optional command-line interface arguments.
    :type argument_list: list[str] or None
    :return: Exit code.
    :rtype: int
    """
    parser = build_parser()
    arguments = parser.parse_args(argument_list)
    try:
        return int(arguments.func(arguments))
    except (
        FileNotFoundError,
        ValueError,
        ValidationError,
    ) as exception:
        message = exception.args[0] if getattr(exception, "args", None) else str(exception)
        print(str(message), file=sys.stderr)
        return 2
