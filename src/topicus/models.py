"""
Pydantic models for sampler configuration and output.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .constants import SCHEMA_VERSION


class TopicusModel(BaseModel):
    """
    Base model that rejects unknown fields.
    """

    model_config = ConfigDict(extra="forbid")


class LdaConfiguration(TopicusModel):
    """
    Configuration for a sampler run.

    :ivar schema_version: Configuration schema version.
    :vartype schema_version: int
    :ivar topic_count: Number of topics.
    :vartype topic_count: int
    :ivar workers: Number of parallel worker tasks.
    :vartype workers: int
    :ivar seed: Optional seed for the random sources.
    :vartype seed: int or None
    :ivar top_words: Keywords reported per topic.
    :vartype top_words: int
    """

    schema_version: int = Field(default=SCHEMA_VERSION, ge=1)
    topic_count: int = Field(default=10, ge=1)
    workers: int = Field(default=1, ge=1)
    seed: Optional[int] = Field(default=None, ge=0)
    top_words: int = Field(default=10, ge=1)

    @model_validator(mode="after")
    def _validate_schema_version(self) -> "LdaConfiguration":
        if self.schema_version != SCHEMA_VERSION:
            raise ValueError(f"Unsupported configuration schema version: {self.schema_version}")
        return self


class LdaKeyword(TopicusModel):
    """
    One of a topic's most frequent words.

    :ivar word: Word string.
    :vartype word: str
    :ivar weight: Normalized frequency of the word within the topic.
    :vartype weight: float
    """

    word: str
    weight: float


class LdaTopic(TopicusModel):
    """
    Summary of one topic.

    :ivar topic_id: Topic index.
    :vartype topic_id: int
    :ivar keywords: Most frequent words, most frequent first.
    :vartype keywords: list[LdaKeyword]
    :ivar token_count: Tokens assigned to the topic.
    :vartype token_count: int
    """

    topic_id: int
    keywords: List[LdaKeyword] = Field(default_factory=list)
    token_count: int = 0


class LdaReport(TopicusModel):
    """
    Run summary.

    :ivar topics: Per-topic summaries.
    :vartype topics: list[LdaTopic]
    :ivar document_count: Documents in the corpus.
    :vartype document_count: int
    :ivar vocabulary_size: Distinct words in the corpus.
    :vartype vocabulary_size: int
    :ivar rounds: Sampling rounds until the plateau halt.
    :vartype rounds: int
    :ivar workers: Worker tasks used.
    :vartype workers: int
    """

    topics: List[LdaTopic] = Field(default_factory=list)
    document_count: int
    vocabulary_size: int
    rounds: int
    workers: int


class LdaOutput(TopicusModel):
    """
    Serialized result of a command-line run.

    :ivar generated_at: International Organization for Standardization 8601 timestamp.
    :vartype generated_at: str
    :ivar configuration: Configuration the run used.
    :vartype configuration: LdaConfiguration
    :ivar report: Run summary.
    :vartype report: LdaReport
    :ivar topic_word_frequencies: ``K x V`` normalized word frequencies.
    :vartype topic_word_frequencies: list[list[float]]
    :ivar assignments: Topic label of every token.
    :vartype assignments: list[list[int]]
    :ivar words: Word of each frequency column.
    :vartype words: list[str]
    """

    generated_at: str
    configuration: LdaConfiguration
    report: LdaReport
    topic_word_frequencies: List[List[float]]
    assignments: List[List[int]]
    words: List[str]
