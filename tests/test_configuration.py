"""
Configuration loading and override tests.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from topicus.configuration import (
    apply_overrides,
    configuration_keys,
    load_configuration_view,
    parse_override_value,
    parse_overrides,
)
from topicus.models import LdaConfiguration


def test_parse_override_value_coerces_integers_and_none():
    """
    Override values become ints or None; anything else stays a string.
    """
    assert parse_override_value("12") == 12
    assert parse_override_value(" -3 ") == -3
    assert parse_override_value("None") is None
    assert parse_override_value("null") is None
    assert parse_override_value("many") == "many"


def test_parse_overrides_accepts_configuration_fields():
    """
    Overrides naming configuration fields are parsed into a flat mapping.
    """
    assert parse_overrides(["topic_count=4", "seed=none", " workers = 2"]) == {
        "topic_count": 4,
        "seed": None,
        "workers": 2,
    }
    assert parse_overrides(None) == {}
    assert "top_words" in configuration_keys()


def test_parse_overrides_rejects_unknown_and_malformed_keys():
    """
    Keys outside the configuration model and pairs without '=' are rejected.
    """
    with pytest.raises(ValueError, match="key=value"):
        parse_overrides(["topic_count"])
    with pytest.raises(ValueError, match="Unknown configuration key 'nested.value'"):
        parse_overrides(["nested.value=x"])
    with pytest.raises(ValueError, match="Unknown configuration key ''"):
        parse_overrides([" =3"])
    with pytest.raises(ValueError, match="topic_count"):
        parse_overrides(["alpha=0.1"])


def test_apply_overrides_does_not_mutate_input():
    """
    Overrides are layered on a copy.
    """
    base = {"workers": 1, "seed": 4}
    updated = apply_overrides(base, {"workers": 4, "seed": None})
    assert base == {"workers": 1, "seed": 4}
    assert updated == {"workers": 4, "seed": None}
    assert LdaConfiguration.model_validate(updated).workers == 4


def test_load_configuration_view_merges_in_order(tmp_path):
    """
    Later files take precedence key by key.
    """
    first = tmp_path / "base.yml"
    first.write_text("topic_count: 5\nworkers: 2\nseed: 1\n", encoding="utf-8")
    second = tmp_path / "local.yml"
    second.write_text("workers: 8\n", encoding="utf-8")
    empty = tmp_path / "empty.yml"
    empty.write_text("", encoding="utf-8")
    view = load_configuration_view([str(first), str(empty), str(second)])
    assert view == {"topic_count": 5, "workers": 8, "seed": 1}


def test_load_configuration_view_errors(tmp_path):
    """
    Missing files and non-mapping documents are rejected.
    """
    with pytest.raises(FileNotFoundError, match="Configuration not found"):
        load_configuration_view([str(tmp_path / "missing.yml")])
    listing = tmp_path / "list.yml"
    listing.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="mapping/object"):
        load_configuration_view([str(listing)])
    with pytest.raises(ValueError, match="custom message"):
        load_configuration_view([str(listing)], mapping_error_message="custom message")


def test_lda_configuration_validation():
    """
    Counts must be positive and unknown keys are rejected.
    """
    config = LdaConfiguration.model_validate({"topic_count": 3, "workers": 2})
    assert config.top_words == 10
    assert config.seed is None
    with pytest.raises(ValidationError):
        LdaConfiguration.model_validate({"topic_count": 0})
    with pytest.raises(ValidationError):
        LdaConfiguration.model_validate({"workers": 0})
    with pytest.raises(ValidationError):
        LdaConfiguration.model_validate({"alpha": 0.1})
    with pytest.raises(ValidationError, match="schema version"):
        LdaConfiguration.model_validate({"schema_version": 2})
