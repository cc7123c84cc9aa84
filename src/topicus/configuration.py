"""
Configuration loading for sampler runs.

Configuration is a flat mapping of :class:`topicus.models.LdaConfiguration` fields.
YAML files are layered first, then ``key=value`` overrides from the command line.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

import yaml

from .models import LdaConfiguration


def configuration_keys() -> List[str]:
    return sorted(LdaConfiguration.model_fields)


def parse_override_value(raw: str) -> Optional[object]:
    """
    Parse the value half of an override.

    ``none`` and ``null`` clear an optional field. Integers become ints. Anything else
    is passed through as a string for the configuration model to validate.

    :param raw: Raw override value.
    :type raw: str
    :return: Parsed value.
    :rtype: int or str or None
    """
    stripped = raw.strip()
    if stripped.lower() in {"none", "null"}:
        return None
    try:
        return int(stripped)
    except ValueError:
        return stripped


def parse_overrides(pairs: Optional[List[str]]) -> Dict[str, object]:
    """
    Parse repeated ``key=value`` pairs naming configuration fields.

    :param pairs: Repeated command-line pairs.
    :type pairs: list[str] or None
    :return: Override mapping keyed by field name.
    :rtype: dict[str, object]
    :raises ValueError: If a pair is not key=value or names an unknown field.
    """
    known = configuration_keys()
    overrides: Dict[str, object] = {}
    for item in pairs or []:
        if "=" not in item:
            raise ValueError(f"Overrides must be key=value (got {item!r})")
        key, raw = item.split("=", 1)
        key = key.strip()
        if key not in known:
            raise ValueError(
                f"Unknown configuration key {key!r}. Expected one of: {', '.join(known)}"
            )
        overrides[key] = parse_override_value(raw)
    return overrides


def apply_overrides(
    config: Mapping[str, object], overrides: Mapping[str, object]
) -> Dict[str, object]:
    """
    Return a copy of ``config`` with ``overrides`` layered on top.
    """
    updated = dict(config)
    updated.update(overrides)
    return updated


def load_configuration_view(
    configuration_paths: Iterable[str],
    *,
    configuration_label: str = "Configuration",
    mapping_error_message: Optional[str] = None,
) -> Dict[str, object]:
    """
    Load a composed configuration view from one or more YAML files.

    Later files take precedence key by key. An empty file contributes nothing.

    :param configuration_paths: Configuration file paths in precedence order.
    :type configuration_paths: Iterable[str]
    :param configuration_label: Label used in error messages.
    :type configuration_label: str
    :param mapping_error_message: Optional message for non-mapping documents.
    :type mapping_error_message: str or None
    :return: Composed configuration view.
    :rtype: dict[str, object]
    :raises FileNotFoundError: If any configuration file is missing.
    :raises ValueError: If any configuration file is not a mapping/object.
    """
    paths = [Path(raw) for raw in configuration_paths]
    for candidate in paths:
        if not candidate.is_file():
            raise FileNotFoundError(f"{configuration_label} not found: {candidate}")
    view: Dict[str, object] = {}
    for candidate in paths:
        loaded = yaml.safe_load(candidate.read_text(encoding="utf-8"))
        if loaded is None:
            continue
        if not isinstance(loaded, dict):
            raise ValueError(
                mapping_error_message or f"{configuration_label} must be a mapping/object"
            )
        view = apply_overrides(view, loaded)
    return view
