"""Resolve CLI values with environment-variable fallbacks.

Precedence is CLI value, then environment variable, then default. GitHub
Actions exports every declared action input, using an empty string for the
ones the workflow left out, so blank environment values count as unset.
"""

from __future__ import annotations

import os
from collections import abc as cabc
from dataclasses import dataclass
from pathlib import Path

INPUT_PREFIX = "INPUT_"


@dataclass(frozen=True, slots=True)
class InputResolution:
    """Configuration for resolving an input from multiple sources."""

    env_key: str
    default: str | Path | None = None
    required: bool = False
    as_path: bool = False


def resolve_input(
    param_value: str | Path | None,
    resolution: InputResolution,
    env: cabc.Mapping[str, str] | None = None,
) -> str | Path | None:
    """Resolve input from parameter, environment variable, or default.

    Raises
    ------
    SystemExit
        If the input is required and no source provides it.

    Examples
    --------
    >>> resolve_input(None, InputResolution("INPUT_REGION", default="fr-par"), env={})
    'fr-par'
    """
    if param_value is not None:
        return param_value

    env_value = (env if env is not None else os.environ).get(resolution.env_key)
    if env_value is not None and env_value.strip():
        return Path(env_value) if resolution.as_path else env_value

    if resolution.required:
        msg = f"{resolution.env_key} is required"
        raise SystemExit(msg)

    return resolution.default


def resolve_named_inputs(
    values: cabc.Mapping[str, str | None],
    *,
    required: cabc.Collection[str] = (),
    env: cabc.Mapping[str, str] | None = None,
) -> dict[str, str | None]:
    """Resolve a set of string inputs against their ``INPUT_<NAME>`` variables.

    Examples
    --------
    >>> resolve_named_inputs({"region": None}, env={"INPUT_REGION": "nl-ams"})
    {'region': 'nl-ams'}
    """
    resolved: dict[str, str | None] = {}
    for name, value in values.items():
        resolution = InputResolution(
            env_key=f"{INPUT_PREFIX}{name.upper()}",
            required=name in required,
        )
        result = resolve_input(value, resolution, env)
        resolved[name] = None if result is None else str(result)
    return resolved
