"""GitHub Actions plumbing for the environment entry points.

The resolved plan leaves the Python process through three channels: key-value
files (``GITHUB_ENV`` and ``GITHUB_OUTPUT``), workflow commands written to
stdout, and a ``tfvars.json`` file handed to the provisioning modules.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TextIO, TypeAlias

Stream: TypeAlias = Callable[[str], object]

_ANNOTATION_LEVELS = frozenset({"notice", "warning", "error"})


def emit_annotation(level: str, message: str, stream: Stream = print) -> None:
    """Write a ``::warning::``-style workflow command.

    Parameters
    ----------
    level
        One of ``notice``, ``warning`` or ``error``.
    message
        Annotation text; newlines are escaped as the runner expects.
    stream
        Output callable (defaults to ``print``).

    Examples
    --------
    >>> emit_annotation("warning", "no compute price for tier 'GP1-XL'")
    ::warning::no compute price for tier 'GP1-XL'
    """
    if level not in _ANNOTATION_LEVELS:
        msg = f"unsupported annotation level: {level}"
        raise ValueError(msg)
    escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    stream(f"::{level}::{escaped}")


def _heredoc_delimiter(value: str, base: str = "EOF") -> str:
    delimiter = base
    counter = 0
    while delimiter in value:
        counter += 1
        delimiter = f"{base}_{counter}"
    return delimiter


def _write_entry(handle: TextIO, key: str, value: str) -> None:
    if "\n" not in value and "\r" not in value:
        handle.write(f"{key}={value}\n")
        return
    delimiter = _heredoc_delimiter(value)
    handle.write(f"{key}<<{delimiter}\n{value}\n{delimiter}\n")


def append_key_values(target_file: Path, items: Mapping[str, str]) -> None:
    """Append entries to a ``GITHUB_ENV`` or ``GITHUB_OUTPUT`` style file.

    Multiline values use the heredoc form with a delimiter that does not occur
    in the value.

    Examples
    --------
    >>> append_key_values(  # doctest: +SKIP
    ...     Path("/tmp/env"), {"CLUSTER_NAME": "coder-dev-cluster"}
    ... )
    """
    target_file.parent.mkdir(parents=True, exist_ok=True)
    with target_file.open("a", encoding="utf-8") as handle:
        for key, value in items.items():
            _write_entry(handle, key, value)


def append_step_summary(summary_file: Path, markdown: str) -> None:
    """Append a markdown fragment to ``GITHUB_STEP_SUMMARY``."""
    summary_file.parent.mkdir(parents=True, exist_ok=True)
    with summary_file.open("a", encoding="utf-8") as handle:
        handle.write(markdown if markdown.endswith("\n") else f"{markdown}\n")


def write_tfvars(path: Path, variables: Mapping[str, object]) -> None:
    """Write provisioning variables to a ``tfvars.json`` file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(dict(variables), indent=2, sort_keys=True), encoding="utf-8")
