"""Unit tests for CLI and environment input resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from coder_platform._input_resolution import (
    InputResolution,
    resolve_input,
    resolve_named_inputs,
)


def test_cli_value_wins() -> None:
    resolution = InputResolution(env_key="INPUT_REGION", default="fr-par")
    assert resolve_input("pl-waw", resolution, env={"INPUT_REGION": "nl-ams"}) == "pl-waw"


def test_environment_value_used_when_cli_missing() -> None:
    resolution = InputResolution(env_key="INPUT_REGION", default="fr-par")
    assert resolve_input(None, resolution, env={"INPUT_REGION": "nl-ams"}) == "nl-ams"


def test_blank_environment_value_falls_back_to_default() -> None:
    resolution = InputResolution(env_key="INPUT_REGION", default="fr-par")
    assert resolve_input(None, resolution, env={"INPUT_REGION": "  "}) == "fr-par", (
        "Blank action inputs should count as unset"
    )


def test_path_resolution(tmp_path: Path) -> None:
    resolution = InputResolution(env_key="GITHUB_ENV", as_path=True)
    result = resolve_input(None, resolution, env={"GITHUB_ENV": str(tmp_path / "env")})
    assert result == tmp_path / "env", "Path inputs should be converted"


def test_required_input_missing() -> None:
    resolution = InputResolution(env_key="INPUT_ENVIRONMENT", required=True)
    with pytest.raises(SystemExit, match="INPUT_ENVIRONMENT is required"):
        resolve_input(None, resolution, env={})


def test_reads_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INPUT_ZONE", "fr-par-2")
    assert resolve_input(None, InputResolution(env_key="INPUT_ZONE")) == "fr-par-2"


def test_resolve_named_inputs() -> None:
    resolved = resolve_named_inputs(
        {"environment": None, "node_count": "4", "zone": None},
        required=("environment",),
        env={"INPUT_ENVIRONMENT": "prod", "INPUT_NODE_COUNT": "6", "INPUT_ZONE": ""},
    )

    assert resolved == {"environment": "prod", "node_count": "4", "zone": None}, (
        "CLI values win, env fills gaps, and blanks stay unset"
    )


def test_resolve_named_inputs_required_missing() -> None:
    with pytest.raises(SystemExit, match="INPUT_ENVIRONMENT"):
        resolve_named_inputs({"environment": None}, required=("environment",), env={})
