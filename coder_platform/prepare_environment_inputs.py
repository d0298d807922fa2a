#!/usr/bin/env -S uv run python
# /// script
# requires-python = ">=3.13"
# dependencies = ["cyclopts>=2.9"]
# ///
"""Prepare the resolved environment plan for the provisioning workflow.

This script:
- resolves inputs from CLI arguments and ``INPUT_*`` environment variables;
- validates them and merges the environment defaults with any overrides;
- derives resource names, state backend settings, and public hostnames;
- estimates the monthly cost; and
- exports the plan to $GITHUB_ENV, $GITHUB_OUTPUT, and a tfvars.json file.

Nothing is written when an input is rejected.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from coder_platform._github_actions import (
    append_key_values,
    emit_annotation,
    write_tfvars,
)
from coder_platform._input_resolution import (
    InputResolution,
    resolve_input,
    resolve_named_inputs,
)
from coder_platform._platform_errors import PlatformConfigError
from coder_platform._platform_models import RawPlatformInputs
from coder_platform._platform_plan import (
    PlatformPlan,
    build_env_vars,
    build_outputs,
    build_tfvars,
    plan_from_raw,
)

app = App(help="Resolve the Coder environment plan and export it.")
logger = logging.getLogger(__name__)

TFVARS_FILENAME = "environment.tfvars.json"


@dataclass(frozen=True, slots=True)
class ExportPaths:
    """Files the resolved plan is written to."""

    github_env: Path
    github_output: Path
    tfvars: Path


def resolve_raw_inputs(raw: RawPlatformInputs) -> RawPlatformInputs:
    """Fill unset CLI values from their ``INPUT_*`` environment variables."""
    values = {f.name: getattr(raw, f.name) for f in fields(RawPlatformInputs)}
    resolved = resolve_named_inputs(values, required=("environment",))
    return RawPlatformInputs(**resolved)


def resolve_export_paths(
    runner_temp: Path | None,
    github_env: Path | None,
    github_output: Path | None,
    tfvars_file: Path | None,
) -> ExportPaths:
    """Resolve output locations, falling back to the runner temp directory."""
    temp_root = Path(
        resolve_input(
            runner_temp,
            InputResolution(
                env_key="RUNNER_TEMP",
                default=Path(tempfile.gettempdir()),
                as_path=True,
            ),
        )
    )
    env_file = resolve_input(
        github_env,
        InputResolution(
            env_key="GITHUB_ENV",
            default=temp_root / "github-env-undefined",
            as_path=True,
        ),
    )
    output_file = resolve_input(
        github_output,
        InputResolution(
            env_key="GITHUB_OUTPUT",
            default=temp_root / "github-output-undefined",
            as_path=True,
        ),
    )
    tfvars = tfvars_file or temp_root / "coder-environment" / TFVARS_FILENAME
    return ExportPaths(
        github_env=Path(env_file),
        github_output=Path(output_file),
        tfvars=tfvars,
    )


def export_plan(plan: PlatformPlan, paths: ExportPaths) -> None:
    """Write the plan to GITHUB_ENV, GITHUB_OUTPUT, and the tfvars file."""
    for tier in plan.cost.unknown_tiers:
        emit_annotation("warning", f"Cost estimate incomplete: {tier}")

    write_tfvars(paths.tfvars, build_tfvars(plan))
    append_key_values(paths.github_env, build_env_vars(plan))
    outputs = build_outputs(plan) | {"tfvars_file": str(paths.tfvars)}
    append_key_values(paths.github_output, outputs)
    logger.info("Exported %s plan to %s", plan.inputs.environment, paths.github_env)


@app.command()
def main(
    environment: str | None = None,
    region: str | None = None,
    zone: str | None = None,
    project_name: str | None = None,
    cluster_name: str | None = None,
    bucket_name: str | None = None,
    domain_name: str | None = None,
    subdomain: str | None = None,
    node_count: str | None = None,
    node_type: str | None = None,
    min_size: str | None = None,
    max_size: str | None = None,
    database_node_type: str | None = None,
    database_is_ha: str | None = None,
    database_backup_retention_days: str | None = None,
    enable_monitoring: str | None = None,
    enable_pod_security: str | None = None,
    enable_network_policy: str | None = None,
    enable_load_balancer: str | None = None,
    runner_temp: Annotated[Path | None, Parameter(help="RUNNER_TEMP override.")] = None,
    github_env: Annotated[Path | None, Parameter(help="GITHUB_ENV path override.")] = None,
    github_output: Annotated[
        Path | None, Parameter(help="GITHUB_OUTPUT path override.")
    ] = None,
    tfvars_file: Annotated[Path | None, Parameter(help="tfvars.json destination.")] = None,
) -> int:
    """Resolve and export the environment plan.

    CLI arguments take precedence over ``INPUT_*`` environment variables;
    sizing fields left unset keep the environment defaults.
    """
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    raw = resolve_raw_inputs(
        RawPlatformInputs(
            environment=environment,
            region=region,
            zone=zone,
            project_name=project_name,
            cluster_name=cluster_name,
            bucket_name=bucket_name,
            domain_name=domain_name,
            subdomain=subdomain,
            node_count=node_count,
            node_type=node_type,
            min_size=min_size,
            max_size=max_size,
            database_node_type=database_node_type,
            database_is_ha=database_is_ha,
            database_backup_retention_days=database_backup_retention_days,
            enable_monitoring=enable_monitoring,
            enable_pod_security=enable_pod_security,
            enable_network_policy=enable_network_policy,
            enable_load_balancer=enable_load_balancer,
        )
    )

    try:
        plan = plan_from_raw(raw)
    except PlatformConfigError as exc:
        logger.error("Rejected inputs: %s", exc)
        emit_annotation("error", str(exc))
        return 1

    paths = resolve_export_paths(runner_temp, github_env, github_output, tfvars_file)
    export_plan(plan, paths)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(app())
