# /*
# Copyright 2026 The Airgap Manager Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Orchestration functions that compose domain modules into workflows."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import docker
from rich.panel import Panel

from airgap_manager import console
from airgap_manager.charts import download_charts
from airgap_manager.cluster import create_cluster
from airgap_manager.config import AirgapConfig, SetupFlags
from airgap_manager.constants import OPTIONAL_COMMANDS, REQUIRED_COMMANDS
from airgap_manager.environment import check_prerequisites, reset_environment, setup_certificates
from airgap_manager.images import mirror_images
from airgap_manager.installer import generate_install_script
from airgap_manager.models import CertPaths, ClusterSession, MirrorSummary, RegistrySession
from airgap_manager.recipes import mirror_recipes
from airgap_manager.registry import registry_session, start_registry
from airgap_manager.verify import verify_registry_connectivity


@dataclass
class SetupReport:
    """Handles and summaries produced by a setup run."""

    certs: CertPaths
    registry: RegistrySession
    charts: dict[str, Path] | None = None
    images: MirrorSummary | None = None
    recipes: MirrorSummary | None = None
    cluster: ClusterSession | None = None
    install_script: Path | None = None


# ============================================================================
# Internal helpers
# ============================================================================

def required_commands(flags: SetupFlags) -> list[str]:
    """Return the CLI tools the selected steps invoke, in canonical order."""
    needed = set()
    if flags.reset or flags.registry or flags.images or flags.cluster:
        needed.add("docker")
    if flags.reset or flags.cluster:
        needed.add("kind")
    if flags.cluster or flags.verify:
        needed.add("kubectl")
    if flags.charts:
        needed.add("helm")
    if flags.certs:
        needed.add("mkcert")
    return [cmd for cmd in REQUIRED_COMMANDS if cmd in needed]


def _needs_docker(flags: SetupFlags) -> bool:
    return flags.reset or flags.registry or flags.images or flags.cluster


def _print_completion(cfg: AirgapConfig, flags: SetupFlags) -> None:
    console.print(Panel.fit("Air-Gapped Radius Environment Setup Complete!", style="bold green"))
    if flags.installer:
        console.print("To install Radius:")
        console.print("  1. Ensure no internet connection if desired for testing")
        console.print(f"  2. Run: {cfg.install_script}")


# ============================================================================
# Public API
# ============================================================================

def run_setup(flags: SetupFlags, cfg: AirgapConfig) -> SetupReport:
    """Run the air-gapped bootstrap workflow, step by step.

    Steps run strictly in order; each fatal step raises and stops the run.
    Skipped provisioning steps are replaced by handles derived from *cfg*,
    so later steps can run against resources left by a previous run.

    Args:
        flags: Which steps to run.
        cfg: Resolved configuration.

    Returns:
        SetupReport with the handles and summaries of the steps that ran.

    Raises:
        AirgapError: If any fatal step fails.
    """
    console.print("[yellow]\u2139\ufe0f  Starting Air-Gapped Radius Setup[/yellow]")
    if flags.check_prereqs:
        check_prerequisites(
            required_commands(flags),
            OPTIONAL_COMMANDS if flags.recipes else (),
            need_ca=flags.certs,
        )

    docker_client = docker.from_env() if _needs_docker(flags) else None
    try:
        if flags.reset:
            reset_environment(cfg, docker_client)

        if flags.certs:
            certs = setup_certificates(cfg.certs_dir, cfg.registry_name)
        else:
            certs = CertPaths.in_directory(cfg.certs_dir)

        if flags.registry:
            registry = start_registry(cfg, certs, docker_client)
        else:
            registry = registry_session(cfg, certs)
        report = SetupReport(certs=certs, registry=registry)

        if flags.charts:
            report.charts = download_charts(cfg.charts_dir, cfg.chart_specs())
        if flags.images:
            report.images = mirror_images(docker_client, cfg.image_references(), registry.endpoint)
        if flags.recipes:
            report.recipes = mirror_recipes(cfg.recipe_specs(), registry.endpoint, certs.ca)
        if flags.cluster:
            report.cluster = create_cluster(cfg, registry, docker_client)
    finally:
        if docker_client is not None:
            docker_client.close()

    if flags.verify:
        verify_registry_connectivity(
            cfg.connectivity_image,
            cfg.connectivity_pod_name,
            cfg.pod_phase_retries,
            cfg.pod_phase_interval,
        )
    if flags.installer:
        chart = (report.charts or {}).get("radius", cfg.radius_chart_path)
        report.install_script = generate_install_script(
            cfg.install_script, chart, cfg.registry_host, cfg.installer_components(),
        )

    _print_completion(cfg, flags)
    return report
