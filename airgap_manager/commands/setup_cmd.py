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

"""Full setup workflow subcommand."""

from __future__ import annotations

import typer

from airgap_manager.config import SetupFlags, display_config, resolve_config
from airgap_manager.orchestrator import run_setup


def setup(
    skip_prereqs: bool = typer.Option(
        False, "--skip-prereqs", help="Skip CLI tool and mkcert CA checks"),
    skip_reset: bool = typer.Option(
        False, "--skip-reset", help="Keep the existing cluster, registry, network and certificates"),
    skip_certs: bool = typer.Option(
        False, "--skip-certs", help="Reuse certificates already in the certs directory"),
    skip_registry: bool = typer.Option(
        False, "--skip-registry", help="Use an already running registry"),
    skip_charts: bool = typer.Option(
        False, "--skip-charts", help="Skip Helm chart download"),
    skip_images: bool = typer.Option(
        False, "--skip-images", help="Skip container image mirroring"),
    skip_recipes: bool = typer.Option(
        False, "--skip-recipes", help="Skip recipe artifact mirroring"),
    skip_cluster: bool = typer.Option(
        False, "--skip-cluster", help="Skip Kind cluster creation"),
    skip_verify: bool = typer.Option(
        False, "--skip-verify", help="Skip the in-cluster registry pull test"),
    skip_installer: bool = typer.Option(
        False, "--skip-installer", help="Skip installer script generation"),
    cluster_name: str | None = typer.Option(
        None, "--cluster-name", help="Kind cluster name (overrides AIRGAP_CLUSTER_NAME)"),
    registry_port: int | None = typer.Option(
        None, "--registry-port", min=1, max=65535, help="Registry port (overrides AIRGAP_REGISTRY_PORT)"),
    radius_version: str | None = typer.Option(
        None, "--radius-version", help="Radius version, e.g. 0.45 (overrides AIRGAP_RADIUS_VERSION)"),
) -> None:
    """Prepare the air-gapped environment: registry, mirrors, Kind cluster, installer.

    Use --skip-* flags to opt out of individual steps.
    """
    flags = SetupFlags(
        check_prereqs=not skip_prereqs,
        reset=not skip_reset,
        certs=not skip_certs,
        registry=not skip_registry,
        charts=not skip_charts,
        images=not skip_images,
        recipes=not skip_recipes,
        cluster=not skip_cluster,
        verify=not skip_verify,
        installer=not skip_installer,
    )
    cfg = resolve_config(cluster_name=cluster_name, registry_port=registry_port, radius_version=radius_version)
    display_config(flags, cfg)
    run_setup(flags, cfg)
