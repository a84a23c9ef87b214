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

"""Mirror subcommands (recipes, images) against a running registry."""

from __future__ import annotations

import docker
import typer

from airgap_manager.config import resolve_config
from airgap_manager.images import mirror_images
from airgap_manager.recipes import mirror_recipes
from airgap_manager.registry import registry_session, wait_for_registry
from airgap_manager.utils import require_command

app = typer.Typer(help="Mirror artifacts into an already running local registry.")


@app.command()
def recipes(
    registry_port: int | None = typer.Option(None, "--registry-port", min=1, max=65535, help="Local registry port"),
    radius_version: str | None = typer.Option(None, "--radius-version", help="Radius version, e.g. 0.45"),
) -> None:
    """Mirror Radius recipe artifacts with ORAS."""
    require_command("oras")
    cfg = resolve_config(registry_port=registry_port, radius_version=radius_version)
    session = registry_session(cfg)
    wait_for_registry(session, cfg.registry_ready_retries, cfg.registry_ready_interval)
    mirror_recipes(cfg.recipe_specs(), session.endpoint, session.cert_paths.ca)


@app.command()
def images(
    registry_port: int | None = typer.Option(None, "--registry-port", min=1, max=65535, help="Local registry port"),
    radius_version: str | None = typer.Option(None, "--radius-version", help="Radius version, e.g. 0.45"),
) -> None:
    """Mirror container images with Docker."""
    require_command("docker")
    cfg = resolve_config(registry_port=registry_port, radius_version=radius_version)
    session = registry_session(cfg)
    wait_for_registry(session, cfg.registry_ready_retries, cfg.registry_ready_interval)
    docker_client = docker.from_env()
    try:
        mirror_images(docker_client, cfg.image_references(), session.endpoint)
    finally:
        docker_client.close()
