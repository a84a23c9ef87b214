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

"""Installer script generation subcommand."""

from __future__ import annotations

from pathlib import Path

import typer

from airgap_manager.config import resolve_config
from airgap_manager.installer import generate_install_script


def generate_installer(
    output: Path | None = typer.Option(None, "--output", "-o", help="Script path (default: install-radius-airgapped.sh)"),
    registry_port: int | None = typer.Option(None, "--registry-port", min=1, max=65535, help="Local registry port"),
    radius_version: str | None = typer.Option(None, "--radius-version", help="Radius version, e.g. 0.45"),
) -> None:
    """Write the offline Radius installer script."""
    cfg = resolve_config(registry_port=registry_port, radius_version=radius_version)
    generate_install_script(
        output.resolve() if output else cfg.install_script,
        cfg.radius_chart_path,
        cfg.registry_host,
        cfg.installer_components(),
    )
