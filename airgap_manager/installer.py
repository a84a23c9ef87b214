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

"""Offline Radius installer script generation."""

from __future__ import annotations

import shlex
from pathlib import Path

from rich.panel import Panel

from airgap_manager import console
from airgap_manager.constants import INSTALL_SCRIPT_MODE


def install_command(chart: Path, registry_host: str, components: dict[str, tuple[str, str]]) -> list[str]:
    """Build the ``rad install kubernetes`` argv.

    Args:
        chart: Path of the downloaded Radius chart archive.
        registry_host: Registry ``host:port`` the cluster pulls from.
        components: Component key -> (repository, tag) in the local registry.

    Returns:
        The command as a list of arguments.
    """
    argv = ["rad", "install", "kubernetes", "--chart", str(chart)]
    for key, (repository, tag) in components.items():
        argv += ["--set", f"{key}.image={registry_host}/{repository},{key}.tag={tag}"]
    return argv


def render_install_script(argv: list[str]) -> str:
    """Render the installer script around *argv*, one option per line."""
    parts = [shlex.quote(arg) for arg in argv[:3]]
    options = []
    rest = argv[3:]
    for flag, value in zip(rest[::2], rest[1::2]):
        options.append(f"{shlex.quote(flag)} {shlex.quote(value)}")
    command = " \\\n  ".join([" ".join(parts), *options])
    return (
        "#!/bin/bash\n"
        "set -e\n"
        "\n"
        'echo "Installing Radius in air-gapped environment..."\n'
        "\n"
        "# Install Radius with local charts and registry\n"
        f"{command}\n"
        "\n"
        'echo "Radius installation complete."\n'
    )


def generate_install_script(
    path: Path,
    chart: Path,
    registry_host: str,
    components: dict[str, tuple[str, str]],
) -> Path:
    """Write the executable offline installer script.

    Args:
        path: Destination script path.
        chart: Path of the downloaded Radius chart archive.
        registry_host: Registry ``host:port`` the cluster pulls from.
        components: Component key -> (repository, tag) in the local registry.

    Returns:
        The written script path.
    """
    console.print(Panel.fit("Generating Radius installation script", style="bold blue"))
    path.write_text(render_install_script(install_command(chart, registry_host, components)))
    path.chmod(INSTALL_SCRIPT_MODE)
    console.print(f"[green]\u2705 Installation script generated: {path}[/green]")
    return path
