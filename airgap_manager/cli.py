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

"""
cli.py - Air-gapped Radius environment bootstrap.

Subcommands:
    setup               Full workflow: certs, registry, charts, mirroring, Kind cluster, installer
    reset               Delete the cluster, registry container, network and certificates
    mirror              Mirror recipes or images into an already running registry
    verify              Run the in-cluster registry pull test
    generate-installer  Write the offline Radius installer script

Environment Variables:
    All configuration can be overridden via AIRGAP_* environment variables:
    - AIRGAP_CLUSTER_NAME (default: air-gapped-cluster)
    - AIRGAP_REGISTRY_NAME (default: registry.localhost)
    - AIRGAP_REGISTRY_PORT (default: 6060)
    - AIRGAP_NETWORK_NAME (default: kind-network)
    - AIRGAP_RADIUS_VERSION (default: from dependencies.yaml)
    - And more (see AirgapConfig for full list)

Examples:
    # Full setup (default, no flags needed)
    airgap-manager setup

    # Only mirror recipes into the registry left by a previous run
    airgap-manager mirror recipes

    # Rebuild the cluster but keep registry contents
    airgap-manager setup --skip-reset --skip-certs --skip-charts --skip-images --skip-recipes
"""

from __future__ import annotations

import logging
import sys

import typer

from airgap_manager import console
from airgap_manager.commands import installer_cmd, mirror_cmd, reset_cmd, setup_cmd, verify_cmd

app = typer.Typer(
    help="Air-gapped Radius environment bootstrap.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


app.command("setup")(setup_cmd.setup)
app.command("reset")(reset_cmd.reset)
app.command("verify")(verify_cmd.verify)
app.command("generate-installer")(installer_cmd.generate_installer)
app.add_typer(mirror_cmd.app, name="mirror")


def main() -> None:
    """Console entry point; fatal errors exit 1."""
    try:
        app()
    except Exception as e:
        console.print(f"[red]\u274c {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
