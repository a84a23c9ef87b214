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

"""Registry connectivity check subcommand."""

from __future__ import annotations

import typer

from airgap_manager.config import resolve_config
from airgap_manager.utils import require_command
from airgap_manager.verify import verify_registry_connectivity


def verify(
    registry_port: int | None = typer.Option(None, "--registry-port", min=1, max=65535, help="Local registry port"),
) -> None:
    """Run a throwaway pod that pulls through the local registry."""
    require_command("kubectl")
    cfg = resolve_config(registry_port=registry_port)
    verify_registry_connectivity(
        cfg.connectivity_image,
        cfg.connectivity_pod_name,
        cfg.pod_phase_retries,
        cfg.pod_phase_interval,
    )
