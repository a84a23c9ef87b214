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

"""Environment reset subcommand."""

from __future__ import annotations

import docker
import typer

from airgap_manager.config import resolve_config
from airgap_manager.environment import reset_environment
from airgap_manager.utils import require_command


def reset(
    cluster_name: str | None = typer.Option(None, "--cluster-name", help="Kind cluster name"),
) -> None:
    """Delete the Kind cluster, registry container, network and certificates."""
    for cmd in ("docker", "kind"):
        require_command(cmd)
    cfg = resolve_config(cluster_name=cluster_name)
    docker_client = docker.from_env()
    try:
        reset_environment(cfg, docker_client)
    finally:
        docker_client.close()
