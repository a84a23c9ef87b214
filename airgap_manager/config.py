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

"""Configuration classes, step flags, and config resolution/display."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.panel import Panel

from airgap_manager import console
from airgap_manager.constants import (
    CLUSTER_SETTLE_SECONDS,
    CONNECTIVITY_IMAGE_PATH,
    CONNECTIVITY_POD_NAME,
    DEFAULT_CERTS_DIR,
    DEFAULT_CHARTS_DIR,
    DEFAULT_CLUSTER_NAME,
    DEFAULT_NETWORK_NAME,
    DEFAULT_NODE_CA_PATH,
    DEFAULT_RADIUS_VERSION,
    DEFAULT_REGISTRY_NAME,
    DEFAULT_REGISTRY_PORT,
    DEFAULT_REGISTRY_SERVER,
    INSTALL_SCRIPT_NAME,
    POD_PHASE_MAX_RETRIES,
    POD_PHASE_POLL_INTERVAL_SECONDS,
    REGISTRY_READY_MAX_RETRIES,
    REGISTRY_READY_POLL_INTERVAL_SECONDS,
    dep_value,
)
from airgap_manager.models import ArtifactSpec


@dataclass(frozen=True)
class ChartSpec:
    """A Helm chart to download for offline installation.

    Attributes:
        name: Short chart name (archive prefix).
        reference: ``oci://`` reference or ``<repo>/<chart>``.
        version: Chart version to pull.
        repo_name: Classic Helm repo name to add first, or None for OCI charts.
        repo_url: Classic Helm repo URL, or None for OCI charts.
    """

    name: str
    reference: str
    version: str
    repo_name: str | None = None
    repo_url: str | None = None

    @property
    def archive_name(self) -> str:
        return f"{self.name}-{self.version}.tgz"


# ============================================================================
# Configuration classes
# ============================================================================

class AirgapConfig(BaseSettings):
    """Air-gapped environment configuration, auto-loaded from AIRGAP_* env vars.

    Attributes:
        cluster_name: Name of the Kind cluster.
        registry_name: Registry container name and in-cluster hostname.
        registry_server: Hostname the host uses to reach the registry.
        registry_port: Host port publishing the registry's TLS endpoint.
        network_name: Docker network the registry is started on.
        certs_dir: Directory holding tls.crt, tls.key and ca.crt.
        charts_dir: Directory Helm charts are downloaded into.
        node_ca_path: Path the CA is mounted at inside cluster nodes.
        radius_version: Radius minor version (e.g. ``0.45``).
        install_script: Path of the generated installer script.
        registry_ready_retries: Registry readiness probe attempts.
        registry_ready_interval: Seconds between registry probes.
        pod_phase_retries: Connectivity pod phase polls.
        pod_phase_interval: Seconds between pod phase polls.
        settle_seconds: Pause after cluster wiring for network/DNS to settle.
        connectivity_pod_name: Name of the throwaway connectivity pod.
    """

    model_config = SettingsConfigDict(env_prefix="AIRGAP_", extra="ignore")

    cluster_name: str = DEFAULT_CLUSTER_NAME
    registry_name: str = DEFAULT_REGISTRY_NAME
    registry_server: str = DEFAULT_REGISTRY_SERVER
    registry_port: int = Field(default=DEFAULT_REGISTRY_PORT, ge=1, le=65535)
    network_name: str = DEFAULT_NETWORK_NAME
    certs_dir: Path = Path(DEFAULT_CERTS_DIR)
    charts_dir: Path = Path(DEFAULT_CHARTS_DIR)
    node_ca_path: str = DEFAULT_NODE_CA_PATH
    radius_version: str = Field(default=DEFAULT_RADIUS_VERSION, pattern=r"^\d+\.\d+$")
    install_script: Path = Path(INSTALL_SCRIPT_NAME)
    registry_ready_retries: int = Field(default=REGISTRY_READY_MAX_RETRIES, ge=1)
    registry_ready_interval: float = Field(default=REGISTRY_READY_POLL_INTERVAL_SECONDS, ge=0)
    pod_phase_retries: int = Field(default=POD_PHASE_MAX_RETRIES, ge=1)
    pod_phase_interval: float = Field(default=POD_PHASE_POLL_INTERVAL_SECONDS, ge=0)
    settle_seconds: float = Field(default=CLUSTER_SETTLE_SECONDS, ge=0)
    connectivity_pod_name: str = CONNECTIVITY_POD_NAME

    @field_validator("certs_dir", "charts_dir", "install_script")
    @classmethod
    def _absolute(cls, value: Path) -> Path:
        # Docker bind mounts need absolute host paths.
        return value.expanduser().resolve()

    @property
    def registry_host(self) -> str:
        """``<registry_name>:<port>``, the name cluster nodes pull from."""
        return f"{self.registry_name}:{self.registry_port}"

    @property
    def localhost_registry(self) -> str:
        """``<registry_server>:<port>``, the name the host pushes to."""
        return f"{self.registry_server}:{self.registry_port}"

    @property
    def radius_chart_path(self) -> Path:
        return self.charts_dir / f"radius-{self.radius_version}.0.tgz"

    @property
    def connectivity_image(self) -> str:
        return f"{self.registry_host}/{CONNECTIVITY_IMAGE_PATH}"

    def expand(self, value: Any) -> Any:
        """Substitute ``{radius_version}`` throughout a dependencies.yaml value."""
        if isinstance(value, str):
            return value.replace("{radius_version}", self.radius_version)
        if isinstance(value, list):
            return [self.expand(item) for item in value]
        if isinstance(value, dict):
            return {key: self.expand(item) for key, item in value.items()}
        return value

    def chart_specs(self) -> list[ChartSpec]:
        specs = []
        for chart in self.expand(dep_value("charts", default=[])):
            repo = chart.get("repo") or {}
            specs.append(ChartSpec(
                name=chart["name"],
                reference=chart["reference"],
                version=str(chart["version"]),
                repo_name=repo.get("name"),
                repo_url=repo.get("url"),
            ))
        return specs

    def recipe_specs(self) -> list[ArtifactSpec]:
        prefix = dep_value("recipes", "strip_prefix")
        return [
            ArtifactSpec.parse(ref, strip_prefix=prefix)
            for ref in self.expand(dep_value("recipes", "artifacts", default=[]))
        ]

    def image_references(self) -> list[str]:
        return self.expand(dep_value("images", default=[]))

    def installer_components(self) -> dict[str, tuple[str, str]]:
        """Map ``rad install`` component keys to (repository, tag)."""
        components = self.expand(dep_value("installer", default={}))
        return {key: (entry["repository"], str(entry["tag"])) for key, entry in components.items()}


# ============================================================================
# Step flags
# ============================================================================

@dataclass(frozen=True)
class SetupFlags:
    """Single source of truth for which workflow steps run.

    Attributes:
        check_prereqs: Verify CLI tools and the mkcert CA.
        reset: Tear down the previous cluster, registry, network and certs.
        certs: Generate registry TLS certificates.
        registry: Start the local TLS registry.
        charts: Download Helm charts.
        images: Mirror container images.
        recipes: Mirror recipe artifacts.
        cluster: Create and wire the Kind cluster.
        verify: Run the in-cluster registry pull test.
        installer: Generate the offline installer script.
    """

    check_prereqs: bool = True
    reset: bool = True
    certs: bool = True
    registry: bool = True
    charts: bool = True
    images: bool = True
    recipes: bool = True
    cluster: bool = True
    verify: bool = True
    installer: bool = True


# ============================================================================
# Config resolution
# ============================================================================

def resolve_config(
    cluster_name: str | None = None,
    registry_port: int | None = None,
    radius_version: str | None = None,
) -> AirgapConfig:
    """Merge CLI overrides, environment variables, and defaults.

    Resolution priority: CLI arguments > AIRGAP_* environment variables > defaults.

    Args:
        cluster_name: CLI override for the Kind cluster name, or None.
        registry_port: CLI override for the registry port, or None.
        radius_version: CLI override for the Radius version, or None.

    Returns:
        The resolved AirgapConfig.
    """
    overrides: dict = {}
    if cluster_name is not None:
        overrides["cluster_name"] = cluster_name
    if registry_port is not None:
        overrides["registry_port"] = registry_port
    if radius_version is not None:
        overrides["radius_version"] = radius_version
    # Init kwargs take precedence over AIRGAP_* variables.
    return AirgapConfig(**overrides)


# ============================================================================
# Display
# ============================================================================

def display_config(flags: SetupFlags, cfg: AirgapConfig) -> None:
    """Print only config relevant to requested steps.

    Args:
        flags: Resolved step flags controlling what to display.
        cfg: Air-gapped environment configuration.
    """
    console.print(Panel.fit("Configuration", style="bold blue"))

    if flags.registry or flags.images or flags.recipes:
        console.print("[yellow]Registry:[/yellow]")
        console.print(f"  registry_name   : {cfg.registry_name}")
        console.print(f"  registry_port   : {cfg.registry_port}")
        console.print(f"  network_name    : {cfg.network_name}")
        console.print(f"  certs_dir       : {cfg.certs_dir}")

    if flags.cluster or flags.verify or flags.reset:
        console.print("[yellow]Kind cluster:[/yellow]")
        console.print(f"  cluster_name    : {cfg.cluster_name}")
        console.print(f"  node_ca_path    : {cfg.node_ca_path}")

    if flags.charts or flags.installer:
        console.print("[yellow]Radius:[/yellow]")
        console.print(f"  radius_version  : {cfg.radius_version}")
        console.print(f"  charts_dir      : {cfg.charts_dir}")
        console.print(f"  install_script  : {cfg.install_script}")
