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

"""Kind cluster creation and registry trust wiring for every node."""

from __future__ import annotations

import io
import json
import shlex
import tarfile
import time

import docker
import sh
import yaml
from rich.panel import Panel

from airgap_manager import console, logger
from airgap_manager.config import AirgapConfig
from airgap_manager.constants import (
    CONTAINERD_CAPABILITIES,
    CONTAINERD_CERTS_DIR,
    KIND_API_VERSION,
    KIND_DEFAULT_NETWORK,
    NODE_HOSTS_FILE,
    NS_KUBE_PUBLIC,
    REGISTRY_HOSTING_CONFIGMAP,
    REGISTRY_HOSTING_HELP_URL,
    REGISTRY_HOSTING_KEY,
)
from airgap_manager.errors import ClusterCreateError, NodeConfigurationError, RegistryIPUnresolvedError
from airgap_manager.models import ClusterSession, RegistrySession
from airgap_manager.utils import run_kubectl

HOSTS_TOML = "hosts.toml"


# ============================================================================
# Generated configuration
# ============================================================================

def kind_config(cluster_name: str, ca_host_path: str, node_ca_path: str) -> dict:
    """Build the Kind cluster config.

    Args:
        cluster_name: Kind cluster name.
        ca_host_path: Host path of the registry CA certificate.
        node_ca_path: Path the CA is mounted at inside the node.

    Returns:
        Kind ``Cluster`` resource as a dictionary ready for YAML serialization.
    """
    containerd_patch = (
        '[plugins."io.containerd.grpc.v1.cri".registry]\n'
        f"  config_path = {json.dumps(CONTAINERD_CERTS_DIR)}"
    )
    return {
        "kind": "Cluster",
        "apiVersion": KIND_API_VERSION,
        "name": cluster_name,
        "nodes": [
            {
                "role": "control-plane",
                "extraMounts": [{"containerPath": node_ca_path, "hostPath": ca_host_path}],
            }
        ],
        "containerdConfigPatches": [containerd_patch],
    }


def render_hosts_toml(host_url: str, ca_path: str) -> str:
    """Render a containerd ``hosts.toml`` trusting *ca_path* for *host_url*.

    JSON string literals are valid TOML basic strings, so json.dumps does
    the quoting.
    """
    capabilities = ", ".join(json.dumps(cap) for cap in CONTAINERD_CAPABILITIES)
    return (
        f"[host.{json.dumps(host_url)}]\n"
        f"  capabilities = [{capabilities}]\n"
        f"  ca = {json.dumps(ca_path)}\n"
    )


def trust_stanzas(cfg: AirgapConfig) -> dict[str, str]:
    """Map each containerd certs.d directory to its hosts.toml content.

    One entry for ``<registry_server>:<port>`` and one for
    ``<registry_name>:<port>``, both pointing at the mounted CA.
    """
    stanzas = {}
    for host in (cfg.localhost_registry, cfg.registry_host):
        stanzas[f"{CONTAINERD_CERTS_DIR}/{host}"] = render_hosts_toml(f"https://{host}", cfg.node_ca_path)
    return stanzas


def registry_hosting_configmap(registry_host: str) -> dict:
    """Build the ``local-registry-hosting`` ConfigMap (KEP-1755)."""
    hosting = {"host": registry_host, "help": REGISTRY_HOSTING_HELP_URL, "secure": True}
    return {
        "apiVersion": "v1",
        "kind": "ConfigMap",
        "metadata": {"name": REGISTRY_HOSTING_CONFIGMAP, "namespace": NS_KUBE_PUBLIC},
        "data": {REGISTRY_HOSTING_KEY: yaml.safe_dump(hosting, default_flow_style=False, sort_keys=False)},
    }


# ============================================================================
# Network wiring
# ============================================================================

def detect_cluster_network(docker_client: docker.DockerClient, cluster_name: str):
    """Return the Docker network the Kind nodes live on.

    Prefers ``kind-<cluster>`` and falls back to Kind's default ``kind``.
    """
    for candidate in (f"kind-{cluster_name}", KIND_DEFAULT_NETWORK):
        try:
            network = docker_client.networks.get(candidate)
        except docker.errors.NotFound:
            continue
        console.print(f"[yellow]\u2139\ufe0f  Using Kind network: {network.name}[/yellow]")
        return network
    raise ClusterCreateError(f"No Kind network found for cluster '{cluster_name}'")


def connect_registry(network, container) -> None:
    """Attach the registry container to *network*; already attached is fine."""
    console.print(f"[yellow]\u2139\ufe0f  Connecting registry to the Kind network: {network.name}[/yellow]")
    try:
        network.connect(container)
    except docker.errors.APIError as e:
        if "already exists" in str(e):
            console.print("   Registry was already connected to the network")
            return
        console.print(f"[yellow]\u26a0\ufe0f  Could not connect registry to {network.name}: {e}[/yellow]")
        return
    console.print(f"[green]  ✓ Registry connected to Kind network: {network.name}[/green]")


def resolve_registry_ip(networks: dict, network_id: str, network_name: str) -> str:
    """Find the registry's IP address from its ``NetworkSettings.Networks``.

    Tries, in order: the entry whose NetworkID matches, the entry keyed by
    the network name, then any entry with an address.

    Args:
        networks: ``container.attrs["NetworkSettings"]["Networks"]``.
        network_id: ID of the cluster network.
        network_name: Name of the cluster network.

    Returns:
        The resolved IP address.

    Raises:
        RegistryIPUnresolvedError: If no entry carries an address.
    """
    for settings in networks.values():
        if settings.get("NetworkID") == network_id and settings.get("IPAddress"):
            return settings["IPAddress"]

    by_name = networks.get(network_name) or {}
    if by_name.get("IPAddress"):
        return by_name["IPAddress"]

    for settings in networks.values():
        if settings.get("IPAddress"):
            return settings["IPAddress"]

    raise RegistryIPUnresolvedError("Failed to get registry IP address in any network")


# ============================================================================
# Node configuration
# ============================================================================

def _exec(node, command: list[str]) -> str:
    """Run *command* in *node*, raising NodeConfigurationError on failure."""
    result = node.exec_run(command)
    output = result.output.decode(errors="replace").strip() if result.output else ""
    if result.exit_code != 0:
        raise NodeConfigurationError(f"{' '.join(command)} failed on {node.name}: {output}")
    return output


def _tar_single_file(name: str, content: str) -> bytes:
    data = content.encode()
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        info = tarfile.TarInfo(name=name)
        info.size = len(data)
        info.mode = 0o644
        info.mtime = int(time.time())
        tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def restart_containerd(node) -> None:
    """Restart containerd via systemctl, falling back to SIGHUP."""
    console.print(f"   Restarting containerd on {node.name}")
    if node.exec_run(["systemctl", "restart", "containerd"]).exit_code == 0:
        return
    logger.debug("systemctl unavailable on %s, sending SIGHUP to containerd", node.name)
    _exec(node, ["killall", "-SIGHUP", "containerd"])


def configure_node(node, registry_name: str, registry_ip: str, stanzas: dict[str, str]) -> None:
    """Make one Kind node resolve and trust the local registry.

    Args:
        node: Docker container object for the node.
        registry_name: Registry hostname to map in /etc/hosts.
        registry_ip: Registry address on the cluster network.
        stanzas: certs.d directory -> hosts.toml content.

    Raises:
        NodeConfigurationError: If any command inside the node fails.
    """
    console.print(f"   Adding {registry_name} -> {registry_ip} to {NODE_HOSTS_FILE} in {node.name}")
    entry = shlex.quote(f"{registry_ip} {registry_name}")
    _exec(node, ["sh", "-c", f"echo {entry} >> {NODE_HOSTS_FILE}"])

    for directory, content in stanzas.items():
        _exec(node, ["mkdir", "-p", directory])
        try:
            node.put_archive(directory, _tar_single_file(HOSTS_TOML, content))
        except docker.errors.APIError as e:
            raise NodeConfigurationError(f"Failed to write {directory}/{HOSTS_TOML} on {node.name}: {e}") from e

    restart_containerd(node)


def _kind_nodes(cluster_name: str) -> list[str]:
    return str(sh.kind("get", "nodes", "--name", cluster_name)).split()


# ============================================================================
# Cluster operations
# ============================================================================

def create_kind_cluster(cfg: AirgapConfig, ca_host_path: str) -> None:
    """Create the Kind cluster with the registry CA mounted into the node.

    Raises:
        ClusterCreateError: If ``kind create cluster`` fails.
    """
    config = kind_config(cfg.cluster_name, ca_host_path, cfg.node_ca_path)
    try:
        sh.kind("create", "cluster", "--config=-", _in=yaml.safe_dump(config, sort_keys=False))
    except sh.ErrorReturnCode as err:
        stderr = err.stderr.decode(errors="replace").strip() if err.stderr else ""
        raise ClusterCreateError(f"Failed to create Kind cluster '{cfg.cluster_name}': {stderr}") from err


def apply_registry_configmap(registry_host: str) -> None:
    """Publish the registry endpoint in ``kube-public`` for discovery."""
    manifest = yaml.safe_dump(registry_hosting_configmap(registry_host), sort_keys=False)
    ok, _, stderr = run_kubectl(["apply", "-f", "-"], input=manifest)
    if not ok:
        raise ClusterCreateError(f"Failed to apply {REGISTRY_HOSTING_CONFIGMAP} ConfigMap: {stderr[:200]}")


def create_cluster(
    cfg: AirgapConfig,
    registry: RegistrySession,
    docker_client: docker.DockerClient,
) -> ClusterSession:
    """Create the Kind cluster and wire every node to the local registry.

    Args:
        cfg: Configuration with cluster name, node CA path and settle delay.
        registry: The running registry.
        docker_client: Docker client instance.

    Returns:
        ClusterSession with ``registry_trust_configured`` set.

    Raises:
        ClusterCreateError: If cluster creation or ConfigMap apply fails.
        RegistryIPUnresolvedError: If the registry has no reachable address.
        NodeConfigurationError: If a node cannot be configured.
    """
    console.print(Panel.fit("Creating Kind cluster with secure registry", style="bold blue"))
    create_kind_cluster(cfg, str(registry.cert_paths.ca))
    session = ClusterSession(name=cfg.cluster_name)

    network = detect_cluster_network(docker_client, cfg.cluster_name)
    session.network = network.name
    registry_container = docker_client.containers.get(registry.container_name)
    connect_registry(network, registry_container)

    registry_container.reload()
    session.registry_ip = resolve_registry_ip(
        registry_container.attrs["NetworkSettings"]["Networks"], network.id, network.name,
    )
    console.print(f"[yellow]\u2139\ufe0f  Registry IP in {network.name} network: {session.registry_ip}[/yellow]")

    stanzas = trust_stanzas(cfg)
    session.nodes = _kind_nodes(cfg.cluster_name)
    for node_name in session.nodes:
        configure_node(docker_client.containers.get(node_name), cfg.registry_name, session.registry_ip, stanzas)
    session.registry_trust_configured = True

    apply_registry_configmap(cfg.registry_host)
    console.print("[green]\u2705 Kind cluster created successfully[/green]")

    if cfg.settle_seconds:
        console.print("[yellow]\u2139\ufe0f  Waiting a moment for registry connection to stabilize...[/yellow]")
        time.sleep(cfg.settle_seconds)
    return session
