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

"""Local TLS registry container lifecycle and readiness probing."""

from __future__ import annotations

import docker
import requests
from rich.panel import Panel

from airgap_manager import console, logger
from airgap_manager.config import AirgapConfig
from airgap_manager.constants import (
    REGISTRY_CERTS_MOUNT,
    REGISTRY_CONTAINER_PORT,
    REGISTRY_IMAGE,
    REGISTRY_PROBE_PATH,
    REGISTRY_PROBE_TIMEOUT_SECONDS,
    REGISTRY_RESTART_POLICY,
)
from airgap_manager.errors import CertificateError, PollTimeoutError, RegistryStartTimeoutError
from airgap_manager.models import CertPaths, RegistrySession, RegistryStatus
from airgap_manager.utils import poll_until


def registry_session(cfg: AirgapConfig, certs: CertPaths | None = None) -> RegistrySession:
    """Build the session handle for the registry described by *cfg*.

    Args:
        cfg: Configuration naming the registry.
        certs: Certificate paths, or None to derive them from ``cfg.certs_dir``.

    Returns:
        A RegistrySession in STARTING state.
    """
    return RegistrySession(
        container_name=cfg.registry_name,
        network=cfg.network_name,
        port=cfg.registry_port,
        cert_paths=certs or CertPaths.in_directory(cfg.certs_dir),
        server=cfg.registry_server,
    )


def ensure_network(docker_client: docker.DockerClient, name: str):
    """Return the Docker network *name*, creating it if needed."""
    try:
        return docker_client.networks.get(name)
    except docker.errors.NotFound:
        console.print(f"[yellow]\u2139\ufe0f  Creating Docker network: {name}[/yellow]")
        return docker_client.networks.create(name)


def probe_registry(endpoint: str, ca_file) -> bool:
    """Return True if the registry answers HTTPS on ``/v2/``.

    Any HTTP response counts; an unauthenticated registry answers 200 and an
    authenticated one 401, both mean the TLS listener is up.
    """
    try:
        requests.get(
            f"https://{endpoint}{REGISTRY_PROBE_PATH}",
            verify=str(ca_file),
            timeout=REGISTRY_PROBE_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        logger.debug("Registry probe failed: %s", exc)
        return False
    return True


def wait_for_registry(session: RegistrySession, attempts: int, interval: float) -> None:
    """Poll the registry until it answers, updating ``session.status``.

    Args:
        session: Registry to probe.
        attempts: Maximum number of probes.
        interval: Seconds between probes.

    Raises:
        CertificateError: If the registry CA certificate is missing.
        RegistryStartTimeoutError: If the registry never answered.
    """
    if not session.cert_paths.ca.is_file():
        session.status = RegistryStatus.FAILED
        raise CertificateError(
            f"Registry CA certificate not found: {session.cert_paths.ca}. Run setup without --skip-certs first."
        )

    console.print("[yellow]\u2139\ufe0f  Waiting for registry to initialize...[/yellow]")
    try:
        poll_until(
            lambda: probe_registry(session.endpoint, session.cert_paths.ca),
            attempts=attempts,
            interval=interval,
            description=f"registry {session.endpoint}",
        )
    except PollTimeoutError as err:
        session.status = RegistryStatus.FAILED
        raise RegistryStartTimeoutError(
            f"Registry failed to initialize after {attempts} attempts ({attempts * interval:.0f} seconds)"
        ) from err
    session.status = RegistryStatus.READY
    console.print("[green]\u2705 Registry is ready[/green]")


def start_registry(
    cfg: AirgapConfig,
    certs: CertPaths,
    docker_client: docker.DockerClient,
) -> RegistrySession:
    """Start the TLS registry container and wait until it answers.

    Args:
        cfg: Configuration with registry name, port, network and poll settings.
        certs: Certificate material to serve.
        docker_client: Docker client instance.

    Returns:
        The READY registry session.

    Raises:
        RegistryStartTimeoutError: If the registry does not become ready.
    """
    console.print(Panel.fit("Setting up secure registry", style="bold blue"))
    ensure_network(docker_client, cfg.network_name)

    session = registry_session(cfg, certs)
    try:
        existing = docker_client.containers.get(cfg.registry_name)
    except docker.errors.NotFound:
        existing = None

    if existing is not None:
        console.print(f"[yellow]\u2139\ufe0f  Reusing existing registry container: {cfg.registry_name}[/yellow]")
        if existing.status != "running":
            existing.start()
        wait_for_registry(session, cfg.registry_ready_retries, cfg.registry_ready_interval)
        return session

    console.print(f"[yellow]\u2139\ufe0f  Starting secure registry: {cfg.registry_host}[/yellow]")
    docker_client.containers.run(
        REGISTRY_IMAGE,
        detach=True,
        name=cfg.registry_name,
        network=cfg.network_name,
        ports={f"{REGISTRY_CONTAINER_PORT}/tcp": cfg.registry_port},
        volumes={str(certs.directory): {"bind": REGISTRY_CERTS_MOUNT, "mode": "ro"}},
        environment={
            "REGISTRY_HTTP_ADDR": f"0.0.0.0:{REGISTRY_CONTAINER_PORT}",
            "REGISTRY_HTTP_TLS_CERTIFICATE": f"{REGISTRY_CERTS_MOUNT}/{certs.cert.name}",
            "REGISTRY_HTTP_TLS_KEY": f"{REGISTRY_CERTS_MOUNT}/{certs.key.name}",
        },
        restart_policy={"Name": REGISTRY_RESTART_POLICY},
    )

    wait_for_registry(session, cfg.registry_ready_retries, cfg.registry_ready_interval)
    return session
