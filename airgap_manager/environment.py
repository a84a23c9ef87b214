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

"""Prerequisite checks, environment reset, and registry certificates."""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path

import docker
import sh
from rich.panel import Panel

from airgap_manager import console
from airgap_manager.config import AirgapConfig
from airgap_manager.constants import CERT_EXTRA_HOSTS, MKCERT_ROOT_CA, ORAS_INSTALL_URL
from airgap_manager.errors import CANotInstalledError, CertificateError
from airgap_manager.models import CertPaths
from airgap_manager.utils import command_exists, require_command


# ============================================================================
# Prerequisites
# ============================================================================

def mkcert_ca_root() -> Path:
    """Return the mkcert CA root directory.

    Raises:
        CANotInstalledError: If mkcert cannot report a CA root holding rootCA.pem.
    """
    try:
        ca_root = Path(str(sh.mkcert("-CAROOT")).strip())
    except sh.ErrorReturnCode as err:
        raise CANotInstalledError("mkcert CA not installed. Please run 'mkcert -install'") from err
    if not (ca_root / MKCERT_ROOT_CA).is_file():
        raise CANotInstalledError(
            f"mkcert CA not installed ({ca_root / MKCERT_ROOT_CA} missing). Please run 'mkcert -install'"
        )
    return ca_root


def check_prerequisites(required: Iterable[str], optional: Iterable[str] = (), need_ca: bool = True) -> None:
    """Verify CLI tools are installed and the mkcert CA is registered.

    Args:
        required: Commands whose absence is fatal.
        optional: Commands whose absence only warns.
        need_ca: Whether the mkcert CA must be installed.

    Raises:
        ToolMissingError: If a required command is missing.
        CANotInstalledError: If *need_ca* and the mkcert CA is missing.
    """
    console.print(Panel.fit("Checking prerequisites", style="bold blue"))
    for cmd in required:
        require_command(cmd)

    for cmd in optional:
        if not command_exists(cmd):
            console.print(f"[yellow]\u26a0\ufe0f  {cmd} not found. It's recommended for mirroring Radius recipes.[/yellow]")
            console.print(f"[yellow]   To install {cmd}: {ORAS_INSTALL_URL}[/yellow]")

    if need_ca:
        mkcert_ca_root()
    console.print("[green]\u2705 All prerequisites are installed[/green]")


# ============================================================================
# Environment reset
# ============================================================================

def _kind_clusters() -> list[str]:
    return str(sh.kind("get", "clusters")).split()


def reset_environment(cfg: AirgapConfig, docker_client: docker.DockerClient) -> None:
    """Tear down the previous cluster, registry container, network and certificates.

    Every resource is optional; absent ones are skipped.

    Args:
        cfg: Configuration naming the resources.
        docker_client: Docker client instance.
    """
    console.print(Panel.fit("Cleaning up existing resources", style="bold blue"))

    if cfg.cluster_name in _kind_clusters():
        console.print(f"[yellow]\u2139\ufe0f  Deleting existing Kind cluster: {cfg.cluster_name}[/yellow]")
        sh.kind("delete", "cluster", "--name", cfg.cluster_name)

    try:
        container = docker_client.containers.get(cfg.registry_name)
    except docker.errors.NotFound:
        pass
    else:
        console.print(f"[yellow]\u2139\ufe0f  Deleting existing registry container: {cfg.registry_name}[/yellow]")
        container.remove(force=True)

    try:
        network = docker_client.networks.get(cfg.network_name)
    except docker.errors.NotFound:
        pass
    else:
        console.print(f"[yellow]\u2139\ufe0f  Deleting existing Docker network: {cfg.network_name}[/yellow]")
        network.remove()

    if cfg.certs_dir.exists():
        console.print(f"[yellow]\u2139\ufe0f  Removing certificates directory: {cfg.certs_dir}[/yellow]")
        shutil.rmtree(cfg.certs_dir)

    console.print("[green]\u2705 Cleanup completed[/green]")


# ============================================================================
# Certificates
# ============================================================================

def setup_certificates(certs_dir: Path, registry_name: str) -> CertPaths:
    """Generate the registry TLS keypair and export the mkcert root CA.

    Args:
        certs_dir: Directory to write tls.crt, tls.key and ca.crt into.
        registry_name: Registry hostname the certificate must be valid for.

    Returns:
        Paths of the generated certificate material.

    Raises:
        CertificateError: If mkcert fails or the CA cannot be copied.
    """
    console.print(Panel.fit("Setting up certificates", style="bold blue"))
    paths = CertPaths.in_directory(certs_dir)
    certs_dir.mkdir(parents=True, exist_ok=True)

    console.print(f"[yellow]\u2139\ufe0f  Generating TLS certificates for {registry_name}[/yellow]")
    try:
        sh.mkcert(
            "-cert-file", str(paths.cert),
            "-key-file", str(paths.key),
            registry_name, *CERT_EXTRA_HOSTS,
        )
        shutil.copyfile(mkcert_ca_root() / MKCERT_ROOT_CA, paths.ca)
    except (sh.ErrorReturnCode, CANotInstalledError, OSError) as err:
        raise CertificateError(f"Failed to generate registry certificates: {err}") from err

    console.print("[green]\u2705 Certificates generated successfully[/green]")
    return paths
