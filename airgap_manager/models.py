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

"""Artifact specs, mirror results, and session handles passed between steps."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from airgap_manager.constants import CA_FILE, CERT_FILE, DEFAULT_TAG, KEY_FILE


def split_reference(reference: str) -> tuple[str, str | None]:
    """Split ``name[:tag]`` into (name, tag).

    Only a colon after the last slash separates a tag, so registry ports
    (``localhost:6060/foo``) stay part of the name.

    Args:
        reference: OCI reference, with or without a tag.

    Returns:
        Tuple of (name, tag), where tag is None when absent.
    """
    slash = reference.rfind("/")
    colon = reference.rfind(":")
    if colon > slash:
        return reference[:colon], reference[colon + 1:] or None
    return reference, None


@dataclass(frozen=True)
class ArtifactSpec:
    """An OCI artifact (recipe module or container image) to mirror.

    Attributes:
        source_reference: Full public reference including the tag.
        tag: Tag to mirror, ``latest`` when the reference carries none.
        repository: Repository path used under the local registry.
    """

    source_reference: str
    tag: str
    repository: str

    @classmethod
    def parse(cls, reference: str, strip_prefix: str | None = None) -> ArtifactSpec:
        """Derive repository and tag from a public reference.

        Args:
            reference: Public OCI reference (e.g. ``ghcr.io/org/repo:1.0``).
            strip_prefix: Namespace prefix to drop from the repository path.
                When None or not matching, only the registry host is dropped.

        Returns:
            The parsed ArtifactSpec.
        """
        name, tag = split_reference(reference)
        if strip_prefix and name.startswith(strip_prefix):
            repository = name[len(strip_prefix):]
        elif "/" in name:
            repository = name.split("/", 1)[1]
        else:
            repository = name
        return cls(source_reference=reference, tag=tag or DEFAULT_TAG, repository=repository)

    def local_reference(self, registry: str) -> str:
        """Reference of this artifact inside *registry* (``host:port``)."""
        return f"{registry}/{self.repository}:{self.tag}"


class MirrorOutcome(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class MirrorResult:
    """Outcome of one mirror attempt.

    Attributes:
        spec: The artifact that was attempted.
        local_reference: Destination reference in the local registry.
        outcome: Whether it succeeded, was skipped, or failed.
        detail: Human-readable reason or captured tool output.
    """

    spec: ArtifactSpec
    local_reference: str
    outcome: MirrorOutcome
    detail: str = ""


@dataclass
class MirrorSummary:
    """Accumulated results of a mirror loop."""

    results: list[MirrorResult] = field(default_factory=list)

    def add(self, result: MirrorResult) -> MirrorResult:
        self.results.append(result)
        return result

    def count(self, outcome: MirrorOutcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    @property
    def succeeded(self) -> int:
        return self.count(MirrorOutcome.SUCCESS)

    @property
    def total(self) -> int:
        return len(self.results)

    def ratio(self) -> str:
        return f"{self.succeeded}/{self.total}"


@dataclass(frozen=True)
class CertPaths:
    """Locations of the registry TLS material.

    Attributes:
        directory: Certificate directory mounted into the registry.
        cert: Registry TLS certificate.
        key: Registry TLS private key.
        ca: Exported mkcert root CA.
    """

    directory: Path
    cert: Path
    key: Path
    ca: Path

    @classmethod
    def in_directory(cls, directory: Path) -> CertPaths:
        return cls(
            directory=directory,
            cert=directory / CERT_FILE,
            key=directory / KEY_FILE,
            ca=directory / CA_FILE,
        )


class RegistryStatus(str, Enum):
    STARTING = "starting"
    READY = "ready"
    FAILED = "failed"


@dataclass
class RegistrySession:
    """Handle for the running local registry container.

    Attributes:
        container_name: Docker container name (also its DNS name).
        network: Docker network the registry was started on.
        port: Host port publishing the registry's TLS endpoint.
        cert_paths: TLS material the registry serves.
        status: Lifecycle state, READY once the HTTPS probe answers.
        server: Hostname the host uses to reach the published port.
    """

    container_name: str
    network: str
    port: int
    cert_paths: CertPaths
    status: RegistryStatus = RegistryStatus.STARTING
    server: str = "localhost"

    @property
    def endpoint(self) -> str:
        return f"{self.server}:{self.port}"


@dataclass
class ClusterSession:
    """Handle for the Kind cluster wired to the local registry.

    Attributes:
        name: Kind cluster name.
        network: Docker network the cluster nodes live on.
        registry_ip: Registry address inside that network.
        nodes: Node container names.
        registry_trust_configured: True once every node trusts the registry.
    """

    name: str
    network: str = ""
    registry_ip: str = ""
    nodes: list[str] = field(default_factory=list)
    registry_trust_configured: bool = False
