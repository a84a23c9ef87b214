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

"""Container image mirroring into the local registry."""

from __future__ import annotations

from dataclasses import replace

import docker
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from airgap_manager import console
from airgap_manager.constants import POSTGRES_MIRROR_MARKER
from airgap_manager.errors import NoImagesMirroredError
from airgap_manager.models import ArtifactSpec, MirrorOutcome, MirrorResult, MirrorSummary, split_reference


def image_spec(reference: str) -> ArtifactSpec:
    """Parse an image reference, mapping the Radius postgres mirror to ``mirror/postgres``."""
    spec = ArtifactSpec.parse(reference)
    if POSTGRES_MIRROR_MARKER in reference:
        spec = replace(spec, repository=POSTGRES_MIRROR_MARKER)
    return spec


def _push(docker_client: docker.DockerClient, repository: str, tag: str) -> str | None:
    """Push and return the first error reported by the daemon, or None."""
    for chunk in docker_client.images.push(repository, tag=tag, stream=True, decode=True):
        if "error" in chunk:
            return chunk.get("errorDetail", {}).get("message") or chunk["error"]
    return None


def _pull_tag_push(docker_client: docker.DockerClient, spec: ArtifactSpec, registry: str) -> MirrorResult:
    """Pull, tag, and push a single image to the local registry."""
    local_ref = spec.local_reference(registry)
    source_name, _ = split_reference(spec.source_reference)
    local_repo = f"{registry}/{spec.repository}"

    try:
        image = docker_client.images.pull(source_name, tag=spec.tag)
    except docker.errors.APIError as e:
        return MirrorResult(spec, local_ref, MirrorOutcome.SKIPPED, f"pull failed: {e}")

    try:
        image.tag(local_repo, tag=spec.tag)
        error = _push(docker_client, local_repo, spec.tag)
    except docker.errors.APIError as e:
        error = f"Docker API error: {e}"
    if error:
        return MirrorResult(spec, local_ref, MirrorOutcome.FAILED, f"push failed: {error}")
    return MirrorResult(spec, local_ref, MirrorOutcome.SUCCESS)


def mirror_images(
    docker_client: docker.DockerClient,
    references: list[str],
    registry: str,
) -> MirrorSummary:
    """Pull each image, retag it for the local registry, and push it.

    Individual failures are warnings; the loop always visits every image.

    Args:
        docker_client: Docker client instance.
        references: Public image references.
        registry: Local registry ``host:port`` to push to.

    Returns:
        Summary holding exactly one result per reference.

    Raises:
        NoImagesMirroredError: If no image was mirrored at all.
    """
    console.print(Panel.fit("Mirroring container images to local registry", style="bold blue"))

    summary = MirrorSummary()
    with Progress(
        SpinnerColumn(), TextColumn("[progress.description]{task.description}"),
        BarColumn(), TaskProgressColumn(), console=console,
    ) as progress:
        task = progress.add_task("[cyan]Mirroring images...", total=len(references))
        for reference in references:
            result = summary.add(_pull_tag_push(docker_client, image_spec(reference), registry))
            progress.advance(task)
            if result.outcome is MirrorOutcome.SUCCESS:
                console.print(f"[green]✓ {reference} -> {result.local_reference}[/green]")
            else:
                console.print(f"[yellow]\u26a0\ufe0f  {reference} - {result.detail}[/yellow]")

    console.print(f"[green]\u2705 Successfully mirrored {summary.ratio()} images[/green]")
    if summary.succeeded == 0:
        raise NoImagesMirroredError("No images were mirrored. Cannot continue.")
    return summary
