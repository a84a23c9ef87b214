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

"""Recipe OCI artifact mirroring via the ORAS CLI."""

from __future__ import annotations

import re
import shutil
import tempfile
from pathlib import Path

import sh
from rich.panel import Panel

from airgap_manager import console, logger
from airgap_manager.constants import RECIPE_LAYOUT_DIR, RECIPE_MODULE_GLOB, RECIPE_SOURCE_ANNOTATION
from airgap_manager.models import ArtifactSpec, MirrorOutcome, MirrorResult, MirrorSummary

_ORAS_VERSION_RE = re.compile(r"Version:\s*([\d.]+)")


def detect_oras_version() -> str:
    """Return the installed ORAS version, or ``unknown``."""
    try:
        output = str(sh.oras("version"))
    except (sh.ErrorReturnCode, sh.CommandNotFound):
        return "unknown"
    match = _ORAS_VERSION_RE.search(output)
    return match.group(1) if match else "unknown"


def _stderr(err: Exception) -> str:
    if isinstance(err, sh.CommandNotFound):
        return f"command not found: {err}"
    return err.stderr.decode(errors="replace").strip() if err.stderr else ""


def pull_artifact(reference: str, workdir: Path) -> str | None:
    """Pull *reference* into *workdir*, trying each ORAS pull form in turn.

    Older and newer ORAS releases accept different flags, so the first form
    that succeeds wins.

    Args:
        reference: Public artifact reference.
        workdir: Empty scratch directory.

    Returns:
        Name of the method that succeeded, or None if all failed.
    """
    layout = str(workdir / RECIPE_LAYOUT_DIR)
    methods = (
        ("pull-to-layout", ("pull", reference, "--to-oci-layout", layout)),
        ("copy-to-layout", ("copy", reference, "--to-oci-layout", layout)),
        ("pull", ("pull", reference)),
    )
    for method, args in methods:
        try:
            sh.oras(*args, _cwd=str(workdir))
        except (sh.ErrorReturnCode, sh.CommandNotFound) as err:
            logger.debug("oras %s failed for %s: %s", method, reference, _stderr(err))
            continue
        return method
    return None


def _unique_name(name: str, taken: set[str]) -> str:
    """Return *name*, or *name* with a numeric suffix if it is already taken."""
    candidate = Path(name)
    index = 1
    while name in taken:
        name = f"{candidate.stem}_{index}{candidate.suffix}"
        index += 1
    return name


def flatten_layout(layout: Path, dest: Path) -> list[Path]:
    """Copy every non-hidden file below *layout* directly into *dest*.

    Files whose basename was already taken keep their relative path,
    joined with ``_`` (plus a numeric suffix if that is taken too),
    instead of overwriting an earlier file.

    Args:
        layout: Root of the pulled OCI layout.
        dest: Directory to copy files into.

    Returns:
        The copied destination paths.
    """
    copied: list[Path] = []
    if not layout.is_dir():
        return copied

    taken: set[str] = set()
    for path in sorted(layout.rglob("*")):
        rel = path.relative_to(layout)
        if not path.is_file() or any(part.startswith(".") for part in rel.parts):
            continue
        name = path.name
        if name in taken:
            name = _unique_name("_".join(rel.parts), taken)
            logger.warning("Duplicate file name %s in %s; keeping it as %s", path.name, layout, name)
        taken.add(name)
        target = dest / name
        shutil.copyfile(path, target)
        copied.append(target)
    return copied


def mirror_recipe(spec: ArtifactSpec, registry: str, ca_file: Path, workdir: Path) -> MirrorResult:
    """Mirror a single recipe artifact into the local registry.

    Args:
        spec: Recipe artifact to mirror.
        registry: Local registry ``host:port`` to push to.
        ca_file: CA certificate the registry's TLS chains to.
        workdir: Empty scratch directory for this artifact.

    Returns:
        The MirrorResult for this artifact; never raises for tool failures.
    """
    local_ref = spec.local_reference(registry)
    console.print(f"[yellow]\u2139\ufe0f  Pulling recipe module from {spec.source_reference}...[/yellow]")

    method = pull_artifact(spec.source_reference, workdir)
    if method is None:
        console.print(f"[yellow]\u26a0\ufe0f  All pull methods failed for recipe {spec.source_reference}, skipping...[/yellow]")
        return MirrorResult(spec, local_ref, MirrorOutcome.SKIPPED, "all pull methods failed")
    logger.info("Pulled %s using %s", spec.source_reference, method)

    flatten_layout(workdir / RECIPE_LAYOUT_DIR, workdir)
    modules = sorted(workdir.glob(RECIPE_MODULE_GLOB))
    console.print(f"   Found {len(modules)} files to push")
    if not modules:
        console.print(f"[yellow]\u26a0\ufe0f  No recipe module files found for {spec.source_reference}[/yellow]")
        return MirrorResult(spec, local_ref, MirrorOutcome.SKIPPED, "no module files found")

    console.print(f"[yellow]\u2139\ufe0f  Pushing {spec.source_reference} to {local_ref}...[/yellow]")
    try:
        sh.oras(
            "push", "--ca-file", str(ca_file), local_ref,
            *[module.name for module in modules],
            "--annotation", f"{RECIPE_SOURCE_ANNOTATION}={spec.source_reference}",
            _cwd=str(workdir),
        )
    except (sh.ErrorReturnCode, sh.CommandNotFound) as err:
        detail = _stderr(err)
        console.print(f"[yellow]\u26a0\ufe0f  Failed to push recipe {local_ref} to local registry[/yellow]")
        console.print(f"[yellow]   Error details: {detail}[/yellow]")
        return MirrorResult(spec, local_ref, MirrorOutcome.FAILED, detail)

    console.print(f"[green]✓ {spec.source_reference} -> {local_ref}[/green]")
    return MirrorResult(spec, local_ref, MirrorOutcome.SUCCESS)


def mirror_recipes(specs: list[ArtifactSpec], registry: str, ca_file: Path) -> MirrorSummary:
    """Mirror every recipe artifact, continuing past individual failures.

    Args:
        specs: Recipe artifacts to mirror.
        registry: Local registry ``host:port`` to push to.
        ca_file: CA certificate the registry's TLS chains to.

    Returns:
        Summary holding exactly one result per spec.
    """
    console.print(Panel.fit("Mirroring Radius recipes using ORAS", style="bold blue"))
    console.print(f"[yellow]\u2139\ufe0f  Detected ORAS version: {detect_oras_version()}[/yellow]")

    summary = MirrorSummary()
    with tempfile.TemporaryDirectory(prefix="airgap-recipes-") as scratch:
        for index, spec in enumerate(specs):
            workdir = Path(scratch) / str(index)
            workdir.mkdir()
            summary.add(mirror_recipe(spec, registry, ca_file, workdir))

    console.print(f"[green]\u2705 Successfully mirrored {summary.ratio()} recipes[/green]")
    if summary.succeeded == 0:
        console.print("[yellow]\u26a0\ufe0f  No recipes were mirrored. Radius may have limited functionality.[/yellow]")
    return summary
