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

"""In-cluster registry connectivity check."""

from __future__ import annotations

from rich.panel import Panel

from airgap_manager import console
from airgap_manager.constants import CONNECTIVITY_MESSAGE, POD_PHASE_FAILED, POD_PHASE_SUCCEEDED
from airgap_manager.errors import ConnectivityCheckError, ConnectivityTimeoutError, PollTimeoutError
from airgap_manager.utils import poll_until, run_kubectl

TERMINAL_PHASES = (POD_PHASE_SUCCEEDED, POD_PHASE_FAILED)


def pod_phase(pod_name: str) -> str:
    """Return the pod's ``.status.phase``, or an empty string if unknown."""
    ok, stdout, _ = run_kubectl(["get", "pod", pod_name, "-o", "jsonpath={.status.phase}"])
    return stdout.strip() if ok else ""


def verify_registry_connectivity(image: str, pod_name: str, attempts: int, interval: float) -> None:
    """Run a throwaway pod pulling *image* and wait for it to finish.

    Args:
        image: Image reference resolved through the local registry.
        pod_name: Name of the throwaway pod.
        attempts: Maximum number of phase polls.
        interval: Seconds between polls.

    Raises:
        ConnectivityCheckError: If the pod cannot be created or ends Failed.
        ConnectivityTimeoutError: If the pod never reaches a terminal phase.
    """
    console.print(Panel.fit("Verifying connectivity to the registry from the cluster", style="bold blue"))
    run_kubectl(["delete", "pod", pod_name, "--ignore-not-found"], timeout=60)

    ok, _, stderr = run_kubectl([
        "run", pod_name,
        f"--image={image}",
        "--restart=Never",
        "--command", "--", "echo", CONNECTIVITY_MESSAGE,
    ])
    if not ok:
        raise ConnectivityCheckError(f"Failed to start registry connectivity pod: {stderr[:200]}")

    def _terminal_phase() -> str | None:
        phase = pod_phase(pod_name)
        return phase if phase in TERMINAL_PHASES else None

    try:
        phase = poll_until(
            _terminal_phase,
            attempts=attempts,
            interval=interval,
            description=f"pod {pod_name} to finish",
        )
    except PollTimeoutError as err:
        _, description, _ = run_kubectl(["describe", "pod", pod_name])
        console.print(description)
        raise ConnectivityTimeoutError(f"Registry connectivity test timed out after {attempts} tries") from err

    if phase == POD_PHASE_FAILED:
        raise ConnectivityCheckError(
            f"Registry connectivity test failed. Check pod logs: kubectl logs {pod_name}"
        )

    console.print("[green]\u2705 Registry connectivity test successful[/green]")
    run_kubectl(["delete", "pod", pod_name, "--wait=false"])
