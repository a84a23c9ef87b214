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

"""Utility functions for command checks, kubectl, and bounded polling."""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from typing import TypeVar

import sh
from tenacity import RetryCallState, RetryError, Retrying, retry_if_result, stop_after_attempt, wait_fixed

from airgap_manager import logger
from airgap_manager.errors import PollTimeoutError, ToolMissingError

T = TypeVar("T")


def command_exists(cmd: str) -> bool:
    """Return True if *cmd* resolves on the system PATH."""
    try:
        return bool(sh.which(cmd))
    except sh.ErrorReturnCode:
        return False


def require_command(cmd: str) -> None:
    """Check if a command exists on the system PATH.

    Args:
        cmd: Name of the CLI command to check.

    Raises:
        ToolMissingError: If the command is not found.
    """
    if not command_exists(cmd):
        raise ToolMissingError(f"{cmd} is required but not found. Please install it and try again.")


def run_kubectl(args: list[str], timeout: int = 30, input: str | None = None) -> tuple[bool, str, str]:
    """Run a kubectl command via subprocess and return (success, stdout, stderr).

    Uses subprocess instead of sh so stdout (e.g. a pod phase) stays
    separate from stderr noise.

    Args:
        args: kubectl arguments (e.g. ``["get", "pods", "-n", "default"]``).
        timeout: Maximum seconds to wait for the command to complete.
        input: Text fed to kubectl's stdin (for ``apply -f -``).

    Returns:
        Tuple of (success, stdout, stderr).
    """
    try:
        result = subprocess.run(
            ["kubectl", *args],
            capture_output=True,
            text=True,
            timeout=timeout,
            input=input,
        )
        return result.returncode == 0, result.stdout, result.stderr
    except (subprocess.SubprocessError, OSError) as exc:
        return False, "", str(exc)


def poll_until(
    probe: Callable[[], T | None],
    *,
    attempts: int,
    interval: float,
    description: str,
) -> T:
    """Call *probe* until it returns a truthy value, at most *attempts* times.

    Waits *interval* seconds between attempts (not after the last one).
    Exceptions raised by *probe* propagate immediately.

    Args:
        probe: Zero-argument callable; a falsy result means "not yet".
        attempts: Maximum number of probe calls.
        interval: Fixed delay in seconds between calls.
        description: What is being waited for, used in messages.

    Returns:
        The first truthy value returned by *probe*.

    Raises:
        PollTimeoutError: If *probe* never returned a truthy value.
    """
    def _log_wait(state: RetryCallState) -> None:
        logger.debug("Waiting for %s (attempt %d/%d)", description, state.attempt_number, attempts)

    retryer = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(interval),
        retry=retry_if_result(lambda result: not result),
        before_sleep=_log_wait,
    )
    try:
        return retryer(probe)
    except RetryError as err:
        raise PollTimeoutError(f"{description} not reached after {attempts} attempts") from err
