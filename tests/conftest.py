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

"""Shared fakes for the external tools the workflow drives."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, NamedTuple

import docker
import pytest
import sh

from airgap_manager.config import AirgapConfig


def sh_failure(command: str = "cmd", stderr: bytes = b"boom") -> sh.ErrorReturnCode:
    return sh.ErrorReturnCode_1(command, b"", stderr)


class FakeCommand:
    def __init__(self, owner: "FakeSh", name: str) -> None:
        self.owner = owner
        self.name = name

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        self.owner.calls.append((self.name, args, kwargs))
        handler = self.owner.handlers.get(self.name)
        if handler is None:
            return ""
        return handler(*args, **kwargs)


class FakeSh:
    """Stand-in for the ``sh`` module that records every invocation."""

    ErrorReturnCode = sh.ErrorReturnCode
    ErrorReturnCode_1 = sh.ErrorReturnCode_1
    CommandNotFound = sh.CommandNotFound

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple, dict]] = []
        self.handlers: dict[str, Callable[..., Any]] = {}

    def __getattr__(self, name: str) -> FakeCommand:
        if name.startswith("_"):
            raise AttributeError(name)
        return FakeCommand(self, name)

    def calls_to(self, name: str) -> list[tuple]:
        return [args for cmd, args, _ in self.calls if cmd == name]


@pytest.fixture
def fake_sh() -> FakeSh:
    return FakeSh()


class ExecResult(NamedTuple):
    exit_code: int
    output: bytes


class FakeContainer:
    def __init__(self, name: str, attrs: dict | None = None, status: str = "running") -> None:
        self.name = name
        self.attrs = attrs or {}
        self.status = status
        self.removed = False
        self.started = False
        self.reloaded = 0
        self.exec_calls: list[list[str]] = []
        self.archives: list[tuple[str, bytes]] = []
        self.failing: dict[str, int] = {}

    def remove(self, force: bool = False) -> None:
        self.removed = force

    def start(self) -> None:
        self.started = True

    def reload(self) -> None:
        self.reloaded += 1

    def exec_run(self, command: list[str]) -> ExecResult:
        self.exec_calls.append(list(command))
        code = self.failing.get(command[0], 0)
        return ExecResult(code, b"error" if code else b"")

    def put_archive(self, path: str, data: bytes) -> bool:
        self.archives.append((path, data))
        return True


class FakeContainers:
    def __init__(self) -> None:
        self.items: dict[str, FakeContainer] = {}
        self.run_calls: list[tuple[str, dict]] = []

    def get(self, name: str) -> FakeContainer:
        if name not in self.items:
            raise docker.errors.NotFound(f"No such container: {name}")
        return self.items[name]

    def run(self, image: str, **kwargs: Any) -> FakeContainer:
        self.run_calls.append((image, kwargs))
        container = FakeContainer(kwargs["name"])
        self.items[kwargs["name"]] = container
        return container


class FakeNetwork:
    def __init__(self, name: str, net_id: str = "", connect_error: Exception | None = None) -> None:
        self.name = name
        self.id = net_id or f"id-{name}"
        self.removed = False
        self.connected: list[str] = []
        self.connect_error = connect_error

    def remove(self) -> None:
        self.removed = True

    def connect(self, container: FakeContainer) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected.append(container.name)


class FakeNetworks:
    def __init__(self) -> None:
        self.items: dict[str, FakeNetwork] = {}
        self.created: list[str] = []

    def get(self, name: str) -> FakeNetwork:
        if name not in self.items:
            raise docker.errors.NotFound(f"network {name} not found")
        return self.items[name]

    def create(self, name: str) -> FakeNetwork:
        self.created.append(name)
        network = FakeNetwork(name)
        self.items[name] = network
        return network


class FakeImage:
    def __init__(self, reference: str) -> None:
        self.reference = reference
        self.tags: list[str] = []

    def tag(self, repository: str, tag: str | None = None) -> bool:
        self.tags.append(f"{repository}:{tag}")
        return True


class FakeImages:
    def __init__(self) -> None:
        self.pull_failures: set[str] = set()
        self.push_failures: set[str] = set()
        self.pulled: list[str] = []
        self.pushed: list[str] = []

    def pull(self, repository: str, tag: str | None = None) -> FakeImage:
        reference = f"{repository}:{tag}"
        if reference in self.pull_failures:
            raise docker.errors.APIError(f"pull access denied for {repository}")
        self.pulled.append(reference)
        return FakeImage(reference)

    def push(self, repository: str, tag: str | None = None, stream: bool = False, decode: bool = False):
        reference = f"{repository}:{tag}"
        if reference in self.push_failures:
            return iter([{"status": "Preparing"}, {"error": "denied", "errorDetail": {"message": "denied"}}])
        self.pushed.append(reference)
        return iter([{"status": "Pushed"}])


class FakeDockerClient:
    def __init__(self) -> None:
        self.containers = FakeContainers()
        self.networks = FakeNetworks()
        self.images = FakeImages()
        self.closed = False

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def docker_client() -> FakeDockerClient:
    return FakeDockerClient()


@pytest.fixture
def cfg(tmp_path: Path) -> AirgapConfig:
    return AirgapConfig(
        certs_dir=tmp_path / "certs",
        charts_dir=tmp_path / "charts",
        install_script=tmp_path / "install-radius-airgapped.sh",
        registry_ready_interval=0,
        pod_phase_interval=0,
        settle_seconds=0,
    )
