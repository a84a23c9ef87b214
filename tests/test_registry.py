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

import pytest
import requests

from airgap_manager import registry
from airgap_manager.errors import CertificateError, RegistryStartTimeoutError
from airgap_manager.models import CertPaths, RegistryStatus
from tests.conftest import FakeContainer


@pytest.fixture(autouse=True)
def ca_file(cfg):
    cfg.certs_dir.mkdir(parents=True, exist_ok=True)
    path = cfg.certs_dir / "ca.crt"
    path.write_text("ROOT CA")
    return path


class FlakyGet:
    """requests.get stand-in that refuses connections until call *ready_on*."""

    def __init__(self, ready_on: int | None):
        self.ready_on = ready_on
        self.calls = []

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.ready_on is None or len(self.calls) < self.ready_on:
            raise requests.ConnectionError("connection refused")
        return object()


def test_registry_ready_after_some_probes(monkeypatch, cfg):
    get = FlakyGet(ready_on=3)
    monkeypatch.setattr(registry.requests, "get", get)
    session = registry.registry_session(cfg)

    registry.wait_for_registry(session, attempts=10, interval=0)

    assert session.status is RegistryStatus.READY
    assert len(get.calls) == 3
    url, kwargs = get.calls[0]
    assert url == "https://localhost:6060/v2/"
    assert kwargs["verify"] == str(cfg.certs_dir / "ca.crt")


def test_registry_never_ready(monkeypatch, cfg):
    get = FlakyGet(ready_on=None)
    monkeypatch.setattr(registry.requests, "get", get)
    session = registry.registry_session(cfg)

    with pytest.raises(RegistryStartTimeoutError, match="10 attempts"):
        registry.wait_for_registry(session, attempts=10, interval=0)

    assert session.status is RegistryStatus.FAILED
    assert len(get.calls) == 10


def test_start_registry_runs_container(monkeypatch, cfg, docker_client):
    monkeypatch.setattr(registry.requests, "get", FlakyGet(ready_on=1))
    certs = CertPaths.in_directory(cfg.certs_dir)

    session = registry.start_registry(cfg, certs, docker_client)

    assert session.status is RegistryStatus.READY
    assert docker_client.networks.created == [cfg.network_name]
    image, kwargs = docker_client.containers.run_calls[0]
    assert image == "registry:2"
    assert kwargs["name"] == cfg.registry_name
    assert kwargs["network"] == cfg.network_name
    assert kwargs["ports"] == {"6060/tcp": 6060}
    assert kwargs["volumes"] == {str(cfg.certs_dir): {"bind": "/certs", "mode": "ro"}}
    assert kwargs["environment"]["REGISTRY_HTTP_TLS_CERTIFICATE"] == "/certs/tls.crt"
    assert kwargs["environment"]["REGISTRY_HTTP_TLS_KEY"] == "/certs/tls.key"
    assert kwargs["restart_policy"] == {"Name": "always"}


def test_start_registry_reuses_stopped_container(monkeypatch, cfg, docker_client):
    monkeypatch.setattr(registry.requests, "get", FlakyGet(ready_on=1))
    existing = FakeContainer(cfg.registry_name, status="exited")
    docker_client.containers.items[cfg.registry_name] = existing

    registry.start_registry(cfg, CertPaths.in_directory(cfg.certs_dir), docker_client)

    assert existing.started
    assert docker_client.containers.run_calls == []


def test_missing_ca_is_reported_before_probing(monkeypatch, cfg, ca_file):
    get = FlakyGet(ready_on=1)
    monkeypatch.setattr(registry.requests, "get", get)
    ca_file.unlink()
    session = registry.registry_session(cfg)

    with pytest.raises(CertificateError, match="ca.crt"):
        registry.wait_for_registry(session, attempts=10, interval=0)

    assert session.status is RegistryStatus.FAILED
    assert get.calls == []
