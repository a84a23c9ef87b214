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

from airgap_manager import utils
from airgap_manager.errors import PollTimeoutError, ToolMissingError
from tests.conftest import sh_failure


def test_poll_until_returns_first_truthy_value():
    calls = []

    def probe():
        calls.append(1)
        return "ready" if len(calls) == 3 else None

    assert utils.poll_until(probe, attempts=10, interval=0, description="thing") == "ready"
    assert len(calls) == 3


def test_poll_until_times_out_after_exact_attempts():
    calls = []

    def probe():
        calls.append(1)
        return False

    with pytest.raises(PollTimeoutError, match="after 4 attempts"):
        utils.poll_until(probe, attempts=4, interval=0, description="thing")
    assert len(calls) == 4


def test_poll_until_propagates_probe_errors():
    def probe():
        raise ValueError("broken")

    with pytest.raises(ValueError):
        utils.poll_until(probe, attempts=3, interval=0, description="thing")


def test_require_command(monkeypatch, fake_sh):
    monkeypatch.setattr(utils, "sh", fake_sh)
    fake_sh.handlers["which"] = lambda cmd: f"/usr/bin/{cmd}"
    utils.require_command("kind")

    def missing(cmd):
        raise sh_failure("which", b"")

    fake_sh.handlers["which"] = missing
    assert utils.command_exists("kind") is False
    with pytest.raises(ToolMissingError, match="kind is required"):
        utils.require_command("kind")


def test_run_kubectl_reports_missing_binary(monkeypatch):
    def boom(*args, **kwargs):
        raise FileNotFoundError("kubectl")

    monkeypatch.setattr(utils.subprocess, "run", boom)
    ok, stdout, stderr = utils.run_kubectl(["get", "pods"])
    assert not ok
    assert stdout == ""
    assert "kubectl" in stderr
