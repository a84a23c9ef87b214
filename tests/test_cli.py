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
from typer.testing import CliRunner

from airgap_manager import cli
from airgap_manager.commands import setup_cmd
from airgap_manager.errors import ToolMissingError

runner = CliRunner()


def test_help_lists_subcommands():
    result = runner.invoke(cli.app, ["--help"])
    assert result.exit_code == 0
    for name in ("setup", "reset", "mirror", "verify", "generate-installer"):
        assert name in result.output


def test_setup_skip_flags(monkeypatch):
    captured = {}
    monkeypatch.setattr(setup_cmd, "run_setup", lambda flags, cfg: captured.update(flags=flags, cfg=cfg))

    result = runner.invoke(
        cli.app,
        ["setup", "--skip-reset", "--skip-verify", "--cluster-name", "demo", "--registry-port", "7070"],
    )

    assert result.exit_code == 0, result.output
    flags = captured["flags"]
    assert not flags.reset
    assert not flags.verify
    assert flags.images
    assert captured["cfg"].cluster_name == "demo"
    assert captured["cfg"].registry_host == "registry.localhost:7070"


def test_setup_rejects_bad_port():
    result = runner.invoke(cli.app, ["setup", "--registry-port", "70000"])
    assert result.exit_code != 0


def test_generate_installer(tmp_path):
    output = tmp_path / "install.sh"
    result = runner.invoke(cli.app, ["generate-installer", "--output", str(output), "--radius-version", "0.46"])
    assert result.exit_code == 0, result.output
    assert "radius-0.46.0.tgz" in output.read_text()


def test_main_exits_1_on_error(monkeypatch):
    def boom():
        raise ToolMissingError("kind is required but not found. Please install it and try again.")

    monkeypatch.setattr(cli, "app", boom)
    with pytest.raises(SystemExit) as exc:
        cli.main()
    assert exc.value.code == 1


def test_setup_rejects_patch_level_radius_version(monkeypatch):
    monkeypatch.setattr(setup_cmd, "run_setup", lambda flags, cfg: pytest.fail("setup should not run"))
    result = runner.invoke(cli.app, ["setup", "--radius-version", "0.46.0"])
    assert result.exit_code != 0
