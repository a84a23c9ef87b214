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

from airgap_manager import charts
from airgap_manager.config import ChartSpec
from airgap_manager.errors import ChartFetchError
from tests.conftest import sh_failure

OCI_CHART = ChartSpec("radius", "oci://ghcr.io/radius-project/helm-chart/radius", "0.45.0")
REPO_CHART = ChartSpec("dapr", "dapr/dapr", "1.14.4", "dapr", "https://dapr.github.io/helm-charts/")


def test_download_charts(monkeypatch, fake_sh, tmp_path):
    monkeypatch.setattr(charts, "sh", fake_sh)

    archives = charts.download_charts(tmp_path, [OCI_CHART, REPO_CHART])

    assert archives == {"radius": tmp_path / "radius-0.45.0.tgz", "dapr": tmp_path / "dapr-1.14.4.tgz"}
    assert fake_sh.calls_to("helm") == [
        ("pull", OCI_CHART.reference, "--version", "0.45.0", "-d", str(tmp_path)),
        ("repo", "add", "dapr", REPO_CHART.repo_url, "--force-update"),
        ("repo", "update", "dapr"),
        ("pull", "dapr/dapr", "--version", "1.14.4", "-d", str(tmp_path)),
    ]


def test_download_charts_stops_on_first_failure(monkeypatch, fake_sh, tmp_path):
    monkeypatch.setattr(charts, "sh", fake_sh)

    def helm(*args):
        raise sh_failure("helm pull", b"not found")

    fake_sh.handlers["helm"] = helm
    with pytest.raises(ChartFetchError, match="not found"):
        charts.download_charts(tmp_path, [OCI_CHART, REPO_CHART])
    assert len(fake_sh.calls_to("helm")) == 1
