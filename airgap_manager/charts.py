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

"""Helm chart download for offline installation."""

from __future__ import annotations

from pathlib import Path

import sh
from rich.panel import Panel

from airgap_manager import console
from airgap_manager.config import ChartSpec
from airgap_manager.errors import ChartFetchError


def _add_repo(chart: ChartSpec) -> None:
    sh.helm("repo", "add", chart.repo_name, chart.repo_url, "--force-update")
    sh.helm("repo", "update", chart.repo_name)


def download_charts(charts_dir: Path, charts: list[ChartSpec]) -> dict[str, Path]:
    """Pull every chart archive into *charts_dir*, in order.

    Unlike the mirror steps there is no partial-success tolerance: the first
    failure aborts.

    Args:
        charts_dir: Destination directory for the ``.tgz`` archives.
        charts: Charts to download.

    Returns:
        Mapping of chart name to the downloaded archive path.

    Raises:
        ChartFetchError: If adding a repo or pulling a chart fails.
    """
    console.print(Panel.fit("Downloading required Helm charts", style="bold blue"))
    charts_dir.mkdir(parents=True, exist_ok=True)

    archives: dict[str, Path] = {}
    for chart in charts:
        console.print(f"[yellow]\u2139\ufe0f  Downloading {chart.name} chart ({chart.version})...[/yellow]")
        try:
            if chart.repo_name and chart.repo_url:
                _add_repo(chart)
            sh.helm("pull", chart.reference, "--version", chart.version, "-d", str(charts_dir))
        except sh.ErrorReturnCode as err:
            stderr = err.stderr.decode(errors="replace").strip() if err.stderr else ""
            raise ChartFetchError(f"Failed to download chart {chart.reference}@{chart.version}: {stderr}") from err
        archives[chart.name] = charts_dir / chart.archive_name

    console.print(f"[green]\u2705 Downloaded {len(archives)} Helm charts to {charts_dir}[/green]")
    return archives
