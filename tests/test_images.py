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

from airgap_manager import images
from airgap_manager.errors import NoImagesMirroredError
from airgap_manager.models import MirrorOutcome

REFERENCES = [
    "docker.io/rancher/mirrored-pause:3.6",
    "ghcr.io/radius-project/mirror/postgres:latest",
    "ghcr.io/dapr/operator:1.14.4",
]


def test_postgres_mirror_repository_override():
    spec = images.image_spec("ghcr.io/radius-project/mirror/postgres:latest")
    assert spec.repository == "mirror/postgres"
    assert spec.local_reference("localhost:6060") == "localhost:6060/mirror/postgres:latest"


def test_mirror_all_images(docker_client):
    summary = images.mirror_images(docker_client, REFERENCES, "localhost:6060")

    assert summary.ratio() == "3/3"
    assert docker_client.images.pulled == REFERENCES
    assert docker_client.images.pushed == [
        "localhost:6060/rancher/mirrored-pause:3.6",
        "localhost:6060/mirror/postgres:latest",
        "localhost:6060/dapr/operator:1.14.4",
    ]


def test_partial_failure_continues(docker_client):
    docker_client.images.pull_failures.add("docker.io/rancher/mirrored-pause:3.6")
    docker_client.images.push_failures.add("localhost:6060/dapr/operator:1.14.4")

    summary = images.mirror_images(docker_client, REFERENCES, "localhost:6060")

    outcomes = [result.outcome for result in summary.results]
    assert outcomes == [MirrorOutcome.SKIPPED, MirrorOutcome.SUCCESS, MirrorOutcome.FAILED]
    assert summary.results[2].detail == "push failed: denied"
    assert summary.ratio() == "1/3"


def test_no_image_mirrored_is_fatal(docker_client):
    docker_client.images.pull_failures.update(REFERENCES)
    with pytest.raises(NoImagesMirroredError):
        images.mirror_images(docker_client, REFERENCES, "localhost:6060")
