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

"""Constants, dependency loading, and dep_value helper."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


def load_dependencies() -> dict:
    """Load chart, recipe, and image lists from dependencies.yaml.

    Returns:
        Parsed YAML content as a nested dictionary.
    """
    deps_file = Path(__file__).resolve().parent / "dependencies.yaml"
    with open(deps_file) as f:
        return yaml.safe_load(f)


DEPENDENCIES = load_dependencies()


def dep_value(*keys: str, default: Any = None) -> Any:
    """Safely traverse the DEPENDENCIES dict by key path.

    Args:
        *keys: Sequence of dictionary keys to traverse.
        default: Value to return if any key is missing.

    Returns:
        The value at the nested key path, or *default* if not found.
    """
    node = DEPENDENCIES
    for key in keys:
        if not isinstance(node, dict):
            return default
        node = node.get(key)
        if node is None:
            return default
    return node


# -- Prerequisites --
REQUIRED_COMMANDS = ("docker", "kind", "kubectl", "helm", "mkcert")
OPTIONAL_COMMANDS = ("oras",)
ORAS_INSTALL_URL = "https://oras.land/docs/installation"
MKCERT_ROOT_CA = "rootCA.pem"

# -- Certificates --
CERT_FILE = "tls.crt"
KEY_FILE = "tls.key"
CA_FILE = "ca.crt"
CERT_EXTRA_HOSTS = ("localhost", "127.0.0.1")

# -- Registry container --
REGISTRY_IMAGE = "registry:2"
REGISTRY_CONTAINER_PORT = 6060
REGISTRY_CERTS_MOUNT = "/certs"
REGISTRY_RESTART_POLICY = "always"
REGISTRY_PROBE_PATH = "/v2/"
REGISTRY_PROBE_TIMEOUT_SECONDS = 5
REGISTRY_READY_MAX_RETRIES = 10
REGISTRY_READY_POLL_INTERVAL_SECONDS = 2

# -- Recipes --
RECIPE_SOURCE_ANNOTATION = "org.opencontainers.image.source"
RECIPE_LAYOUT_DIR = "layout"
RECIPE_MODULE_GLOB = "*.json"

# -- Images --
POSTGRES_MIRROR_MARKER = "mirror/postgres"
DEFAULT_TAG = "latest"

# -- Kind cluster --
KIND_API_VERSION = "kind.x-k8s.io/v1alpha4"
KIND_DEFAULT_NETWORK = "kind"
CONTAINERD_CERTS_DIR = "/etc/containerd/certs.d"
CONTAINERD_CAPABILITIES = ("pull", "resolve", "push")
NODE_HOSTS_FILE = "/etc/hosts"
CLUSTER_SETTLE_SECONDS = 15

# -- Registry discovery ConfigMap --
NS_KUBE_PUBLIC = "kube-public"
REGISTRY_HOSTING_CONFIGMAP = "local-registry-hosting"
REGISTRY_HOSTING_KEY = "localRegistryHosting.v1"
REGISTRY_HOSTING_HELP_URL = "https://kind.sigs.k8s.io/docs/user/local-registry/"

# -- Connectivity test --
CONNECTIVITY_POD_NAME = "registry-test"
CONNECTIVITY_IMAGE_PATH = "mirror/postgres:latest"
CONNECTIVITY_MESSAGE = "Registry connectivity test successful"
POD_PHASE_MAX_RETRIES = 30
POD_PHASE_POLL_INTERVAL_SECONDS = 2
POD_PHASE_SUCCEEDED = "Succeeded"
POD_PHASE_FAILED = "Failed"

# -- Installer --
INSTALL_SCRIPT_NAME = "install-radius-airgapped.sh"
INSTALL_SCRIPT_MODE = 0o755

# -- Defaults --
DEFAULT_CLUSTER_NAME = "air-gapped-cluster"
DEFAULT_REGISTRY_NAME = "registry.localhost"
DEFAULT_REGISTRY_SERVER = "localhost"
DEFAULT_REGISTRY_PORT = 6060
DEFAULT_NETWORK_NAME = "kind-network"
DEFAULT_CERTS_DIR = "certs"
DEFAULT_CHARTS_DIR = "charts"
DEFAULT_NODE_CA_PATH = "/etc/ssl/certs/local-ca.crt"
DEFAULT_RADIUS_VERSION = dep_value("radius", "version", default="0.45")
