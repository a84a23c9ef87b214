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

"""Typed errors for the bootstrap workflow.

Every class here is fatal: the CLI prints the message and exits 1.
Per-artifact mirror failures are not exceptions; they are recorded as
MirrorResult outcomes instead.
"""

from __future__ import annotations


class AirgapError(RuntimeError):
    """Base error for the air-gapped bootstrap workflow."""


class ToolMissingError(AirgapError):
    """A required CLI tool is not on PATH."""


class CANotInstalledError(AirgapError):
    """The mkcert local CA is not installed."""


class CertificateError(AirgapError):
    """TLS certificate generation or CA export failed."""


class PollTimeoutError(AirgapError):
    """A bounded poll exhausted its attempts."""


class RegistryStartTimeoutError(AirgapError):
    """The local registry did not answer within the readiness window."""


class ChartFetchError(AirgapError):
    """A Helm chart could not be downloaded."""


class NoImagesMirroredError(AirgapError):
    """Not a single container image reached the local registry."""


class ClusterCreateError(AirgapError):
    """kind failed to create or configure the cluster."""


class RegistryIPUnresolvedError(AirgapError):
    """The registry container has no IP address on any network."""


class NodeConfigurationError(AirgapError):
    """A cluster node could not be configured to trust the registry."""


class ConnectivityCheckError(AirgapError):
    """The in-cluster registry pull test failed."""


class ConnectivityTimeoutError(ConnectivityCheckError):
    """The in-cluster registry pull test never reached a terminal phase."""
