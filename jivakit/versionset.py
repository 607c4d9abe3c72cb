"""Cluster facts reported with usage events, cached in the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable

from jivakit import version

logger = logging.getLogger(__name__)

# Tracking code of the project in the analytics service.
GA_CLIENT_ID = "UA-127388617-1"

# Event categories.
INSTALL_EVENT = "install"
PING = "jiva-csi-ping"
VOLUME_PROVISION = "volume-provision"
VOLUME_DEPROVISION = "volume-deprovision"

APP_NAME = "OpenEBS"
RUNNING_STATUS = "running"
EVENT_LABEL_NODE = "nodes"
EVENT_LABEL_CAPACITY = "capacity"

REPLICA = "replica:"
DEFAULT_REPLICA_COUNT = "replica:3"
DEFAULT_CAS_TYPE = "jiva"

CLUSTER_UUID_ENV = "OPENEBS_IO_USAGE_UUID"
CLUSTER_VERSION_ENV = "OPENEBS_IO_K8S_VERSION"
CLUSTER_ARCH_ENV = "OPENEBS_IO_K8S_ARCH"
OPENEBS_VERSION_ENV = "OPENEBS_IO_VERSION_TAG"
NODE_TYPE_ENV = "OPENEBS_IO_NODE_TYPE"
INSTALLER_TYPE_ENV = "OPENEBS_IO_INSTALLER_TYPE"


@dataclass(frozen=True)
class ClusterInfo:
    """Facts read from the cluster API.

    ``uid`` is the UID of the ``default`` namespace, ``platform`` the
    server's os/arch pair, ``git_version`` the server version and
    ``node_type`` the node's OS and kernel version.
    """

    uid: str = ""
    platform: str = ""
    git_version: str = ""
    node_type: str = ""


ClusterFetcher = Callable[[], ClusterInfo]


@dataclass
class VersionSet:
    """Mostly fixed information about the cluster environment."""

    id: str = ""
    k8s_version: str = ""
    k8s_arch: str = ""
    openebs_version: str = ""
    node_type: str = ""
    installer_type: str = ""

    def fetch_and_set_version(self, fetcher: ClusterFetcher) -> None:
        """Query the cluster through ``fetcher`` and cache the answers in the environment."""
        info = fetcher()

        self.id = info.uid
        os.environ[CLUSTER_UUID_ENV] = self.id

        self.k8s_arch = info.platform
        self.k8s_version = info.git_version
        os.environ[CLUSTER_ARCH_ENV] = self.k8s_arch
        os.environ[CLUSTER_VERSION_ENV] = self.k8s_version

        self.node_type = info.node_type
        os.environ[NODE_TYPE_ENV] = self.node_type

        self.openebs_version = version.get_version_details()
        os.environ[OPENEBS_VERSION_ENV] = self.openebs_version

    def get_version(
        self, override: bool = False, fetcher: ClusterFetcher | None = None
    ) -> None:
        """Fill the set from the environment, querying the cluster first when needed.

        The cluster is queried when the version is not yet cached in the
        environment or when ``override`` is true.
        """
        if OPENEBS_VERSION_ENV not in os.environ or override:
            try:
                if fetcher is None:
                    raise LookupError("no source of cluster information was given")
                self.fetch_and_set_version(fetcher)
            except Exception as exc:
                logger.error("%s", exc)
                raise
        self.id = os.environ.get(CLUSTER_UUID_ENV, "")
        self.k8s_arch = os.environ.get(CLUSTER_ARCH_ENV, "")
        self.k8s_version = os.environ.get(CLUSTER_VERSION_ENV, "")
        self.node_type = os.environ.get(NODE_TYPE_ENV, "")
        self.openebs_version = os.environ.get(OPENEBS_VERSION_ENV, "")
        self.installer_type = os.environ.get(INSTALLER_TYPE_ENV, "")