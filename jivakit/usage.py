"""Anonymous usage events and their delivery to the analytics service."""

from __future__ import annotations

import logging
import os
import re
import threading
import time
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Callable

from jivakit.versionset import (
    APP_NAME,
    DEFAULT_CAS_TYPE,
    DEFAULT_REPLICA_COUNT,
    EVENT_LABEL_NODE,
    GA_CLIENT_ID,
    INSTALL_EVENT,
    PING,
    REPLICA,
    RUNNING_STATUS,
    VOLUME_PROVISION,
    ClusterFetcher,
    VersionSet,
)

logger = logging.getLogger(__name__)

# User's consent to send usage data.
ENABLE_ANALYTICS_ENV = "OPENEBS_IO_ENABLE_ANALYTICS"
# Interval between ping events.
PING_PERIOD_ENV = "OPENEBS_IO_ANALYTICS_PING_INTERVAL"

DEFAULT_PING_PERIOD = timedelta(hours=24)
MINIMUM_PING_PERIOD = timedelta(hours=1)
_DEFAULT_PING_PERIOD_TEXT = "24h0m0s"

COLLECT_URL = "https://www.google-analytics.com/collect"
_TRACKING_ID_RE = re.compile(r"UA-[0-9]+-[0-9]+")

_SIZE_RE = re.compile(r"([0-9]+(?:\.[0-9]+)*) ?([kKmMgGtTpP])?[iI]?[bB]?")
_DECIMAL_UNITS = {"k": 10**3, "m": 10**6, "g": 10**9, "t": 10**12, "p": 10**15}
_GB = 10**9

_DURATION_PART_RE = re.compile(r"([0-9]*(?:\.[0-9]*)?)([^0-9.]+)")
_UNIT_NS = {
    "ns": 1,
    "us": 10**3,
    "\u00b5s": 10**3,
    "\u03bcs": 10**3,
    "ms": 10**6,
    "s": 10**9,
    "m": 60 * 10**9,
    "h": 3600 * 10**9,
}
_MAX_NS = 2**63 - 1


def to_giga_units(size: str) -> int:
    """Convert a human size such as ``"104.5 GB"`` to whole gigabytes (10**9 bytes).

    Binary suffixes are read as decimal ones, so ``"1 GiB"`` is 1.
    """
    match = _SIZE_RE.fullmatch(size)
    if match is None:
        raise ValueError(f"invalid size: {size!r}")
    number, prefix = match.groups()
    try:
        value = float(number)
    except ValueError:
        raise ValueError(f"invalid size: {size!r}") from None
    if prefix:
        value *= _DECIMAL_UNITS[prefix.lower()]
    return int(value) // _GB


def _parse_duration_ns(text: str) -> int:
    """Parse a duration such as ``"1h30m"`` into nanoseconds."""
    s = text
    negative = False
    if s and s[0] in "+-":
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return 0
    if not s:
        raise ValueError(f"invalid duration {text!r}")
    total = Fraction(0)
    pos = 0
    while pos < len(s):
        match = _DURATION_PART_RE.match(s, pos)
        if match is None:
            raise ValueError(f"invalid duration {text!r}")
        number, unit = match.groups()
        if number in ("", "."):
            raise ValueError(f"invalid duration {text!r}")
        if unit not in _UNIT_NS:
            raise ValueError(f"unknown unit {unit!r} in duration {text!r}")
        try:
            total += Fraction(Decimal(number)) * _UNIT_NS[unit]
        except InvalidOperation:
            raise ValueError(f"invalid duration {text!r}") from None
        pos = match.end()
    ns = int(total)
    if ns > _MAX_NS + (1 if negative else 0):
        raise ValueError(f"invalid duration {text!r}")
    return -ns if negative else ns


def get_ping_period() -> timedelta:
    """Return the ping interval from the environment, defaulting to 24 hours.

    Values that cannot be parsed or are below one hour give the default.
    """
    value = os.environ.get(PING_PERIOD_ENV) or _DEFAULT_PING_PERIOD_TEXT
    try:
        ns = _parse_duration_ns(value)
    except ValueError:
        ns = 0
    if ns < MINIMUM_PING_PERIOD // timedelta(microseconds=1) * 1000:
        return DEFAULT_PING_PERIOD
    return timedelta(microseconds=ns // 1000)


@dataclass
class Usage:
    """One usage event together with the application and client it describes."""

    category: str = ""
    action: str = ""
    label: str = ""
    value: int = 0
    app_version: str = ""
    app_installer_id: str = ""
    app_id: str = ""
    app_name: str = ""
    track_id: str = ""
    client_id: str = ""
    campaign_source: str = ""
    campaign_name: str = ""
    data_source: str = ""
    document_title: str = ""
    fetcher: ClusterFetcher | None = field(default=None, repr=False, compare=False)

    def _version_set(self, override: bool) -> VersionSet:
        versions = VersionSet()
        try:
            versions.get_version(override, self.fetcher)
        except Exception:
            # Already logged; report whatever could be gathered.
            pass
        return versions

    def new_event(self, category: str, action: str, label: str, value: int) -> Usage:
        """Set category, action, label and value of the event."""
        self.category = category
        self.action = action
        self.label = label
        self.value = value
        return self

    def build(self) -> Usage:
        """Fill in the project, tracking and client identifiers."""
        versions = self._version_set(False)
        self.app_id = APP_NAME
        self.track_id = GA_CLIENT_ID
        self.client_id = versions.id
        self.campaign_source = versions.installer_type
        return self

    def application_builder(self) -> Usage:
        """Fill in cluster details for events other than install."""
        versions = self._version_set(False)
        self.app_version = versions.openebs_version
        self.app_name = versions.k8s_arch
        self.app_installer_id = versions.k8s_version
        self.data_source = versions.node_type
        return self

    def set_volume_capacity(self, vol_cap: str) -> Usage:
        """Record a volume's capacity in gigabytes; unparsable sizes count as 0."""
        try:
            self.value = to_giga_units(vol_cap)
        except ValueError:
            self.value = 0
        return self

    def set_volume_type(self, vol_type: str, method: str) -> Usage:
        """Record the storage engine, defaulting it for provision events."""
        if method == VOLUME_PROVISION and not vol_type:
            self.app_name = DEFAULT_CAS_TYPE
        else:
            self.app_name = vol_type
        return self

    def set_replica_count(self, count: str, method: str) -> Usage:
        """Record the replica count, defaulting it for provision events."""
        if method == VOLUME_PROVISION and not count:
            self.action = DEFAULT_REPLICA_COUNT
        else:
            self.action = REPLICA + count
        return self

    def install_builder(self, override: bool, cluster_size: int) -> Usage:
        """Fill in an install event for a cluster of ``cluster_size`` nodes."""
        versions = self._version_set(override)
        self.app_version = versions.openebs_version
        self.app_name = versions.k8s_arch
        self.app_installer_id = versions.k8s_version
        self.data_source = versions.node_type
        self.document_title = versions.id
        self.app_id = APP_NAME
        return self.new_event(INSTALL_EVENT, RUNNING_STATUS, EVENT_LABEL_NODE, int(cluster_size))

    def to_params(self) -> dict[str, str]:
        """Return the measurement-protocol parameters of this event hit."""
        return {
            "v": "1",
            "tid": self.track_id,
            "cid": self.client_id,
            "t": "event",
            "cs": self.campaign_source,
            "cc": self.client_id,
            "cn": self.campaign_name,
            "aid": self.app_id,
            "av": self.app_version,
            "ds": self.data_source,
            "an": self.app_name,
            "aiid": self.app_installer_id,
            "dt": self.document_title,
            "ec": self.category,
            "ea": self.action,
            "el": self.label,
            "ev": str(self.value),
        }

    def send(self) -> threading.Thread | None:
        """Send the event in the background; return the sending thread.

        Nothing is sent, and None is returned, when the tracking ID is not valid.
        """
        if not _TRACKING_ID_RE.fullmatch(self.track_id):
            return None
        thread = threading.Thread(target=_post, args=(self.to_params(),), daemon=True)
        thread.start()
        return thread


def _post(params: dict[str, str]) -> None:
    body = urllib.parse.urlencode(params).encode()
    request = urllib.request.Request(
        COLLECT_URL,
        data=body,
        method="POST",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    try:
        with urllib.request.urlopen(request, timeout=30) as response:
            status = response.status
    except (urllib.error.URLError, OSError) as exc:
        logger.error("%s", exc)
        return
    if not 200 <= status < 300:
        logger.error("analytics request failed with status %s", status)


def ping_check(count_nodes: Callable[[], int]) -> None:
    """Send a ping event every ping period, forever."""
    usage = Usage()
    period = get_ping_period().total_seconds()
    while True:
        time.sleep(period)
        try:
            cluster_size = count_nodes()
        except Exception as exc:
            logger.error("failed to count nodes: %s", exc)
            cluster_size = 0
        usage.build().install_builder(True, cluster_size)
        usage.category = PING
        usage.send()