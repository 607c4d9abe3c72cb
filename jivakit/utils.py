"""Naming helpers and reconcile timing."""

from __future__ import annotations

from datetime import timedelta

# Interval after which reconciliation is triggered periodically.
SYNC_PERIOD = timedelta(seconds=5)
# Interval after which a failed reconciliation is retried.
RETRY_PERIOD = timedelta(seconds=2)

MAX_NAME_LEN = 43


def strip_name(name: str) -> str:
    """Lower-case ``name``, cut it to 43 characters and drop one trailing dash.

    Custom resource names are limited to 63 characters and 20 more are
    appended later for the replica suffix and revision hash.
    """
    name = name.lower()[:MAX_NAME_LEN]
    if name.endswith("-"):
        name = name[:-1]
    return name