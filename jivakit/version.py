"""Version information and upgrade-path checks."""

from __future__ import annotations

import logging
import re
import subprocess

logger = logging.getLogger(__name__)

VERSION = "0.0.1"
COMMIT = ""
DATE = ""

MIN_CURRENT_VERSION = "2.6.0"
# Versions used by CI pipelines; they always compare as newest.
EXCEPTIONS = ("master", "develop")

valid_desired_version = VERSION.split("-")[0]

_INT_RE = re.compile(r"[+-]?\d+")


def _atoi(text: str) -> int:
    """Parse a decimal integer, yielding 0 for anything unparsable."""
    if _INT_RE.fullmatch(text):
        return int(text)
    return 0


def get() -> str:
    """Return the current version."""
    return VERSION


def get_git_commit() -> str:
    """Return the commit SHA, asking git when none was set at build time."""
    if COMMIT:
        return COMMIT
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--verify", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.error("failed to get git commit: %s", exc)
        return ""
    return result.stdout.strip()


def get_version_details() -> str:
    """Return ``<version>-<short commit>``."""
    commit = get_git_commit()
    if len(commit) < 7:
        raise ValueError(f"git commit {commit!r} is too short")
    return "-".join((get(), commit[:7]))


def is_current_version_valid(v: str) -> bool:
    """Tell whether ``v`` may be upgraded to the desired version."""
    return can_current_version_be_upgraded(v.split("-")[0])


def is_desired_version_valid(v: str) -> bool:
    """Tell whether ``v`` matches the version this build upgrades to."""
    return valid_desired_version == v.split("-")[0]


def can_current_version_be_upgraded(version: str) -> bool:
    """Tell whether ``version`` lies between the minimum and desired versions."""
    return is_old_less_than_or_equal_new_version(
        MIN_CURRENT_VERSION, version
    ) and is_old_less_than_or_equal_new_version(version, valid_desired_version)


def is_old_less_than_or_equal_new_version(old: str, new: str) -> bool:
    """Return True if ``old`` is lower than or equal to ``new``."""
    old_parts = old.split("-")[0].split(".")
    new_parts = new.split("-")[0].split(".")
    if new_parts[0] in EXCEPTIONS:
        return True
    if len(new_parts) < len(old_parts):
        raise ValueError(f"version {new!r} has fewer components than {old!r}")
    for old_part, new_part in zip(old_parts, new_parts):
        old_num, new_num = _atoi(old_part), _atoi(new_part)
        if old_num != new_num:
            return old_num < new_num
    return True