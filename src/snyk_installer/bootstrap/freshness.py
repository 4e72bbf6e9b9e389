"""Freshness and provenance markers of an installation directory.

``.timestamp`` holds the epoch milliseconds of the last successful install;
``.installedFrom`` holds the URL the binary was fetched from.
"""

from __future__ import annotations

import re
import time
from typing import Optional

from snyk_installer.core.logging import get_logger
from snyk_installer.remote.filepath import RemotePath

LOGGER = get_logger(__name__)

TIMESTAMP_FILE = ".timestamp"
INSTALLED_FROM = ".installedFrom"

MILLIS_PER_HOUR = 3_600_000

# optional sign and ASCII digits only, no "+" or "_"
_TIMESTAMP_PATTERN = re.compile(r"-?[0-9]+")


def now_millis() -> int:
    return time.time_ns() // 1_000_000


def read_timestamp(target: RemotePath) -> Optional[int]:
    """Read the freshness marker of ``target``.

    Returns:
        The stored epoch milliseconds, 0 if the marker is corrupt, or None
        if there is no marker.

    Raises:
        OSError: If the marker exists but cannot be read.
    """
    marker = target.child(TIMESTAMP_FILE)
    if not marker.exists():
        return None

    try:
        content = marker.read_text().strip()
    except UnicodeDecodeError:
        content = ""

    if _TIMESTAMP_PATTERN.fullmatch(content):
        return int(content)

    # corrupt or modified marker => force new installation
    LOGGER.error(f"{TIMESTAMP_FILE} file is corrupt and cannot be read and will be reset to 0.")
    return 0


def is_up_to_date(
    target: RemotePath,
    update_policy_hours: int,
    now_ms: Optional[int] = None,
) -> bool:
    """Check whether the installation in ``target`` can be reused.

    A marker in the future counts as fresh. A missing or corrupt marker is
    stale, and so is one that cannot be read; this function never raises
    for them.

    Args:
        target: Installation directory.
        update_policy_hours: Hours between refreshes.
        now_ms: Current time in epoch milliseconds (default: now).
    """
    try:
        timestamp = read_timestamp(target)
    except OSError as e:
        LOGGER.warning(f"Could not read {TIMESTAMP_FILE} in {target}: {e}")
        return False
    if timestamp is None:
        return False

    now = now_millis() if now_ms is None else now_ms
    elapsed = now - timestamp
    if elapsed <= 0:
        return True
    return elapsed < update_policy_hours * MILLIS_PER_HOUR


def write_timestamp(target: RemotePath, now_ms: Optional[int] = None) -> int:
    """Record a successful installation in ``target``.

    Returns:
        The timestamp written.
    """
    timestamp = now_millis() if now_ms is None else now_ms
    target.child(TIMESTAMP_FILE).write_text(str(timestamp))
    return timestamp


def write_installed_from(target: RemotePath, url: str) -> None:
    target.child(INSTALLED_FROM).write_text(url)
