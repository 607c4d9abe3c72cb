"""Registry of volumes with an operation in progress."""

from __future__ import annotations

import threading

_transitions: dict[str, str] = {}
_lock = threading.Lock()


class VolumeBusyError(RuntimeError):
    """Raised when a volume already has an operation in progress."""

    def __init__(self, volume_id: str, request: str) -> None:
        super().__init__(f"Volume Busy, {request} is already in progress")
        self.volume_id = volume_id
        self.request = request


def add_volume_to_transition_list(volume_id: str, req: str) -> None:
    """Mark ``volume_id`` as busy with ``req``; raise if it is already busy."""
    with _lock:
        current = _transitions.get(volume_id)
        if current is not None:
            raise VolumeBusyError(volume_id, current)
        _transitions[volume_id] = req


def remove_volume_from_transition_list(volume_id: str) -> None:
    """Clear any operation recorded for ``volume_id``."""
    with _lock:
        _transitions.pop(volume_id, None)