"""Helpers for reading events out of broadcast transaction logs."""
from __future__ import annotations

from typing import Any

__all__ = ["event_attribute"]


def event_attribute(tx_result: Any, event_type: str, key: str, msg_index: int = 0) -> str:
    """Return the first value of ``key`` in ``event_type`` of the given message log.

    Raises:
        KeyError: If the event or attribute is not in the log.
    """
    events = tx_result.logs[msg_index].events_by_type
    if event_type not in events or key not in events[event_type]:
        raise KeyError(f"{event_type}.{key} not found in tx logs")
    return events[event_type][key][0]
