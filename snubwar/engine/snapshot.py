"""
Versioned snapshot export/import.
A snapshot is {"version", "timestamp", "state"} where state is GameState.to_dict().
Import parses everything before anything is replaced.
"""

import time
from typing import Any

from snubwar.config import SNAPSHOT_VERSION
from snubwar.engine.errors import SnapshotError
from snubwar.engine.state import GameState

SNAPSHOT_FIELDS = {"version", "timestamp", "state"}


def export_state(state: GameState) -> dict[str, Any]:
    """Independent copy of state, tagged with the format version and epoch milliseconds."""
    return {
        "version": SNAPSHOT_VERSION,
        "timestamp": int(time.time() * 1000),
        "state": state.to_dict(),
    }


def import_state(snapshot: Any) -> GameState:
    """
    Parse a snapshot produced by export_state.
    Raises SnapshotError for any malformed or unsupported input.
    """
    if not isinstance(snapshot, dict):
        raise SnapshotError(f"Snapshot must be an object, got {type(snapshot).__name__}")
    missing = SNAPSHOT_FIELDS - snapshot.keys()
    if missing:
        raise SnapshotError(f"Snapshot is missing fields: {', '.join(sorted(missing))}")
    unknown = snapshot.keys() - SNAPSHOT_FIELDS
    if unknown:
        raise SnapshotError(f"Snapshot has unknown fields: {', '.join(sorted(map(str, unknown)))}")

    if snapshot["version"] != SNAPSHOT_VERSION:
        raise SnapshotError(
            f"Unsupported snapshot version {snapshot['version']!r} (expected {SNAPSHOT_VERSION})"
        )
    timestamp = snapshot["timestamp"]
    if not isinstance(timestamp, int) or isinstance(timestamp, bool) or timestamp < 0:
        raise SnapshotError("Snapshot timestamp must be a non-negative integer")

    return GameState.from_dict(snapshot["state"])
