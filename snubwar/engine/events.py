"""
Game events for UI hooks and logging.
Events describe what happened during action processing. The presentation layer
keeps its own id-indexed table of visual handles and updates it from
unit_created / unit_moved / unit_removed.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class GameEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameEvent":
        return cls(type=data["type"], payload=data["payload"])


# ===== Event Type Constants =====

# Unit lifecycle events
UNIT_CREATED = "unit_created"
UNIT_MOVED = "unit_moved"
UNIT_REMOVED = "unit_removed"
UNIT_DAMAGED = "unit_damaged"

# Action events
FORTIFICATION_BUILT = "fortification_built"
SHOT_RESOLVED = "shot_resolved"

# Turn events
TURN_ENDED = "turn_ended"
TURN_STARTED = "turn_started"

# Victory events
GAME_OVER = "game_over"


# ===== Event Factory Functions =====

def unit_created(unit_id: str, unit_type: str, player: str, face_id: int) -> GameEvent:
    return GameEvent(UNIT_CREATED, {
        "unit_id": unit_id,
        "unit_type": unit_type,
        "player": player,
        "face_id": face_id,
    })


def unit_moved(unit_id: str, player: str, from_face: int, to_face: int) -> GameEvent:
    return GameEvent(UNIT_MOVED, {
        "unit_id": unit_id,
        "player": player,
        "from_face": from_face,
        "to_face": to_face,
    })


def unit_removed(
    unit_id: str,
    unit_type: str,
    player: str,
    face_id: int,
    cause: str,  # "destroyed", "import"
) -> GameEvent:
    return GameEvent(UNIT_REMOVED, {
        "unit_id": unit_id,
        "unit_type": unit_type,
        "player": player,
        "face_id": face_id,
        "cause": cause,
    })


def unit_damaged(unit_id: str, old_hp: int, new_hp: int) -> GameEvent:
    return GameEvent(UNIT_DAMAGED, {
        "unit_id": unit_id,
        "old_hp": old_hp,
        "new_hp": new_hp,
        "damage": old_hp - new_hp,
    })


def fortification_built(unit_id: str, player: str, face_id: int, builder_id: str) -> GameEvent:
    return GameEvent(FORTIFICATION_BUILT, {
        "unit_id": unit_id,
        "player": player,
        "face_id": face_id,
        "builder_id": builder_id,
    })


def shot_resolved(
    attacker_id: str,
    target_id: str,
    distance: int,
    roll: int,
    hit: bool,
    destroyed: bool,
    remaining_hp: int,
) -> GameEvent:
    return GameEvent(SHOT_RESOLVED, {
        "attacker_id": attacker_id,
        "target_id": target_id,
        "distance": distance,
        "roll": roll,
        "hit": hit,
        "destroyed": destroyed,
        "remaining_hp": remaining_hp,
    })


def turn_ended(turn_number: int, player: str) -> GameEvent:
    return GameEvent(TURN_ENDED, {
        "turn_number": turn_number,
        "player": player,
    })


def turn_started(turn_number: int, player: str) -> GameEvent:
    return GameEvent(TURN_STARTED, {
        "turn_number": turn_number,
        "player": player,
    })


def game_over(
    outcome: str,
    alive: dict[str, bool],
    drill_cannon_shots: int,
) -> GameEvent:
    """
    Emitted once, when a terminal outcome is reached.

    Args:
        outcome: "red", "green", "draw" or "planet_destroyed"
        alive: {player: has a rover or a factory}
        drill_cannon_shots: cumulative drill cannon shots at the time of the check
    """
    return GameEvent(GAME_OVER, {
        "outcome": outcome,
        "alive": alive,
        "drill_cannon_shots": drill_cannon_shots,
    })
