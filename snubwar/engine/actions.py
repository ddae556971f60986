"""
Action definitions for the game.
Actions are immutable, deterministic instructions committed by the reducer.
Each one is a whole turn: the acting unit does one thing, then control passes.
"""

from dataclasses import dataclass

MOVE = "move"
SHOOT = "shoot"
FORTIFY = "fortify"
ACTION_KINDS = (MOVE, SHOOT, FORTIFY)


@dataclass
class Action:
    """Base action class. All actions have a type, player, and payload."""
    type: str  # "move_unit", "shoot", "fortify"
    player: str  # player performing the action
    payload: dict  # Action-specific data


def move_unit(player: str, unit_id: str, to_face: int) -> Action:
    """
    Move a rover to an adjacent face.
    Example: move_unit("red", "red_rover_001", 17)
    """
    return Action(
        type="move_unit",
        player=player,
        payload={"unit_id": unit_id, "to_face": to_face},
    )


def shoot(player: str, unit_id: str, target_id: str, roll: int) -> Action:
    """
    Shoot at an enemy unit within range.

    roll must be provided (1..6); the reducer does not draw random numbers,
    so the same action list always replays to the same state.

    Example: shoot("red", "red_rover_001", "green_rover_002", 5)
    """
    return Action(
        type="shoot",
        player=player,
        payload={"unit_id": unit_id, "target_id": target_id, "roll": roll},
    )


def fortify(player: str, unit_id: str, face_id: int) -> Action:
    """
    Build a fortification on an empty face adjacent to the unit.
    Example: fortify("green", "green_rover_002", 44)
    """
    return Action(
        type="fortify",
        player=player,
        payload={"unit_id": unit_id, "face_id": face_id},
    )
