"""
Query functions for UI integration.
These functions help the UI understand what actions are available
without mutating game state. The check_* helpers are the rule checks the
reducer applies before committing; they raise RulesViolation / UnknownReferenceError.
"""

from dataclasses import dataclass
from typing import Any

from snubwar.engine import DICE_SIDES
from snubwar.engine.actions import Action, MOVE, SHOOT, FORTIFY
from snubwar.engine.combat import shooting_range
from snubwar.engine.errors import GameError, RulesViolation, UnknownReferenceError
from snubwar.engine.movement import calculate_distance, faces_within, UNREACHABLE
from snubwar.engine.state import GameState, Rover, Building, AnyUnit
from snubwar.engine.store import EntityStore
from snubwar.engine.topology import Topology, is_valid_face, face_kind


@dataclass
class ValidationResult:
    """Result of action validation."""
    valid: bool
    error: str | None = None
    code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "error": self.error, "code": self.code}


# ===== Rule checks =====

def check_can_act(state: GameState, player: str) -> None:
    """The game must be running and it must be player's turn."""
    if state.winner is not None:
        raise RulesViolation(f"Game is over ({state.winner}).", code="game_over")
    if not state.game_started:
        raise RulesViolation("Game has not started.", code="game_not_started")
    if player != state.current_player:
        raise RulesViolation(
            f"Not {player}'s turn. Current player: {state.current_player}", code="wrong_player"
        )


def require_face(face_id: Any) -> int:
    if not is_valid_face(face_id):
        raise UnknownReferenceError(f"Unknown face: {face_id}", code="unknown_face")
    return face_id


def allowed_action_kinds(unit: AnyUnit) -> tuple[str, ...]:
    """Rovers can move, shoot and fortify. Drill cannons can only shoot. Everything else is inert."""
    if isinstance(unit, Rover):
        return (MOVE, SHOOT, FORTIFY)
    if isinstance(unit, Building) and unit.building_type == "drillcannon":
        return (SHOOT,)
    return ()


def check_actor(state: GameState, player: str, unit_id: str, kind: str | None = None) -> AnyUnit:
    """Resolve unit_id to a unit player owns that can act (and can do `kind`, when given)."""
    unit = EntityStore(state).get(unit_id)
    if unit.player != player:
        raise RulesViolation(f"Unit {unit_id} does not belong to {player}", code="not_your_unit")
    kinds = allowed_action_kinds(unit)
    if not kinds:
        raise RulesViolation(f"{unit.type} {unit_id} cannot act", code="not_selectable")
    if kind is not None and kind not in kinds:
        raise RulesViolation(
            f"{unit_id} cannot {kind}. Allowed: {', '.join(kinds)}", code="action_not_allowed"
        )
    return unit


def check_move(state: GameState, topology: Topology, unit: AnyUnit, to_face: Any) -> None:
    """Target must be adjacent, free of rovers/buildings, and not hold an enemy fortification."""
    require_face(to_face)
    store = EntityStore(state)
    if not topology.are_adjacent(unit.face_id, to_face):
        raise RulesViolation("Invalid move: not adjacent", code="not_adjacent")
    if store.is_occupied(to_face):
        raise RulesViolation("Invalid move: face occupied", code="face_occupied")
    if store.enemy_fortification_at(to_face, unit.player) is not None:
        raise RulesViolation("Invalid move: enemy fortification", code="enemy_fortification")


def check_fortify(state: GameState, topology: Topology, unit: AnyUnit, face_id: Any) -> None:
    """Target must be adjacent and completely empty."""
    require_face(face_id)
    if not topology.are_adjacent(unit.face_id, face_id):
        raise RulesViolation("Can only fortify adjacent spaces", code="not_adjacent")
    if not EntityStore(state).is_empty(face_id):
        raise RulesViolation("Cannot fortify occupied space", code="face_occupied")


def check_shoot(state: GameState, topology: Topology, unit: AnyUnit, target: AnyUnit) -> int:
    """Target must be an enemy unit within 1..range hops. Returns the distance."""
    if target.player == unit.player:
        raise RulesViolation(f"{target.id} is not an enemy unit", code="no_enemy_target")
    distance = calculate_distance(unit.face_id, target.face_id, topology.adjacency)
    max_range = shooting_range(unit)
    if distance == UNREACHABLE or distance < 1 or distance > max_range:
        raise RulesViolation(
            f"Target out of range ({distance} spaces, max {max_range})", code="out_of_range"
        )
    return distance


def check_roll(roll: Any) -> int:
    if not isinstance(roll, int) or isinstance(roll, bool) or not 1 <= roll <= DICE_SIDES:
        raise RulesViolation(f"Invalid roll: {roll!r} (expected 1..{DICE_SIDES})", code="invalid_roll")
    return roll


def find_shoot_target(state: GameState, player: str, face_id: int) -> AnyUnit | None:
    """Enemy unit on a face: a rover first, then a building, then a fortification."""
    for collection in (state.rovers, state.buildings, state.fortifications):
        for unit in collection:
            if unit.face_id == face_id and unit.player != player:
                return unit
    return None


# ===== Action Validation =====

def validate_action(state: GameState, action: Action, topology: Topology) -> ValidationResult:
    """
    Validate an action without applying it.
    Returns ValidationResult with valid=True or valid=False with error message and code.
    """
    try:
        check_can_act(state, action.player)
        payload = action.payload
        if action.type == "move_unit":
            unit = check_actor(state, action.player, payload.get("unit_id"), MOVE)
            check_move(state, topology, unit, payload.get("to_face"))
        elif action.type == "fortify":
            unit = check_actor(state, action.player, payload.get("unit_id"), FORTIFY)
            check_fortify(state, topology, unit, payload.get("face_id"))
        elif action.type == "shoot":
            unit = check_actor(state, action.player, payload.get("unit_id"), SHOOT)
            target = EntityStore(state).get(payload.get("target_id"))
            check_shoot(state, topology, unit, target)
            check_roll(payload.get("roll"))
        else:
            raise UnknownReferenceError(f"Unknown action type: {action.type}", code="unknown_action")
    except GameError as e:
        return ValidationResult(False, e.message, e.code)
    return ValidationResult(True)


# ===== Legal targets =====

def get_move_targets(state: GameState, topology: Topology, unit_id: str) -> list[int]:
    """Adjacent faces the unit may move to, sorted. Empty for units that cannot move."""
    unit = EntityStore(state).get(unit_id)
    if MOVE not in allowed_action_kinds(unit):
        return []
    targets = []
    for face_id in sorted(topology.neighbors(unit.face_id)):
        try:
            check_move(state, topology, unit, face_id)
        except RulesViolation:
            continue
        targets.append(face_id)
    return targets


def get_fortify_targets(state: GameState, topology: Topology, unit_id: str) -> list[int]:
    """Adjacent, completely empty faces, sorted."""
    unit = EntityStore(state).get(unit_id)
    if FORTIFY not in allowed_action_kinds(unit):
        return []
    store = EntityStore(state)
    return [face_id for face_id in sorted(topology.neighbors(unit.face_id)) if store.is_empty(face_id)]


def get_shoot_targets(state: GameState, topology: Topology, unit_id: str) -> list[dict[str, Any]]:
    """
    Enemy units within shooting range of unit.
    Returns list of {unit_id, type, player, face_id, distance, hit_points}, nearest first.
    """
    unit = EntityStore(state).get(unit_id)
    if SHOOT not in allowed_action_kinds(unit):
        return []
    in_range = faces_within(unit.face_id, shooting_range(unit), topology.adjacency)
    targets = []
    for target in state.all_units():
        if target.player == unit.player:
            continue
        distance = in_range.get(target.face_id)
        if distance is None or distance < 1:
            continue
        targets.append({
            "unit_id": target.id,
            "type": target.type,
            "player": target.player,
            "face_id": target.face_id,
            "distance": distance,
            "hit_points": target.hit_points,
        })
    targets.sort(key=lambda t: (t["distance"], t["face_id"], t["unit_id"]))
    return targets


def get_unit_targets(state: GameState, topology: Topology, unit_id: str) -> dict[str, Any]:
    """All three target lists for one unit."""
    unit = EntityStore(state).get(unit_id)
    return {
        "unit_id": unit_id,
        "actions": list(allowed_action_kinds(unit)),
        "shooting_range": shooting_range(unit),
        "move": get_move_targets(state, topology, unit_id),
        "shoot": get_shoot_targets(state, topology, unit_id),
        "fortify": get_fortify_targets(state, topology, unit_id),
    }


def get_selectable_units(state: GameState, player: str) -> list[dict[str, Any]]:
    """Units of player that can act. Returns list of {unit_id, type, face_id, actions}."""
    result = []
    for unit in EntityStore(state).units_of(player):
        kinds = allowed_action_kinds(unit)
        if kinds:
            result.append({
                "unit_id": unit.id,
                "type": unit.type,
                "face_id": unit.face_id,
                "actions": list(kinds),
            })
    return result


# ===== State summaries =====

def is_alive(state: GameState, player: str) -> bool:
    """A player is alive while they own at least one rover or at least one factory."""
    return any(r.player == player for r in state.rovers) or any(
        b.player == player and b.building_type == "factory" for b in state.buildings
    )


def get_units_of(state: GameState, player: str) -> list[dict[str, Any]]:
    return [unit.to_dict() for unit in EntityStore(state).units_of(player)]


def get_player_stats(state: GameState) -> dict[str, dict[str, Any]]:
    """Per-player unit counts and alive status."""
    stats = {}
    for player in ("red", "green"):
        stats[player] = {
            "rovers": sum(1 for r in state.rovers if r.player == player),
            "buildings": sum(1 for b in state.buildings if b.player == player),
            "fortifications": sum(1 for f in state.fortifications if f.player == player),
            "factories": sum(
                1 for b in state.buildings if b.player == player and b.building_type == "factory"
            ),
            "action_points": state.action_points_stored.get(player, 0),
            "alive": is_alive(state, player),
        }
    return stats


def get_game_summary(state: GameState) -> dict[str, Any]:
    """Compact overview for status bars."""
    return {
        "current_player": state.current_player,
        "turn_number": state.turn_number,
        "game_started": state.game_started,
        "winner": state.winner,
        "drill_cannon_shots": state.drill_cannon_shots,
        "players": get_player_stats(state),
    }


def describe_face(state: GameState, topology: Topology, face_id: int) -> dict[str, Any]:
    """What is on a face, for tooltips."""
    require_face(face_id)
    store = EntityStore(state)
    occupant = store.unit_at(face_id)
    fort = store.fortification_at(face_id)
    return {
        "face_id": face_id,
        "type": face_kind(face_id),
        "neighbors": sorted(topology.neighbors(face_id)),
        "unit": occupant.to_dict() if occupant else None,
        "fortification": fort.to_dict() if fort else None,
    }
