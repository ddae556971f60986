"""
Game state representation.
The reducer works on copies; mutations never touch the caller's state.
Includes JSON serialization for save/load functionality.

Parsing is strict: a dict with missing or unknown keys, wrong types, or values
that break a board invariant raises SnapshotError instead of being coerced.
"""

import json
from dataclasses import dataclass, field
from copy import deepcopy
from typing import Any, ClassVar

from snubwar.engine import (
    PLAYERS,
    BUILDING_TYPES,
    ROVER_MAX_HP,
    BUILDING_MAX_HP,
    FORTIFICATION_HP,
)
from snubwar.engine.errors import SnapshotError
from snubwar.engine.topology import is_valid_face

DRAW = "draw"
PLANET_DESTROYED = "planet_destroyed"
OUTCOMES = (*PLAYERS, DRAW, PLANET_DESTROYED)


def other_player(player: str) -> str:
    return "green" if player == "red" else "red"


# ===== Strict parsing helpers =====

def _require_keys(data: Any, expected: set[str], what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise SnapshotError(f"{what} must be an object, got {type(data).__name__}")
    missing = expected - data.keys()
    if missing:
        raise SnapshotError(f"{what} is missing fields: {', '.join(sorted(missing))}")
    unknown = data.keys() - expected
    if unknown:
        raise SnapshotError(f"{what} has unknown fields: {', '.join(sorted(map(str, unknown)))}")
    return data


def _int(data: dict[str, Any], key: str, what: str) -> int:
    value = data[key]
    # bool is an int subclass; True is not a hit point count
    if not isinstance(value, int) or isinstance(value, bool):
        raise SnapshotError(f"{what}.{key} must be an integer")
    return value


def _str(data: dict[str, Any], key: str, what: str) -> str:
    value = data[key]
    if not isinstance(value, str) or not value:
        raise SnapshotError(f"{what}.{key} must be a non-empty string")
    return value


def _player(data: dict[str, Any], key: str, what: str) -> str:
    value = _str(data, key, what)
    if value not in PLAYERS:
        raise SnapshotError(f"{what}.{key} must be one of {PLAYERS}, got {value!r}")
    return value


def _face(data: dict[str, Any], key: str, what: str) -> int:
    value = _int(data, key, what)
    if not is_valid_face(value):
        raise SnapshotError(f"{what}.{key} is not a face id: {value}")
    return value


def _hit_points(data: dict[str, Any], what: str, expected_max: int) -> tuple[int, int]:
    hp = _int(data, "hit_points", what)
    max_hp = _int(data, "max_hit_points", what)
    if max_hp != expected_max:
        raise SnapshotError(f"{what}.max_hit_points must be {expected_max}, got {max_hp}")
    if not 1 <= hp <= max_hp:
        raise SnapshotError(f"{what}.hit_points must be within 1..{max_hp}, got {hp}")
    return hp, max_hp


def _list(data: dict[str, Any], key: str, what: str) -> list[Any]:
    value = data[key]
    if not isinstance(value, list):
        raise SnapshotError(f"{what}.{key} must be a list")
    return value


# ===== Units =====

@dataclass
class Rover:
    """Mobile combat unit."""
    id: str  # e.g. "red_rover_001"
    player: str  # "red" or "green"
    face_id: int
    hit_points: int = ROVER_MAX_HP
    max_hit_points: int = ROVER_MAX_HP

    type: ClassVar[str] = "rover"
    FIELDS: ClassVar[set[str]] = {"type", "id", "player", "face_id", "hit_points", "max_hit_points"}

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "id": self.id,
            "player": self.player,
            "face_id": self.face_id,
            "hit_points": self.hit_points,
            "max_hit_points": self.max_hit_points,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Rover":
        data = _require_keys(data, cls.FIELDS, "rover")
        if data["type"] != cls.type:
            raise SnapshotError(f"rover.type must be 'rover', got {data['type']!r}")
        hp, max_hp = _hit_points(data, "rover", ROVER_MAX_HP)
        return cls(
            id=_str(data, "id", "rover"),
            player=_player(data, "player", "rover"),
            face_id=_face(data, "face_id", "rover"),
            hit_points=hp,
            max_hit_points=max_hp,
        )


@dataclass
class Building:
    """Immobile structure. A factory keeps its owner alive."""
    id: str
    player: str
    face_id: int
    building_type: str  # "spaceport", "factory", "drillcannon", "treasury"
    hit_points: int = BUILDING_MAX_HP
    max_hit_points: int = BUILDING_MAX_HP

    type: ClassVar[str] = "building"
    FIELDS: ClassVar[set[str]] = {
        "type", "id", "player", "face_id", "building_type", "hit_points", "max_hit_points",
    }

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "id": self.id,
            "player": self.player,
            "face_id": self.face_id,
            "building_type": self.building_type,
            "hit_points": self.hit_points,
            "max_hit_points": self.max_hit_points,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Building":
        data = _require_keys(data, cls.FIELDS, "building")
        if data["type"] != cls.type:
            raise SnapshotError(f"building.type must be 'building', got {data['type']!r}")
        building_type = _str(data, "building_type", "building")
        if building_type not in BUILDING_TYPES:
            raise SnapshotError(f"Unknown building type: {building_type!r}")
        hp, max_hp = _hit_points(data, "building", BUILDING_MAX_HP)
        return cls(
            id=_str(data, "id", "building"),
            player=_player(data, "player", "building"),
            face_id=_face(data, "face_id", "building"),
            building_type=building_type,
            hit_points=hp,
            max_hit_points=max_hp,
        )


@dataclass
class Fortification:
    """Single-HP obstacle. Blocks enemy movement onto its face."""
    id: str
    player: str
    face_id: int
    hit_points: int = FORTIFICATION_HP
    max_hit_points: int = FORTIFICATION_HP

    type: ClassVar[str] = "fortification"
    FIELDS: ClassVar[set[str]] = {"type", "id", "player", "face_id", "hit_points", "max_hit_points"}

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "id": self.id,
            "player": self.player,
            "face_id": self.face_id,
            "hit_points": self.hit_points,
            "max_hit_points": self.max_hit_points,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Fortification":
        data = _require_keys(data, cls.FIELDS, "fortification")
        if data["type"] != cls.type:
            raise SnapshotError(f"fortification.type must be 'fortification', got {data['type']!r}")
        hp, max_hp = _hit_points(data, "fortification", FORTIFICATION_HP)
        return cls(
            id=_str(data, "id", "fortification"),
            player=_player(data, "player", "fortification"),
            face_id=_face(data, "face_id", "fortification"),
            hit_points=hp,
            max_hit_points=max_hp,
        )


AnyUnit = Rover | Building | Fortification


# ===== Game State =====

@dataclass
class GameState:
    """Complete mutable game state. Unit collections are owned exclusively by this object."""
    current_player: str  # "red" or "green"
    rovers: list[Rover] = field(default_factory=list)
    buildings: list[Building] = field(default_factory=list)
    fortifications: list[Fortification] = field(default_factory=list)
    # Append-only, human-readable ("red moved rover to 17")
    move_history: list[str] = field(default_factory=list)
    # True while the game accepts actions; flips to False once, when an outcome is reached
    game_started: bool = False
    action_points_stored: dict[str, int] = field(
        default_factory=lambda: {player: 0 for player in PLAYERS}
    )
    drill_cannon_shots: int = 0
    # Increments each time control returns to red
    turn_number: int = 1
    # None while running; "red", "green", "draw" or "planet_destroyed" once over
    winner: str | None = None
    # Counter for generating unique unit ids (player -> last issued number)
    unit_id_counters: dict[str, int] = field(default_factory=dict)

    FIELDS: ClassVar[set[str]] = {
        "current_player", "rovers", "buildings", "fortifications", "move_history",
        "game_started", "action_points_stored", "drill_cannon_shots", "turn_number",
        "winner", "unit_id_counters",
    }

    def copy(self) -> "GameState":
        """Return a deep copy of this game state."""
        return deepcopy(self)

    def generate_unit_id(self, player: str, kind: str) -> str:
        """
        Generate a unique id for a unit ("red_rover_001").
        Skips ids already on the board, so a counter that lags behind an
        imported snapshot catches up instead of reissuing a taken id.
        """
        taken = {unit.id for unit in self.all_units()}
        while True:
            self.unit_id_counters[player] = self.unit_id_counters.get(player, 0) + 1
            unit_id = f"{player}_{kind}_{self.unit_id_counters[player]:03d}"
            if unit_id not in taken:
                return unit_id

    def all_units(self) -> list[AnyUnit]:
        return [*self.rovers, *self.buildings, *self.fortifications]

    @property
    def is_over(self) -> bool:
        return self.winner is not None

    # ===== Serialization Methods =====

    def to_dict(self) -> dict[str, Any]:
        """Convert GameState to a dictionary for JSON serialization."""
        return {
            "current_player": self.current_player,
            "rovers": [r.to_dict() for r in self.rovers],
            "buildings": [b.to_dict() for b in self.buildings],
            "fortifications": [f.to_dict() for f in self.fortifications],
            "move_history": list(self.move_history),
            "game_started": self.game_started,
            "action_points_stored": dict(self.action_points_stored),
            "drill_cannon_shots": self.drill_cannon_shots,
            "turn_number": self.turn_number,
            "winner": self.winner,
            "unit_id_counters": dict(self.unit_id_counters),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameState":
        """Create GameState from a dictionary. Raises SnapshotError on any malformed field."""
        data = _require_keys(data, cls.FIELDS, "state")

        rovers = [Rover.from_dict(r) for r in _list(data, "rovers", "state")]
        buildings = [Building.from_dict(b) for b in _list(data, "buildings", "state")]
        fortifications = [Fortification.from_dict(f) for f in _list(data, "fortifications", "state")]

        history = _list(data, "move_history", "state")
        if not all(isinstance(line, str) for line in history):
            raise SnapshotError("state.move_history must contain only strings")

        if not isinstance(data["game_started"], bool):
            raise SnapshotError("state.game_started must be a boolean")

        points = _require_keys(data["action_points_stored"], set(PLAYERS), "state.action_points_stored")
        for player in PLAYERS:
            if _int(points, player, "state.action_points_stored") < 0:
                raise SnapshotError("state.action_points_stored values must be >= 0")

        shots = _int(data, "drill_cannon_shots", "state")
        if shots < 0:
            raise SnapshotError("state.drill_cannon_shots must be >= 0")

        turn_number = _int(data, "turn_number", "state")
        if turn_number < 1:
            raise SnapshotError("state.turn_number must be >= 1")

        winner = data["winner"]
        if winner is not None and winner not in OUTCOMES:
            raise SnapshotError(f"state.winner must be null or one of {OUTCOMES}, got {winner!r}")
        if winner is not None and data["game_started"]:
            raise SnapshotError("state.game_started must be false once a winner is set")

        counters = data["unit_id_counters"]
        if not isinstance(counters, dict):
            raise SnapshotError("state.unit_id_counters must be an object")
        for player, value in counters.items():
            if player not in PLAYERS or not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise SnapshotError(f"state.unit_id_counters has an invalid entry: {player!r}")

        _check_board_invariants(rovers, buildings, fortifications)

        return cls(
            current_player=_player(data, "current_player", "state"),
            rovers=rovers,
            buildings=buildings,
            fortifications=fortifications,
            move_history=list(history),
            game_started=data["game_started"],
            action_points_stored={player: points[player] for player in PLAYERS},
            drill_cannon_shots=shots,
            turn_number=turn_number,
            winner=winner,
            unit_id_counters=dict(counters),
        )

    def to_json(self, indent: int = 2) -> str:
        """Serialize GameState to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "GameState":
        """Deserialize GameState from a JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"State is not valid JSON: {e}") from e
        return cls.from_dict(data)

    def save(self, filepath: str) -> None:
        """Save GameState to a JSON file."""
        with open(filepath, "w") as f:
            f.write(self.to_json())

    @classmethod
    def load(cls, filepath: str) -> "GameState":
        """Load GameState from a JSON file."""
        with open(filepath, "r") as f:
            return cls.from_json(f.read())


def _check_board_invariants(
    rovers: list[Rover],
    buildings: list[Building],
    fortifications: list[Fortification],
) -> None:
    """Unique ids, at most one rover/building per face, at most one fortification per face."""
    seen_ids: set[str] = set()
    for unit in [*rovers, *buildings, *fortifications]:
        if unit.id in seen_ids:
            raise SnapshotError(f"Duplicate unit id: {unit.id}")
        seen_ids.add(unit.id)

    occupied: dict[int, str] = {}
    for unit in [*rovers, *buildings]:
        if unit.face_id in occupied:
            raise SnapshotError(
                f"Face {unit.face_id} holds both {occupied[unit.face_id]} and {unit.id}"
            )
        occupied[unit.face_id] = unit.id

    fortified: set[int] = set()
    for fort in fortifications:
        if fort.face_id in fortified:
            raise SnapshotError(f"Face {fort.face_id} holds more than one fortification")
        fortified.add(fort.face_id)
