"""
Utility functions for the game engine.
"""

import random
from collections import Counter

from snubwar.engine import PLAYERS
from snubwar.engine.combat import RandomSource
from snubwar.engine.state import GameState, Rover, Building, Fortification, AnyUnit
from snubwar.engine.store import EntityStore
from snubwar.engine.topology import hq_faces, face_kind


def create_rover(state: GameState, player: str, face_id: int) -> Rover:
    """Place a full-HP rover for player. Raises if the face is taken."""
    rover = Rover(id=state.generate_unit_id(player, "rover"), player=player, face_id=face_id)
    EntityStore(state).place(rover)
    return rover


def create_building(state: GameState, player: str, face_id: int, building_type: str) -> Building:
    building = Building(
        id=state.generate_unit_id(player, building_type),
        player=player,
        face_id=face_id,
        building_type=building_type,
    )
    EntityStore(state).place(building)
    return building


def create_fortification(state: GameState, player: str, face_id: int) -> Fortification:
    fort = Fortification(id=state.generate_unit_id(player, "fortification"), player=player, face_id=face_id)
    EntityStore(state).place(fort)
    return fort


def initialize_game_state(
    rng: RandomSource | None = None,
    starting_buildings: list[dict] | None = None,
) -> GameState:
    """
    Create a started game: one red and one green rover on two distinct HQ faces.

    Args:
        rng: Random source used to pick the HQ faces (defaults to the random module)
        starting_buildings: Optional extra buildings:
            [{"player": "red", "face_id": 12, "building_type": "factory"}, ...]
            A face that is already taken raises.

    Returns:
        GameState with red to move, game_started=True
    """
    source = rng if rng is not None else random
    hqs = list(hq_faces())

    state = GameState(current_player=PLAYERS[0])
    for player in PLAYERS:
        face_id = hqs.pop(source.randint(0, len(hqs) - 1))
        create_rover(state, player, face_id)

    for entry in starting_buildings or []:
        create_building(state, entry["player"], entry["face_id"], entry["building_type"])

    state.game_started = True
    return state


def get_unit_by_id(state: GameState, unit_id: str) -> AnyUnit | None:
    """Find a unit by id, or None."""
    return EntityStore(state).find(unit_id)


def print_game_state(state: GameState, verbose: bool = False):
    """
    Pretty-print the current game state.

    Args:
        state: Current game state
        verbose: If True, list every unit with its face and HP
    """
    print(f"\n{'='*60}")
    status = f"Winner: {state.winner}" if state.winner else f"Player: {state.current_player}"
    print(f"Turn {state.turn_number} | {status} | Drill cannon shots: {state.drill_cannon_shots}")
    print(f"{'='*60}")

    for player in PLAYERS:
        units = EntityStore(state).units_of(player)
        print(f"\n{player} ({len(units)} units)")
        if not units:
            print("  - No units")
        elif verbose:
            for unit in units:
                kind = getattr(unit, "building_type", unit.type)
                print(f"  - {unit.id}: {kind} on {face_kind(unit.face_id)} {unit.face_id}, "
                      f"hp={unit.hit_points}/{unit.max_hit_points}")
        else:
            counts = Counter(getattr(unit, "building_type", unit.type) for unit in units)
            for kind, count in sorted(counts.items()):
                print(f"  - {kind}: {count}")

    if state.move_history:
        print(f"\n{'History':.<40}")
        for line in state.move_history[-5:]:
            print(f"  {line}")
    print()
