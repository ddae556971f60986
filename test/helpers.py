"""
Test helpers: hand-built states, distance lookups and a scripted dice source.
"""

from snubwar.engine.movement import faces_within
from snubwar.engine.state import GameState, Rover, Building, Fortification
from snubwar.engine.topology import get_topology


class FixedRolls:
    """Stand-in for random.Random that hands out scripted values."""

    def __init__(self, *rolls: int):
        self.rolls = list(rolls)
        self.calls = 0

    def randint(self, a: int, b: int) -> int:
        self.calls += 1
        return self.rolls.pop(0)


def face_at_distance(start: int, distance: int) -> int:
    """Lowest face id exactly `distance` hops from start."""
    reachable = faces_within(start, distance, get_topology().adjacency)
    return min(face_id for face_id, d in reachable.items() if d == distance)


def farthest_face(start: int) -> int:
    reachable = faces_within(start, 100, get_topology().adjacency)
    best = max(reachable.values())
    return min(face_id for face_id, d in reachable.items() if d == best)


def make_state(*units, current_player: str = "red") -> GameState:
    """Running game holding exactly the given units."""
    state = GameState(current_player=current_player, game_started=True)
    for unit in units:
        if isinstance(unit, Rover):
            state.rovers.append(unit)
        elif isinstance(unit, Building):
            state.buildings.append(unit)
        elif isinstance(unit, Fortification):
            state.fortifications.append(unit)
    return state


