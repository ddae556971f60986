"""
Main entry point for the Snub War game engine.
Demonstrates core functionality with a few simulated scenarios.
"""

import random

from snubwar.engine.actions import move_unit, shoot, fortify
from snubwar.engine.movement import faces_within
from snubwar.engine.reducer import apply_action, replay_from_actions
from snubwar.engine.session import GameSession
from snubwar.engine.state import GameState
from snubwar.engine.topology import get_topology
from snubwar.engine.utils import (
    initialize_game_state,
    print_game_state,
    create_rover,
    create_building,
)


def main():
    print("Snub War - tactics on a snub dodecahedron")
    print("=" * 60)

    topology = get_topology()
    print(f"Board: {len(topology.faces)} faces, {topology.edge_count()} edges")

    state = initialize_game_state(rng=random.Random(7))
    print("\n[INITIAL STATE]")
    print_game_state(state, verbose=True)

    # ===== SCENARIO 1: Movement =====
    print("\n[SCENARIO 1: Movement]")
    red_rover = next(r for r in state.rovers if r.player == "red")
    to_face = min(topology.neighbors(red_rover.face_id))
    print(f"Moving {red_rover.id} from {red_rover.face_id} to {to_face}...")

    try:
        state, events = apply_action(state, move_unit("red", red_rover.id, to_face), topology)
        print("✓ Move successful!")
        print(f"  Events: {[e.type for e in events]}")
        print(f"  Now {state.current_player} to play")
    except ValueError as e:
        print(f"✗ Move failed: {e}")
        return

    # ===== SCENARIO 2: Fortify and blocked movement =====
    print("\n[SCENARIO 2: Fortification]")
    green_rover = next(r for r in state.rovers if r.player == "green")
    fort_face = min(topology.neighbors(green_rover.face_id))
    state, events = apply_action(state, fortify("green", green_rover.id, fort_face), topology)
    print(f"✓ Green fortified {fort_face}")
    print(f"  Events: {[e.type for e in events]}")

    # ===== SCENARIO 3: Shooting with fixed rolls =====
    print("\n[SCENARIO 3: Shooting]")
    state = GameState(current_player="red", game_started=True)
    shooter = create_rover(state, "red", 0)
    target_face = min(f for f, d in faces_within(0, 2, topology.adjacency).items() if d == 2)
    target = create_rover(state, "green", target_face)
    create_building(state, "green", 91, "factory")

    actions = [
        shoot("red", shooter.id, target.id, 6),
        fortify("green", target.id, min(f for f in topology.neighbors(target_face) if f not in (0, 91))),
        shoot("red", shooter.id, target.id, 2),
    ]
    final_state, events = replay_from_actions(state, actions, topology)
    for e in events:
        if e.type == "shot_resolved":
            p = e.payload
            print(f"  - roll {p['roll']}: {'hit' if p['hit'] else 'miss'}, target hp={p['remaining_hp']}")
    print("History:")
    for line in final_state.move_history:
        print(f"  {line}")

    # ===== SCENARIO 4: Session with the interaction machine =====
    print("\n[SCENARIO 4: Interaction machine]")
    session = GameSession(rng=random.Random(3), require_move_confirmation=True)
    session.subscribe(lambda event: print(f"  event: {event.type} {event.payload}"))
    rover_id = session.selectable_units()[0]["unit_id"]
    face = session.legal_move_targets(rover_id)[0]
    print(f"select {rover_id}: {session.select_unit(rover_id).code}")
    print(f"choose move: {session.choose_action('move').code}")
    print(f"click {face}: {session.target_face(face).code}")
    print(f"click {face} again: {session.target_face(face).code}")

    print_game_state(session.state)

    # ===== Summary =====
    print("\n" + "=" * 60)
    print("✓ Demonstrated:")
    print("  • Movement across adjacent faces")
    print("  • Fortifications")
    print("  • Deterministic shooting and replay")
    print("  • Arm-then-confirm interaction")
    print("=" * 60)


if __name__ == "__main__":
    main()
