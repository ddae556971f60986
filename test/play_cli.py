#!/usr/bin/env python3
"""
Interactive hot-seat CLI for the Snub War engine.
Run: python test/play_cli.py [--confirm] [--seed N]
"""

import argparse
import random
import sys

from snubwar.engine.errors import GameError
from snubwar.engine.session import GameSession
from snubwar.engine.queries import describe_face, get_game_summary
from snubwar.engine.utils import get_unit_by_id, print_game_state


def print_header(session):
    summary = get_game_summary(session.state)
    print("=" * 60)
    print(f"  TURN {summary['turn_number']} | {summary['current_player'].upper()} "
          f"| Drill cannon shots: {summary['drill_cannon_shots']}")
    if summary["winner"]:
        print(f"  *** GAME OVER - {summary['winner'].upper()} ***")
    selection = session.selection()
    unit = get_unit_by_id(session.state, selection["selected_unit_id"]) if selection["selected_unit_id"] else None
    selected = f"{unit.id} (hp {unit.hit_points}/{unit.max_hit_points})" if unit else "-"
    print(f"  Mode: {selection['mode']} | Selected: {selected}")
    print("=" * 60)


def print_units(session):
    print("\nYour units:")
    for unit in session.selectable_units():
        print(f"  {unit['unit_id']} on {unit['face_id']} ({', '.join(unit['actions'])})")


def print_targets(session):
    unit_id = session.selected_unit_id
    mode = session.mode
    if mode == "move":
        print(f"  Move targets: {session.legal_move_targets(unit_id)}")
    elif mode == "fortify":
        print(f"  Fortify targets: {session.legal_fortify_targets(unit_id)}")
    elif mode == "shoot":
        for t in session.legal_shoot_targets(unit_id):
            print(f"  {t['unit_id']} on {t['face_id']} (distance {t['distance']}, hp {t['hit_points']})")


def print_events(events):
    for e in events:
        p = e.payload
        if e.type == "shot_resolved":
            result = "HIT" if p["hit"] else "miss"
            print(f"  Shot at {p['target_id']}: rolled {p['roll']} -> {result}")
            if p["destroyed"]:
                print(f"    {p['target_id']} destroyed")
        elif e.type == "unit_moved":
            print(f"  {p['unit_id']} moved {p['from_face']} -> {p['to_face']}")
        elif e.type == "fortification_built":
            print(f"  {p['player']} fortified {p['face_id']}")
        elif e.type == "game_over":
            print(f"  *** GAME OVER: {p['outcome'].upper()} ***")
        elif e.type in ["turn_started", "turn_ended", "unit_created", "unit_removed", "unit_damaged"]:
            pass  # Header will show this
        else:
            print(f"  {e.type}: {p}")


def main_loop(session):
    print("\nCommands: s <unit_id> | m | f | x | t <face> | i <face> | c | p | q")
    while True:
        print_header(session)
        if session.mode == "game_over":
            print_game_state(session.state, verbose=True)
            return
        if session.mode == "idle":
            print_units(session)
        else:
            print_targets(session)

        parts = input("\n> ").strip().split()
        if not parts:
            continue
        cmd, args = parts[0].lower(), parts[1:]

        if cmd == "q":
            return
        if cmd == "p":
            print_game_state(session.state, verbose=True)
            continue
        if cmd == "i" and args and args[0].isdigit():
            try:
                print(describe_face(session.state, session.topology, int(args[0])))
            except GameError as e:
                print(f"\n{e.message}")
            continue

        if cmd == "s" and args:
            result = session.select_unit(args[0])
        elif cmd in ("m", "f", "x"):
            result = session.choose_action({"m": "move", "f": "fortify", "x": "shoot"}[cmd])
        elif cmd == "t" and args and args[0].isdigit():
            result = session.target_face(int(args[0]))
        elif cmd == "c":
            result = session.cancel_action()
        else:
            print("Unknown command")
            continue

        if not result.success:
            print(f"\nRejected ({result.code}): {result.reason}")
        elif result.code == "confirm_required":
            print(f"\n{result.reason}")
        elif result.events:
            print("\n--- Events ---")
            print_events(result.events)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Hot-seat Snub War")
    parser.add_argument("--confirm", action="store_true", help="require a second click to confirm moves")
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()
    rng = random.Random(args.seed) if args.seed is not None else None
    try:
        main_loop(GameSession(rng=rng, require_move_confirmation=args.confirm))
    except KeyboardInterrupt:
        print("\n\nGame interrupted. Goodbye!")
        sys.exit(0)
