"""
Win evaluation: elimination, draws, planet destruction and the end of the game.
"""

import pytest

from helpers import make_state
from snubwar.engine.actions import move_unit, shoot
from snubwar.engine.combat import resolve_shot
from snubwar.engine.errors import RulesViolation
from snubwar.engine.queries import is_alive
from snubwar.engine.reducer import apply_action, check_game_over, evaluate_outcome
from snubwar.engine.state import GameState, Rover, Building
from snubwar.engine.store import EntityStore


def test_alive_means_rover_or_factory():
    state = make_state(
        Building(id="red_factory_001", player="red", face_id=0, building_type="factory"),
        Building(id="green_treasury_001", player="green", face_id=40, building_type="treasury"),
    )
    assert is_alive(state, "red")
    assert not is_alive(state, "green")


def test_no_outcome_while_both_alive(duel):
    assert evaluate_outcome(duel) is None
    assert check_game_over(duel) == []
    assert duel.game_started


def test_draw_when_nobody_is_left():
    state = GameState(current_player="red", game_started=True)
    assert evaluate_outcome(state) == "draw"


def test_destroying_last_rover_wins(board):
    state = make_state(
        Rover(id="red_rover_001", player="red", face_id=0),
        Rover(id="green_rover_001", player="green", face_id=1, hit_points=1),
    )
    new_state, events = apply_action(state, shoot("red", "red_rover_001", "green_rover_001", 4), board)

    assert new_state.winner == "red"
    assert not new_state.game_started
    types = [e.type for e in events]
    assert types.count("game_over") == 1
    assert "turn_started" not in types
    over = next(e for e in events if e.type == "game_over")
    assert over.payload["alive"] == {"red": True, "green": False}


def test_factory_keeps_player_alive(board):
    state = make_state(
        Rover(id="red_rover_001", player="red", face_id=0),
        Rover(id="green_rover_001", player="green", face_id=1, hit_points=1),
        Building(id="green_factory_002", player="green", face_id=91, building_type="factory"),
    )
    new_state, _ = apply_action(state, shoot("red", "red_rover_001", "green_rover_001", 6), board)
    assert new_state.rovers == [state.rovers[0]]
    assert new_state.winner is None
    assert new_state.current_player == "green"


def test_destroying_last_factory_wins(board):
    state = make_state(
        Rover(id="red_rover_001", player="red", face_id=0),
        Building(id="green_factory_001", player="green", face_id=2, building_type="factory", hit_points=1),
        Building(id="green_spaceport_002", player="green", face_id=9, building_type="spaceport"),
    )
    new_state, events = apply_action(state, shoot("red", "red_rover_001", "green_factory_001", 5), board)

    assert [b.id for b in new_state.buildings] == ["green_spaceport_002"]
    assert new_state.winner == "red"
    assert events[-1].type == "game_over"


def test_planet_destroyed_overrides(board):
    state = make_state(
        Rover(id="red_rover_001", player="red", face_id=0),
        Building(id="red_drillcannon_002", player="red", face_id=1, building_type="drillcannon"),
        Rover(id="green_rover_001", player="green", face_id=2, hit_points=1),
    )
    state.drill_cannon_shots = 7
    # killing the last green unit with the eighth drill cannon shot still ends in planet destruction
    new_state, events = apply_action(state, shoot("red", "red_drillcannon_002", "green_rover_001", 6), board)

    assert new_state.drill_cannon_shots == 8
    assert new_state.winner == "planet_destroyed"
    assert events[-1].payload["outcome"] == "planet_destroyed"


def test_check_game_over_runs_once():
    state = GameState(current_player="red", game_started=True)
    first = check_game_over(state)
    assert [e.type for e in first] == ["game_over"]
    assert state.winner == "draw"

    assert check_game_over(state) == []
    assert state.winner == "draw"


def test_no_input_after_game_over(board):
    state = make_state(
        Rover(id="red_rover_001", player="red", face_id=0),
        Rover(id="green_rover_001", player="green", face_id=1, hit_points=1),
    )
    finished, _ = apply_action(state, shoot("red", "red_rover_001", "green_rover_001", 4), board)
    with pytest.raises(RulesViolation) as exc:
        apply_action(finished, move_unit("green", "green_rover_001", 2), board)
    assert exc.value.code == "game_over"


def test_building_worn_down_over_five_hits():
    state = make_state(
        Rover(id="red_rover_001", player="red", face_id=0),
        Building(id="green_factory_001", player="green", face_id=2, building_type="factory"),
    )
    events = []
    store = EntityStore(state, on_event=events.append)
    attacker, factory = state.rovers[0], state.buildings[0]

    for expected_hp in (4, 3, 2, 1):
        assert resolve_shot(store, attacker, factory, 5).remaining_hp == expected_hp
        assert is_alive(state, "green")

    final = resolve_shot(store, attacker, factory, 5)
    assert final.destroyed
    assert state.buildings == []
    assert events[-1].type == "unit_removed"
    assert not is_alive(state, "green")
    assert evaluate_outcome(state) == "red"
