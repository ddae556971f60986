"""
Main game reducer.
Applies committed actions to a copy of the state, enforcing rules.
Returns (new_state, events) where events describe what happened.
A rejected action raises and leaves the caller's state untouched.
"""

from snubwar.engine import DRILL_CANNON_PLANET_DESTROY_THRESHOLD, PLAYERS
from snubwar.engine.actions import Action, MOVE, SHOOT, FORTIFY
from snubwar.engine.combat import resolve_shot
from snubwar.engine.errors import UnknownReferenceError
from snubwar.engine.events import (
    GameEvent,
    fortification_built,
    shot_resolved,
    turn_ended,
    turn_started,
    game_over,
)
from snubwar.engine.queries import (
    check_actor,
    check_can_act,
    check_fortify,
    check_move,
    check_roll,
    check_shoot,
    is_alive,
)
from snubwar.engine.state import GameState, Building, Fortification, DRAW, PLANET_DESTROYED, other_player
from snubwar.engine.store import EntityStore
from snubwar.engine.topology import Topology, get_topology


def apply_action(
    state: GameState,
    action: Action,
    topology: Topology | None = None,
) -> tuple[GameState, list[GameEvent]]:
    """
    Apply a single action to the current state, returning new state and events.

    Validates:
    - The game is running and action.player is the current player
    - The acting unit exists, belongs to the player, and may perform the action
    - The action-specific target rules

    Every committed action ends the turn, which runs the win check.

    Args:
        state: Current game state (never mutated)
        action: Action to apply
        topology: Board; defaults to the process-wide snub dodecahedron

    Returns:
        Tuple of (new_state, events) where events describe what happened
    """
    if topology is None:
        topology = get_topology()

    check_can_act(state, action.player)

    new_state = state.copy()
    events: list[GameEvent] = []
    store = EntityStore(new_state, on_event=events.append)

    if action.type == "move_unit":
        _handle_move_unit(new_state, store, action, topology)

    elif action.type == "fortify":
        events.extend(_handle_fortify(new_state, store, action, topology))

    elif action.type == "shoot":
        events.extend(_handle_shoot(new_state, store, action, topology))

    else:
        raise UnknownReferenceError(f"Unknown action type: {action.type}", code="unknown_action")

    events.extend(end_turn(new_state))
    return new_state, events


def _handle_move_unit(
    state: GameState,
    store: EntityStore,
    action: Action,
    topology: Topology,
) -> None:
    """
    Move a rover one face.
    Validates:
    - Target face is adjacent to the rover's face
    - No rover or building on the target
    - No enemy fortification on the target (own fortifications don't block)
    """
    unit = check_actor(state, action.player, action.payload.get("unit_id"), MOVE)
    to_face = action.payload.get("to_face")
    check_move(state, topology, unit, to_face)

    store.move(unit, to_face)
    state.move_history.append(f"{action.player} moved {unit.type} to {to_face}")


def _handle_fortify(
    state: GameState,
    store: EntityStore,
    action: Action,
    topology: Topology,
) -> list[GameEvent]:
    """
    Build a 1 HP fortification owned by the acting player.
    Validates:
    - Target face is adjacent to the builder
    - Target face is completely empty
    """
    unit = check_actor(state, action.player, action.payload.get("unit_id"), FORTIFY)
    face_id = action.payload.get("face_id")
    check_fortify(state, topology, unit, face_id)

    fortification = Fortification(
        id=state.generate_unit_id(action.player, "fortification"),
        player=action.player,
        face_id=face_id,
    )
    store.place(fortification)
    state.move_history.append(f"{action.player} fortified {face_id}")
    return [fortification_built(fortification.id, action.player, face_id, unit.id)]


def _handle_shoot(
    state: GameState,
    store: EntityStore,
    action: Action,
    topology: Topology,
) -> list[GameEvent]:
    """
    Shoot at an enemy unit. The turn ends whether the shot hits or misses.
    Validates:
    - Target is an enemy rover, building, or fortification
    - 1 <= distance <= shooting range (3, or 5 from an HQ face)
    - The supplied roll is a d6 result
    Every drill cannon shot counts toward planet destruction.
    """
    payload = action.payload
    unit = check_actor(state, action.player, payload.get("unit_id"), SHOOT)
    target = store.get(payload.get("target_id"))
    distance = check_shoot(state, topology, unit, target)
    roll = check_roll(payload.get("roll"))

    if isinstance(unit, Building) and unit.building_type == "drillcannon":
        state.drill_cannon_shots += 1

    result = resolve_shot(store, unit, target, roll)

    if not result.hit:
        outcome = f"miss (rolled {roll}, needed 4+)"
    elif result.destroyed:
        outcome = f"hit (rolled {roll}), target destroyed"
    else:
        outcome = f"hit (rolled {roll}), {result.remaining_hp} HP remaining"
    state.move_history.append(
        f"{action.player} {unit.type} shot {target.type} at {target.face_id}: {outcome}"
    )

    return [shot_resolved(
        unit.id,
        target.id,
        distance,
        roll,
        result.hit,
        result.destroyed,
        result.remaining_hp,
    )]


# ===== Turn end and victory =====

def end_turn(state: GameState) -> list[GameEvent]:
    """
    Pass control to the other player, then run the win check.
    turn_number increments each time control returns to red.
    """
    events: list[GameEvent] = []
    old_player = state.current_player
    events.append(turn_ended(state.turn_number, old_player))

    state.current_player = other_player(old_player)
    if state.current_player == PLAYERS[0]:
        state.turn_number += 1

    over_events = check_game_over(state)
    events.extend(over_events)
    if not over_events:
        events.append(turn_started(state.turn_number, state.current_player))
    return events


def evaluate_outcome(state: GameState) -> str | None:
    """
    Decide whether the game is over.

    Returns:
        None while both players are alive and the planet stands, else one of
        "draw", "red", "green", "planet_destroyed". Planet destruction overrides
        the elimination outcomes.
    """
    red_alive = is_alive(state, "red")
    green_alive = is_alive(state, "green")

    outcome = None
    if not red_alive and not green_alive:
        outcome = DRAW
    elif not red_alive:
        outcome = "green"
    elif not green_alive:
        outcome = "red"

    if state.drill_cannon_shots >= DRILL_CANNON_PLANET_DESTROY_THRESHOLD:
        outcome = PLANET_DESTROYED

    return outcome


def check_game_over(state: GameState) -> list[GameEvent]:
    """
    Run the win check, closing the game on a terminal outcome.
    A game that already has a winner is left alone, so repeated checks emit nothing.
    """
    if state.winner is not None:
        return []

    outcome = evaluate_outcome(state)
    if outcome is None:
        return []

    state.winner = outcome
    state.game_started = False
    return [game_over(
        outcome,
        {player: is_alive(state, player) for player in PLAYERS},
        state.drill_cannon_shots,
    )]


def replay_from_actions(
    initial_state: GameState,
    actions: list[Action],
    topology: Topology | None = None,
) -> tuple[GameState, list[GameEvent]]:
    """
    Replay a series of actions from an initial state.
    Shots carry their rolls, so the result is deterministic.

    Returns:
        Tuple of (final_state, all_events) after all actions applied
    """
    current_state = initial_state.copy()
    all_events: list[GameEvent] = []

    for action in actions:
        current_state, events = apply_action(current_state, action, topology)
        all_events.extend(events)

    return current_state, all_events
