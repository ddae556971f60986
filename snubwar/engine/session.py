"""
Interaction state machine and context object for one game.

A GameSession owns the live GameState and walks the player through
idle -> unit_selected -> move|shoot|fortify -> idle, committing actions
through the reducer. The session is the only place that draws random
numbers; the reducer receives the roll inside the shoot action.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from snubwar import config
from snubwar.engine.actions import ACTION_KINDS, MOVE, FORTIFY, Action, move_unit, shoot, fortify
from snubwar.engine.combat import RandomSource, ShotResult, roll_d6
from snubwar.engine.errors import GameError, RulesViolation, UnknownReferenceError
from snubwar.engine.events import GameEvent, SHOT_RESOLVED, unit_created, unit_removed
from snubwar.engine.queries import (
    allowed_action_kinds,
    check_actor,
    check_can_act,
    check_fortify,
    check_move,
    check_shoot,
    find_shoot_target,
    get_fortify_targets,
    get_move_targets,
    get_selectable_units,
    get_shoot_targets,
    get_units_of,
    require_face,
)
from snubwar.engine.reducer import apply_action
from snubwar.engine.snapshot import export_state, import_state
from snubwar.engine.state import GameState
from snubwar.engine.store import EntityStore
from snubwar.engine.topology import Topology, get_topology
from snubwar.engine.utils import initialize_game_state

IDLE = "idle"
UNIT_SELECTED = "unit_selected"
GAME_OVER = "game_over"


@dataclass
class ActionResult:
    """Outcome of one input. Failed inputs never change the game state."""
    success: bool
    code: str = "ok"
    reason: str = ""
    events: list[GameEvent] = field(default_factory=list)
    shot: ShotResult | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "code": self.code,
            "reason": self.reason,
            "events": [e.to_dict() for e in self.events],
            "shot": self.shot.to_dict() if self.shot else None,
        }


class GameSession:
    def __init__(
        self,
        state: GameState | None = None,
        topology: Topology | None = None,
        rng: RandomSource | None = None,
        require_move_confirmation: bool | None = None,
    ):
        self.topology = topology if topology is not None else get_topology()
        self.rng = rng
        self.state = state if state is not None else initialize_game_state(rng=rng)
        if require_move_confirmation is None:
            require_move_confirmation = config.REQUIRE_MOVE_CONFIRMATION
        self.require_move_confirmation = require_move_confirmation

        self.lock = threading.Lock()
        self._listeners: list[Callable[[GameEvent], None]] = []
        self._mode = IDLE
        self.selected_unit_id: str | None = None
        self.pending_move_face: int | None = None
        self._last_result: ActionResult | None = None

    # ===== Listeners =====

    def subscribe(self, callback: Callable[[GameEvent], None]) -> Callable[[], None]:
        """Register an event listener. Returns a function that unsubscribes it."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _publish(self, events: list[GameEvent]) -> None:
        for event in events:
            for listener in list(self._listeners):
                listener(event)

    # ===== Queries =====

    @property
    def mode(self) -> str:
        if self.state.is_over:
            return GAME_OVER
        return self._mode

    def current_player(self) -> str:
        return self.state.current_player

    def units_of(self, player: str) -> list[dict[str, Any]]:
        return get_units_of(self.state, player)

    def selectable_units(self) -> list[dict[str, Any]]:
        return get_selectable_units(self.state, self.state.current_player)

    def legal_move_targets(self, unit_id: str) -> list[int]:
        return get_move_targets(self.state, self.topology, unit_id)

    def legal_shoot_targets(self, unit_id: str) -> list[dict[str, Any]]:
        return get_shoot_targets(self.state, self.topology, unit_id)

    def legal_fortify_targets(self, unit_id: str) -> list[int]:
        return get_fortify_targets(self.state, self.topology, unit_id)

    def last_action_result(self) -> ActionResult | None:
        return self._last_result

    def selection(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "selected_unit_id": self.selected_unit_id,
            "pending_move_face": self.pending_move_face,
        }

    # ===== Inputs =====

    def select_unit(self, unit_id: str) -> ActionResult:
        """Pick one of the current player's units. Clears any chosen action and armed target."""
        with self.lock:
            try:
                check_can_act(self.state, self.state.current_player)
                check_actor(self.state, self.state.current_player, unit_id)
            except GameError as e:
                return self._fail(e)

            self.selected_unit_id = unit_id
            self.pending_move_face = None
            self._mode = UNIT_SELECTED
            return self._record(ActionResult(True))

    def choose_action(self, kind: str) -> ActionResult:
        with self.lock:
            try:
                check_can_act(self.state, self.state.current_player)
                unit = self._selected_unit()
                if kind not in ACTION_KINDS:
                    raise UnknownReferenceError(f"Unknown action: {kind}", code="unknown_action")
                check_actor(self.state, self.state.current_player, unit.id, kind)
            except GameError as e:
                return self._fail(e)

            self._mode = kind
            self.pending_move_face = None
            return self._record(ActionResult(True))

    def cancel_action(self) -> ActionResult:
        with self.lock:
            if self.mode == GAME_OVER:
                return self._fail(RulesViolation("Game is over.", code="game_over"))
            self._reset_selection()
            return self._record(ActionResult(True))

    def target_face(self, face_id: int) -> ActionResult:
        """
        Resolve a click on a face for the chosen action.
        Legal targets commit the action and end the turn; illegal ones are
        rejected with a reason code and leave the selection as it was.
        """
        with self.lock:
            try:
                player = self.state.current_player
                check_can_act(self.state, player)
                unit = self._selected_unit()
                if self._mode not in ACTION_KINDS:
                    raise RulesViolation("Choose move, shoot or fortify first", code="no_action_chosen")
                require_face(face_id)

                if self._mode == MOVE:
                    check_move(self.state, self.topology, unit, face_id)
                    if self.require_move_confirmation and self.pending_move_face != face_id:
                        self.pending_move_face = face_id
                        return self._record(ActionResult(
                            True, code="confirm_required", reason=f"Click {face_id} again to confirm the move"
                        ))
                    action = move_unit(player, unit.id, face_id)

                elif self._mode == FORTIFY:
                    check_fortify(self.state, self.topology, unit, face_id)
                    action = fortify(player, unit.id, face_id)

                else:
                    target = find_shoot_target(self.state, player, face_id)
                    if target is None:
                        raise RulesViolation(f"No enemy unit on face {face_id}", code="no_enemy_target")
                    check_shoot(self.state, self.topology, unit, target)
                    action = shoot(player, unit.id, target.id, roll_d6(self.rng))

                return self._commit(action)
            except GameError as e:
                return self._fail(e)

    # ===== Snapshots =====

    def export_snapshot(self) -> dict[str, Any]:
        with self.lock:
            return export_state(self.state)

    def import_snapshot(self, snapshot: dict[str, Any]) -> ActionResult:
        """
        Replace the live state with a parsed snapshot. A SnapshotError propagates
        and leaves everything untouched.
        """
        with self.lock:
            new_state = import_state(snapshot)

            events = [
                unit_removed(u.id, u.type, u.player, u.face_id, "import") for u in self.state.all_units()
            ]
            events.extend(
                unit_created(u.id, u.type, u.player, u.face_id) for u in new_state.all_units()
            )
            self.state = new_state
            self._reset_selection()
            self._publish(events)
            return self._record(ActionResult(True, events=events))

    # ===== Internals =====

    def _selected_unit(self):
        if self.selected_unit_id is None:
            raise RulesViolation("No unit selected", code="no_unit_selected")
        return check_actor(self.state, self.state.current_player, self.selected_unit_id)

    def _commit(self, action: Action) -> ActionResult:
        new_state, events = apply_action(self.state, action, self.topology)
        self.state = new_state
        self._reset_selection()

        shot = None
        for event in events:
            if event.type == SHOT_RESOLVED:
                p = event.payload
                shot = ShotResult(p["roll"], p["hit"], p["destroyed"], p["target_id"], p["remaining_hp"])

        self._publish(events)
        return self._record(ActionResult(True, events=events, shot=shot))

    def _reset_selection(self) -> None:
        self._mode = IDLE
        self.selected_unit_id = None
        self.pending_move_face = None

    def _fail(self, error: GameError) -> ActionResult:
        return self._record(ActionResult(False, code=error.code, reason=error.message))

    def _record(self, result: ActionResult) -> ActionResult:
        self._last_result = result
        return result

    def available_actions(self) -> list[str]:
        """Action kinds of the selected unit, or [] when nothing is selected."""
        if self.selected_unit_id is None or self.mode == GAME_OVER:
            return []
        unit = EntityStore(self.state).find(self.selected_unit_id)
        return list(allowed_action_kinds(unit)) if unit is not None else []
