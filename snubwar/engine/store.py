"""
Entity store: query and mutation operations over the unit collections of a GameState.

The store does not own any presentation objects. Every collection change is
reported through on_event (unit_created / unit_moved / unit_removed /
unit_damaged) so the presentation layer can create or release its handles.
"""

from collections.abc import Callable

from snubwar.engine.state import GameState, Rover, Building, Fortification, AnyUnit
from snubwar.engine.errors import RulesViolation, UnknownReferenceError
from snubwar.engine.events import GameEvent, unit_created, unit_moved, unit_removed, unit_damaged
from snubwar.engine.topology import is_valid_face


class EntityStore:
    """View over one GameState's rovers, buildings and fortifications."""

    def __init__(self, state: GameState, on_event: Callable[[GameEvent], None] | None = None):
        self.state = state
        self._on_event = on_event

    def _emit(self, event: GameEvent) -> None:
        if self._on_event is not None:
            self._on_event(event)

    def _collection(self, unit: AnyUnit) -> list:
        if isinstance(unit, Rover):
            return self.state.rovers
        if isinstance(unit, Building):
            return self.state.buildings
        if isinstance(unit, Fortification):
            return self.state.fortifications
        raise TypeError(f"Not a unit: {unit!r}")

    # ===== Queries =====

    def get(self, unit_id: str) -> AnyUnit:
        """Find a unit by id. Raises UnknownReferenceError if there is none."""
        for unit in self.state.all_units():
            if unit.id == unit_id:
                return unit
        raise UnknownReferenceError(f"Unknown unit: {unit_id}", code="unknown_unit")

    def find(self, unit_id: str) -> AnyUnit | None:
        for unit in self.state.all_units():
            if unit.id == unit_id:
                return unit
        return None

    def units_of(self, player: str) -> list[AnyUnit]:
        return [unit for unit in self.state.all_units() if unit.player == player]

    def unit_at(self, face_id: int) -> Rover | Building | None:
        """The rover or building on a face, if any."""
        for unit in [*self.state.rovers, *self.state.buildings]:
            if unit.face_id == face_id:
                return unit
        return None

    def fortification_at(self, face_id: int) -> Fortification | None:
        for fort in self.state.fortifications:
            if fort.face_id == face_id:
                return fort
        return None

    def is_occupied(self, face_id: int) -> bool:
        """True if a rover or building sits on the face. Fortifications don't count."""
        return self.unit_at(face_id) is not None

    def is_empty(self, face_id: int) -> bool:
        """True if nothing at all (rover, building, or fortification of either player) is on the face."""
        return not self.is_occupied(face_id) and self.fortification_at(face_id) is None

    def enemy_fortification_at(self, face_id: int, player: str) -> Fortification | None:
        """A fortification on the face owned by someone other than player."""
        for fort in self.state.fortifications:
            if fort.face_id == face_id and fort.player != player:
                return fort
        return None

    # ===== Mutations =====

    def place(self, unit: AnyUnit) -> AnyUnit:
        """
        Add a unit to the board.
        Rovers and buildings need a face without rover/building; fortifications need a fully empty face.
        """
        if not is_valid_face(unit.face_id):
            raise UnknownReferenceError(f"Unknown face: {unit.face_id}", code="unknown_face")
        if self.find(unit.id) is not None:
            raise RulesViolation(f"Unit id already in use: {unit.id}", code="duplicate_unit")
        if isinstance(unit, Fortification):
            if not self.is_empty(unit.face_id):
                raise RulesViolation(f"Face {unit.face_id} is not empty", code="face_occupied")
        elif self.is_occupied(unit.face_id):
            raise RulesViolation(f"Face {unit.face_id} is occupied", code="face_occupied")

        self._collection(unit).append(unit)
        self._emit(unit_created(unit.id, unit.type, unit.player, unit.face_id))
        return unit

    def remove(self, unit: AnyUnit, cause: str = "destroyed") -> None:
        """Take a unit off the board and signal eviction of its visual handle."""
        collection = self._collection(unit)
        for index, existing in enumerate(collection):
            if existing is unit or existing.id == unit.id:
                del collection[index]
                self._emit(unit_removed(unit.id, unit.type, unit.player, unit.face_id, cause))
                return
        raise UnknownReferenceError(f"Unknown unit: {unit.id}", code="unknown_unit")

    def move(self, unit: Rover, face_id: int) -> None:
        old_face = unit.face_id
        unit.face_id = face_id
        self._emit(unit_moved(unit.id, unit.player, old_face, face_id))

    def apply_damage(self, unit: AnyUnit, amount: int) -> int:
        """
        Subtract amount HP from unit. Returns the remaining HP.
        A unit that reaches 0 is removed in the same call, so no unit with HP <= 0 is ever observable.
        """
        if amount < 0:
            raise ValueError(f"Damage must be >= 0, got {amount}")
        old_hp = unit.hit_points
        remaining = max(0, old_hp - amount)
        if remaining == old_hp:
            return remaining
        if remaining == 0:
            self.remove(unit, cause="destroyed")
            unit.hit_points = 0
            return 0
        unit.hit_points = remaining
        self._emit(unit_damaged(unit.id, old_hp, remaining))
        return remaining
