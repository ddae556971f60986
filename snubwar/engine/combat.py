"""
Combat resolution system.
One shooter, one target, one d6: hit on 4+, a hit removes exactly 1 HP.
Range is counted in face hops; standing on an HQ (pentagon) face extends it.
"""

import random
from dataclasses import dataclass
from typing import Any, Protocol

from snubwar.engine import SHOOT_RANGE, HQ_RANGE_BONUS, DICE_SIDES, HIT_THRESHOLD
from snubwar.engine.errors import RulesViolation
from snubwar.engine.state import AnyUnit, Rover
from snubwar.engine.store import EntityStore
from snubwar.engine.topology import is_hq


class RandomSource(Protocol):
    """Anything with random.randint's signature (the random module, random.Random, a test fake)."""

    def randint(self, a: int, b: int) -> int: ...


def shooting_range(unit: AnyUnit) -> int:
    """Base range, plus the HQ bonus when the shooter is a rover standing on a pentagon."""
    if isinstance(unit, Rover) and is_hq(unit.face_id):
        return SHOOT_RANGE + HQ_RANGE_BONUS
    return SHOOT_RANGE


def roll_d6(rng: RandomSource | None = None) -> int:
    """Roll one die. rng defaults to the random module."""
    source = rng if rng is not None else random
    return source.randint(1, DICE_SIDES)


def is_hit(roll: int) -> bool:
    return roll >= HIT_THRESHOLD


@dataclass
class ShotResult:
    """Result of a single shot."""
    roll: int
    hit: bool
    destroyed: bool
    target_id: str
    remaining_hp: int  # target HP after the shot (0 if destroyed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "roll": self.roll,
            "hit": self.hit,
            "destroyed": self.destroyed,
            "target_id": self.target_id,
            "remaining_hp": self.remaining_hp,
        }


def resolve_shot(
    store: EntityStore,
    attacker: AnyUnit,
    target: AnyUnit,
    roll: int,
) -> ShotResult:
    """
    Resolve a shot from attacker at target with a given die roll.

    On a hit the target loses 1 HP through the store, which removes it when it
    reaches 0. On a miss nothing changes. The attacker is never touched; range
    and ownership are checked by the caller.
    """
    if not isinstance(roll, int) or isinstance(roll, bool) or not 1 <= roll <= DICE_SIDES:
        raise RulesViolation(f"Invalid roll: {roll!r} (expected 1..{DICE_SIDES})", code="invalid_roll")
    if attacker is target:
        raise RulesViolation("A unit cannot shoot itself", code="no_enemy_target")

    if not is_hit(roll):
        return ShotResult(
            roll=roll,
            hit=False,
            destroyed=False,
            target_id=target.id,
            remaining_hp=target.hit_points,
        )

    remaining = store.apply_damage(target, 1)
    return ShotResult(
        roll=roll,
        hit=True,
        destroyed=remaining <= 0,
        target_id=target.id,
        remaining_hp=remaining,
    )
