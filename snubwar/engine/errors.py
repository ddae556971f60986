"""
Engine exceptions.

All of them subclass ValueError so callers that only know "the action was
rejected" can keep catching ValueError. Each carries a short machine-readable
code next to the human-readable message.
"""

from typing import Any

class GameError(ValueError):
    """Base class for errors raised by the engine."""

    code = "game_error"

    def __init__(self, message: str, code: str | None = None, **details: Any):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"code": self.code, "reason": self.message}
        if self.details:
            out["details"] = self.details
        return out


class RulesViolation(GameError):
    """The action is well formed but not legal right now (not adjacent, occupied, out of range...)."""

    code = "rules_violation"


class UnknownReferenceError(GameError):
    """An id (unit, face, action kind) does not refer to anything."""

    code = "unknown_reference"


class SnapshotError(GameError):
    """An imported snapshot is malformed; the import is refused."""

    code = "invalid_snapshot"
