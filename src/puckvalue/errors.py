"""Error taxonomy raised by the valuation engine."""

from __future__ import annotations

from typing import Any


class ValuationError(RuntimeError):
    """Base class for valuation pass failures."""


class InsufficientDataError(ValuationError):
    """A category has no observations league-wide."""

    def __init__(self, category: str) -> None:
        super().__init__(f"No observations for category {category}")
        self.category = category

    def __reduce__(self):
        return (type(self), (self.category,))


class InvalidKeeperStateError(ValuationError):
    """A keeper assignment breaks the draft-round tier restrictions."""

    def __init__(self, assignment: Any, reason: str) -> None:
        player_id = getattr(assignment, "player_id", "?")
        super().__init__(f"Invalid keeper assignment for player {player_id}: {reason}")
        self.assignment = assignment
        self.reason = reason

    def __reduce__(self):
        # Rebuild from the structured fields when crossing process boundaries.
        return (type(self), (self.assignment, self.reason))


class ConfigurationError(ValuationError):
    """A stat category present in the raw stats cannot be weighted."""

    def __init__(self, category: str, reason: str) -> None:
        super().__init__(f"Category {category}: {reason}")
        self.category = category
        self.reason = reason

    def __reduce__(self):
        return (type(self), (self.category, self.reason))
