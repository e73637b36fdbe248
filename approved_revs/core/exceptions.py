"""Exception hierarchy for the approval engine."""

from dataclasses import dataclass
from typing import List, Sequence


class ApprovedRevsError(Exception):
    """Base class for all approval engine errors."""


class ConfigurationError(ApprovedRevsError):
    """Invalid configuration, or configuration requiring a missing subsystem."""


class ItemNotFoundError(ApprovedRevsError):
    """Raised when an item id does not resolve to an item."""

    def __init__(self, item_id):
        super().__init__(f"Item {item_id} not found")
        self.item_id = item_id


class PermissionDeniedError(ApprovedRevsError):
    """Raised when an actor may not approve or unapprove an item."""

    def __init__(self, actor_name: str, item, reason: str):
        super().__init__(f"{actor_name or 'anonymous'} may not change approval of {item}: {reason}")
        self.actor_name = actor_name
        self.item = item
        self.reason = reason


class NotificationError(ApprovedRevsError):
    """Raised when an event could not be delivered."""


@dataclass
class SideEffectFailure:
    """One failed post-commit step (render, index, audit or notify)."""
    step: str
    error: BaseException

    def __str__(self) -> str:
        return f"{self.step}: {self.error}"


class SideEffectError(ApprovedRevsError):
    """
    Raised after an approval record change has committed when one or more
    side-effect steps failed.

    The record change is not rolled back. Callers retry side effects
    separately from the record mutation.
    """

    def __init__(self, action: str, failures: Sequence[SideEffectFailure]):
        self.action = action
        self.failures: List[SideEffectFailure] = list(failures)
        summary = "; ".join(str(f) for f in self.failures)
        super().__init__(f"{action} committed but side effects failed: {summary}")

    @property
    def steps(self) -> List[str]:
        return [f.step for f in self.failures]
