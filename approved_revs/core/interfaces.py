"""Collaborator protocols consumed by the approval engine.

The engine never talks to the host platform directly. Rendering, indexing,
audit logging, notification, category lookup, revision history and
property lookup are injected as objects implementing these protocols.
"""

from typing import Callable, Iterable, Optional, Protocol, Set

from .types import FileVersion, Item, StructuralOutput


# Returns True/False to force approvability, None to fall through.
ApprovabilityOverrideHook = Callable[[Item], Optional[bool]]


class PropertyLookup(Protocol):
    """Resolves item property values that name actors (e.g. "Reviewer")."""

    def values(self, property_name: str, item: Item) -> Set[str]: ...


class ContentFetch(Protocol):
    """Fetches item text; ``revision_id=None`` means the latest revision.

    Returns None when the revision no longer exists.
    """

    def fetch(self, item: Item, revision_id: Optional[int] = None) -> Optional[str]: ...


class ContentRender(Protocol):
    def render(self, item: Item, text: str, revision_id: Optional[int] = None) -> StructuralOutput: ...


class Indexer(Protocol):
    def apply(self, item: Item, output: StructuralOutput) -> None: ...


class AuditLog(Protocol):
    def record(
        self,
        action: str,
        item: Item,
        params: Iterable[str] = (),
        actor: Optional[str] = None,
    ) -> None: ...


class NotificationBus(Protocol):
    def publish(self, event_kind: str, item: Item, version: object = None) -> None: ...


class CategoryLookup(Protocol):
    """Category graph of the host platform.

    Category names are returned without the ``Category:`` prefix.
    """

    def direct_categories(self, item: Item) -> Iterable[str]: ...

    def parent_categories(self, category: str) -> Iterable[str]: ...


class RevisionHistory(Protocol):
    def creator(self, item: Item) -> Optional[str]:
        """Name of the author of the item's oldest revision."""
        ...


class MarkerLookup(Protocol):
    """Legacy in-content "approvable" marker stored as an item property."""

    def has_marker(self, item: Item) -> bool: ...


class LatestVersionLookup(Protocol):
    def latest_revision(self, item: Item) -> Optional[int]: ...

    def latest_file_version(self, item: Item) -> Optional[FileVersion]: ...


class ItemDirectory(Protocol):
    def get(self, item_id: int) -> Optional[Item]: ...

    def get_by_file_key(self, file_key: str) -> Optional[Item]: ...
