"""Value types shared by the policy engine and the approval store."""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from .namespaces import namespace_name


@dataclass(frozen=True)
class Item:
    """
    An addressable content unit (page or file).

    ``id`` is the host platform's stable numeric page id. ``namespace`` is a
    namespace id; ``name`` is the title text without the namespace prefix.
    """
    id: int
    namespace: int
    name: str
    exists: bool = True
    namespace_text: Optional[str] = None  # display name for a namespace outside the canonical table

    @property
    def namespace_name(self) -> str:
        if self.namespace_text is not None:
            return self.namespace_text
        return namespace_name(self.namespace)

    @property
    def full_name(self) -> str:
        ns = self.namespace_name
        return f"{ns}:{self.name}" if ns else self.name

    @property
    def base_name(self) -> str:
        """Title text before the first subpage separator."""
        return self.name.split("/", 1)[0]

    @property
    def file_key(self) -> str:
        """Stable file identity (title text in storage-key form)."""
        return self.name.replace(" ", "_")

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class Actor:
    """The user performing a request. An empty name means anonymous."""
    name: str = ""
    groups: FrozenSet[str] = frozenset()

    @property
    def is_anonymous(self) -> bool:
        return not self.name

    @classmethod
    def anonymous(cls) -> "Actor":
        return cls()


@dataclass(frozen=True)
class FileVersion:
    """A file version identified by upload timestamp and content hash."""
    timestamp: str
    sha1: str

    @property
    def fingerprint(self) -> str:
        return self.sha1[:8]


@dataclass
class StructuralOutput:
    """Render result pushed to the indexer: link/category graph and search text."""
    links: FrozenSet[str] = frozenset()
    categories: FrozenSet[str] = frozenset()
    search_text: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)
