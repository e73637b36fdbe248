"""Request-scoped memoization.

Answers about approvability, authorization and approved versions depend on
the current actor and the current persisted state, so they live for one
external request only. A new ``RequestCache`` is created per request.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from ..types import FileVersion, Item


@dataclass
class RequestCache:
    approvable: Dict[Item, bool] = field(default_factory=dict)
    media_approvable: Dict[Item, bool] = field(default_factory=dict)
    categories: Dict[Item, Tuple[str, ...]] = field(default_factory=dict)
    can_approve: Dict[Tuple[str, Item], bool] = field(default_factory=dict)
    approved_revision: Dict[int, Optional[int]] = field(default_factory=dict)
    approved_content: Dict[int, Optional[str]] = field(default_factory=dict)
    file_info: Dict[str, Optional[FileVersion]] = field(default_factory=dict)

    def clear(self) -> None:
        for memo in (
            self.approvable,
            self.media_approvable,
            self.categories,
            self.can_approve,
            self.approved_revision,
            self.approved_content,
            self.file_info,
        ):
            memo.clear()

    def forget_item(self, item: Item) -> None:
        """Drop everything memoized about one item after its record changed."""
        self.approvable.pop(item, None)
        self.media_approvable.pop(item, None)
        self.approved_revision.pop(item.id, None)
        self.approved_content.pop(item.id, None)
        self.file_info.pop(item.file_key, None)
        for key in [k for k in self.can_approve if k[1] == item]:
            del self.can_approve[key]
