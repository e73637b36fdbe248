"""Decides whether an item takes part in the approval workflow.

Approvability is independent of who may approve. An item is approvable
when policy names it (by namespace, category or page), when an override
hook says so, or through two legacy paths: the in-content marker property
and an already existing approval record.
"""

import logging
from typing import Callable, Dict, Optional, Tuple

from approved_revs.db.repository import ApprovalRepository

from ..interfaces import ApprovabilityOverrideHook, MarkerLookup
from ..namespaces import BANNED_NAMESPACES
from ..types import Item
from .categories import CategoryClosureResolver
from .registry import PermissionRegistry

logger = logging.getLogger(__name__)


class ApprovabilityResolver:
    """
    Answers ``is_approvable`` / ``media_is_approvable`` for one request.

    Answers are memoized per item in the supplied dictionaries, which the
    caller scopes to a single request.
    """

    def __init__(
        self,
        registry: Callable[[], PermissionRegistry],
        categories: CategoryClosureResolver,
        repository: ApprovalRepository,
        *,
        override_hook: Optional[ApprovabilityOverrideHook] = None,
        marker_lookup: Optional[MarkerLookup] = None,
        memo: Optional[Dict[Item, bool]] = None,
        media_memo: Optional[Dict[Item, bool]] = None,
    ):
        self._registry = registry
        self.categories = categories
        self.repository = repository
        self.override_hook = override_hook
        self.marker_lookup = marker_lookup
        self.memo = memo if memo is not None else {}
        self.media_memo = media_memo if media_memo is not None else {}

    @property
    def registry(self) -> PermissionRegistry:
        return self._registry()

    def in_namespace_permissions(self, item: Item) -> bool:
        return item.namespace in self.registry.namespace_rules

    def approvable_categories(self, item: Item) -> Tuple[str, ...]:
        return self.registry.matching_categories(self.categories.closure(item))

    def in_category_permissions(self, item: Item) -> bool:
        return len(self.approvable_categories(item)) > 0

    def in_page_permissions(self, item: Item) -> bool:
        return item.full_name in self.registry.page_rules

    def title_in_permissions(self, item: Item) -> bool:
        """True if any policy zone explicitly governs the item."""
        return (
            self.in_namespace_permissions(item)
            or self.in_category_permissions(item)
            or self.in_page_permissions(item)
        )

    def has_marker(self, item: Item) -> bool:
        if self.marker_lookup is None:
            return False
        return bool(self.marker_lookup.has_marker(item))

    def is_approvable(self, item: Item) -> bool:
        if item in self.memo:
            return self.memo[item]
        result = self._resolve(item)
        self.memo[item] = result
        return result

    def _resolve(self, item: Item) -> bool:
        if not item.exists:
            return False

        if self.override_hook is not None:
            decision = self.override_hook(item)
            if decision is not None:
                logger.debug("Approvability of %s forced to %s by override hook", item, decision)
                return bool(decision)

        if self.title_in_permissions(item):
            return True

        # Explicit zone configuration above still applies to these namespaces;
        # only the legacy paths below are closed to them.
        if item.namespace in BANNED_NAMESPACES:
            return False

        if self.has_marker(item):
            return True

        # An item that already carries an approval stays manageable even if
        # policy no longer covers it.
        return self.repository.get_approved_revision(item.id) is not None

    def media_is_approvable(self, item: Item) -> bool:
        if item in self.media_memo:
            return self.media_memo[item]

        if not item.exists:
            result = False
        elif self.title_in_permissions(item):
            result = True
        else:
            result = self.repository.get_approved_file(item.file_key) is not None

        self.media_memo[item] = result
        return result
