"""Transitive category membership."""

from collections import deque
from typing import Dict, Optional, Tuple

from ..interfaces import CategoryLookup
from ..types import Item
from .registry import normalize_category_name


class CategoryClosureResolver:
    """
    Computes every category an item belongs to, directly or through parent
    categories.

    Traversal is breadth-first with a visited set, so cycles in the
    category graph terminate and each category appears once. The result
    keeps discovery order, which makes downstream iteration deterministic.
    """

    def __init__(self, lookup: CategoryLookup, memo: Optional[Dict[Item, Tuple[str, ...]]] = None):
        self.lookup = lookup
        self.memo = memo if memo is not None else {}

    def closure(self, item: Item) -> Tuple[str, ...]:
        if item in self.memo:
            return self.memo[item]

        seen = set()
        ordered = []
        queue = deque(normalize_category_name(c) for c in self.lookup.direct_categories(item))

        while queue:
            category = queue.popleft()
            if not category or category in seen:
                continue
            seen.add(category)
            ordered.append(category)
            for parent in self.lookup.parent_categories(category):
                parent = normalize_category_name(parent)
                if parent not in seen:
                    queue.append(parent)

        result = tuple(ordered)
        self.memo[item] = result
        return result
