"""Normalized permission registry.

The registry is the four rule zones after normalization, plus the key sets
used to decide quickly whether an item is explicitly governed by policy.
It is immutable once built.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from ..config import PolicyConfig
from ..namespaces import NAMESPACE_NOT_FOUND, resolve_namespace
from .rules import DEFAULT_RULE, Rule, normalize_rule

logger = logging.getLogger(__name__)


def normalize_category_name(name: Any) -> str:
    """Strip a ``Category:`` prefix and turn underscores into spaces."""
    text = str(name).strip()
    if text.lower().startswith("category:"):
        text = text.split(":", 1)[1]
    return text.replace("_", " ").strip()


def normalize_page_name(name: Any) -> str:
    """Canonical full page name; ``Main:Foo`` is the main-namespace ``Foo``."""
    text = str(name).strip().replace("_", " ")
    if text.startswith("Main:"):
        text = text[len("Main:"):]
    return text


@dataclass(frozen=True)
class PermissionRegistry:
    all_pages: Rule = DEFAULT_RULE
    namespace_rules: Mapping[int, Rule] = field(default_factory=lambda: MappingProxyType({}))
    category_rules: Mapping[str, Rule] = field(default_factory=lambda: MappingProxyType({}))
    page_rules: Mapping[str, Rule] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def namespaces(self) -> FrozenSet[int]:
        return frozenset(self.namespace_rules)

    @property
    def categories(self) -> FrozenSet[str]:
        return frozenset(self.category_rules)

    @property
    def pages(self) -> FrozenSet[str]:
        return frozenset(self.page_rules)

    def namespace_rule(self, namespace_id: int) -> Optional[Rule]:
        return self.namespace_rules.get(namespace_id)

    def category_rule(self, category: str) -> Optional[Rule]:
        return self.category_rules.get(category)

    def page_rule(self, full_name: str) -> Optional[Rule]:
        return self.page_rules.get(full_name)

    def matching_categories(self, categories: Iterable[str]) -> Tuple[str, ...]:
        """Configured categories among ``categories``, in the given order."""
        return tuple(c for c in categories if c in self.category_rules)


def _normalize_zone(raw_zone: Dict[Any, Any], key_func) -> Dict[Any, Rule]:
    zone: Dict[Any, Rule] = {}
    for raw_key, raw_rule in raw_zone.items():
        key = key_func(raw_key)
        if key in zone:
            logger.debug("Duplicate zone key %r after normalization; last entry wins", raw_key)
        zone[key] = normalize_rule(raw_rule)
    return zone


def _namespace_key(raw_key: Any) -> int:
    ns_id = resolve_namespace(raw_key)
    if ns_id is None or ns_id == NAMESPACE_NOT_FOUND:
        logger.warning("Unknown namespace %r in permissions; entry will never match", raw_key)
        return NAMESPACE_NOT_FOUND
    return ns_id


def build_registry(policy: PolicyConfig) -> PermissionRegistry:
    """
    Normalize a raw policy into a PermissionRegistry.

    Args:
        policy: Raw policy as loaded from configuration

    Returns:
        Immutable PermissionRegistry
    """
    namespace_rules = _normalize_zone(policy.namespace_permissions, _namespace_key)
    category_rules = _normalize_zone(policy.category_permissions, normalize_category_name)
    page_rules = _normalize_zone(policy.page_permissions, normalize_page_name)

    registry = PermissionRegistry(
        all_pages=normalize_rule(policy.all_pages),
        namespace_rules=MappingProxyType(namespace_rules),
        category_rules=MappingProxyType(category_rules),
        page_rules=MappingProxyType(page_rules),
    )
    logger.info(
        "Permission registry built: %d namespace, %d category, %d page rules",
        len(namespace_rules),
        len(category_rules),
        len(page_rules),
    )
    return registry
