"""Decides whether an actor may approve a specific item.

An actor matching the All Pages rule may approve everything. Otherwise the
remaining zones are evaluated in order: Namespace, Category (each of the
item's configured categories), Page. Each applicable rule updates one
running decision:

- a rule with ``override=False`` is skipped while the decision is already
  true, so it can never revoke an earlier grant;
- otherwise the decision becomes true if the actor matches the rule and
  false if not, so a later failing zone revokes an earlier grant.

If nothing granted approval, users may still approve their own user page
and its subpages.
"""

import logging
from typing import Callable, Dict, Optional, Tuple

from ..exceptions import ConfigurationError
from ..interfaces import PropertyLookup, RevisionHistory
from ..namespaces import USER_NAMESPACES
from ..types import Actor, Item
from .categories import CategoryClosureResolver
from .registry import PermissionRegistry
from .rules import Rule

logger = logging.getLogger(__name__)


class ApproverAuthorizer:
    """Answers ``can_approve(actor, item)``; results are memoized per request."""

    def __init__(
        self,
        registry: Callable[[], PermissionRegistry],
        categories: CategoryClosureResolver,
        history: RevisionHistory,
        *,
        property_lookup: Optional[PropertyLookup] = None,
        memo: Optional[Dict[Tuple[str, Item], bool]] = None,
    ):
        self._registry = registry
        self.categories = categories
        self.history = history
        self.property_lookup = property_lookup
        self.memo = memo if memo is not None else {}

    def can_approve(self, actor: Actor, item: Item) -> bool:
        key = (actor.name, item)
        if key in self.memo:
            return self.memo[key]

        decision = self._evaluate(actor, item)
        self.memo[key] = decision
        logger.debug("can_approve(%r, %s) = %s", actor.name, item, decision)
        return decision

    def _evaluate(self, actor: Actor, item: Item) -> bool:
        registry = self._registry()

        # A grant from All Pages is final.
        if self._actor_matches(registry.all_pages, actor, item):
            return True

        decision = False
        for rule in self._zone_rules(registry, item):
            decision = self._apply_rule(rule, decision, actor, item)

        if not decision and self._is_own_user_page(actor, item):
            decision = True

        return decision

    def _zone_rules(self, registry: PermissionRegistry, item: Item):
        rule = registry.namespace_rule(item.namespace)
        if rule is not None:
            yield rule

        # Closure order: deterministic, but no precedence among categories.
        for category in registry.matching_categories(self.categories.closure(item)):
            yield registry.category_rules[category]

        rule = registry.page_rule(item.full_name)
        if rule is not None:
            yield rule

    def _apply_rule(self, rule: Rule, decision: bool, actor: Actor, item: Item) -> bool:
        if not rule.override and decision:
            return True
        return self._actor_matches(rule, actor, item)

    def _actor_matches(self, rule: Rule, actor: Actor, item: Item) -> bool:
        if rule.creator_allowed and self._is_creator(actor, item):
            return True

        actor_groups = {g.lower() for g in actor.groups}
        if any(group.lower() in actor_groups for group in rule.groups):
            return True

        actor_name = actor.name.lower()
        if actor_name and any(user.lower() == actor_name for user in rule.users):
            return True

        for property_name in sorted(rule.properties):
            if self._property_names_actor(property_name, actor, item):
                return True

        return False

    def _is_creator(self, actor: Actor, item: Item) -> bool:
        if actor.is_anonymous:
            return False
        return self.history.creator(item) == actor.name

    def _property_names_actor(self, property_name: str, actor: Actor, item: Item) -> bool:
        if actor.is_anonymous:
            return False
        if self.property_lookup is None:
            raise ConfigurationError(
                f"Permission rule uses property {property_name!r} "
                "but no property lookup is configured"
            )
        return actor.name in self.property_lookup.values(property_name, item)

    @staticmethod
    def _is_own_user_page(actor: Actor, item: Item) -> bool:
        if item.namespace not in USER_NAMESPACES or actor.is_anonymous:
            return False
        return item.base_name == actor.name
