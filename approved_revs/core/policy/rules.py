"""Approver rule definitions.

A rule names who may approve items within a zone: groups, users, item
properties whose values name users, and optionally the item's creator.
Raw rule entries are duck-typed (a scalar, a list, or missing) and are
normalized into the canonical ``Rule`` shape once, at load time.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rule:
    """
    Who may approve within a zone.

    ``override`` controls precedence: a zone with ``override=True`` that the
    actor fails revokes an earlier grant; ``override=False`` leaves an
    earlier grant in place.
    """
    groups: FrozenSet[str] = frozenset()
    users: FrozenSet[str] = frozenset()
    properties: FrozenSet[str] = frozenset()
    creator_allowed: bool = False
    override: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert rule to dictionary for serialization."""
        return {
            "group": sorted(self.groups),
            "user": sorted(self.users),
            "property": sorted(self.properties),
            "creator": self.creator_allowed,
            "override": self.override,
        }


DEFAULT_RULE = Rule()

# Raw key spellings per field
_SET_FIELDS = {
    "groups": ("group", "groups"),
    "users": ("user", "users"),
    "properties": ("property", "properties"),
}


def _to_name_set(value: Any) -> FrozenSet[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = value.strip()
        return frozenset({value}) if value else frozenset()
    if isinstance(value, dict):
        logger.debug("Ignoring mapping where a list of names was expected: %r", value)
        return frozenset()
    if isinstance(value, Iterable) and not isinstance(value, bytes):
        return frozenset(str(v).strip() for v in value if v is not None and str(v).strip())
    return frozenset({str(value)})


def _to_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def normalize_rule(raw: Any) -> Rule:
    """
    Coerce a raw rule entry into a Rule.

    Never raises: a non-mapping entry becomes the default rule, a scalar
    field becomes a one-element set, a missing field takes its default.
    """
    if isinstance(raw, Rule):
        return raw
    if not isinstance(raw, dict):
        if raw not in (None, [], ()):
            logger.debug("Rule entry %r is not a mapping; using default rule", raw)
        return DEFAULT_RULE

    values: Dict[str, Any] = {}
    for field_name, keys in _SET_FIELDS.items():
        collected: FrozenSet[str] = frozenset()
        for key in keys:
            if key in raw:
                collected |= _to_name_set(raw[key])
        values[field_name] = collected

    return Rule(
        groups=values["groups"],
        users=values["users"],
        properties=values["properties"],
        creator_allowed=_to_bool(raw.get("creator"), False),
        override=_to_bool(raw.get("override"), True),
    )
