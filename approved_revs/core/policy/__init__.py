"""Permission policy: rule normalization, registry, approvability and authorization."""

from .rules import Rule, DEFAULT_RULE, normalize_rule
from .registry import PermissionRegistry, build_registry
from .categories import CategoryClosureResolver
from .approvability import ApprovabilityResolver
from .authorizer import ApproverAuthorizer

__all__ = [
    "Rule",
    "DEFAULT_RULE",
    "normalize_rule",
    "PermissionRegistry",
    "build_registry",
    "CategoryClosureResolver",
    "ApprovabilityResolver",
    "ApproverAuthorizer",
]
