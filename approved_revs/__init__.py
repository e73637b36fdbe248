"""Approved Revisions: approval workflow for page revisions and file versions."""

__version__ = "1.0.0"

from approved_revs.core.approval import (  # noqa: E402
    ApprovalContext,
    ApprovedRevs,
    Collaborators,
    ReportMode,
)
from approved_revs.core.config import PolicyConfig, Settings, get_settings  # noqa: E402
from approved_revs.core.exceptions import (  # noqa: E402
    ApprovedRevsError,
    ConfigurationError,
    ItemNotFoundError,
    PermissionDeniedError,
    SideEffectError,
)
from approved_revs.core.types import Actor, FileVersion, Item, StructuralOutput  # noqa: E402

__all__ = [
    "__version__",
    "ApprovalContext",
    "ApprovedRevs",
    "Collaborators",
    "ReportMode",
    "PolicyConfig",
    "Settings",
    "get_settings",
    "ApprovedRevsError",
    "ConfigurationError",
    "ItemNotFoundError",
    "PermissionDeniedError",
    "SideEffectError",
    "Actor",
    "FileVersion",
    "Item",
    "StructuralOutput",
]
