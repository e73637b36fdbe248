"""Approval engine and per-request context.

``ApprovedRevs`` is created once per process. It owns the settings, the
raw policy, the lazily built permission registry, the collaborators and
the approval repository.

``ApprovalContext`` is created per external request. It binds the acting
user and a fresh request cache, and exposes every approval operation.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import sessionmaker

from approved_revs.db.repository import ApprovalRepository
from approved_revs.db.session import make_read_session_factory, make_session_factory

from ..config import PolicyConfig, Settings, get_settings, load_default_policy
from ..exceptions import PermissionDeniedError
from ..interfaces import (
    ApprovabilityOverrideHook,
    AuditLog,
    CategoryLookup,
    ContentFetch,
    ContentRender,
    Indexer,
    ItemDirectory,
    LatestVersionLookup,
    MarkerLookup,
    NotificationBus,
    PropertyLookup,
    RevisionHistory,
)
from ..policy.approvability import ApprovabilityResolver
from ..policy.authorizer import ApproverAuthorizer
from ..policy.categories import CategoryClosureResolver
from ..policy.registry import PermissionRegistry, build_registry
from ..types import Actor, FileVersion, Item
from .cache import RequestCache
from .reports import ApprovalReports
from .store import ApprovalStateStore

logger = logging.getLogger(__name__)


@dataclass
class Collaborators:
    """Host-platform services the engine calls into."""

    content: ContentFetch
    renderer: ContentRender
    indexer: Indexer
    audit_log: AuditLog
    notifications: NotificationBus
    categories: CategoryLookup
    history: RevisionHistory
    property_lookup: Optional[PropertyLookup] = None
    marker_lookup: Optional[MarkerLookup] = None
    override_hook: Optional[ApprovabilityOverrideHook] = None
    latest_versions: Optional[LatestVersionLookup] = None
    items: Optional[ItemDirectory] = None


class ApprovedRevs:
    """
    Process-level approval engine.

    Handles:
    - Loading the policy and building the permission registry once
    - Explicit registry rebuilds after a policy change
    - Opening request contexts
    """

    def __init__(
        self,
        settings: Settings,
        collaborators: Collaborators,
        session_factory: sessionmaker,
        read_session_factory: Optional[sessionmaker] = None,
        *,
        policy: Optional[PolicyConfig] = None,
    ):
        """
        Initialize the engine.

        Args:
            settings: Runtime flags
            collaborators: Host-platform services
            session_factory: Primary (write) session factory
            read_session_factory: Optional replica session factory for reads
            policy: Raw policy; loaded from settings on first use if omitted
        """
        self.settings = settings
        self.collaborators = collaborators
        self.repository = ApprovalRepository(session_factory, read_session_factory)
        self._policy = policy
        self._registry: Optional[PermissionRegistry] = None
        self._registry_lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        collaborators: Collaborators,
        settings: Optional[Settings] = None,
    ) -> "ApprovedRevs":
        settings = settings or get_settings()
        session_factory = make_session_factory(settings.database_url)
        read_session_factory = make_read_session_factory(settings.read_database_url, session_factory)
        return cls(settings, collaborators, session_factory, read_session_factory)

    @property
    def policy(self) -> PolicyConfig:
        if self._policy is None:
            self._policy = load_default_policy(self.settings)
        return self._policy

    def get_registry(self) -> PermissionRegistry:
        """Return the permission registry, building it on first use."""
        if self._registry is None:
            with self._registry_lock:
                if self._registry is None:
                    self._registry = build_registry(self.policy)
        return self._registry

    def rebuild_registry(self, policy: Optional[PolicyConfig] = None) -> PermissionRegistry:
        """Replace the policy (optionally) and rebuild the registry."""
        with self._registry_lock:
            if policy is not None:
                self._policy = policy
            self._registry = build_registry(self.policy)
        logger.info("Permission registry rebuilt")
        return self._registry

    def new_context(self, actor: Optional[Actor] = None) -> "ApprovalContext":
        return ApprovalContext(self, actor or Actor.anonymous())


class ApprovalContext:
    """
    Approval operations for one request and one acting user.

    All memoized answers live in ``self.cache`` and die with the context.
    """

    def __init__(self, engine: ApprovedRevs, actor: Actor):
        self.engine = engine
        self.actor = actor
        self.cache = RequestCache()

        c = engine.collaborators
        self.categories = CategoryClosureResolver(c.categories, memo=self.cache.categories)
        self.approvability = ApprovabilityResolver(
            engine.get_registry,
            self.categories,
            engine.repository,
            override_hook=c.override_hook,
            marker_lookup=c.marker_lookup,
            memo=self.cache.approvable,
            media_memo=self.cache.media_approvable,
        )
        self.authorizer = ApproverAuthorizer(
            engine.get_registry,
            self.categories,
            c.history,
            property_lookup=c.property_lookup,
            memo=self.cache.can_approve,
        )
        self.store = ApprovalStateStore(
            engine.repository,
            self.approvability,
            self.cache,
            content=c.content,
            renderer=c.renderer,
            indexer=c.indexer,
            audit_log=c.audit_log,
            notifications=c.notifications,
            actor=actor,
            blank_content_when_unapproved=engine.settings.blank_content_when_unapproved,
            base_url=engine.settings.base_url,
        )

    @property
    def settings(self) -> Settings:
        return self.engine.settings

    # ---- policy --------------------------------------------------------

    def is_approvable(self, item: Item) -> bool:
        return self.approvability.is_approvable(item)

    def media_is_approvable(self, item: Item) -> bool:
        return self.approvability.media_is_approvable(item)

    def can_approve(self, item: Item, actor: Optional[Actor] = None) -> bool:
        return self.authorizer.can_approve(actor or self.actor, item)

    # ---- reads ---------------------------------------------------------

    def get_approved_version(self, item: Item) -> Optional[int]:
        return self.store.get_approved_version(item)

    def has_approved_version(self, item: Item) -> bool:
        return self.store.has_approved_version(item)

    def get_approved_content(self, item: Item) -> Optional[str]:
        return self.store.get_approved_content(item)

    def get_approved_file_info(self, item: Item) -> Optional[FileVersion]:
        return self.store.get_approved_file_info(item)

    # ---- display -------------------------------------------------------

    def shows_not_approved_banner(self, item: Item) -> bool:
        """Whether viewers of an approvable page with no approval get a notice."""
        if not self.settings.show_not_approved_banner:
            return False
        return self.is_approvable(item) and not self.has_approved_version(item)

    def shows_approve_latest_link(self, item: Item) -> bool:
        """
        Whether to offer the actor a one-click approval of the latest
        revision. Needs the latest-version lookup; without it the link is
        never offered.
        """
        latest_versions = self.engine.collaborators.latest_versions
        if not self.settings.show_approve_latest_link or latest_versions is None:
            return False
        if not self.is_approvable(item) or not self.can_approve(item):
            return False
        latest = latest_versions.latest_revision(item)
        return latest is not None and latest != self.get_approved_version(item)

    # ---- unchecked mutations ------------------------------------------

    def set_approved(self, item: Item, revision_id: int, is_latest: bool = False) -> None:
        self.store.set_approved(item, revision_id, is_latest)

    def unset_approval(self, item: Item) -> None:
        self.store.unset_approval(item)

    def delete_all_approvals(self, item: Item) -> None:
        self.store.delete_all_approvals(item)

    def set_approved_file(self, item: Item, version: FileVersion) -> None:
        self.store.set_approved_file(item, version)

    def unset_approved_file(self, item: Item) -> None:
        self.store.unset_approved_file(item)

    def delete_all_file_approvals(self, item: Item) -> None:
        self.store.delete_all_file_approvals(item)

    # ---- checked actions ----------------------------------------------

    def approve(self, item: Item, revision_id: int, is_latest: bool = False) -> None:
        """Approve a revision on behalf of the context actor.

        Raises:
            PermissionDeniedError: If the page is not approvable or the actor
                may not approve it
            SideEffectError: If post-commit steps failed
        """
        self._check(item, self.is_approvable(item))
        self.store.set_approved(item, revision_id, is_latest)

    def unapprove(self, item: Item) -> None:
        self._check(item, self.is_approvable(item))
        self.store.unset_approval(item)

    def approve_file(self, item: Item, version: FileVersion) -> None:
        self._check(item, self.media_is_approvable(item))
        self.store.set_approved_file(item, version)

    def unapprove_file(self, item: Item) -> None:
        self._check(item, self.media_is_approvable(item))
        self.store.unset_approved_file(item)

    def _check(self, item: Item, approvable: bool) -> None:
        if not approvable:
            raise PermissionDeniedError(self.actor.name, item, "item is not approvable")
        if not self.can_approve(item):
            raise PermissionDeniedError(self.actor.name, item, "actor is not an approver")

    # ---- lifecycle hooks ----------------------------------------------

    def on_item_saved(self, item: Item, revision_id: int) -> bool:
        """
        Approve a freshly saved revision automatically when enabled and the
        author may approve the page.

        Returns:
            True if the revision was approved
        """
        if not self.settings.automatic_approvals_enabled:
            return False
        if not self.is_approvable(item) or not self.can_approve(item):
            return False
        self.store.set_approved(item, revision_id, is_latest=True)
        return True

    def on_item_deleted(self, item: Item) -> None:
        self.store.delete_all_approvals(item)

    def on_file_deleted(self, item: Item) -> None:
        self.store.delete_all_file_approvals(item)

    def reports(self) -> ApprovalReports:
        return ApprovalReports(self)
