"""Approval state store.

Source of truth for which version of each item is approved. Mutations
commit the record change first, then propagate side effects (re-render and
reindex, audit log, notification). Side-effect failures are collected and
raised together as ``SideEffectError``; the record change stands.
"""

import logging
from enum import Enum
from typing import Any, Callable, List, Optional

from approved_revs.db.repository import ApprovalRepository

from ..exceptions import ApprovedRevsError, SideEffectError, SideEffectFailure
from ..interfaces import AuditLog, ContentFetch, ContentRender, Indexer, NotificationBus
from ..policy.approvability import ApprovabilityResolver
from ..types import Actor, FileVersion, Item
from .cache import RequestCache
from .labels import file_label, revision_label

logger = logging.getLogger(__name__)


class ApprovalEvent(str, Enum):
    """Event kinds published on the notification bus."""

    REVISION_APPROVED = "revision_approved"
    REVISION_UNAPPROVED = "revision_unapproved"
    FILE_APPROVED = "file_approved"
    FILE_UNAPPROVED = "file_unapproved"


class AuditAction(str, Enum):
    APPROVE = "approve"
    UNAPPROVE = "unapprove"


_FAILED = object()


class _SideEffects:
    """Runs post-commit steps, collecting failures instead of stopping."""

    def __init__(self, action: str, item: Item):
        self.action = action
        self.item = item
        self.failures: List[SideEffectFailure] = []

    def run(self, step: str, func: Callable[[], Any]) -> Any:
        try:
            return func()
        except Exception as e:
            logger.error("%s of %s: %s step failed: %s", self.action, self.item, step, e)
            self.failures.append(SideEffectFailure(step=step, error=e))
            return _FAILED

    def raise_if_failed(self) -> None:
        if self.failures:
            raise SideEffectError(self.action, self.failures)


class ApprovalStateStore:
    """
    Per-request view of the approval records.

    Reads are memoized in the request cache. Writes go straight to the
    repository and refresh the cache.
    """

    def __init__(
        self,
        repository: ApprovalRepository,
        approvability: ApprovabilityResolver,
        cache: RequestCache,
        *,
        content: ContentFetch,
        renderer: ContentRender,
        indexer: Indexer,
        audit_log: AuditLog,
        notifications: NotificationBus,
        actor: Optional[Actor] = None,
        blank_content_when_unapproved: bool = False,
        base_url: str = "",
    ):
        self.repository = repository
        self.approvability = approvability
        self.cache = cache
        self.content = content
        self.renderer = renderer
        self.indexer = indexer
        self.audit_log = audit_log
        self.notifications = notifications
        self.actor = actor or Actor.anonymous()
        self.blank_content_when_unapproved = blank_content_when_unapproved
        self.base_url = base_url

    # ---- page reads ----------------------------------------------------

    def get_approved_version(self, item: Item) -> Optional[int]:
        """Approved revision id of a page, or None."""
        if item.id in self.cache.approved_revision:
            return self.cache.approved_revision[item.id]

        if not self.approvability.is_approvable(item):
            return None

        revision_id = self.repository.get_approved_revision(item.id)
        self.cache.approved_revision[item.id] = revision_id
        return revision_id

    def has_approved_version(self, item: Item) -> bool:
        return self.get_approved_version(item) is not None

    def get_approved_content(self, item: Item) -> Optional[str]:
        """Text of the approved revision, or None if unset or purged."""
        if item.id in self.cache.approved_content:
            return self.cache.approved_content[item.id]

        revision_id = self.get_approved_version(item)
        if revision_id is None:
            return None

        text = self.content.fetch(item, revision_id)
        if text is None:
            logger.warning(
                "Approved revision %s of %s no longer exists; treating as unapproved",
                revision_id,
                item,
            )
        self.cache.approved_content[item.id] = text
        return text

    # ---- page writes ---------------------------------------------------

    def set_approved(self, item: Item, revision_id: int, is_latest: bool = False) -> None:
        """
        Mark a revision as the approved one for a page.

        Args:
            item: Page being approved
            revision_id: Revision to approve
            is_latest: True when the revision is known to be the latest;
                its links and search text are already current, so the
                re-render step is skipped

        Raises:
            SideEffectError: If any post-commit step failed
        """
        self.repository.save_approved_revision(item.id, revision_id)
        self.cache.approved_revision[item.id] = revision_id
        self.cache.approved_content.pop(item.id, None)
        self.cache.approvable.pop(item, None)
        logger.info("%s approved revision %s of %s", self.actor.name or "anonymous", revision_id, item)

        effects = _SideEffects(AuditAction.APPROVE.value, item)

        if not is_latest:
            text = effects.run("fetch", lambda: self._require_text(item, revision_id))
            if text is not _FAILED:
                self._refresh_structure(effects, item, text, revision_id)

        label = revision_label(self.base_url, item, revision_id)
        effects.run("audit", lambda: self.audit_log.record(
            AuditAction.APPROVE.value, item, [label], actor=self.actor.name or None,
        ))
        effects.run("notify", lambda: self.notifications.publish(
            ApprovalEvent.REVISION_APPROVED.value, item, revision_id,
        ))
        effects.raise_if_failed()

    def unset_approval(self, item: Item) -> None:
        """
        Remove the approval for a page and rebuild its derived data from
        the latest text (or from empty text when unapproved pages are
        shown blank).

        Raises:
            SideEffectError: If any post-commit step failed
        """
        self.repository.delete_approved_revision(item.id)
        self._forget(item)
        self.cache.approved_revision[item.id] = None
        logger.info("%s unapproved %s", self.actor.name or "anonymous", item)

        effects = _SideEffects(AuditAction.UNAPPROVE.value, item)

        if self.blank_content_when_unapproved:
            text = ""
        else:
            text = effects.run("fetch", lambda: self._require_text(item, None))
        if text is not _FAILED:
            self._refresh_structure(effects, item, text, None)

        effects.run("audit", lambda: self.audit_log.record(
            AuditAction.UNAPPROVE.value, item, [], actor=self.actor.name or None,
        ))
        effects.run("notify", lambda: self.notifications.publish(
            ApprovalEvent.REVISION_UNAPPROVED.value, item,
        ))
        effects.raise_if_failed()

    def delete_all_approvals(self, item: Item) -> None:
        """Drop the page's approval record when the page itself is deleted."""
        deleted = self.repository.delete_approved_revision(item.id)
        self._forget(item)
        if deleted:
            logger.info("Removed approval of deleted page %s", item)

    # ---- files ---------------------------------------------------------

    def get_approved_file_info(self, item: Item) -> Optional[FileVersion]:
        """Approved (timestamp, sha1) of a file, or None."""
        key = item.file_key
        if key in self.cache.file_info:
            return self.cache.file_info[key]

        if not self.approvability.media_is_approvable(item):
            return None

        version = self.repository.get_approved_file(key)
        self.cache.file_info[key] = version
        return version

    def set_approved_file(self, item: Item, version: FileVersion) -> None:
        """
        Mark a file version as approved.

        Raises:
            SideEffectError: If the audit or notify step failed
        """
        self.repository.save_approved_file(item.file_key, version)
        self.cache.file_info[item.file_key] = version
        self.cache.media_approvable.pop(item, None)
        logger.info(
            "%s approved file %s version %s",
            self.actor.name or "anonymous",
            item,
            version.fingerprint,
        )

        effects = _SideEffects(AuditAction.APPROVE.value, item)
        label = file_label(self.base_url, item, version)
        effects.run("audit", lambda: self.audit_log.record(
            AuditAction.APPROVE.value, item, [label], actor=self.actor.name or None,
        ))
        effects.run("notify", lambda: self.notifications.publish(
            ApprovalEvent.FILE_APPROVED.value, item, version,
        ))
        effects.raise_if_failed()

    def unset_approved_file(self, item: Item) -> None:
        self.repository.delete_approved_file(item.file_key)
        self._forget(item)
        self.cache.file_info[item.file_key] = None
        logger.info("%s unapproved file %s", self.actor.name or "anonymous", item)

        effects = _SideEffects(AuditAction.UNAPPROVE.value, item)
        effects.run("audit", lambda: self.audit_log.record(
            AuditAction.UNAPPROVE.value, item, [], actor=self.actor.name or None,
        ))
        effects.run("notify", lambda: self.notifications.publish(
            ApprovalEvent.FILE_UNAPPROVED.value, item,
        ))
        effects.raise_if_failed()

    def delete_all_file_approvals(self, item: Item) -> None:
        deleted = self.repository.delete_approved_file(item.file_key)
        self._forget(item)
        if deleted:
            logger.info("Removed approval of deleted file %s", item)

    # ---- helpers -------------------------------------------------------

    def _require_text(self, item: Item, revision_id: Optional[int]) -> str:
        text = self.content.fetch(item, revision_id)
        if text is None:
            which = f"revision {revision_id}" if revision_id is not None else "latest revision"
            raise ApprovedRevsError(f"{which} of {item} not found")
        return text

    def _refresh_structure(self, effects: _SideEffects, item: Item, text: str, revision_id: Optional[int]) -> None:
        output = effects.run("render", lambda: self.renderer.render(item, text, revision_id))
        if output is not _FAILED:
            effects.run("index", lambda: self.indexer.apply(item, output))

    def _forget(self, item: Item) -> None:
        # Approvability may have rested on the record that just went away.
        self.cache.forget_item(item)
