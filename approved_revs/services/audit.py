"""Approval log backed by the ``approval_log`` table."""

import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import sessionmaker

from approved_revs.core.types import Item
from approved_revs.db.models import ApprovalLogEntry

logger = logging.getLogger(__name__)


class SqlAuditLog:
    """
    AuditLog that appends one row per approve/unapprove action.

    Each entry is written in its own transaction, after the approval
    record change has committed.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def record(
        self,
        action: str,
        item: Item,
        params: Iterable[str] = (),
        actor: Optional[str] = None,
    ) -> None:
        entry = ApprovalLogEntry(
            action=action,
            item_id=item.id,
            item_title=item.full_name,
            actor=actor,
            params=list(params),
        )
        with self.session_factory.begin() as session:
            session.add(entry)
        logger.debug("Logged %s of %s by %s", action, item, actor or "anonymous")

    def entries_for(self, item: Item, limit: int = 50) -> List[ApprovalLogEntry]:
        """Most recent log entries for an item, newest first."""
        with self.session_factory() as session:
            return (
                session.query(ApprovalLogEntry)
                .filter(ApprovalLogEntry.item_id == item.id)
                .order_by(ApprovalLogEntry.created_at.desc(), ApprovalLogEntry.id.desc())
                .limit(limit)
                .all()
            )
