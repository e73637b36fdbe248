"""Approval log model.

Append-only record of approve/unapprove actions, written by
``SqlAuditLog``.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, JSON, String

from approved_revs.db.base import Base


class ApprovalLogEntry(Base):
    __tablename__ = "approval_log"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Action details
    action = Column(String(20), nullable=False, index=True)  # approve | unapprove
    item_id = Column(Integer, nullable=False, index=True)
    item_title = Column(String(255), nullable=False)
    actor = Column(String(255), nullable=True)

    # Rendered parameters (link to the approved version)
    params = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def __repr__(self) -> str:
        return f"<ApprovalLogEntry {self.action} {self.item_title}>"
