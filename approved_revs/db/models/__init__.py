"""Database models for the approval engine."""

from approved_revs.db.models.approval import ApprovedRevision, ApprovedFile
from approved_revs.db.models.audit import ApprovalLogEntry

__all__ = [
    "ApprovedRevision",
    "ApprovedFile",
    "ApprovalLogEntry",
]
