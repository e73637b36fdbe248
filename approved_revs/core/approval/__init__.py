"""Approval state: request cache, store, reports and the engine entry point."""

from .cache import RequestCache
from .store import ApprovalStateStore, ApprovalEvent, AuditAction
from .service import ApprovedRevs, ApprovalContext, Collaborators
from .reports import ApprovalReports, ReportMode, ReportRow

__all__ = [
    "RequestCache",
    "ApprovalStateStore",
    "ApprovalEvent",
    "AuditAction",
    "ApprovedRevs",
    "ApprovalContext",
    "Collaborators",
    "ApprovalReports",
    "ReportMode",
    "ReportRow",
]
