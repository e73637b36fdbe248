"""Concrete collaborators: SQL approval log and webhook notifications."""

from .audit import SqlAuditLog
from .notifications import WebhookNotificationBus

__all__ = ["SqlAuditLog", "WebhookNotificationBus"]
