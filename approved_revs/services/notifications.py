"""Webhook delivery of approval events.

Each published event is POSTed as JSON to every configured webhook URL.
Delivery is synchronous; a URL that still fails after the configured
number of attempts makes ``publish`` raise ``NotificationError`` once all
URLs have been tried.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from approved_revs.core.config import Settings, get_settings
from approved_revs.core.exceptions import NotificationError
from approved_revs.core.types import FileVersion, Item

logger = logging.getLogger(__name__)


class WebhookNotificationBus:
    """NotificationBus that posts approval events to webhooks."""

    def __init__(
        self,
        urls: Optional[List[str]] = None,
        *,
        settings: Optional[Settings] = None,
        client: Optional[httpx.Client] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the bus.

        Args:
            urls: Webhook URLs; defaults to ``settings.webhook_urls``
            settings: Settings instance (timeouts, retries)
            client: Preconfigured httpx client (tests pass a MockTransport)
            headers: Extra request headers, e.g. authentication
        """
        self.settings = settings or get_settings()
        self.urls = urls if urls is not None else self.settings.webhook_urls_list
        self.headers = dict(headers or {})
        self.headers["Content-Type"] = "application/json"
        self._client = client

    def publish(self, event_kind: str, item: Item, version: object = None) -> None:
        if not self.urls:
            logger.debug("No webhooks configured; %s for %s not delivered", event_kind, item)
            return

        payload = self.build_payload(event_kind, item, version)
        errors = []
        for url in self.urls:
            try:
                self._deliver(url, payload)
            except httpx.HTTPError as e:
                logger.exception(f"Failed to send webhook to {url}")
                errors.append(f"{url}: {e}")

        if errors:
            raise NotificationError(f"{event_kind} for {item} not delivered: " + "; ".join(errors))

    def build_payload(self, event_kind: str, item: Item, version: object = None) -> Dict[str, Any]:
        """Build the JSON payload for an event."""
        data: Dict[str, Any] = {
            "item_id": item.id,
            "namespace": item.namespace,
            "title": item.full_name,
        }
        if isinstance(version, FileVersion):
            data["timestamp"] = version.timestamp
            data["sha1"] = version.sha1
        elif version is not None:
            data["revision_id"] = version
        return {
            "event": event_kind,
            "timestamp": datetime.utcnow().isoformat(),
            "data": data,
        }

    def _deliver(self, url: str, payload: Dict[str, Any]) -> None:
        attempts = max(1, self.settings.webhook_max_retries)
        last_error: Optional[httpx.HTTPError] = None

        for attempt in range(1, attempts + 1):
            try:
                response = self._post(url, payload)
                response.raise_for_status()
                return
            except httpx.HTTPError as e:
                last_error = e
                logger.warning("Webhook %s attempt %d/%d failed: %s", url, attempt, attempts, e)

        raise last_error

    def _post(self, url: str, payload: Dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return self._client.post(url, json=payload, headers=self.headers)
        with httpx.Client(timeout=self.settings.webhook_timeout) as client:
            return client.post(url, json=payload, headers=self.headers)
