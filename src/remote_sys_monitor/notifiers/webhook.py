"""Generic webhook notification handler."""

import logging

import httpx

from remote_sys_monitor.notifiers.base import BaseNotifier

logger = logging.getLogger(__name__)


class WebhookNotifier(BaseNotifier):
    """Send reports via generic HTTP webhook."""

    name = "webhook"

    def __init__(
        self,
        url: str,
        method: str = "POST",
        headers: dict | None = None,
        auth: tuple[str, str] | None = None,
        mention: str | None = None,
        timeout: float = 10,
    ) -> None:
        """Initialize webhook notifier.

        Args:
            url: Webhook URL.
            method: HTTP method (default POST).
            headers: Optional headers to include.
            auth: Optional (username, password) tuple for basic auth.
            mention: Line prepended when the report has a failure.
            timeout: HTTP timeout in seconds.
        """
        super().__init__(mention=mention)
        self.url = url
        self.method = method.upper()
        self.headers = headers or {}
        self.auth = auth
        self.timeout = timeout

    def send(self, message: str, failed: bool) -> bool:
        """Send report via webhook."""
        payload = {
            "event": "report",
            "failed": failed,
            "text": message,
        }
        return self._send_request(payload)

    def _send_request(self, payload: dict) -> bool:
        """Send HTTP request to webhook."""
        try:
            auth = httpx.BasicAuth(*self.auth) if self.auth else None

            response = httpx.request(
                method=self.method,
                url=self.url,
                json=payload,
                headers=self.headers,
                auth=auth,
                timeout=self.timeout,
            )

            if response.status_code in (200, 201, 202, 204):
                logger.info(f"Webhook notification sent to {self.url}")
                return True
            else:
                logger.error(f"Webhook error: {response.status_code}")
                return False

        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Failed to send webhook notification: {e}")
            return False
