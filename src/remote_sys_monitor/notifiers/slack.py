"""Slack notification handler."""

import logging

import httpx

from remote_sys_monitor.notifiers.base import DEFAULT_MENTION, BaseNotifier

logger = logging.getLogger(__name__)


class SlackNotifier(BaseNotifier):
    """Send reports via Slack incoming webhook."""

    name = "slack"

    def __init__(
        self,
        webhook_url: str,
        channel: str | None = None,
        mention: str | None = DEFAULT_MENTION,
        timeout: float = 10,
    ) -> None:
        """Initialize Slack notifier.

        Args:
            webhook_url: Slack incoming webhook URL.
            channel: Optional channel override.
            mention: Line prepended when the report has a failure.
            timeout: HTTP timeout in seconds.
        """
        super().__init__(mention=mention)
        self.webhook_url = webhook_url
        self.channel = channel
        self.timeout = timeout

    def send(self, message: str, failed: bool) -> bool:
        """Send report via Slack."""
        payload = {"text": message}
        if self.channel:
            payload["channel"] = self.channel
        return self._send_webhook(payload)

    def _send_webhook(self, payload: dict) -> bool:
        """Send payload to Slack webhook."""
        try:
            response = httpx.post(
                self.webhook_url,
                json=payload,
                timeout=self.timeout,
            )

            if response.status_code == 200:
                logger.info("Slack notification sent")
                return True
            else:
                logger.error(f"Slack webhook error: {response.status_code} - {response.text}")
                return False

        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Failed to send Slack notification: {e}")
            return False
