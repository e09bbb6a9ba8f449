"""Telegram notification handler."""

import logging

import httpx

from remote_sys_monitor.notifiers.base import BaseNotifier

logger = logging.getLogger(__name__)


class TelegramNotifier(BaseNotifier):
    """Send reports via Telegram bot."""

    name = "telegram"

    def __init__(
        self,
        bot_token: str,
        chat_id: str | int,
        mention: str | None = None,
        timeout: float = 10,
    ) -> None:
        """Initialize Telegram notifier.

        Args:
            bot_token: Telegram bot API token.
            chat_id: Chat ID to send messages to.
            mention: Line prepended when the report has a failure.
            timeout: HTTP timeout in seconds.
        """
        super().__init__(mention=mention)
        self.bot_token = bot_token
        self.chat_id = str(chat_id)
        self.api_base = f"https://api.telegram.org/bot{bot_token}"
        self.timeout = timeout

    def send(self, message: str, failed: bool) -> bool:
        """Send a message via Telegram API."""
        try:
            response = httpx.post(
                f"{self.api_base}/sendMessage",
                json={
                    "chat_id": self.chat_id,
                    "text": message,
                    "parse_mode": "Markdown",
                    "disable_notification": not failed,
                },
                timeout=self.timeout,
            )

            if response.status_code == 200:
                logger.info(f"Telegram notification sent to {self.chat_id}")
                return True
            else:
                logger.error(f"Telegram API error: {response.status_code} - {response.text}")
                return False

        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Failed to send Telegram notification: {e}")
            return False
