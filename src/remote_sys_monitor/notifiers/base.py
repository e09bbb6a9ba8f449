"""Base notifier interface."""

from abc import ABC, abstractmethod
from datetime import datetime

TIMESTAMP_FORMAT = "%d/%b/%y %H:%M %Z"
DEFAULT_MENTION = "@all"


def make_pretty_timestamp(now: datetime | None = None) -> str:
    """Human readable local timestamp, e.g. ``18/Oct/26 09:30 CEST``."""
    now = now or datetime.now().astimezone()
    return now.strftime(TIMESTAMP_FORMAT).strip()


class BaseNotifier(ABC):
    """Abstract base class for report notifiers."""

    name = "notifier"

    def __init__(self, mention: str | None = DEFAULT_MENTION) -> None:
        self.mention = mention

    @abstractmethod
    def send(self, message: str, failed: bool) -> bool:
        """Deliver an already formatted message.

        Args:
            message: Text to deliver.
            failed: Whether the report contains a failure.

        Returns:
            True if the message was delivered.
        """
        ...

    def format_message(self, report_text: str, failed: bool, now: datetime | None = None) -> str:
        """Prefix the report with a timestamp, and a mention when something failed.

        Override this method to customize message formatting.
        """
        lines = []
        if failed and self.mention:
            lines.append(self.mention)
        lines.append(make_pretty_timestamp(now))
        lines.append(report_text)
        return "\n".join(lines)

    def send_report(self, report_text: str, failed: bool) -> bool:
        """Format and deliver a flattened report."""
        return self.send(self.format_message(report_text, failed), failed)
