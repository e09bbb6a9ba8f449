"""Report notification handlers."""

from remote_sys_monitor.config import ConfigError, NotifierConfig
from remote_sys_monitor.notifiers.base import BaseNotifier, make_pretty_timestamp
from remote_sys_monitor.notifiers.slack import SlackNotifier
from remote_sys_monitor.notifiers.telegram import TelegramNotifier
from remote_sys_monitor.notifiers.webhook import WebhookNotifier

__all__ = [
    "BaseNotifier",
    "SlackNotifier",
    "TelegramNotifier",
    "WebhookNotifier",
    "build_notifiers",
    "make_pretty_timestamp",
]


def build_notifiers(config: NotifierConfig) -> list[BaseNotifier]:
    """Instantiate every notifier present in the configuration."""
    notifiers: list[BaseNotifier] = []
    try:
        if config.slack:
            notifiers.append(SlackNotifier(
                webhook_url=config.slack["webhook_url"],
                channel=config.slack.get("channel"),
                mention=config.slack.get("mention", "@all"),
            ))
        if config.telegram:
            notifiers.append(TelegramNotifier(
                bot_token=config.telegram["bot_token"],
                chat_id=config.telegram["chat_id"],
                mention=config.telegram.get("mention"),
            ))
        if config.webhook:
            auth = config.webhook.get("auth")
            notifiers.append(WebhookNotifier(
                url=config.webhook["url"],
                method=config.webhook.get("method", "POST"),
                headers=config.webhook.get("headers"),
                auth=tuple(auth) if auth else None,
                mention=config.webhook.get("mention"),
            ))
    except KeyError as e:
        raise ConfigError(f"Notifier configuration is missing {e}") from e
    return notifiers
