"""
Webhook Notifier — POST card messages to the chat bot.

Delivery is fire-and-forget: the HTTP status is logged and returned to the
caller for reporting, but a failed delivery never aborts a sync run and is
never retried.

## Environment Variables

- FORKSYNC_WEBHOOK_URL: Bot hook URL (notifications are only logged if unset)
- FORKSYNC_WEBHOOK_TIMEOUT: Request timeout in seconds (default: none)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import httpx

from .payload import CardMessage, Color

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Interface shared by the real and null notifiers."""

    def __init__(self, template_id: str, template_version: str):
        self.template_id = template_id
        self.template_version = template_version

    def build(self, title: str, body: str, color: Color) -> CardMessage:
        return CardMessage.build(
            template_id=self.template_id,
            template_version=self.template_version,
            title=title,
            body=body,
            color=color,
        )

    @abstractmethod
    def send(self, title: str, body: str, color: Color) -> bool:
        """Deliver one card. Returns True when the bot accepted it."""
        pass


class WebhookNotifier(Notifier):
    """
    Real webhook notifier using httpx.

    Sends a single POST per message. Returns True when the bot answered
    with a non-error status.
    """

    def __init__(
        self,
        url: str,
        template_id: str,
        template_version: str,
        timeout: Optional[float] = None,
    ):
        super().__init__(template_id, template_version)
        self.url = url
        self.timeout = timeout

    def send(self, title: str, body: str, color: Color) -> bool:
        message = self.build(title, body, color)

        try:
            response = httpx.post(
                self.url,
                json=message.to_json_dict(),
                timeout=self.timeout,
                headers={"User-Agent": "forksync/1.0"},
            )
        except httpx.TimeoutException:
            logger.error(f"[notify] Webhook POST timed out: {title}")
            return False
        except httpx.RequestError as e:
            logger.error(f"[notify] Webhook POST failed: {e}")
            return False

        if response.status_code < 400:
            logger.info(f"[notify] Message sent: {title} ({response.status_code})")
            return True

        logger.warning(
            f"[notify] Webhook answered {response.status_code} for: {title}"
        )
        return False


class NullNotifier(Notifier):
    """Used when no webhook URL is configured. Logs instead of sending."""

    def __init__(self, template_id: str = "", template_version: str = ""):
        super().__init__(template_id, template_version)
        self.sent: List[CardMessage] = []

    def send(self, title: str, body: str, color: Color) -> bool:
        self.sent.append(self.build(title, body, color))
        logger.info(f"[notify] No webhook configured, not sending: {title} [{color}]")
        return False
