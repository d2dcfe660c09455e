"""
Notify — Chat bot card messages.
"""

from .payload import CardMessage
from .webhook import Notifier, NullNotifier, WebhookNotifier

__all__ = [
    "CardMessage",
    "Notifier",
    "NullNotifier",
    "WebhookNotifier",
]
