"""Notification sinks for user-visible editor messages.

Notifications are fire-and-forget: the editor never waits for, or reads
anything back from, a sink.
"""

from enum import Enum
from typing import List, NamedTuple
import logging

# Set up logging
logger = logging.getLogger(__name__)


class Variant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class Notification(NamedTuple):
    title: str
    description: str
    variant: Variant = Variant.DEFAULT


class NotificationSink:
    """Base sink; logs every notification."""

    def notify(self, title: str, description: str, variant: Variant = Variant.DEFAULT) -> None:
        if variant == Variant.DESTRUCTIVE:
            logger.warning(f"{title}: {description}")
        else:
            logger.info(f"{title}: {description}")


class RecordingSink(NotificationSink):
    """Sink that keeps every notification, e.g. for a status panel."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def notify(self, title: str, description: str, variant: Variant = Variant.DEFAULT) -> None:
        super().notify(title, description, variant)
        self.notifications.append(Notification(title, description, variant))

    @property
    def last(self):
        return self.notifications[-1] if self.notifications else None
