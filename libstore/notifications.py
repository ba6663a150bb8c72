import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List

logger = logging.getLogger(__name__)


@dataclass
class SentNotification:
    account_id: str
    message: str
    sent_at: datetime = field(default_factory=datetime.now)


class Notifier:
    """Delivers patron notifications. Delivery is a log line; every message is kept in ``sent``."""

    def __init__(self) -> None:
        self.sent: List[SentNotification] = []

    def send(self, account_id: str, message: str) -> SentNotification:
        notification = SentNotification(account_id, message)
        self.sent.append(notification)
        logger.info(f"Notification to {account_id}: {message}")
        return notification

    def sent_to(self, account_id: str) -> List[SentNotification]:
        return [n for n in self.sent if n.account_id == account_id]
