import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional

from libstore.notifications import Notifier

logger = logging.getLogger(__name__)


class ReservationStatus(Enum):
    ACTIVE = "Active"
    CANCELLED = "Cancelled"
    FULFILLED = "Fulfilled"
    EXPIRED = "Expired"


@dataclass
class Reservation:
    """A patron's claim on the next free copy of a book.

    Once the reader is notified a copy is held for them; the hold runs for
    ``hold_days`` from the notification and then expires.
    """
    account_id: str
    book_id: str
    hold_days: int = 7
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.now)
    status: ReservationStatus = ReservationStatus.ACTIVE
    notified_at: Optional[datetime] = None

    @property
    def expires_at(self) -> Optional[datetime]:
        if self.notified_at is None:
            return None
        return self.notified_at + timedelta(days=self.hold_days)

    @property
    def is_active(self) -> bool:
        return self.status is ReservationStatus.ACTIVE

    @property
    def is_waiting(self) -> bool:
        """Active and not yet offered a copy."""
        return self.is_active and self.notified_at is None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        expires_at = self.expires_at
        return self.is_active and expires_at is not None and (now or datetime.now()) > expires_at

    def mark_notified(self, now: Optional[datetime] = None) -> None:
        self.notified_at = now or datetime.now()

    def cancel(self) -> None:
        self.status = ReservationStatus.CANCELLED
        logger.info(f"Reservation {self.id} cancelled")

    def fulfill(self) -> None:
        self.status = ReservationStatus.FULFILLED
        logger.info(f"Reservation {self.id} fulfilled")

    def expire(self) -> None:
        self.status = ReservationStatus.EXPIRED
        logger.info(f"Reservation {self.id} expired without pickup")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "book_id": self.book_id,
            "created_at": self.created_at.isoformat(),
            "notified_at": self.notified_at.isoformat() if self.notified_at else None,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "status": self.status.value,
        }


class ReservationQueue:
    """FIFO of reservations for one book. Only active reservations hold a position."""

    def __init__(self, book_id: str, hold_days: int = 7) -> None:
        self.book_id = book_id
        self.hold_days = hold_days
        self.reservations: List[Reservation] = []

    def __len__(self) -> int:
        return len(self.active())

    def add(self, account_id: str) -> str:
        reservation = Reservation(account_id, self.book_id, hold_days=self.hold_days)
        self.reservations.append(reservation)
        logger.info(f"Queued reservation {reservation.id} for {account_id} on {self.book_id} "
                    f"({len(self)} active)")
        return reservation.id

    def active(self) -> List[Reservation]:
        return [r for r in self.reservations if r.is_active]

    def get(self, reservation_id: str) -> Optional[Reservation]:
        for reservation in self.reservations:
            if reservation.id == reservation_id:
                return reservation
        return None

    def next_reservation(self) -> Optional[Reservation]:
        for reservation in self.reservations:
            if reservation.is_active:
                return reservation
        return None

    def next_waiting(self) -> Optional[Reservation]:
        """First active reservation that has not been offered a copy yet."""
        for reservation in self.reservations:
            if reservation.is_waiting:
                return reservation
        return None

    def active_for(self, account_id: str) -> Optional[Reservation]:
        for reservation in self.reservations:
            if reservation.is_active and reservation.account_id == account_id:
                return reservation
        return None

    def position(self, account_id: str) -> Optional[int]:
        """1-based queue position of the account's active reservation, or None."""
        for index, reservation in enumerate(self.active(), 1):
            if reservation.account_id == account_id:
                return index
        return None

    def expire_holds(self, now: Optional[datetime] = None) -> List[Reservation]:
        """Expire notified reservations whose pickup window has passed."""
        expired = [r for r in self.reservations if r.is_expired(now)]
        for reservation in expired:
            reservation.expire()
        return expired

    def notify_next_reader(self, notifier: Notifier, now: Optional[datetime] = None) -> Optional[Reservation]:
        """Offer a copy to the first waiting reader. Readers already notified are skipped."""
        reservation = self.next_waiting()
        if reservation is None:
            logger.info(f"No one to notify for {self.book_id}")
            return None
        reservation.mark_notified(now)
        notifier.send(reservation.account_id, f"Book {self.book_id} is ready for pickup.")
        return reservation
