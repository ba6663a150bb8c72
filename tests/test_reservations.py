from datetime import datetime, timedelta

from libstore.notifications import Notifier
from libstore.reservations import Reservation, ReservationQueue, ReservationStatus


def test_reservation_expiry_and_transitions():
    reservation = Reservation("acc-1", "B1", hold_days=7)

    assert reservation.is_active
    assert reservation.is_waiting
    assert reservation.expires_at is None
    assert not reservation.is_expired()

    notified = datetime(2024, 5, 1, 10, 0)
    reservation.mark_notified(notified)
    assert not reservation.is_waiting
    assert reservation.expires_at == notified + timedelta(days=7)
    assert not reservation.is_expired(notified + timedelta(days=7))
    assert reservation.is_expired(notified + timedelta(days=7, seconds=1))

    reservation.cancel()
    assert reservation.status is ReservationStatus.CANCELLED
    assert not reservation.is_active

    other = Reservation("acc-2", "B1")
    other.fulfill()
    assert other.status is ReservationStatus.FULFILLED


def test_queue_positions_only_count_active():
    queue = ReservationQueue("B1")
    first = queue.add("ACC001")
    queue.add("ACC002")
    queue.add("ACC003")

    assert [queue.position(a) for a in ("ACC001", "ACC002", "ACC003")] == [1, 2, 3]

    queue.get(first).cancel()
    assert queue.position("ACC001") is None
    assert queue.position("ACC002") == 1
    assert queue.position("ACC003") == 2
    assert len(queue) == 2
    assert queue.position("nobody") is None


def test_next_reservation_is_fifo():
    queue = ReservationQueue("B1")
    assert queue.next_reservation() is None

    queue.add("ACC001")
    queue.add("ACC002")
    assert queue.next_reservation().account_id == "ACC001"

    queue.next_reservation().fulfill()
    assert queue.next_reservation().account_id == "ACC002"
    assert queue.active_for("ACC001") is None
    assert queue.active_for("ACC002").account_id == "ACC002"


def test_notify_next_reader():
    notifier = Notifier()
    queue = ReservationQueue("B1")

    assert queue.notify_next_reader(notifier) is None
    assert notifier.sent == []

    queue.add("ACC001")
    head = queue.notify_next_reader(notifier)

    assert head.account_id == "ACC001"
    assert len(notifier.sent) == 1
    assert notifier.sent[0].account_id == "ACC001"
    assert "B1" in notifier.sent[0].message


def test_reservation_to_dict():
    data = Reservation("acc-1", "B1").to_dict()
    assert data["status"] == "Active"
    assert data["book_id"] == "B1"
    assert set(data) == {"id", "account_id", "book_id", "created_at", "notified_at", "expires_at", "status"}
    assert data["notified_at"] is None
    assert data["expires_at"] is None


def test_notified_readers_are_skipped():
    notifier = Notifier()
    queue = ReservationQueue("B1")
    queue.add("ACC001")
    queue.add("ACC002")

    first = queue.notify_next_reader(notifier)
    second = queue.notify_next_reader(notifier)

    assert first.account_id == "ACC001"
    assert second.account_id == "ACC002"
    # Both keep their place until pickup
    assert queue.position("ACC001") == 1
    assert queue.position("ACC002") == 2
    assert queue.next_waiting() is None
    assert queue.notify_next_reader(notifier) is None
    assert [n.account_id for n in notifier.sent] == ["ACC001", "ACC002"]


def test_expire_holds_only_touches_lapsed_notifications():
    notifier = Notifier()
    queue = ReservationQueue("B1", hold_days=3)
    queue.add("ACC001")
    queue.add("ACC002")
    notified = datetime(2024, 5, 1)
    queue.notify_next_reader(notifier, now=notified)

    assert queue.expire_holds(notified + timedelta(days=2)) == []

    expired = queue.expire_holds(notified + timedelta(days=4))
    assert [r.account_id for r in expired] == ["ACC001"]
    assert expired[0].status is ReservationStatus.EXPIRED
    assert queue.position("ACC001") is None
    assert queue.next_waiting().account_id == "ACC002"
