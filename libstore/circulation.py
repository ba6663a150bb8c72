import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from libstore.book import BookCopy, BookMetadata, CopyStatus
from libstore.catalog import CatalogIndex, CopyLocation
from libstore.config import Settings, settings as default_settings
from libstore.errors import AccountNotFoundError, BookUnavailableError, BorrowingNotAllowedError
from libstore.notifications import Notifier
from libstore.reservations import Reservation, ReservationQueue

logger = logging.getLogger(__name__)

ACCOUNT_ACTIVE = "Active"


@dataclass
class Account:
    full_name: str
    phone: str
    email: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: str = ACCOUNT_ACTIVE
    loan_ids: List[str] = field(default_factory=list)
    books_on_hand: List[str] = field(default_factory=list)
    reservation_ids: List[str] = field(default_factory=list)

    @property
    def current_loans(self) -> int:
        return len(self.loan_ids)

    @property
    def is_active(self) -> bool:
        return self.status == ACCOUNT_ACTIVE

    def has_unpaid_fines(self) -> bool:
        # Fines are not calculated
        return False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "full_name": self.full_name,
            "phone": self.phone,
            "email": self.email,
            "status": self.status,
            "current_loans": self.current_loans,
            "books_on_hand": list(self.books_on_hand),
            "reservations": list(self.reservation_ids),
        }


@dataclass
class Loan:
    account_id: str
    copy_id: str
    book_id: str
    issue_date: datetime
    due_date: datetime
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.now()) > self.due_date

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "copy_id": self.copy_id,
            "book_id": self.book_id,
            "issue_date": self.issue_date.isoformat(),
            "due_date": self.due_date.isoformat(),
        }


class LendingDesk:
    """Circulation workflow: accounts, loans and reservations over a catalog.

    The desk only talks to the catalog through its lookup surface and the
    copies those lookups return; it never touches storage nodes.
    """

    def __init__(self, catalog: CatalogIndex, settings: Optional[Settings] = None,
                 notifier: Optional[Notifier] = None) -> None:
        self.catalog = catalog
        self.settings = settings or default_settings
        self.notifier = notifier or Notifier()
        self.accounts: Dict[str, Account] = {}
        self.loans: Dict[str, Loan] = {}
        self.queues: Dict[str, ReservationQueue] = {}

    # ------------------------- Accounts ------------------------- #
    def register_account(self, full_name: str, phone: str, email: str) -> Account:
        account = Account(full_name=full_name.strip(), phone=phone.strip(), email=email.strip())
        self.accounts[account.id] = account
        logger.info(f"Registered account {account.id} for {account.full_name}")
        return account

    def get_account(self, account_id: str) -> Optional[Account]:
        return self.accounts.get(account_id)

    def account_exists(self, account_id: str) -> bool:
        return account_id in self.accounts

    def can_borrow(self, account_id: str) -> bool:
        account = self.accounts.get(account_id)
        if account is None:
            return False
        within_limit = account.current_loans < self.settings.max_loans
        overdue = self.has_overdue_books(account_id)
        allowed = within_limit and not overdue and not account.has_unpaid_fines() and account.is_active
        if not allowed:
            logger.info(f"Account {account_id} cannot borrow: loans={account.current_loans}/"
                        f"{self.settings.max_loans}, overdue={overdue}, status={account.status}")
        return allowed

    def has_overdue_books(self, account_id: str, now: Optional[datetime] = None) -> bool:
        return any(loan.is_overdue(now) for loan in self.loans.values() if loan.account_id == account_id)

    # ------------------------- Catalog ------------------------- #
    def search_books(self, title: Optional[str] = "", author: Optional[str] = "") -> List[BookMetadata]:
        return self.catalog.search(title, author)

    # ------------------------- Loans ------------------------- #
    def issue_book(self, account_id: str, book_id: str, issue_date: Optional[datetime] = None,
                   due_date: Optional[datetime] = None) -> Loan:
        """Lend a copy of ``book_id``; a copy held for this account is preferred."""
        self.release_expired_holds(issue_date)
        if not self.can_borrow(account_id):
            raise BorrowingNotAllowedError(f"Account {account_id} cannot borrow books right now.")

        found = self._held_copy(account_id, book_id) or self.catalog.find_available_copy(book_id)
        if found is None:
            raise BookUnavailableError(f"No copy of {book_id} is available.")

        issue_date = issue_date or datetime.now()
        due_date = due_date or issue_date + timedelta(days=self.settings.loan_period_days)
        copy = found.copy
        loan = Loan(account_id=account_id, copy_id=copy.id, book_id=book_id,
                    issue_date=issue_date, due_date=due_date)
        copy.mark_loaned(account_id)

        account = self.accounts[account_id]
        account.loan_ids.append(loan.id)
        account.books_on_hand.append(copy.id)
        self.loans[loan.id] = loan

        queue = self.queues.get(book_id)
        reservation = queue.active_for(account_id) if queue else None
        if reservation is not None:
            reservation.fulfill()

        logger.info(f"Issued copy {copy.id} ({book_id}) from {found.location} to {account_id}, "
                    f"due {due_date:%Y-%m-%d}")
        return loan

    def loan_for_copy(self, copy_id: str) -> Optional[Loan]:
        for loan in self.loans.values():
            if loan.copy_id == copy_id:
                return loan
        return None

    def is_overdue(self, copy_id: str, now: Optional[datetime] = None) -> bool:
        loan = self.loan_for_copy(copy_id)
        return loan is not None and loan.is_overdue(now)

    def return_book(self, copy_id: str, now: Optional[datetime] = None) -> Optional[Loan]:
        """Close the loan on a copy. The copy is held for the next waiting reader, if any."""
        loan = self.loan_for_copy(copy_id)
        if loan is None:
            logger.info(f"No active loan for copy {copy_id}")
            return None

        account = self.accounts.get(loan.account_id)
        if account is not None:
            if loan.id in account.loan_ids:
                account.loan_ids.remove(loan.id)
            if copy_id in account.books_on_hand:
                account.books_on_hand.remove(copy_id)
        del self.loans[loan.id]

        found = self.catalog.find_copy_by_id(copy_id)
        if found is not None:
            copy = found.copy
            self._pass_on(copy, now)
            logger.info(f"Copy {copy_id} returned to {found.location} as {copy.status.value}")
        return loan

    def active_loans(self) -> Dict[str, Loan]:
        return dict(self.loans)

    # ------------------------- Reservations ------------------------- #
    def reserve_book(self, account_id: str, book_id: str) -> Reservation:
        account = self.accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)

        queue = self.queues.get(book_id)
        if queue is None:
            queue = ReservationQueue(book_id, hold_days=self.settings.reservation_hold_days)
            self.queues[book_id] = queue

        reservation_id = queue.add(account_id)
        account.reservation_ids.append(reservation_id)
        return queue.get(reservation_id)

    def reservation_queue(self, book_id: str) -> Optional[ReservationQueue]:
        return self.queues.get(book_id)

    def release_expired_holds(self, now: Optional[datetime] = None) -> List[str]:
        """Expire holds that were not picked up in time and pass their copies on.

        Returns the ids of the copies that were released.
        """
        released = []
        for book_id, queue in self.queues.items():
            for reservation in queue.expire_holds(now):
                found = self._held_copy(reservation.account_id, book_id)
                if found is None:
                    continue
                self._pass_on(found.copy, now)
                released.append(found.copy.id)
                logger.info(f"Hold on {found.copy.id} for {reservation.account_id} lapsed; "
                            f"copy is now {found.copy.status.value}")
        return released

    # ------------------------- Helpers ------------------------- #
    def _pass_on(self, copy: BookCopy, now: Optional[datetime] = None) -> None:
        queue = self.queues.get(copy.book_id)
        reservation = queue.notify_next_reader(self.notifier, now) if queue else None
        if reservation is not None:
            copy.mark_reserved(reservation.account_id)
        else:
            copy.mark_returned()

    def _held_copy(self, account_id: str, book_id: str) -> Optional[CopyLocation]:
        for copy in self.catalog.copies_of(book_id):
            if copy.status is CopyStatus.RESERVED and copy.holder_account_id == account_id:
                return self.catalog.find_copy_by_id(copy.id)
        return None
