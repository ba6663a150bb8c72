class LibraryError(Exception):
    """Base error for the library storage and lending layers."""
    pass


class DuplicateBookError(LibraryError, ValueError):
    """Raised when a book id is registered twice."""

    def __init__(self, book_id: str) -> None:
        super().__init__(f"Book with id {book_id} already exists.")
        self.book_id = book_id


class AccountNotFoundError(LibraryError, LookupError):
    """Raised when an operation names an unknown patron account."""

    def __init__(self, account_id: str) -> None:
        super().__init__(f"Account {account_id} not found.")
        self.account_id = account_id


class BorrowingNotAllowedError(LibraryError):
    """The account is unknown or may not take another loan."""
    pass


class BookUnavailableError(LibraryError):
    """No copy of the requested book can be issued right now."""
    pass
