import enum


class ErrorKind(enum.Enum):
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    STORE_ERROR = "store_error"
    FATAL_STARTUP = "fatal_startup"


class BookstoreError(Exception):
    """
    Base for every failure the service reports.

    The handler layer dispatches on ``kind`` / ``status_code`` only,
    never on the message text.
    """

    kind = None
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class BadRequestError(BookstoreError):
    kind = ErrorKind.BAD_REQUEST
    status_code = 400


class NotFoundError(BookstoreError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class StoreError(BookstoreError):
    kind = ErrorKind.STORE_ERROR
    status_code = 500


class FatalStartupError(BookstoreError):
    """
    Store still unreachable after the startup retry budget.

    Raised before the app serves anything, so it never becomes a response;
    the entry point exits on it.
    """

    kind = ErrorKind.FATAL_STARTUP
