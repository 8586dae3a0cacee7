"""Error hierarchy for the timetable library.

Two families are kept apart so callers can decide how to surface them:

- DataError: a precondition was violated (malformed "HH:MM" string, backend
  row with the wrong shape). These indicate bad data and are raised
  immediately instead of producing garbage values.
- BackendError: the hosted backend could not be reached or rejected a
  request. Views turn these into a user-visible message and wait for the
  user to retry manually.

Example usage in a view:
    try:
        entries = client.list_schedules(day="Monday")
    except BackendError as e:
        self.error = "Failed to load data"
"""


class TimetableError(Exception):
    """Base exception for all timetable errors."""

    pass


class DataError(TimetableError):
    """Input data violates a precondition of the schedule logic."""

    pass


class TimeFormatError(DataError, ValueError):
    """A wall-clock or calendar-date string could not be parsed.

    Inherits from ValueError so plain `except ValueError` blocks still catch it.
    """

    pass


class CancellationDateError(DataError, ValueError):
    """A cancellation was requested for a date the class does not fall on."""

    pass


class RecordShapeError(DataError):
    """A backend row does not match the expected record shape."""

    def __init__(self, message: str, record: str, row: object = None) -> None:
        super().__init__(message)
        self.record = record
        self.row = row


class BackendError(TimetableError):
    """Base exception for failures talking to the hosted backend."""

    pass


class BackendUnavailableError(BackendError):
    """Connection failure or timeout reaching the backend.

    Examples: DNS failure, refused connection, request timeout.
    """

    pass


class BackendResponseError(BackendError):
    """The backend answered with a 4xx or 5xx status."""

    def __init__(self, message: str, status_code: int, body: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AuthenticationError(BackendError):
    """Invalid credentials, or the account is not linked to a teacher.

    Requires the user to sign in again; never retried automatically.
    """

    pass
