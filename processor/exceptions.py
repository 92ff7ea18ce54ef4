"""Error kinds raised by the calendar pipeline."""
from typing import Optional


class CalendarPipelineError(Exception):
    """Base class for every failure that aborts a run."""


class NetworkError(CalendarPipelineError):
    """The event listing request could not be completed."""


class SchemaValidationError(CalendarPipelineError):
    """The response body does not match the expected envelope shape."""

    def __init__(self, path: str, expectation: str, error_count: int = 1):
        self.path = path
        self.expectation = expectation
        self.error_count = error_count
        message = f"Invalid response at '{path}': {expectation}"
        if error_count > 1:
            message += f" (and {error_count - 1} more violation(s))"
        super().__init__(message)


class DateParseError(CalendarPipelineError):
    """A start or end timestamp could not be decomposed."""

    def __init__(self, field: str, value: str, event_id: Optional[int] = None):
        self.field = field
        self.value = value
        self.event_id = event_id
        super().__init__(
            f"Cannot parse {field} {value!r} for event {event_id}"
        )


class SerializationError(CalendarPipelineError):
    """The calendar writer rejected the entry sequence."""


class FilesystemError(CalendarPipelineError):
    """The calendar file could not be written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Cannot write calendar to {path}: {reason}")


class ScrapeError(CalendarPipelineError):
    """The browser scrape of the public locator page failed."""
