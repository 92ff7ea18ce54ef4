"""Transformer turning validated locator events into calendar entries."""
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Union

from dateutil.parser import isoparse

from processor.exceptions import DateParseError
from processor.models import CalendarEntry
from processor.schemas import LocatorEvent

logger = logging.getLogger(__name__)

MARKUP_PATTERN = re.compile(r'<[^>]+>')


def decompose_timestamp(value: str, field: str = 'timestamp',
                        event_id: Optional[int] = None) -> datetime:
    """
    Decompose an ISO 8601 timestamp into its wall-clock minute.

    The local time written in the string is kept as-is; any UTC offset is
    dropped rather than converted, so the result does not depend on the
    host timezone.

    Args:
        value: ISO 8601 timestamp string
        field: Name of the field being parsed (for error messages)
        event_id: Identifier of the owning event (for error messages)

    Returns:
        Naive datetime truncated to the minute

    Raises:
        DateParseError: If the string is not a parseable timestamp
    """
    try:
        parsed = isoparse(value)
    except (ValueError, OverflowError) as e:
        raise DateParseError(field=field, value=value, event_id=event_id) from e
    return truncate_to_minute(parsed)


def truncate_to_minute(value: datetime) -> datetime:
    """Drop tzinfo, seconds and microseconds from a datetime."""
    return value.replace(tzinfo=None, second=0, microsecond=0)


def utc_minute(value: datetime) -> datetime:
    """Convert to an aware UTC datetime truncated to the minute.

    Naive values are taken as host local time.
    """
    return value.astimezone(timezone.utc).replace(second=0, microsecond=0)


def format_event_id(event_id: Union[int, float]) -> str:
    """Render an identifier, dropping the fraction of integral floats."""
    if isinstance(event_id, float) and event_id.is_integer():
        event_id = int(event_id)
    return str(event_id)


def strip_markup(text: str) -> str:
    """Remove every ``<...>`` tag. Entities are left encoded."""
    return MARKUP_PATTERN.sub('', text)


class EventTransformer:
    """Maps locator events onto calendar entries."""

    EVENT_URL_BASE = "https://locator.riftbound.uvsgames.com/events/"
    UID_DOMAIN = "locator.riftbound.uvsgames.com"
    TITLE_SEPARATOR = " - "

    def __init__(self, duration_hours: int = 3):
        """
        Initialize the transformer.

        Args:
            duration_hours: Length assumed for events without an end time
        """
        self.duration = timedelta(hours=duration_hours)

    def transform_all(self, events: Iterable[LocatorEvent],
                      now: datetime) -> List[CalendarEntry]:
        """
        Transform every event, preserving order.

        Args:
            events: Validated events in source order
            now: Time of the current run

        Returns:
            List of CalendarEntry objects, one per event

        Raises:
            DateParseError: On the first event with an unparseable timestamp
        """
        entries = [self.transform(event, now) for event in events]
        logger.info(f"Transformed {len(entries)} events into calendar entries")
        return entries

    def transform(self, event: LocatorEvent, now: datetime) -> CalendarEntry:
        """
        Transform a single event.

        Args:
            event: Validated locator event
            now: Time of the current run, used for LAST-MODIFIED (stored in UTC)

        Returns:
            CalendarEntry for the event

        Raises:
            DateParseError: If a timestamp cannot be parsed or the default
                end falls outside the supported date range
        """
        start = decompose_timestamp(
            event.start_datetime, field='start_datetime', event_id=event.id
        )
        if event.end_datetime:
            end = decompose_timestamp(
                event.end_datetime, field='end_datetime', event_id=event.id
            )
        else:
            logger.debug(
                f"Event {event.id} has no end time, "
                f"assuming {self.duration} duration"
            )
            try:
                end = start + self.duration
            except OverflowError as e:
                raise DateParseError(
                    field='end_datetime', value=f"{start.isoformat()} + {self.duration}",
                    event_id=event.id
                ) from e

        event_id = format_event_id(event.id)
        return CalendarEntry(
            uid=f"{event_id}@{self.UID_DOMAIN}",
            start=start,
            end=end,
            title=f"{event.store.name}{self.TITLE_SEPARATOR}{event.name}",
            description=strip_markup(event.description),
            location=event.full_address,
            url=self.event_url(event_id),
            geo=(event.latitude, event.longitude),
            last_modified=utc_minute(now)
        )

    def event_url(self, event_id: Union[int, str]) -> str:
        """Return the public locator page for an event."""
        return f"{self.EVENT_URL_BASE}{event_id}"
