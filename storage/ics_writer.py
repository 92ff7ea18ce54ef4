"""iCalendar writer for generated calendar entries."""
import logging
import os
import stat
import tempfile
from typing import List

from icalendar import Calendar, Event, vText

from processor.exceptions import FilesystemError, SerializationError
from processor.models import CalendarEntry

logger = logging.getLogger(__name__)


class CalendarEmitter:
    """Serializes calendar entries and replaces the output file."""

    PRODID = "-//riftbound-calendar//Event Locator Export//EN"
    CALENDAR_NAME = "Riftbound events"

    def __init__(self, output_path: str = 'events.ics'):
        """
        Initialize the emitter.

        Args:
            output_path: File the calendar is written to
        """
        self.output_path = output_path

    def emit(self, entries: List[CalendarEntry]) -> int:
        """
        Build the calendar and write it over the output file.

        Args:
            entries: Calendar entries in output order

        Returns:
            Number of bytes written

        Raises:
            SerializationError: If an entry cannot be serialized
            FilesystemError: If the file cannot be written
        """
        content = self.build(entries)
        self._write_atomic(content)
        logger.info(
            f"Wrote {len(entries)} events to {self.output_path}",
            extra={'bytes_written': len(content)}
        )
        return len(content)

    def build(self, entries: List[CalendarEntry]) -> bytes:
        """
        Serialize entries into an iCalendar document.

        Args:
            entries: Calendar entries in output order

        Returns:
            The iCalendar document as bytes

        Raises:
            SerializationError: If an entry is inconsistent or the writer fails
        """
        for index, entry in enumerate(entries):
            self._check_entry(entry, index)

        cal = Calendar()
        cal.add('prodid', self.PRODID)
        cal.add('version', '2.0')
        cal.add('calscale', 'GREGORIAN')
        cal.add('method', 'PUBLISH')
        cal.add('x-wr-calname', self.CALENDAR_NAME)

        try:
            for entry in entries:
                cal.add_component(self._create_event(entry))
            return cal.to_ical()
        except (ValueError, TypeError) as e:
            raise SerializationError(f"Calendar serialization failed: {e}") from e

    def _create_event(self, entry: CalendarEntry) -> Event:
        ve = Event()
        ve.add('uid', entry.uid)
        ve.add('dtstamp', entry.last_modified)
        ve.add('dtstart', entry.start)
        ve.add('dtend', entry.end)
        ve.add('summary', vText(entry.title))
        ve.add('description', vText(entry.description))
        ve.add('location', vText(entry.location))
        ve.add('url', entry.url)
        ve.add('geo', entry.geo)
        ve.add('last-modified', entry.last_modified)
        return ve

    def _check_entry(self, entry: CalendarEntry, index: int) -> None:
        """Reject entries that would produce an inconsistent VEVENT."""
        label = f"entry {index} ({entry.uid})"
        if not entry.title.strip():
            raise SerializationError(f"{label} has an empty title")
        if entry.end <= entry.start:
            raise SerializationError(
                f"{label} ends at {entry.end.isoformat()} which is not after "
                f"its start {entry.start.isoformat()}"
            )
        lat, lon = entry.geo
        if not -90 <= lat <= 90 or not -180 <= lon <= 180:
            raise SerializationError(f"{label} has invalid geo {entry.geo}")

    def _target_mode(self) -> int:
        """Keep the mode of an existing file, else honour the umask."""
        try:
            return stat.S_IMODE(os.stat(self.output_path).st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    def _write_atomic(self, content: bytes) -> None:
        """Write content to a temp file beside the target, then swap it in."""
        directory = os.path.dirname(os.path.abspath(self.output_path))
        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                mode='wb', dir=directory, prefix='.events-', suffix='.ics.tmp',
                delete=False
            ) as tmp:
                tmp_path = tmp.name
                tmp.write(content)
            os.chmod(tmp_path, self._target_mode())
            os.replace(tmp_path, self.output_path)
        except OSError as e:
            logger.error(f"Failed to write calendar file: {e}", exc_info=True)
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise FilesystemError(self.output_path, str(e)) from e
