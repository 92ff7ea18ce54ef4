"""Data models for calendar generation."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class CalendarEntry:
    """One VEVENT worth of data derived from an event record."""
    uid: str
    start: datetime
    end: datetime
    title: str
    description: str
    location: str
    url: str
    geo: Tuple[float, float]
    last_modified: datetime


@dataclass
class ScrapedEventFragment:
    """Loosely structured event card scraped from the public locator page."""
    title: str
    date: str
    time: str
    link: Optional[str]
    full_text: str


@dataclass
class PipelineSettings:
    """Runtime configuration for one pipeline run."""
    output_path: str = 'events.ics'
    log_level: str = 'INFO'
    timeout_seconds: int = 30
    verify_tls: bool = True
    default_duration_hours: int = 3
    latitude: float = 48.8571346
    longitude: float = 2.3479679
    radius_miles: int = 8
    game_slug: str = 'riftbound'
    page_size: int = 200


@dataclass
class PipelineResult:
    """Summary of a completed run."""
    events_written: int
    output_path: str
    bytes_written: int
    duration_seconds: float


class PipelineState(Enum):
    """Stages a single run moves through."""
    IDLE = 'idle'
    FETCHING = 'fetching'
    VALIDATING = 'validating'
    TRANSFORMING = 'transforming'
    EMITTING = 'emitting'
    DONE = 'done'
    FAILED = 'failed'
