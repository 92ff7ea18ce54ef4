"""Generate an iCalendar file of upcoming Riftbound events."""
import argparse
import json
import logging
import os
import sys
import time
from dataclasses import asdict
from datetime import datetime, timedelta
from typing import Dict, List, Mapping, Optional

from processor.event_transformer import EventTransformer
from processor.exceptions import CalendarPipelineError
from processor.models import PipelineResult, PipelineSettings, PipelineState
from processor.schemas import validate_response
from scraper.event_locator import EventLocatorClient
from storage.ics_writer import CalendarEmitter

_RESERVED_ATTRS = set(
    logging.LogRecord('', 0, '', 0, '', (), None).__dict__
) | {'message', 'asctime'}


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, including any ``extra`` fields."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


logger = logging.getLogger(__name__)


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in ('1', 'true', 'yes', 'on'):
        return True
    if value in ('0', 'false', 'no', 'off'):
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _env_number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a {cast.__name__}, got {raw!r}") from e


def _env_duration(env: Mapping[str, str], default: int) -> int:
    hours = _env_number(env, 'DEFAULT_DURATION_HOURS', default, int)
    if hours <= 0:
        raise ValueError(f"DEFAULT_DURATION_HOURS must be positive, got {hours}")
    try:
        timedelta(hours=hours)
    except OverflowError as e:
        raise ValueError(f"DEFAULT_DURATION_HOURS is too large, got {hours}") from e
    return hours


def load_settings(env: Optional[Mapping[str, str]] = None) -> PipelineSettings:
    """
    Read pipeline settings from environment variables.

    Args:
        env: Mapping to read from (default: os.environ)

    Returns:
        PipelineSettings populated from the environment

    Raises:
        ValueError: If a variable cannot be parsed
    """
    env = os.environ if env is None else env
    defaults = PipelineSettings()
    return PipelineSettings(
        output_path=env.get('OUTPUT_PATH', defaults.output_path),
        log_level=env.get('LOG_LEVEL', defaults.log_level),
        timeout_seconds=_env_number(env, 'TIMEOUT_SECONDS', defaults.timeout_seconds, int),
        verify_tls=_env_bool(env, 'VERIFY_TLS', defaults.verify_tls),
        default_duration_hours=_env_duration(env, defaults.default_duration_hours),
        latitude=_env_number(env, 'SEARCH_LATITUDE', defaults.latitude, float),
        longitude=_env_number(env, 'SEARCH_LONGITUDE', defaults.longitude, float),
        radius_miles=_env_number(env, 'SEARCH_RADIUS_MILES', defaults.radius_miles, int),
        game_slug=env.get('GAME_SLUG', defaults.game_slug),
        page_size=_env_number(env, 'PAGE_SIZE', defaults.page_size, int)
    )


class CalendarPipeline:
    """Fetch, validate, transform and emit one batch of events."""

    def __init__(
        self,
        settings: PipelineSettings,
        client: Optional[EventLocatorClient] = None,
        transformer: Optional[EventTransformer] = None,
        emitter: Optional[CalendarEmitter] = None
    ):
        self.settings = settings
        self.client = client or EventLocatorClient(
            latitude=settings.latitude,
            longitude=settings.longitude,
            radius_miles=settings.radius_miles,
            game_slug=settings.game_slug,
            page_size=settings.page_size,
            timeout=settings.timeout_seconds,
            verify_tls=settings.verify_tls
        )
        self.transformer = transformer or EventTransformer(
            duration_hours=settings.default_duration_hours
        )
        self.emitter = emitter or CalendarEmitter(settings.output_path)
        self.state = PipelineState.IDLE

    def _enter(self, state: PipelineState) -> None:
        logger.info(
            f"Pipeline {self.state.value} -> {state.value}",
            extra={'state': state.value}
        )
        self.state = state

    def run(self, now: Optional[datetime] = None) -> PipelineResult:
        """
        Execute the pipeline once.

        Args:
            now: Time of the run (default: current local time)

        Returns:
            PipelineResult summarizing the run

        Raises:
            CalendarPipelineError: On any failure; the output file is untouched
        """
        start_time = time.time()
        now = now or datetime.now().astimezone()
        self.state = PipelineState.IDLE

        try:
            self._enter(PipelineState.FETCHING)
            payload = self.client.fetch_events(now)

            self._enter(PipelineState.VALIDATING)
            response = validate_response(payload)
            if response.total > len(response.results):
                logger.warning(
                    f"Listing reports {response.total} events but only "
                    f"{len(response.results)} fit in one page; the rest are "
                    f"not included"
                )

            self._enter(PipelineState.TRANSFORMING)
            entries = self.transformer.transform_all(response.results, now)

            self._enter(PipelineState.EMITTING)
            bytes_written = self.emitter.emit(entries)
        except Exception:
            self._enter(PipelineState.FAILED)
            raise

        self._enter(PipelineState.DONE)
        return PipelineResult(
            events_written=len(entries),
            output_path=self.emitter.output_path,
            bytes_written=bytes_written,
            duration_seconds=round(time.time() - start_time, 2)
        )


def run_generate(settings: PipelineSettings) -> int:
    """Run the calendar pipeline and report the outcome as an exit code."""
    try:
        result = CalendarPipeline(settings).run()
    except CalendarPipelineError as e:
        logger.error(
            f"Calendar generation failed: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return 1

    logger.info("Calendar generation completed", extra=asdict(result))
    return 0


def run_scrape(settings: PipelineSettings, location: str, distance: str,
               headless: bool) -> int:
    """Scrape the public locator page and print the fragments as JSON."""
    from scraper.locator_browser import LocatorBrowserScraper

    scraper = LocatorBrowserScraper(
        location=location,
        distance=distance,
        headless=headless,
        timeout=settings.timeout_seconds
    )
    try:
        fragments = scraper.scrape()
    except CalendarPipelineError as e:
        logger.error(
            f"Scrape failed: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return 1

    records: List[Dict] = [asdict(fragment) for fragment in fragments]
    print(json.dumps(records, indent=2, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build an iCalendar file of upcoming Riftbound events."
    )
    subparsers = parser.add_subparsers(dest='command')

    generate = subparsers.add_parser('generate', help="Write the calendar file (default)")
    generate.add_argument('--output', help="Output .ics path (env: OUTPUT_PATH)")
    generate.add_argument(
        '--insecure', action='store_true',
        help="Disable TLS certificate verification (env: VERIFY_TLS=false)"
    )

    scrape = subparsers.add_parser('scrape', help="Scrape the public locator page to JSON")
    scrape.add_argument('--location', default='Paris, France')
    scrape.add_argument('--distance', default='5 mi')
    scrape.add_argument('--headed', action='store_true', help="Show the browser window")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Command line entry point.

    Args:
        argv: Arguments (default: sys.argv[1:])

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings()
    except ValueError as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        return 2
    setup_logging(settings.log_level)

    if args.command == 'scrape':
        return run_scrape(settings, args.location, args.distance, not args.headed)

    if getattr(args, 'output', None):
        settings.output_path = args.output
    if getattr(args, 'insecure', False):
        settings.verify_tls = False
    return run_generate(settings)


if __name__ == '__main__':
    sys.exit(main())
