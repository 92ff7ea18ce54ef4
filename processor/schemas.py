"""Response schema for the event locator listing endpoint.

The models mirror the shape the locator API returns for
``/hydraproxy/api/v2/events/``. Validation is a subset check: every field
declared here must be present with the right type, while fields the API adds
later are ignored. Types are checked strictly, so ``"12"`` is not accepted
where a number is expected.

Nullable fields must be present but may hold ``null``. Fields that have only
ever been observed as ``null`` are typed ``None`` and may also be absent.
"""
import logging
from typing import Annotated, Any, List, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    StrictBool,
    StrictStr,
    ValidationError,
)

from processor.exceptions import SchemaValidationError

logger = logging.getLogger(__name__)


def _require_number(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("Input should be a number")
    return value


# JSON numbers: ints or floats, never numeric strings or booleans
Number = Annotated[Union[int, float], BeforeValidator(_require_number)]


class LocatorModel(BaseModel):
    """Base model: immutable and tolerant of unknown fields."""

    model_config = ConfigDict(frozen=True, extra='ignore')


class EventSettings(LocatorModel):
    id: Number
    decklist_status: StrictStr
    decklists_on_spicerack: StrictBool
    event_lifecycle_status: StrictStr
    show_registration_button: StrictBool
    round_duration_in_minutes: Number
    payment_in_store: StrictBool
    payment_on_spicerack: StrictBool
    maximum_number_of_game_wins_per_match: Number
    maximum_number_of_draws_per_match: None = None
    checkin_methods: List[StrictStr]
    stripe_price_id: None = None
    maximum_number_of_players_in_match: Number
    enable_waitlist: StrictBool


class TournamentPhase(LocatorModel):
    id: Number
    phase_name: StrictStr
    phase_description: StrictStr
    first_round_type: Optional[StrictStr]
    status: StrictStr
    order_in_phases: Number
    number_of_rounds: Optional[Number]
    round_type: StrictStr
    rank_required_to_enter_phase: Optional[Number]
    effective_maximum_number_of_game_wins_per_match: Number
    rounds: List[Any]


class Coordinates(LocatorModel):
    type: StrictStr
    coordinates: List[Number]


class Store(LocatorModel):
    """Venue hosting an event."""
    id: Number
    name: StrictStr
    full_address: StrictStr
    city: StrictStr
    country: Optional[StrictStr]
    state: Optional[StrictStr]
    latitude: Number
    longitude: Number
    website: Optional[StrictStr]
    email: Optional[StrictStr]


class GameplayFormat(LocatorModel):
    id: StrictStr
    name: StrictStr


class LocatorEvent(LocatorModel):
    """A single event record from the listing."""
    id: Number
    full_header_image_url: StrictStr
    start_datetime: StrictStr
    end_datetime: Optional[StrictStr]
    day_2_start_datetime: None = None
    timer_end_datetime: None = None
    timer_paused_at_datetime: None = None
    timer_is_running: StrictBool
    description: StrictStr
    settings: EventSettings
    tournament_phases: List[TournamentPhase]
    registered_user_count: Number
    full_address: StrictStr
    name: StrictStr
    pinned_by_store: StrictBool
    use_verbatim_name: StrictBool
    queue_status: StrictStr
    game_type: StrictStr
    source: None = None
    event_status: StrictStr
    event_format: StrictStr
    event_type: StrictStr
    pairing_system: None = None
    rules_enforcement_level: StrictStr
    coordinates: Coordinates
    timezone: Optional[StrictStr]
    event_address_override: Optional[StrictStr]
    event_is_online: StrictBool
    latitude: Number
    longitude: Number
    cost_in_cents: Number
    currency: StrictStr
    capacity: Number
    url: None = None
    number_of_rc_invites: None = None
    top_cut_size: None = None
    number_of_rounds: None = None
    number_of_days: Number
    is_headlining_event: StrictBool
    is_on_demand: StrictBool
    prevent_sync: StrictBool
    header_image: None = None
    starting_table_number: Number
    ending_table_number: None = None
    admin_list_display_order: Number
    prizes_awarded: StrictBool
    is_test_event: StrictBool
    is_template: StrictBool
    tax_enabled: StrictBool
    polymorphic_ctype: Number
    created_at: StrictStr
    updated_at: StrictStr
    created_by: Number
    updated_by: Number
    game: Number
    product_list: None = None
    event_factory_created_by: None = None
    event_configuration_template: StrictStr
    banner_image: Number
    phase_template_group: StrictStr
    game_rules_enforcement_level: None = None
    registration_prerequisite_requires_invitation: StrictBool
    store: Store
    convention: None = None
    gameplay_format: GameplayFormat
    distance_in_miles: None = None
    display_status: StrictStr


class EventLocatorResponse(LocatorModel):
    """Paginated envelope around the event records."""
    page_size: Number
    count: Number
    total: Number
    current_page_number: Number
    next_page_number: Optional[Number]
    next: Optional[Number]
    previous: Optional[Number]
    previous_page_number: Optional[Number]
    results: List[LocatorEvent]


def _format_location(loc) -> str:
    return '.'.join(str(part) for part in loc) or '<root>'


def validate_response(payload: Any) -> EventLocatorResponse:
    """
    Validate a decoded JSON payload against the listing schema.

    Args:
        payload: Decoded JSON body of the listing response

    Returns:
        Validated EventLocatorResponse

    Raises:
        SchemaValidationError: If any declared field is missing or mistyped
    """
    try:
        response = EventLocatorResponse.model_validate(payload)
    except ValidationError as e:
        errors = e.errors()
        first = errors[0]
        path = _format_location(first['loc'])
        logger.error(
            f"Response failed schema validation at '{path}': {first['msg']}",
            extra={'error_count': len(errors)}
        )
        raise SchemaValidationError(
            path=path,
            expectation=first['msg'],
            error_count=len(errors)
        ) from e

    logger.info(
        f"Validated response with {len(response.results)} events "
        f"(total reported: {response.total})"
    )
    return response
