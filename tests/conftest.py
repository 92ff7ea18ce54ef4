"""Shared fixtures for locator payloads."""
import copy

import pytest


SAMPLE_EVENT = {
    'id': 101,
    'full_header_image_url': 'https://cdn.example.com/header.png',
    'start_datetime': '2025-03-14T18:30:00',
    'end_datetime': '2025-03-14T22:00:00',
    'day_2_start_datetime': None,
    'timer_end_datetime': None,
    'timer_paused_at_datetime': None,
    'timer_is_running': False,
    'description': '<p>Bring your <b>deck</b></p>',
    'settings': {
        'id': 7,
        'decklist_status': 'not_required',
        'decklists_on_spicerack': False,
        'event_lifecycle_status': 'scheduled',
        'show_registration_button': True,
        'round_duration_in_minutes': 50,
        'payment_in_store': True,
        'payment_on_spicerack': False,
        'maximum_number_of_game_wins_per_match': 2,
        'maximum_number_of_draws_per_match': None,
        'checkin_methods': ['qr'],
        'stripe_price_id': None,
        'maximum_number_of_players_in_match': 2,
        'enable_waitlist': False
    },
    'tournament_phases': [
        {
            'id': 1,
            'phase_name': 'Swiss',
            'phase_description': '',
            'first_round_type': None,
            'status': 'pending',
            'order_in_phases': 1,
            'number_of_rounds': 4,
            'round_type': 'swiss',
            'rank_required_to_enter_phase': None,
            'effective_maximum_number_of_game_wins_per_match': 2,
            'rounds': []
        }
    ],
    'registered_user_count': 12,
    'full_address': '12 Rue de Rivoli, 75004 Paris, France',
    'name': 'Nexus Night',
    'pinned_by_store': False,
    'use_verbatim_name': False,
    'queue_status': 'closed',
    'game_type': 'riftbound',
    'source': None,
    'event_status': 'upcoming',
    'event_format': 'constructed',
    'event_type': 'casual',
    'pairing_system': None,
    'rules_enforcement_level': 'casual',
    'coordinates': {'type': 'Point', 'coordinates': [2.3556, 48.8556]},
    'timezone': 'Europe/Paris',
    'event_address_override': None,
    'event_is_online': False,
    'latitude': 48.8556,
    'longitude': 2.3556,
    'cost_in_cents': 500,
    'currency': 'EUR',
    'capacity': 32,
    'url': None,
    'number_of_rc_invites': None,
    'top_cut_size': None,
    'number_of_rounds': None,
    'number_of_days': 1,
    'is_headlining_event': False,
    'is_on_demand': False,
    'prevent_sync': False,
    'header_image': None,
    'starting_table_number': 1,
    'ending_table_number': None,
    'admin_list_display_order': 0,
    'prizes_awarded': False,
    'is_test_event': False,
    'is_template': False,
    'tax_enabled': False,
    'polymorphic_ctype': 42,
    'created_at': '2025-02-01T10:00:00Z',
    'updated_at': '2025-02-02T10:00:00Z',
    'created_by': 3,
    'updated_by': 3,
    'game': 1,
    'product_list': None,
    'event_factory_created_by': None,
    'event_configuration_template': 'default',
    'banner_image': 9,
    'phase_template_group': 'standard',
    'game_rules_enforcement_level': None,
    'registration_prerequisite_requires_invitation': False,
    'store': {
        'id': 55,
        'name': 'Le Dragon Ludique',
        'full_address': '12 Rue de Rivoli, 75004 Paris, France',
        'city': 'Paris',
        'country': 'FR',
        'state': None,
        'latitude': 48.8556,
        'longitude': 2.3556,
        'website': None,
        'email': 'shop@example.com'
    },
    'convention': None,
    'gameplay_format': {'id': 'standard', 'name': 'Standard'},
    'distance_in_miles': None,
    'display_status': 'upcoming'
}


def build_event(**overrides):
    """Return a valid raw event dict with top-level overrides applied."""
    event = copy.deepcopy(SAMPLE_EVENT)
    event.update(overrides)
    return event


def build_response(events):
    """Wrap raw events in a listing envelope."""
    return {
        'page_size': 200,
        'count': len(events),
        'total': len(events),
        'current_page_number': 1,
        'next_page_number': None,
        'next': None,
        'previous': None,
        'previous_page_number': None,
        'results': events
    }


@pytest.fixture
def make_event():
    """Factory for raw event dicts."""
    return build_event


@pytest.fixture
def make_response():
    """Factory for raw listing envelopes."""
    return build_response


@pytest.fixture
def sample_payload():
    """Listing with two events, the second without an end time."""
    return build_response([
        build_event(),
        build_event(
            id=102,
            name='Summoner Skirmish',
            start_datetime='2025-03-15T14:00:00+01:00',
            end_datetime=None
        )
    ])
