"""Domain Types: track identifiers and processor status enums.

Tests:
    - Track.parse accepts exact display names only
    - Track.from_prompt_id is case-insensitive
    - prompt_id is the upper-case display name
"""

from stoic_journal.core.domain_types import (
    Track, TRACK_LENGTH_DAYS, CheckoutPaymentStatus, WebhookEventType,
)


def test_four_tracks_in_catalogue_order():
    assert [t.value for t in Track] == ["Money", "Relationships", "Discipline", "Ego"]


def test_track_length_is_thirty_days():
    assert TRACK_LENGTH_DAYS == 30


def test_parse_accepts_display_name():
    assert Track.parse("Discipline") is Track.DISCIPLINE


def test_parse_rejects_other_casing_and_unknown_names():
    assert Track.parse("money") is None
    assert Track.parse("MONEY") is None
    assert Track.parse("Health") is None
    assert Track.parse("") is None


def test_parse_rejects_non_strings():
    assert Track.parse(None) is None
    assert Track.parse(1) is None


def test_prompt_id_is_upper_case():
    assert Track.RELATIONSHIPS.prompt_id == "RELATIONSHIPS"


def test_from_prompt_id_is_case_insensitive():
    assert Track.from_prompt_id("ego") is Track.EGO
    assert Track.from_prompt_id("EGO") is Track.EGO
    assert Track.from_prompt_id("Ego") is Track.EGO
    assert Track.from_prompt_id("EGOS") is None


def test_enums_serialize_to_processor_strings():
    assert CheckoutPaymentStatus.PAID == "paid"
    assert WebhookEventType.CHECKOUT_SESSION_COMPLETED == "checkout.session.completed"
