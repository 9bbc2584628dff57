from uuid import UUID

from playin_map.assembler import DEFAULT_EMOJI, assemble, group_activities
from playin_map.schemas import ActivityTag, ActivityTagRaw, VenueRaw

from .conftest import VENUE_A, VENUE_B, VENUE_C, offer_row, venue_row


def _venues(*rows):
    return [VenueRaw.model_validate(row) for row in rows]


def _tags(*rows):
    return [ActivityTagRaw.model_validate(row) for row in rows]


def test_duplicate_tags_collapse_to_first_occurrence():
    venues = _venues(venue_row(VENUE_A))
    tags = _tags(
        offer_row(VENUE_A, "Tennis", "🎾"),
        offer_row(VENUE_A, "Tennis", "🎾"),
        offer_row(VENUE_A, "Tennis", ""),
    )
    (venue,) = assemble(venues, tags)
    assert venue.activities == (ActivityTag(label="Tennis", emoji="🎾"),)


def test_blank_emoji_gets_default():
    grouped = group_activities(_tags(offer_row(VENUE_A, " Foot ", "  ")))
    assert grouped[UUID(VENUE_A)] == [ActivityTag(label="Foot", emoji=DEFAULT_EMOJI)]


def test_blank_labels_are_skipped():
    grouped = group_activities(
        _tags(
            offer_row(VENUE_A, "   ", "🎾"),
            offer_row(VENUE_A, None, "🎾"),
            {"complex_id": VENUE_A, "activities": None},
        )
    )
    assert grouped == {}


def test_tags_keep_first_seen_order_per_venue():
    tags = _tags(
        offer_row(VENUE_A, "Padel", "🎾"),
        offer_row(VENUE_B, "Foot", "⚽"),
        offer_row(VENUE_A, "Squash", "🟡"),
        offer_row(VENUE_A, "Padel", "🎾"),
        offer_row(VENUE_A, "Padel", "🏓"),
    )
    grouped = group_activities(tags)
    assert [a.label for a in grouped[UUID(VENUE_A)]] == ["Padel", "Squash", "Padel"]
    assert [a.emoji for a in grouped[UUID(VENUE_A)]] == ["🎾", "🟡", "🏓"]
    assert grouped[UUID(VENUE_B)] == [ActivityTag(label="Foot", emoji="⚽")]


def test_venues_without_coordinates_are_excluded():
    venues = _venues(
        venue_row(VENUE_A, latitude=None, longitude=2.0),
        venue_row(VENUE_B, latitude=48.0, longitude=None),
        venue_row(VENUE_C),
    )
    assert [v.id for v in assemble(venues, [])] == [UUID(VENUE_C)]


def test_only_missing_coordinates_yields_empty():
    assert assemble(_venues(venue_row(VENUE_A, latitude=None, longitude=2.0)), []) == []


def test_blank_name_falls_back_to_default():
    venues = _venues(venue_row(VENUE_A, name="  "), venue_row(VENUE_B, name=None))
    assert [v.display_name for v in assemble(venues, [], default_name="Complexe")] == [
        "Complexe",
        "Complexe",
    ]


def test_name_is_trimmed_and_fields_carried_over():
    (venue,) = assemble(_venues(venue_row(VENUE_A, name="  Urban Padel ")), [])
    assert venue.display_name == "Urban Padel"
    assert venue.city == "Paris"
    assert venue.photos == ("https://cdn.example.com/a.jpg",)
    assert venue.activities == ()


def test_output_follows_venue_order():
    venues = _venues(venue_row(VENUE_C), venue_row(VENUE_A), venue_row(VENUE_B))
    tags = _tags(offer_row(VENUE_B, "Foot", "⚽"), offer_row(VENUE_C, "Padel", "🎾"))
    assert [v.id for v in assemble(venues, tags)] == [UUID(VENUE_C), UUID(VENUE_A), UUID(VENUE_B)]


def test_assemble_is_idempotent():
    venues = _venues(venue_row(VENUE_A), venue_row(VENUE_B, photos="x.jpg|y.jpg"))
    tags = _tags(offer_row(VENUE_A, "Padel", "🎾"), offer_row(VENUE_B, "Foot", ""))
    first = assemble(venues, tags)
    second = assemble(venues, tags)
    assert first == second
    assert [v.model_dump_json() for v in first] == [v.model_dump_json() for v in second]


def test_tags_for_unknown_venues_are_ignored():
    (venue,) = assemble(_venues(venue_row(VENUE_A)), _tags(offer_row(VENUE_B, "Foot", "⚽")))
    assert venue.activities == ()
