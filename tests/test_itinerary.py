from datetime import date

from models.trip_items import ItemType, TripItem
from models.trips import Trip
from services.itinerary import assemble, empty_days, group_by_day, group_by_type, unscheduled_items


def make_item(title, day, item_type=ItemType.ACTIVITY, **extra):
    return TripItem(trip_id=1, type=item_type, title=title, date=date.fromisoformat(day), **extra)


DAYS = ["2025-04-01", "2025-04-02", "2025-04-03"]


def test_group_by_day_keeps_empty_days():
    items = [make_item("Arrive", "2025-04-01"), make_item("Temple", "2025-04-03")]

    by_day = group_by_day(DAYS, items)

    assert list(by_day) == DAYS
    assert [i.title for i in by_day["2025-04-01"]] == ["Arrive"]
    assert by_day["2025-04-02"] == []
    assert [i.title for i in by_day["2025-04-03"]] == ["Temple"]


def test_group_by_day_preserves_given_order():
    items = [make_item("Breakfast", "2025-04-02"), make_item("Lunch", "2025-04-02"), make_item("Dinner", "2025-04-02")]

    by_day = group_by_day(DAYS, items)

    assert [i.title for i in by_day["2025-04-02"]] == ["Breakfast", "Lunch", "Dinner"]


def test_group_by_type_lists_every_type():
    items = [
        make_item("NRT -> KIX", "2025-04-01", ItemType.FLIGHT),
        make_item("Ryokan", "2025-04-01", ItemType.STAY),
        make_item("Temple", "2025-04-02"),
    ]

    by_type = group_by_type(items)

    assert set(by_type) == set(ItemType)
    assert [i.title for i in by_type[ItemType.FLIGHT]] == ["NRT -> KIX"]
    assert [i.title for i in by_type[ItemType.STAY]] == ["Ryokan"]
    assert by_type[ItemType.CAR] == []
    assert by_type[ItemType.NOTE] == []


def test_empty_days_and_unscheduled_items():
    items = [make_item("Temple", "2025-04-02"), make_item("Visa appointment", "2025-03-20", ItemType.NOTE)]

    by_day = group_by_day(DAYS, items)

    assert empty_days(by_day) == ["2025-04-01", "2025-04-03"]
    assert [i.title for i in unscheduled_items(DAYS, items)] == ["Visa appointment"]


def test_assemble_builds_full_view():
    trip = Trip(id=1, destination="Japan", start_date=date(2025, 4, 1), end_date=date(2025, 4, 3))
    items = [make_item("Temple", "2025-04-02")]

    itinerary = assemble(trip, items)

    assert itinerary.days == DAYS
    assert itinerary.empty_days == ["2025-04-01", "2025-04-03"]
    assert itinerary.unscheduled == []
    assert not itinerary.is_empty


def test_assemble_with_no_items():
    trip = Trip(id=1, destination="Japan", start_date=date(2025, 4, 1), end_date=date(2025, 4, 1))

    itinerary = assemble(trip, [])

    assert itinerary.is_empty
    assert itinerary.by_day == {"2025-04-01": []}
