"""Day-by-day and per-category projections of a trip's items.

Nothing here touches the store: callers load the trip and its items (sorted
by date) and these functions only regroup them.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from models.trip_items import ItemType, TripItem
from models.trips import Trip
from services.calendar import expand_date_range


def day_key(item: TripItem) -> str:
    return item.date.isoformat()


def group_by_day(days: Sequence[str], items: Sequence[TripItem]) -> Dict[str, List[TripItem]]:
    """Map every day key to the items starting on it.

    Days without items map to an empty list. Items keep the order they were
    given in.
    """
    by_day: Dict[str, List[TripItem]] = {day: [] for day in days}
    for item in items:
        bucket = by_day.get(day_key(item))
        if bucket is not None:
            bucket.append(item)
    return by_day


def group_by_type(items: Sequence[TripItem]) -> Dict[ItemType, List[TripItem]]:
    by_type: Dict[ItemType, List[TripItem]] = {item_type: [] for item_type in ItemType}
    for item in items:
        by_type[ItemType(item.type)].append(item)
    return by_type


def empty_days(by_day: Dict[str, List[TripItem]]) -> List[str]:
    return [day for day, day_items in by_day.items() if not day_items]


def unscheduled_items(days: Sequence[str], items: Sequence[TripItem]) -> List[TripItem]:
    """Items dated outside the trip's day sequence."""
    known = set(days)
    return [item for item in items if day_key(item) not in known]


@dataclass
class Itinerary:
    trip: Trip
    days: List[str]
    by_day: Dict[str, List[TripItem]] = field(default_factory=dict)
    by_type: Dict[ItemType, List[TripItem]] = field(default_factory=dict)
    unscheduled: List[TripItem] = field(default_factory=list)

    @property
    def empty_days(self) -> List[str]:
        return empty_days(self.by_day)

    @property
    def is_empty(self) -> bool:
        return not any(self.by_type.values())


def assemble(trip: Trip, items: Sequence[TripItem]) -> Itinerary:
    days = expand_date_range(trip.start_date, trip.end_date)
    return Itinerary(
        trip=trip,
        days=days,
        by_day=group_by_day(days, items),
        by_type=group_by_type(items),
        unscheduled=unscheduled_items(days, items),
    )
