import datetime as dt
import re
from enum import Enum
from typing import Dict, FrozenSet, Optional
from pydantic import field_validator
from sqlmodel import Field, SQLModel
from .base import Base

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ItemType(str, Enum):
    FLIGHT = "flight"
    CAR = "car"
    STAY = "stay"
    ACTIVITY = "activity"
    NOTE = "note"


# Fields every item type keeps
COMMON_FIELDS: FrozenSet[str] = frozenset({
    "title", "date", "end_date", "start_time", "end_time", "cost", "details",
    "booking_ref", "booking_link", "image_url",
})

# Type-specific fields, keyed by tag. Anything not listed is dropped on write.
TYPE_FIELDS: Dict[ItemType, FrozenSet[str]] = {
    ItemType.FLIGHT: frozenset({"departure_airport", "arrival_airport", "duration"}),
    ItemType.CAR: frozenset({"pickup_location", "dropoff_location", "location"}),
    ItemType.STAY: frozenset({"location"}),
    ItemType.ACTIVITY: frozenset({"location"}),
    ItemType.NOTE: frozenset({"location"}),
}


class TripItemFields(SQLModel):
    # Secondary date: arrival for flights, checkout for stays, drop-off for cars
    end_date: Optional[dt.date] = Field(default=None, index=True)

    # "HH:mm", trip-local wall clock
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    location: Optional[str] = None
    departure_airport: Optional[str] = None
    arrival_airport: Optional[str] = None
    duration: Optional[str] = None
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None

    cost: Optional[float] = None
    details: Optional[str] = None
    booking_ref: Optional[str] = None
    booking_link: Optional[str] = None
    image_url: Optional[str] = None


class TripItem(TripItemFields, Base, table=True):
    __tablename__ = "items"

    trip_id: int = Field(index=True, foreign_key="trips.id")
    type: ItemType = Field(index=True)
    title: str
    date: dt.date = Field(index=True)
    completed: bool = Field(default=False)


class TripItemDraft(TripItemFields):
    """Form input for one item, before defaults are applied and it is stored."""

    type: ItemType = ItemType.ACTIVITY
    title: Optional[str] = None
    date: Optional[dt.date] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, value: Optional[str]) -> Optional[str]:
        if value in (None, ""):
            return None
        if not TIME_PATTERN.match(value):
            raise ValueError("time must be HH:mm (24-hour)")
        return value

    @field_validator("cost")
    @classmethod
    def check_cost(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value < 0:
            raise ValueError("cost must not be negative")
        return value

    def relevant_fields(self) -> FrozenSet[str]:
        return COMMON_FIELDS | TYPE_FIELDS[self.type]

    def for_storage(self) -> dict:
        """The draft's values restricted to the fields its type keeps."""
        keep = self.relevant_fields()
        return {name: value for name, value in self.model_dump().items() if name in keep}
