import logging
from typing import List, Optional
from urllib.parse import quote

from sqlmodel import Session, delete, select

from db import transaction
from models.trip_items import ItemType, TripItem
from models.trips import Trip, TripCreate
from services.calendar import default_end_date, parse_day
from services.errors import InvalidRangeError, ItemNotFoundError, TripNotFoundError

logger = logging.getLogger(__name__)


def placeholder_image(seed: str, width: int, height: int) -> str:
    """Deterministic placeholder image reference for a seed string."""
    return f"https://picsum.photos/seed/{quote(seed, safe='')}/{width}/{height}"


class EntityStore:
    """Trips and their items over a SQLModel session."""

    def __init__(self, session: Session):
        self.session = session

    # Trips

    def create_trip(self, data: TripCreate) -> Trip:
        start = parse_day(data.start_date)
        end = parse_day(data.end_date) if data.end_date else default_end_date(start)
        if end < start:
            raise InvalidRangeError(f"End date {end} is before start date {start}")

        title = data.title or f"{data.destination} Adventure"
        trip = Trip(
            title=title,
            destination=data.destination,
            start_date=start,
            end_date=end,
            tags=list(data.tags),
            notes=", ".join(data.tags) or None,
            cover_image=data.cover_image or placeholder_image(data.destination + title, 800, 400),
            custom_map_image=data.custom_map_image,
        )
        with transaction(self.session):
            self.session.add(trip)
        self.session.refresh(trip)
        logger.info("Created trip %s (%s)", trip.id, trip.destination)
        return trip

    def get_trip(self, trip_id: int) -> Trip:
        trip = self.session.get(Trip, trip_id)
        if not trip:
            raise TripNotFoundError(trip_id)
        return trip

    def list_trips(self) -> List[Trip]:
        return list(self.session.exec(select(Trip).order_by(Trip.start_date.desc())).all())

    def delete_trip(self, trip_id: int) -> None:
        """Delete a trip and every item attached to it."""
        trip = self.get_trip(trip_id)
        with transaction(self.session):
            self.session.exec(delete(TripItem).where(TripItem.trip_id == trip_id))
            self.session.delete(trip)
        logger.info("Deleted trip %s and its items", trip_id)

    # Items

    def items_for_trip(self, trip_id: int) -> List[TripItem]:
        query = (
            select(TripItem)
            .where(TripItem.trip_id == trip_id)
            .order_by(TripItem.date, TripItem.start_time, TripItem.id)
        )
        return list(self.session.exec(query).all())

    def items_by_type(self, item_type: ItemType, trip_id: Optional[int] = None) -> List[TripItem]:
        query = select(TripItem).where(TripItem.type == item_type)
        if trip_id is not None:
            query = query.where(TripItem.trip_id == trip_id)
        return list(self.session.exec(query.order_by(TripItem.date, TripItem.id)).all())

    def all_items(self) -> List[TripItem]:
        return list(self.session.exec(select(TripItem).order_by(TripItem.id)).all())

    def get_item(self, item_id: int) -> TripItem:
        item = self.session.get(TripItem, item_id)
        if not item:
            raise ItemNotFoundError(item_id)
        return item

    def toggle_completed(self, item_id: int) -> TripItem:
        item = self.get_item(item_id)
        with transaction(self.session):
            item.completed = not item.completed
            self.session.add(item)
        self.session.refresh(item)
        return item

    def delete_item(self, item_id: int) -> None:
        item = self.get_item(item_id)
        with transaction(self.session):
            self.session.delete(item)

    def clear_all(self) -> None:
        """Remove every trip and item."""
        with transaction(self.session):
            self.clear_tables()
        logger.warning("All trips and items cleared")

    def clear_tables(self) -> None:
        """Delete every row; the caller owns the transaction."""
        self.session.exec(delete(TripItem))
        self.session.exec(delete(Trip))
        self.session.expunge_all()
