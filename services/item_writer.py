import logging
from typing import List, Optional, Sequence

from sqlmodel import Session

from db import transaction
from models.trip_items import ItemType, TripItem, TripItemDraft
from models.trips import Trip
from services.errors import IncompleteItemError, TripNotFoundError
from services.flight_segments import FlightSegmentBuilder
from services.store import placeholder_image

logger = logging.getLogger(__name__)


def resolve_image(draft: TripItemDraft) -> str:
    """Use the draft's own image, or a placeholder seeded by title, place and type."""
    if draft.image_url:
        return draft.image_url
    place = draft.location or draft.pickup_location or ""
    return placeholder_image(f"{draft.title} {place} {draft.type.value}", 300, 300)


def collect_drafts(draft: TripItemDraft, builder: Optional[FlightSegmentBuilder] = None) -> List[TripItemDraft]:
    """Turn one manual save into the list of drafts to write.

    Flights go through the segment builder; every other type is a single
    draft that must carry a title and a date.
    """
    if draft.type == ItemType.FLIGHT:
        builder = builder or FlightSegmentBuilder(draft=draft)
        return builder.commit()
    if not draft.title or not draft.date:
        raise IncompleteItemError("An item needs a title and a date")
    return [draft]


class ItemWriter:
    def __init__(self, session: Session):
        self.session = session

    def write(self, trip_id: int, drafts: Sequence[TripItemDraft], total_cost: Optional[float] = None) -> List[TripItem]:
        """Save one booking. The first item carries total_cost, the rest cost 0."""
        costs = [total_cost if index == 0 else 0 for index in range(len(drafts))]
        return self._persist(trip_id, drafts, costs)

    def write_each(self, trip_id: int, drafts: Sequence[TripItemDraft]) -> List[TripItem]:
        """Save independent items, each keeping its own cost."""
        return self._persist(trip_id, drafts, [draft.cost for draft in drafts])

    def _persist(self, trip_id: int, drafts: Sequence[TripItemDraft], costs: Sequence[Optional[float]]) -> List[TripItem]:
        if self.session.get(Trip, trip_id) is None:
            raise TripNotFoundError(trip_id)
        for draft in drafts:
            if not draft.title or not draft.date:
                raise IncompleteItemError("An item needs a title and a date")

        items = [self._build(trip_id, draft, cost) for draft, cost in zip(drafts, costs)]
        with transaction(self.session):
            for item in items:
                self.session.add(item)
                # Keep insertion order identical to list order
                self.session.flush()
        for item in items:
            self.session.refresh(item)
        logger.info("Wrote %d item(s) to trip %s", len(items), trip_id)
        return items

    @staticmethod
    def _build(trip_id: int, draft: TripItemDraft, cost: Optional[float]) -> TripItem:
        fields = draft.for_storage()
        fields["cost"] = cost
        fields["image_url"] = resolve_image(draft)
        return TripItem(trip_id=trip_id, type=draft.type, completed=False, **fields)
