"""Staging of multi-leg flight bookings before they are saved together."""
from typing import List, Optional, Sequence

from models.trip_items import ItemType, TripItemDraft
from services.errors import IncompleteItemError, NoSegmentsError


def flight_title(draft: TripItemDraft) -> str:
    return f"Flight {draft.departure_airport or ''} -> {draft.arrival_airport or ''}"


def _has_route_or_title(draft: TripItemDraft) -> bool:
    return bool(draft.departure_airport or draft.arrival_airport or draft.title)


class FlightSegmentBuilder:
    """Accumulates flight legs, one in-progress draft at a time.

    Each staged leg chains into the next draft: the next departure is the
    previous arrival airport and the next date is the previous arrival date.
    This assumes a linear route; branching itineraries are not modelled.
    """

    def __init__(
        self,
        draft: Optional[TripItemDraft] = None,
        staged: Sequence[TripItemDraft] = (),
    ):
        self.draft = self._as_flight(draft or TripItemDraft(type=ItemType.FLIGHT))
        self._staged: List[TripItemDraft] = [self._as_flight(segment) for segment in staged]

    @staticmethod
    def _as_flight(draft: TripItemDraft) -> TripItemDraft:
        return draft.model_copy(update={"type": ItemType.FLIGHT})

    @property
    def staged(self) -> List[TripItemDraft]:
        return list(self._staged)

    def stage_current_leg(self) -> TripItemDraft:
        """Confirm the current draft as a leg and start the next one."""
        if not self.draft.date:
            raise IncompleteItemError("A flight leg needs a departure date")

        segment = self.draft.model_copy()
        if not segment.title:
            segment.title = flight_title(segment)
        if not segment.end_date:
            segment.end_date = segment.date
        self._staged.append(segment)

        self.draft = self.draft.model_copy(update={
            "title": None,
            "departure_airport": segment.arrival_airport,
            "arrival_airport": None,
            "date": segment.end_date,
            "end_date": None,
            "start_time": None,
            "end_time": None,
        })
        return segment

    def remove_segment(self, index: int) -> TripItemDraft:
        return self._staged.pop(index)

    def commit(self) -> List[TripItemDraft]:
        """Staged legs plus the draft, when the draft holds a usable leg.

        A blank draft is dropped. Raises NoSegmentsError when nothing is left.
        """
        segments = list(self._staged)
        if self.draft.date and _has_route_or_title(self.draft):
            final = self.draft.model_copy()
            if not final.title:
                final.title = flight_title(final)
            segments.append(final)
        if not segments:
            raise NoSegmentsError("No flight segments to save")
        return segments
