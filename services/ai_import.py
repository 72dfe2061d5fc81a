"""Turns AI day-by-day suggestions into dated activity items."""
import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence, Union

from sqlmodel import Session

from config import AI_TIMEOUT_SECONDS
from models.suggestions import DaySuggestion
from models.trip_items import ItemType, TripItemDraft
from models.trips import Trip
from services.calendar import expand_date_range
from services.errors import ItineraryGenerationError
from services.item_writer import ItemWriter
from services.openai_service import OpenAIService

logger = logging.getLogger(__name__)

SuggestionSource = Callable[[str, int, str], Awaitable[Sequence[Union[DaySuggestion, dict]]]]

TIME_OF_DAY_START = {
    "Morning": "09:00",
    "Afternoon": "14:00",
}
EVENING_START = "19:00"

DEFAULT_INTERESTS = "General sightseeing"


def start_time_for(time_of_day: str) -> str:
    return TIME_OF_DAY_START.get(time_of_day, EVENING_START)


def interests_for(trip: Trip) -> str:
    return ", ".join(trip.tags or []) or trip.notes or DEFAULT_INTERESTS


def as_day_suggestion(raw: Union[DaySuggestion, dict]) -> DaySuggestion:
    return raw if isinstance(raw, DaySuggestion) else DaySuggestion.model_validate(raw)


def suggestion_drafts(days: Sequence[str], suggestions: Sequence[Union[DaySuggestion, dict]]) -> List[TripItemDraft]:
    """Build one activity draft per suggested activity on a day inside the trip.

    Suggestions whose day number falls outside the trip are skipped.
    """
    drafts = []
    for raw in suggestions:
        suggestion = as_day_suggestion(raw)
        if not 1 <= suggestion.day <= len(days):
            logger.info("Skipping suggestion for day %s of a %d-day trip", suggestion.day, len(days))
            continue
        day = days[suggestion.day - 1]
        for activity in suggestion.activities:
            drafts.append(TripItemDraft(
                type=ItemType.ACTIVITY,
                title=activity.title,
                details=activity.description,
                location=activity.location,
                cost=max(activity.estimated_cost, 0),
                date=day,
                start_time=start_time_for(activity.time_of_day),
            ))
    return drafts


def apply_suggestions(session: Session, trip: Trip, days: Sequence[str], suggestions: Sequence[Union[DaySuggestion, dict]]) -> int:
    """Write every usable suggestion in one transaction; returns the item count."""
    drafts = suggestion_drafts(days, suggestions)
    if not drafts:
        return 0
    return len(ItemWriter(session).write_each(trip.id, drafts))


async def auto_plan(
    session: Session,
    trip: Trip,
    generate: SuggestionSource = OpenAIService.generate_itinerary,
    timeout: float = AI_TIMEOUT_SECONDS,
) -> int:
    """Ask the suggestion source for a plan and write it onto the trip's days.

    Any failure of the source (error, timeout, malformed reply) becomes a
    single ItineraryGenerationError and nothing is written.
    """
    days = expand_date_range(trip.start_date, trip.end_date)
    try:
        reply = await asyncio.wait_for(
            generate(trip.destination, len(days), interests_for(trip)),
            timeout=timeout,
        )
        suggestions = [as_day_suggestion(raw) for raw in reply]
    except Exception as e:
        logger.error("Itinerary generation failed for trip %s: %r", trip.id, e)
        raise ItineraryGenerationError() from e

    return apply_suggestions(session, trip, days, suggestions)
