import logging
from datetime import date
from typing import List, Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field
from sqlmodel import Session, select

import config
from config import CORS_ORIGINS, REMINDER_INTERVAL_SECONDS, ThemeMode, configure_logging, resolve_theme
from db import engine, get_session, init_db
from models.trip_items import ItemType, TripItem, TripItemDraft
from models.trips import TripCreate
from services.ai_import import auto_plan
from services.destinations import COUNTRIES, highlighted_regions, trip_years, trips_in_year
from services.errors import (
    IncompleteItemError,
    InvalidFormatError,
    InvalidRangeError,
    ItemNotFoundError,
    ItineraryGenerationError,
    NoSegmentsError,
    PersistenceError,
    TripNotFoundError,
    WanderlustError,
)
from services.flight_segments import FlightSegmentBuilder
from services.item_writer import ItemWriter, collect_drafts
from services.itinerary import assemble
from services.openai_service import OpenAIService
from services.reminders import UpcomingItemMonitor
from services.store import EntityStore
from services import transfer

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Wanderlust Itinerary API",
    description="Multi-day trips assembled from flights, rentals, stays and activities",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"]
)

ERROR_STATUS = {
    InvalidRangeError: 400,
    IncompleteItemError: 400,
    NoSegmentsError: 400,
    InvalidFormatError: 400,
    TripNotFoundError: 404,
    ItemNotFoundError: 404,
    ItineraryGenerationError: 502,
    PersistenceError: 500,
}


@app.exception_handler(WanderlustError)
async def wanderlust_error_handler(request: Request, exc: WanderlustError):
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        500,
    )
    if isinstance(exc, PersistenceError):
        detail = "Database error"
    elif isinstance(exc, ItineraryGenerationError):
        detail = "Could not generate itinerary"
    else:
        detail = str(exc)
    logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": detail})


class ItemSaveRequest(BaseModel):
    draft: TripItemDraft
    # Flight legs already staged with /flights/stage
    segments: List[TripItemDraft] = Field(default_factory=list)
    total_cost: Optional[float] = Field(default=None, ge=0)


class StageRequest(BaseModel):
    draft: TripItemDraft
    segments: List[TripItemDraft] = Field(default_factory=list)


class Region(BaseModel):
    name: str


class HighlightRequest(BaseModel):
    regions: List[Region]
    destination: Optional[str] = None
    year: Optional[int] = None


class UnstageRequest(StageRequest):
    index: int = Field(ge=0)


class PreferencesUpdate(BaseModel):
    theme: ThemeMode


def _items_today() -> List[TripItem]:
    with Session(engine) as session:
        query = select(TripItem).where(TripItem.date == date.today()).where(TripItem.completed == False)  # noqa: E712
        return list(session.exec(query).all())


def _announce(item: TripItem) -> None:
    logger.info("Starting within the hour: %s at %s (trip %s)", item.title, item.start_time, item.trip_id)


monitor = UpcomingItemMonitor(_items_today, _announce, REMINDER_INTERVAL_SECONDS)


def _download(payload: dict, filename: str) -> Response:
    return Response(
        content=transfer.dump_payload(payload),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/")
def root():
    """Root endpoint - API health check"""
    return {"message": "Welcome to the Wanderlust Itinerary API!"}


# Trips

@app.post("/trips")
async def create_trip(trip: TripCreate, session: Session = Depends(get_session)):
    """Create a trip; title and cover image are defaulted when missing."""
    return EntityStore(session).create_trip(trip)


@app.get("/trips")
async def get_trips(year: Optional[int] = None, session: Session = Depends(get_session)):
    """All trips, newest first, optionally limited to one start year."""
    trips = EntityStore(session).list_trips()
    if year is not None:
        trips = trips_in_year(trips, year)
    return trips


@app.get("/trips/years")
async def get_trip_years(session: Session = Depends(get_session)):
    return trip_years(EntityStore(session).list_trips())


@app.post("/trips/import")
async def import_shared_trip(request: Request, session: Session = Depends(get_session)):
    """Add a shared trip package as a new trip."""
    payload = transfer.load_payload(await request.body())
    trip = transfer.import_share(session, payload)
    return {
        "message": f"Successfully imported trip: {trip.title or trip.destination}",
        "trip": trip,
    }


@app.get("/trips/{trip_id}")
async def get_trip(trip_id: int, session: Session = Depends(get_session)):
    return EntityStore(session).get_trip(trip_id)


@app.delete("/trips/{trip_id}")
async def delete_trip(trip_id: int, session: Session = Depends(get_session)):
    """Delete a trip and all of its items."""
    EntityStore(session).delete_trip(trip_id)
    return {"message": "Trip and associated items deleted successfully"}


@app.get("/trips/{trip_id}/itinerary")
async def get_itinerary(trip_id: int, session: Session = Depends(get_session)):
    """Day-by-day and per-category view of a trip."""
    store = EntityStore(session)
    trip = store.get_trip(trip_id)
    itinerary = assemble(trip, store.items_for_trip(trip_id))
    return {
        "trip": trip,
        "days": itinerary.days,
        "by_day": itinerary.by_day,
        "by_type": {item_type.value: items for item_type, items in itinerary.by_type.items()},
        "empty_days": itinerary.empty_days,
        "unscheduled": itinerary.unscheduled,
        "is_empty": itinerary.is_empty,
    }


@app.post("/trips/{trip_id}/items")
async def save_items(trip_id: int, request: ItemSaveRequest, session: Session = Depends(get_session)):
    """Save one item, or a flight booking made of staged legs plus the draft."""
    builder = None
    if request.draft.type == ItemType.FLIGHT:
        builder = FlightSegmentBuilder(draft=request.draft, staged=request.segments)
    elif request.segments:
        raise IncompleteItemError("Only flight bookings can carry staged segments")
    drafts = collect_drafts(request.draft, builder)
    # The form's cost field is the booking total when no separate total is sent
    total_cost = request.total_cost if request.total_cost is not None else request.draft.cost
    items = ItemWriter(session).write(trip_id, drafts, total_cost)
    return {"message": f"Saved {len(items)} item(s)", "items": items}


@app.post("/trips/{trip_id}/auto-plan")
async def auto_plan_trip(trip_id: int, session: Session = Depends(get_session)):
    """Fill the trip with AI suggested activities."""
    trip = EntityStore(session).get_trip(trip_id)
    created = await auto_plan(session, trip, generate=OpenAIService.generate_itinerary)
    return {"message": f"Added {created} suggested activities", "created": created}


@app.get("/trips/{trip_id}/share")
async def share_trip(trip_id: int, session: Session = Depends(get_session)):
    payload = transfer.export_share(session, trip_id)
    return _download(payload, transfer.share_filename(payload["trip"]["destination"]))


@app.post("/flights/stage")
async def stage_flight_leg(request: StageRequest):
    """Confirm the draft as a leg and return the chained draft for the next one."""
    builder = FlightSegmentBuilder(draft=request.draft, staged=request.segments)
    builder.stage_current_leg()
    return {"segments": builder.staged, "draft": builder.draft}


@app.post("/flights/unstage")
async def unstage_flight_leg(request: UnstageRequest):
    """Drop one staged leg; the in-progress draft is left as it is."""
    if request.index >= len(request.segments):
        raise IncompleteItemError(f"No staged segment at position {request.index}")
    builder = FlightSegmentBuilder(draft=request.draft, staged=request.segments)
    builder.remove_segment(request.index)
    return {"segments": builder.staged, "draft": builder.draft}


# Items

@app.get("/items")
async def get_items(type: ItemType, trip_id: Optional[int] = None, session: Session = Depends(get_session)):
    return EntityStore(session).items_by_type(type, trip_id)


@app.patch("/items/{item_id}/completed")
async def toggle_item_completed(item_id: int, session: Session = Depends(get_session)):
    item = EntityStore(session).toggle_completed(item_id)
    return {"id": item.id, "completed": item.completed}


@app.delete("/items/{item_id}")
async def delete_item(item_id: int, session: Session = Depends(get_session)):
    EntityStore(session).delete_item(item_id)
    return {"message": "Item deleted successfully"}


# Backup and reset

@app.get("/backup")
async def export_backup(session: Session = Depends(get_session)):
    return _download(transfer.export_backup(session), transfer.backup_filename())


@app.post("/backup")
async def restore_backup(request: Request, session: Session = Depends(get_session)):
    """Replace ALL trips and items with the uploaded backup."""
    payload = transfer.load_payload(await request.body())
    counts = transfer.replace_all_from_backup(session, payload)
    return {"message": "Data imported successfully", **counts}


@app.post("/data/reset")
async def reset_data(session: Session = Depends(get_session)):
    EntityStore(session).clear_all()
    return {"message": "System reset complete. All data cleared."}


# Map and destinations

@app.get("/destinations")
def get_destinations():
    return list(COUNTRIES)


@app.post("/map/highlight")
async def highlight_regions(request: HighlightRequest, session: Session = Depends(get_session)):
    """Region names to highlight for one destination, or for every visited one."""
    names = [region.name for region in request.regions]
    if request.destination:
        destinations = [request.destination]
    else:
        trips = EntityStore(session).list_trips()
        if request.year is not None:
            trips = trips_in_year(trips, request.year)
        destinations = [trip.destination for trip in trips]
    return {"highlighted": highlighted_regions(names, destinations)}


# Preferences

def _preferences_response():
    current = config.preferences.current
    return {"theme": current.theme, "appearance": resolve_theme(current.theme)}


@app.get("/settings/preferences")
def get_preferences():
    return _preferences_response()


@app.put("/settings/preferences")
def update_preferences(update: PreferencesUpdate):
    config.preferences.update(theme=update.theme)
    return _preferences_response()


def _log_preferences(updated: config.Preferences) -> None:
    logger.info("Theme preference changed to %s", updated.theme.value)


config.preferences.subscribe(_log_preferences)


@app.on_event("startup")
async def on_startup():
    configure_logging()
    init_db()
    monitor.start()


@app.on_event("shutdown")
async def on_shutdown():
    await monitor.stop()


# Run the application
if __name__ == "__main__":
    uvicorn.run("main:app", host="localhost", port=8000, reload=True)
