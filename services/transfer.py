"""JSON backup (whole dataset) and share (single trip) files.

Backups are restored destructively and keep their identities. Share packages
are added alongside existing data under freshly assigned identities.
"""
import json
import logging
import re
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Type, Union

from sqlmodel import Session, SQLModel

from db import transaction
from models.trip_items import ItemType, TripItem
from models.trips import Trip
from services.calendar import parse_day
from services.errors import InvalidFormatError
from services.store import EntityStore

logger = logging.getLogger(__name__)

SHARE_FORMAT_VERSION = 1

DATE_FIELDS = {"start_date", "end_date", "date"}
REQUIRED_FIELDS = {
    Trip: ("destination", "start_date", "end_date"),
    TripItem: ("type", "title", "date"),
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def to_wire(record: SQLModel) -> Dict[str, Any]:
    """A stored record as a camelCase JSON object, unset fields omitted."""
    data = record.model_dump(mode="json")
    return {_camel(key): value for key, value in data.items() if value is not None}


def from_wire(model: Type[SQLModel], data: Any, drop: tuple = ()) -> SQLModel:
    """Build a table record from a camelCase JSON object.

    Unknown keys are ignored; keys listed in ``drop`` (snake_case) are
    discarded so the store can assign them.
    """
    if not isinstance(data, dict):
        raise InvalidFormatError(f"Expected an object for {model.__name__}")

    fields = {}
    for key, value in data.items():
        name = _snake(key)
        if name in model.model_fields and name not in drop:
            fields[name] = value

    missing = [name for name in REQUIRED_FIELDS[model] if fields.get(name) in (None, "")]
    if missing:
        raise InvalidFormatError(f"{model.__name__} is missing {', '.join(missing)}")

    try:
        for name in DATE_FIELDS & fields.keys():
            if fields[name] is not None:
                fields[name] = parse_day(fields[name])
        if "type" in fields:
            fields["type"] = ItemType(fields["type"])
    except (TypeError, ValueError) as e:
        raise InvalidFormatError(f"Invalid {model.__name__} record: {e}") from e

    if model is Trip and fields["end_date"] < fields["start_date"]:
        raise InvalidFormatError(
            f"Trip end date {fields['end_date']} is before start date {fields['start_date']}"
        )
    return model(**fields)


def load_payload(text: Union[str, bytes]) -> Dict[str, Any]:
    try:
        payload = json.loads(text)
    except UnicodeDecodeError as e:
        raise InvalidFormatError(f"File is not UTF-8 text: {e}") from e
    except json.JSONDecodeError as e:
        raise InvalidFormatError(f"Not a JSON document: {e}") from e
    if not isinstance(payload, dict):
        raise InvalidFormatError("Expected a JSON object")
    return payload


def dump_payload(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, indent=2)


def _slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def backup_filename(today: Optional[date] = None) -> str:
    return f"wanderlust-backup-{(today or date.today()).isoformat()}.json"


def share_filename(destination: str) -> str:
    return f"{_slugify(destination) or 'trip'}-trip.json"


# Backup


def export_backup(session: Session) -> Dict[str, Any]:
    store = EntityStore(session)
    return {
        "trips": [to_wire(trip) for trip in store.list_trips()],
        "items": [to_wire(item) for item in store.all_items()],
        "exportedAt": _timestamp(),
    }


def replace_all_from_backup(session: Session, payload: Dict[str, Any]) -> Dict[str, int]:
    """Clear both tables and load the backup in their place, keeping identities.

    Everything is validated before the store is touched.
    """
    if not isinstance(payload.get("trips"), list) or not isinstance(payload.get("items"), list):
        raise InvalidFormatError("Backup must contain 'trips' and 'items' arrays")

    trips: List[Trip] = [from_wire(Trip, record) for record in payload["trips"]]
    items: List[TripItem] = [from_wire(TripItem, record) for record in payload["items"]]
    trip_ids = {trip.id for trip in trips}
    for item in items:
        if item.trip_id is None:
            raise InvalidFormatError("Backup item is missing tripId")
        if item.trip_id not in trip_ids:
            raise InvalidFormatError(f"Backup item {item.title!r} points at unknown trip {item.trip_id}")

    with transaction(session):
        EntityStore(session).clear_tables()
        session.add_all(trips)
        session.flush()
        session.add_all(items)

    logger.info("Restored backup with %d trips and %d items", len(trips), len(items))
    return {"trips": len(trips), "items": len(items)}


# Share


def export_share(session: Session, trip_id: int) -> Dict[str, Any]:
    store = EntityStore(session)
    trip = store.get_trip(trip_id)
    return {
        "trip": to_wire(trip),
        "items": [to_wire(item) for item in store.items_for_trip(trip_id)],
        "sharedAt": _timestamp(),
        "version": SHARE_FORMAT_VERSION,
    }


def import_share(session: Session, payload: Dict[str, Any]) -> Trip:
    """Add a shared trip as a new trip; its items are re-pointed at it."""
    if not isinstance(payload.get("trip"), dict) or not isinstance(payload.get("items"), list):
        raise InvalidFormatError("Share package must contain a 'trip' object and an 'items' array")

    trip = from_wire(Trip, payload["trip"], drop=("id",))
    items = [from_wire(TripItem, record, drop=("id", "trip_id")) for record in payload["items"]]

    with transaction(session):
        session.add(trip)
        session.flush()
        for item in items:
            item.trip_id = trip.id
        session.add_all(items)

    session.refresh(trip)
    logger.info("Imported shared trip %s with %d items", trip.id, len(items))
    return trip
