"""
Event API routes
"""

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import Response

from eventseat.api.deps import get_store
from eventseat.schemas.event import EventCreate, EventUpdate
from eventseat.services.qr_service import QRService
from eventseat.services.repositories import GuestStore, StorageError
from eventseat.utils.responses import json_response, error_response, bad_request_error, not_found_error

logger = logging.getLogger(__name__)

router = APIRouter()

def _blank(value) -> bool:
    return value is None or not value.strip()

@router.post("/events")
async def create_event(
    event_data: EventCreate,
    store: GuestStore = Depends(get_store)
):
    """Create a new event"""
    if _blank(event_data.name) or _blank(event_data.date):
        raise bad_request_error("Event name and date are required")

    try:
        event = store.create_event(
            name=event_data.name.strip(),
            date=event_data.date.strip(),
            theme_color=event_data.theme_color,
            logo=event_data.logo,
        )
    except StorageError as e:
        logger.error("Error creating event: %s", e)
        return error_response("Failed to create event", status_code=500)

    logger.info("Created event %s", event.id)
    return json_response(event, status_code=201)

@router.get("/events")
async def list_events(store: GuestStore = Depends(get_store)):
    """List all events"""
    try:
        events = store.get_all_events()
    except StorageError as e:
        logger.error("Error fetching events: %s", e)
        return error_response("Failed to fetch events", status_code=500)

    return json_response(events)

@router.get("/events/{event_id}")
async def get_event(
    event_id: str,
    store: GuestStore = Depends(get_store)
):
    """Get one event with its guests"""
    try:
        event = store.get_event(event_id)
    except StorageError as e:
        logger.error("Error fetching event %s: %s", event_id, e)
        return error_response("Failed to fetch event", status_code=500)

    if not event:
        raise not_found_error("Event")

    return json_response(event)

@router.patch("/events/{event_id}")
async def update_event(
    event_id: str,
    event_update: EventUpdate,
    store: GuestStore = Depends(get_store)
):
    """Update event details"""
    changes = {}
    for field in event_update.model_fields_set:
        value = getattr(event_update, field)
        if field in ("name", "date"):
            if _blank(value):
                raise bad_request_error(f"Event {field} cannot be empty")
            value = value.strip()
        changes[field] = value

    try:
        event = store.update_event(event_id, **changes)
    except StorageError as e:
        logger.error("Error updating event %s: %s", event_id, e)
        return error_response("Failed to update event", status_code=500)

    if not event:
        raise not_found_error("Event")

    return json_response(event)

@router.get("/events/{event_id}/qr.png")
async def get_qr_code(
    event_id: str,
    store: GuestStore = Depends(get_store)
):
    """QR code image linking to the event's guest lookup page"""
    try:
        event = store.get_event(event_id)
    except StorageError as e:
        logger.error("Error fetching event %s: %s", event_id, e)
        return error_response("Failed to fetch event", status_code=500)

    if not event:
        raise not_found_error("Event")

    qr_bytes = QRService.generate_event_qr(event.id)

    return Response(
        content=qr_bytes,
        media_type="image/png",
        headers={"Content-Disposition": f"inline; filename=qr_{event.id}.png"}
    )
