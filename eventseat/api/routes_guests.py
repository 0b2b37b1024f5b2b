"""
Guest API routes: add, search, update, delete, bulk add and spreadsheet import
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response

from eventseat.api.deps import get_store
from eventseat.core.config import settings
from eventseat.schemas.common import SuccessResponse
from eventseat.schemas.guest import BulkGuestRequest, GuestCreate, GuestUpdate
from eventseat.services.bulk_service import BulkImportService, MISSING_NAME, MISSING_TABLE, parse_table_number, validate_row
from eventseat.services.repositories import GuestStore, StorageError
from eventseat.services import search_service
from eventseat.services.spreadsheet_service import SpreadsheetError, SpreadsheetService, XLSX_MEDIA_TYPE
from eventseat.utils.responses import json_response, error_response, bad_request_error, not_found_error

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/events/{event_id}/guests")
async def add_guest(
    event_id: str,
    guest_data: GuestCreate,
    store: GuestStore = Depends(get_store)
):
    """Add a single guest to an event"""
    guest_row, reason = validate_row(guest_data.model_dump(by_alias=True))
    if reason in (MISSING_NAME, MISSING_TABLE):
        raise bad_request_error("Guest name and table number are required")
    if reason:
        raise bad_request_error("Table number must be a positive integer")

    try:
        guest = store.add_guest(
            event_id,
            name=guest_row.name,
            table_number=guest_row.table_number,
            seat_number=guest_row.seat_number,
        )
    except StorageError as e:
        logger.error("Error adding guest to event %s: %s", event_id, e)
        return error_response("Failed to add guest", status_code=500)

    if not guest:
        raise not_found_error("Event")

    return json_response(guest, status_code=201)

@router.get("/events/{event_id}/guests")
async def search_guests(
    event_id: str,
    search: Optional[str] = Query(None),
    store: GuestStore = Depends(get_store)
):
    """Search an event's guests by name, most relevant first"""
    if not search:
        raise bad_request_error("Search term is required")

    try:
        event = store.get_event(event_id)
        if not event:
            raise not_found_error("Event")
        guests = search_service.search(event.guests, search, store.search_policy)
    except StorageError as e:
        logger.error("Error searching guests of event %s: %s", event_id, e)
        return error_response("Failed to search guests", status_code=500)

    return json_response(guests)

@router.patch("/events/{event_id}/guests/{guest_id}")
async def update_guest(
    event_id: str,
    guest_id: str,
    guest_update: GuestUpdate,
    store: GuestStore = Depends(get_store)
):
    """Update guest information"""
    changes = {}
    fields_set = guest_update.model_fields_set

    if "name" in fields_set:
        if not guest_update.name or not guest_update.name.strip():
            raise bad_request_error("Guest name cannot be empty")
        changes["name"] = guest_update.name.strip()

    if "table_number" in fields_set:
        table_number = parse_table_number(guest_update.table_number)
        if table_number is None:
            raise bad_request_error("Table number must be a positive integer")
        changes["table_number"] = table_number

    if "seat_number" in fields_set:
        seat = guest_update.seat_number
        seat = str(seat).strip() if seat is not None else ""
        changes["seat_number"] = seat or None

    try:
        guest = store.update_guest(event_id, guest_id, **changes)
    except StorageError as e:
        logger.error("Error updating guest %s: %s", guest_id, e)
        return error_response("Failed to update guest", status_code=500)

    if not guest:
        raise not_found_error("Guest")

    return json_response(guest)

@router.delete("/events/{event_id}/guests/{guest_id}")
async def delete_guest(
    event_id: str,
    guest_id: str,
    store: GuestStore = Depends(get_store)
):
    """Remove a guest from an event"""
    try:
        deleted = store.delete_guest(event_id, guest_id)
    except StorageError as e:
        logger.error("Error deleting guest %s: %s", guest_id, e)
        return error_response("Failed to delete guest", status_code=500)

    if not deleted:
        raise not_found_error("Guest")

    return json_response(SuccessResponse())

@router.post("/events/{event_id}/guests/bulk")
async def bulk_add_guests(
    event_id: str,
    bulk_data: BulkGuestRequest,
    store: GuestStore = Depends(get_store)
):
    """Add many guests at once; invalid rows are reported, valid rows are kept"""
    if not isinstance(bulk_data.guests, list):
        raise bad_request_error("Guests must be an array")

    try:
        if not store.get_event(event_id):
            raise not_found_error("Event")
        result = BulkImportService.add_guests(store, event_id, bulk_data.guests)
    except StorageError as e:
        logger.error("Error adding bulk guests to event %s: %s", event_id, e)
        return error_response("Failed to add bulk guests", status_code=500)

    return json_response(result, status_code=201)

@router.post("/events/{event_id}/guests/import")
async def import_guests(
    event_id: str,
    file: UploadFile = File(...),
    nameColumn: Optional[str] = Form(None),
    tableColumn: Optional[str] = Form(None),
    seatColumn: Optional[str] = Form(None),
    store: GuestStore = Depends(get_store)
):
    """Import guests from a CSV or Excel file"""
    try:
        if not store.get_event(event_id):
            raise not_found_error("Event")
    except StorageError as e:
        logger.error("Error fetching event %s: %s", event_id, e)
        return error_response("Failed to import guests", status_code=500)

    file_content = await file.read()
    if len(file_content) > settings.MAX_UPLOAD_SIZE:
        raise bad_request_error(f"File is too large (max {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB)")

    try:
        df = SpreadsheetService.read_spreadsheet(file_content, file.filename)
        mapping = SpreadsheetService.detect_columns(
            list(df.columns),
            overrides={"name": nameColumn, "table": tableColumn, "seat": seatColumn},
        )
    except SpreadsheetError as e:
        raise bad_request_error(str(e))

    rows = SpreadsheetService.rows_from_dataframe(df, mapping)

    try:
        result = BulkImportService.add_guests(
            store, event_id, rows,
            first_row_number=SpreadsheetService.HEADER_ROW_NUMBER + 1,
        )
    except StorageError as e:
        logger.error("Error importing guests to event %s: %s", event_id, e)
        return error_response("Failed to import guests", status_code=500)

    logger.info("Imported %d guests into event %s from %s", result.summary.added, event_id, file.filename)
    return json_response(result, status_code=201)

@router.get("/events/{event_id}/guests/export.xlsx")
async def export_guests(
    event_id: str,
    store: GuestStore = Depends(get_store)
):
    """Download the current guest list as Excel"""
    try:
        event = store.get_event(event_id)
    except StorageError as e:
        logger.error("Error fetching event %s: %s", event_id, e)
        return error_response("Failed to export guests", status_code=500)

    if not event:
        raise not_found_error("Event")

    content = SpreadsheetService.export_guests(event)

    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename=guests_{event.id}.xlsx"}
    )
