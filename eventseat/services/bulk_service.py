"""
Bulk guest reconciliation: per-row validation with partial success
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from eventseat.schemas.guest import BulkGuestResult, BulkSummary, GuestResponse
from eventseat.services.repositories import StorageError

logger = logging.getLogger(__name__)

MISSING_NAME = "Missing guest name"
MISSING_TABLE = "Missing table number"
INVALID_RECORD = "Invalid guest record"

# Largest value the 32-bit table_number column holds
MAX_TABLE_NUMBER = 2**31 - 1


@dataclass
class GuestRow:
    """A validated, normalized guest row ready for the store"""
    name: str
    table_number: int
    seat_number: Optional[str] = None


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def parse_table_number(value: Any) -> Optional[int]:
    """Parse a table number from a form, JSON or spreadsheet value.

    Returns ``None`` unless the value is a whole number between 1 and
    ``MAX_TABLE_NUMBER``. Integral floats ("5.0", 5.0) are accepted because
    spreadsheets produce them.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        number = int(value)
    else:
        text = _clean_text(value)
        try:
            number = int(text)
        except ValueError:
            try:
                as_float = float(text)
            except ValueError:
                return None
            if not as_float.is_integer():
                return None
            number = int(as_float)
    return number if 1 <= number <= MAX_TABLE_NUMBER else None


def validate_row(row: Any) -> Tuple[Optional[GuestRow], Optional[str]]:
    """Validate one raw row.

    Returns ``(GuestRow, None)`` on success or ``(None, reason)``.
    """
    if not isinstance(row, dict):
        return None, INVALID_RECORD

    name = _clean_text(row.get("name"))
    if not name:
        return None, MISSING_NAME

    raw_table = row.get("tableNumber", row.get("table_number"))
    table_text = _clean_text(raw_table)
    if not table_text:
        return None, MISSING_TABLE

    table_number = parse_table_number(raw_table)
    if table_number is None:
        return None, f'Invalid table number "{table_text}"'

    seat = _clean_text(row.get("seatNumber", row.get("seat_number")))
    return GuestRow(name=name, table_number=table_number, seat_number=seat or None), None


def _reconcile_numbered(
    rows: Sequence[Any],
    first_row_number: int,
) -> Tuple[List[Tuple[int, GuestRow]], List[Tuple[int, str]]]:
    accepted: List[Tuple[int, GuestRow]] = []
    errors: List[Tuple[int, str]] = []

    for offset, row in enumerate(rows):
        row_number = first_row_number + offset
        guest_row, reason = validate_row(row)
        if reason:
            errors.append((row_number, f"Row {row_number}: {reason}"))
            continue
        accepted.append((row_number, guest_row))

    return accepted, errors


def reconcile_rows(
    rows: Sequence[Any],
    first_row_number: int = 1,
) -> Tuple[List[Tuple[int, GuestRow]], List[str]]:
    """Split raw rows into accepted ``(row_number, GuestRow)`` pairs and error messages"""
    accepted, errors = _reconcile_numbered(rows, first_row_number)
    return accepted, [message for _, message in errors]


class BulkImportService:
    """Adds many guests at once, committing every valid row"""

    @staticmethod
    def add_guests(store, event_id: str, rows: Sequence[Any], first_row_number: int = 1) -> BulkGuestResult:
        accepted, errors = _reconcile_numbered(rows, first_row_number)
        added: List[GuestResponse] = []

        for row_number, guest_row in accepted:
            try:
                guest = store.add_guest(
                    event_id,
                    name=guest_row.name,
                    table_number=guest_row.table_number,
                    seat_number=guest_row.seat_number,
                )
            except StorageError as e:
                logger.error("Error adding row %d to event %s: %s", row_number, event_id, e)
                guest = None
            if guest is None:
                errors.append((row_number, f'Row {row_number}: Failed to add guest "{guest_row.name}"'))
                continue
            added.append(guest)

        # Report validation and insert failures in row order
        errors = [message for _, message in sorted(errors, key=lambda item: item[0])]

        if errors:
            logger.info("Bulk add for event %s: %d added, %d rejected", event_id, len(added), len(errors))

        return BulkGuestResult(
            added=added,
            errors=errors,
            summary=BulkSummary(total=len(rows), added=len(added), errors=len(errors)),
        )
