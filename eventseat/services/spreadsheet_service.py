"""
Spreadsheet service for guest list import/export
"""

import io
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pandas as pd

from eventseat.schemas.event import EventResponse

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Header keywords used to guess which column holds which field
NAME_KEYWORDS = ("name", "guest")
TABLE_KEYWORDS = ("table", "tbl")
SEAT_KEYWORDS = ("seat", "chair")


class SpreadsheetError(Exception):
    """Raised when an uploaded spreadsheet cannot be used"""


@dataclass
class ColumnMapping:
    name: Optional[str] = None
    table: Optional[str] = None
    seat: Optional[str] = None


class SpreadsheetService:
    """Service for handling CSV/Excel guest lists"""

    HEADER_ROW_NUMBER = 1

    @staticmethod
    def read_spreadsheet(file_content: bytes, filename: str) -> pd.DataFrame:
        """Read an uploaded .csv, .xlsx or .xls file with every cell as text"""
        lower = (filename or "").lower()
        try:
            if lower.endswith(".csv"):
                df = pd.read_csv(
                    io.BytesIO(file_content),
                    dtype=str,
                    keep_default_na=False,
                    skip_blank_lines=True,
                )
            elif lower.endswith((".xlsx", ".xls")):
                df = pd.read_excel(io.BytesIO(file_content), dtype=str, keep_default_na=False)
            else:
                raise SpreadsheetError("Please upload a CSV or Excel file (.csv, .xlsx, .xls)")
        except SpreadsheetError:
            raise
        except Exception as e:
            logger.warning("Could not parse spreadsheet %s: %s", filename, e)
            raise SpreadsheetError(f"Could not read spreadsheet: {e}") from e

        df.columns = [str(col).strip() for col in df.columns]
        # Drop rows where every cell is blank
        blank = df.apply(lambda row: all(str(value).strip() == "" for value in row), axis=1)
        return df[~blank] if len(df) else df

    @staticmethod
    def detect_columns(headers: List[str], overrides: Optional[Dict[str, Optional[str]]] = None) -> ColumnMapping:
        """Guess name/table/seat columns from header text; explicit overrides win"""
        def find(keywords):
            return next(
                (h for h in headers if any(keyword in h.lower() for keyword in keywords)),
                None,
            )

        mapping = ColumnMapping(
            name=find(NAME_KEYWORDS),
            table=find(TABLE_KEYWORDS),
            seat=find(SEAT_KEYWORDS),
        )

        for field, column in (overrides or {}).items():
            if not column:
                continue
            if column not in headers:
                raise SpreadsheetError(f"Column '{column}' not found in spreadsheet")
            setattr(mapping, field, column)

        missing = []
        if not mapping.name:
            missing.append("guest name")
        if not mapping.table:
            missing.append("table number")
        if missing:
            raise SpreadsheetError(f"Could not find a column for: {', '.join(missing)}")

        return mapping

    @staticmethod
    def rows_from_dataframe(df: pd.DataFrame, mapping: ColumnMapping) -> List[Dict[str, Any]]:
        """Turn spreadsheet rows into raw guest records for reconciliation"""
        rows = []
        for _, row in df.iterrows():
            rows.append({
                "name": row[mapping.name],
                "tableNumber": row[mapping.table],
                "seatNumber": row[mapping.seat] if mapping.seat else None,
            })
        return rows

    @staticmethod
    def create_template() -> bytes:
        """Create an Excel template with the expected columns"""
        df = pd.DataFrame(
            [
                ["Sample Guest 1", 1, "A"],
                ["Sample Guest 2", 1, "B"],
                ["Sample Guest 3", 2, ""],
            ],
            columns=["Name", "Table", "Seat"],
        )

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Guest List")

        return buffer.getvalue()

    @staticmethod
    def export_guests(event: EventResponse) -> bytes:
        """Export an event's current guest list to Excel"""
        data = [
            {
                "Name": guest.name,
                "Table": guest.table_number,
                "Seat": guest.seat_number or "",
            }
            for guest in event.guests
        ]
        df = pd.DataFrame(data, columns=["Name", "Table", "Seat"])

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Guest List")

        return buffer.getvalue()
