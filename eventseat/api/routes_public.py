"""
Public utility routes
"""

from fastapi import APIRouter
from fastapi.responses import Response

from eventseat.services.spreadsheet_service import SpreadsheetService, XLSX_MEDIA_TYPE

router = APIRouter()

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}

@router.get("/template/guest_import_template.xlsx")
async def download_template():
    """Download an Excel template for guest imports"""
    template_bytes = SpreadsheetService.create_template()

    return Response(
        content=template_bytes,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=guest_import_template.xlsx"}
    )
