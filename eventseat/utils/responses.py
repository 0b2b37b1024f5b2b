"""
Standardized response utilities
"""

from typing import Any
from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from eventseat.schemas.common import ErrorResponse

def _serialize(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(data, (list, tuple)):
        return [_serialize(item) for item in data]
    return jsonable_encoder(data)

def json_response(data: Any, status_code: int = 200) -> JSONResponse:
    """Serialize models with their camelCase field names, omitting unset optionals"""
    return JSONResponse(content=_serialize(data), status_code=status_code)

def error_response(message: str, status_code: int = 400) -> JSONResponse:
    """Create standardized error response"""
    return JSONResponse(
        content=ErrorResponse(error=message).model_dump(),
        status_code=status_code
    )

def bad_request_error(message: str):
    """Raise a 400 with ``message``"""
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=message
    )

def not_found_error(resource: str = "Resource"):
    """Create not found error"""
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{resource} not found"
    )
