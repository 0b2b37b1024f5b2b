"""
Common Pydantic schemas
"""

from pydantic import BaseModel

class ErrorResponse(BaseModel):
    """Error response schema"""
    error: str

class SuccessResponse(BaseModel):
    """Acknowledgement for operations without a payload"""
    success: bool = True
