"""
Standardized API response helpers
"""
from typing import Any, Optional, Dict
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response"""
    error: str
    details: Optional[Dict[str, Any]] = None

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Invalid MIME type",
            }
        }


def success_response(message: str, data: Optional[Any] = None) -> Dict[str, Any]:
    """Helper function to create success response"""
    response = {"success": True, "message": message}
    if data is not None:
        response["data"] = data
    return response


def error_response(error: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Helper function to create error response"""
    response = {"error": error}
    if details:
        response["details"] = details
    return response
