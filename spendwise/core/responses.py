"""Response envelope helpers.

Every endpoint answers with ``{"success": bool, "message"?, "data"?, "error"?}``.
"""

from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """
    Create a standardized success body.

    Args:
        data: Response data
        message: Optional success message

    Returns:
        Envelope dictionary (FastAPI serializes it)
    """
    body: Dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def error_response(
    message: str,
    status_code: int = 500,
    error_code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """
    Create a standardized error response.

    Args:
        message: Error message
        status_code: HTTP status code (default: 500)
        error_code: Optional error code
        details: Optional error details

    Returns:
        JSONResponse carrying the error envelope
    """
    body: Dict[str, Any] = {
        "success": False,
        "message": message,
        "error": {"code": error_code or f"ERROR_{status_code}"},
    }

    if details:
        body["error"]["details"] = details

    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))
