# eversol/core/responses.py
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from eversol.core.errors import PincodeServiceError
from eversol.schemas.common import OperationResult

# Result.error -> HTTP status
RESULT_STATUS: dict[str | None, int] = {
    "Validation": status.HTTP_400_BAD_REQUEST,
    "StorageUnavailable": status.HTTP_401_UNAUTHORIZED,
    "NotFound": status.HTTP_404_NOT_FOUND,
    "CapacityExceeded": status.HTTP_409_CONFLICT,
    None: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# PincodeServiceError.kind -> HTTP status
PINCODE_STATUS: dict[str, int] = {
    "Validation": status.HTTP_400_BAD_REQUEST,
    "GeolocationPermission": status.HTTP_403_FORBIDDEN,
    "ApiService": status.HTTP_404_NOT_FOUND,
    "NotServiceable": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "GeolocationError": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def ok(data: Any = None, message: str | None = None) -> dict[str, Any]:
    """Success envelope: {"success": true, "data": ..., "message"?: ...}."""
    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def raise_for_result(result: OperationResult) -> None:
    """
    Raises:
        HTTPException: if the engine reported a failure.
    """
    if result.success:
        return
    raise HTTPException(
        status_code=RESULT_STATUS.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=result.message or "Operation failed",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as {"success": false, "message": ...}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def pincode_error_handler(request: Request, exc: PincodeServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=PINCODE_STATUS.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        content={"success": False, "type": exc.kind, "message": exc.message},
    )
