import logging
from typing import Any

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .core.config import settings

logger = logging.getLogger(__name__)

class APIException(HTTPException):
    def __init__(self, status_code: int, detail: Any):
        super().__init__(status_code=status_code, detail=detail)

class ValidationError(APIException):
    def __init__(self, detail: Any):
        super().__init__(status_code=400, detail=detail)

class AuthenticationError(APIException):
    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(status_code=401, detail=detail)

class ForbiddenError(APIException):
    def __init__(self, detail: str = "Access denied"):
        super().__init__(status_code=403, detail=detail)

class NotFoundError(APIException):
    def __init__(self, detail: str):
        super().__init__(status_code=404, detail=detail)

class ConflictError(APIException):
    def __init__(self, detail: str):
        super().__init__(status_code=409, detail=detail)

class InternalError(APIException):
    """Data-access or unexpected failure; the message is hidden unless EXPOSE_ERROR_DETAILS is on."""

    def __init__(self, detail: str):
        if not settings.EXPOSE_ERROR_DETAILS:
            detail = "Internal server error"
        super().__init__(status_code=500, detail=detail)

def create_error_response(error: Any) -> dict:
    """Create a standardized error response"""
    return {"error": error}

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render every HTTPException as {"error": detail}"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail),
        headers=getattr(exc, "headers", None),
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema violations are a 400 listing every issue"""
    issues = [
        {
            "loc": list(err.get("loc", ())),
            "msg": err.get("msg"),
            "type": err.get("type"),
        }
        for err in exc.errors()
    ]
    logger.info(f"Validation failed for {request.method} {request.url.path}: {len(issues)} issue(s)")
    return JSONResponse(
        status_code=400,
        content=create_error_response(jsonable_encoder(issues))
    )
