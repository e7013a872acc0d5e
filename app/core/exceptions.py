"""
Error taxonomy for the gateway.

Every error is an ``HTTPException`` so the service layer can raise it the same
way it raises any other HTTP error, and FastAPI maps it to the right status.
The ``code`` attribute is rendered next to ``detail`` by the handler
registered in ``app.main``.
"""
from typing import Optional
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class GatewayError(HTTPException):
    """Base class for all gateway errors"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(
            status_code=status_code or self.status_code,
            detail=detail or self.default_detail,
        )


class NotFoundError(GatewayError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_detail = "Not found"


class ForbiddenError(GatewayError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_detail = "Access denied"


class InvalidStateError(GatewayError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_STATE"
    default_detail = "Invalid state"


class ValidationError(GatewayError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    default_detail = "Invalid request"


class PayloadTooLargeError(ValidationError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    code = "PAYLOAD_TOO_LARGE"
    default_detail = "Payload too large"


class RemoteServiceError(GatewayError):
    """The RAG engine answered with a non-success status"""
    code = "REMOTE_SERVICE_ERROR"
    default_detail = "Logos service request failed"


class RemoteUnavailableError(GatewayError):
    """The RAG engine could not be reached at all"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "REMOTE_UNAVAILABLE"
    default_detail = "Logos service is unavailable"


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
        headers=exc.headers,
    )
