from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable, List, Optional
import logging

from app.api.deps import decode_access_token

logger = logging.getLogger(__name__)

DEFAULT_PUBLIC_PATHS: List[str] = [
    "/docs",
    "/redoc",
    "/openapi.json",
    "/health",
    "/auth/token",
    "/auth/register",
]


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Require a valid bearer token on every request.
    Paths listed in ``public_paths`` opt out of the check. Endpoints still
    resolve the user themselves through ``get_current_user``.
    """
    
    def __init__(
        self, 
        app,
        public_paths: Optional[List[str]] = None,
    ):
        """
        Initialize the middleware
        
        Args:
            app: The FastAPI application
            public_paths: List of path prefixes that don't require authentication
        """
        super().__init__(app)
        self.public_paths = public_paths if public_paths is not None else DEFAULT_PUBLIC_PATHS

    def is_public(self, path: str) -> bool:
        return any(path == public or path.startswith(public.rstrip("/") + "/") for public in self.public_paths)
        
    async def dispatch(self, request: Request, call_next: Callable):
        # CORS preflight requests carry no credentials
        if request.method == "OPTIONS" or self.is_public(request.url.path):
            return await call_next(request)

        scheme, _, token = request.headers.get("Authorization", "").partition(" ")
        if scheme.lower() != "bearer" or not token:
            return self._unauthorized("Not authenticated")

        if not decode_access_token(token):
            return self._unauthorized("Invalid token")

        return await call_next(request)

    @staticmethod
    def _unauthorized(detail: str) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": detail, "code": "UNAUTHORIZED"},
            headers={"WWW-Authenticate": "Bearer"},
        )
