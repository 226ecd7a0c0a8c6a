"""FastAPI integration: bearer token gateway for the registry."""

import logging
from typing import Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import GatewayConfig
from ..core.errors import AuthError
from ..core.models import ValidationResult
from ..trust.authority import TrustAuthority
from ..validator import TokenVerifier

logger = logging.getLogger(__name__)


class AuthGatewayMiddleware(BaseHTTPMiddleware):
    """Rejects unauthenticated requests before any route handler runs."""

    def __init__(
        self,
        app,
        authority: TrustAuthority,
        config: Optional[GatewayConfig] = None,
    ):
        """Initialize middleware.

        Args:
            app: ASGI application
            authority: Trust authority for the CA-issued check
            config: Gateway settings (public paths, CA-rooted mode)
        """
        super().__init__(app)
        self.config = config or GatewayConfig()
        self.verifier = TokenVerifier(
            authority=authority,
            require_ca_issued=self.config.require_ca_issued,
            issuer=self.config.issuer,
            leeway=self.config.leeway,
        )

    def is_public(self, path: str) -> bool:
        """Check if a path is served without authentication."""
        return path in self.config.public_paths

    async def dispatch(self, request: Request, call_next):
        """Process request."""
        path = request.url.path
        if self.is_public(path):
            request.state.caller = None
            return await call_next(request)

        # Enrollment only needs proof of key possession
        require_ca_issued = False if path in self.config.enrollment_paths else None

        try:
            result = self.verifier.verify_authorization(
                request.headers.get("authorization"),
                require_ca_issued=require_ca_issued,
            )
        except AuthError as e:
            return JSONResponse(status_code=401, content={"error": str(e)})

        request.state.caller = result
        return await call_next(request)


def get_caller(required: bool = True):
    """Dependency to get the authenticated caller from the request.

    Args:
        required: If True, raise 401 when the request was not authenticated

    Returns:
        ValidationResult of the caller's token, or None
    """

    async def _get_caller(request: Request) -> Optional[ValidationResult]:
        caller = getattr(request.state, "caller", None)
        if required and not caller:
            raise HTTPException(status_code=401, detail="Authentication required")
        return caller

    return _get_caller
