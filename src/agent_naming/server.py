"""Agent Naming Service registry server.

FastAPI application exposing the agent directory over HTTP. Every route
except the liveness probe and the CA certificate download sits behind the
bearer token gateway.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import Field
from starlette.exceptions import HTTPException

from .config import RegistryConfig
from .core.errors import (
    AgentNamingError,
    AuthError,
    FormatError,
    NotFoundError,
    TrustError,
)
from .core.models import AgentRegistration, ValidationResult, WireModel
from .directory import AgentDirectory, create_directory
from .integrations.fastapi import AuthGatewayMiddleware, get_caller
from .trust.authority import TrustAuthority

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


class VerifyRequest(WireModel):
    """Body of POST /api/v1/verify."""

    ans_name: str
    capability: str
    proof: str


class CertificateRequest(WireModel):
    """Body of POST /api/v1/certificates."""

    agent_name: str = Field(min_length=1)
    public_key: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _status_for(exc: AgentNamingError) -> int:
    if isinstance(exc, (FormatError, TrustError)):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, AuthError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_exception_handlers(app: FastAPI) -> None:
    """Map the error hierarchy onto JSON {"error": ...} responses."""

    @app.exception_handler(AgentNamingError)
    async def naming_error_handler(request: Request, exc: AgentNamingError):
        return _error(_status_for(exc), str(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ):
        return _error(status.HTTP_400_BAD_REQUEST, f"Invalid request: {exc.errors()}")

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Server error on %s %s", request.method, request.url.path)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_routes(
    app: FastAPI, directory: AgentDirectory, authority: TrustAuthority
) -> None:
    """Attach the registry routes to app."""

    @app.get("/health")
    def health():
        """Liveness probe."""
        timestamp = datetime.now(timezone.utc).isoformat()
        return {"status": "healthy", "timestamp": timestamp}

    @app.post(f"{API_PREFIX}/agents", status_code=status.HTTP_201_CREATED)
    def register_agent(registration: AgentRegistration):
        """Register an agent."""
        directory.register(registration)
        return {
            "message": "Agent registered successfully",
            "ansName": registration.ans_name,
        }

    @app.get(f"{API_PREFIX}/agents/{{ans_name:path}}")
    def resolve_agent(ans_name: str):
        """Resolve an agent by canonical name."""
        metadata = directory.resolve(ans_name)
        return {"metadata": metadata.to_wire()}

    @app.get(f"{API_PREFIX}/agents")
    def discover_agents(
        capability: Optional[str] = None, provider: Optional[str] = None
    ):
        """Discover agents by capability, or list all agents."""
        if not capability:
            agents = directory.list_agents()
        else:
            agents = directory.discover(capability, provider or None)
        return {"agents": [metadata.to_wire() for metadata in agents]}

    @app.post(f"{API_PREFIX}/verify")
    def verify_capability(body: VerifyRequest):
        """Check a capability proof."""
        verified = directory.verify_capability(
            body.ans_name, body.capability, body.proof
        )
        return {"verified": verified}

    @app.delete(f"{API_PREFIX}/agents/{{ans_name:path}}")
    def remove_agent(ans_name: str):
        """Remove an agent."""
        if not directory.remove(ans_name):
            raise NotFoundError(f"Agent not found: {ans_name}")
        return {"message": "Agent removed successfully"}

    @app.get(f"{API_PREFIX}/ca")
    def get_ca_certificate():
        """CA certificate for trust bootstrapping."""
        return {"certificate": authority.get_ca_certificate()}

    @app.post(f"{API_PREFIX}/certificates")
    def issue_certificate(
        body: CertificateRequest,
        caller: ValidationResult = Depends(get_caller()),
    ):
        """Issue a CA-signed certificate for a public key."""
        certificate = directory.issue_certificate(body.agent_name, body.public_key)
        logger.info(
            "Certificate for %s requested by %s", body.agent_name, caller.subject
        )
        return {"certificate": certificate}


def create_app(
    config: Optional[RegistryConfig] = None,
    authority: Optional[TrustAuthority] = None,
    directory: Optional[AgentDirectory] = None,
) -> FastAPI:
    """Build the registry application.

    Args:
        config: Registry configuration (defaults apply when omitted)
        authority: Trust authority; built from config.trust when omitted
        directory: Agent directory; built from config.storage when omitted

    Returns:
        FastAPI app with authority and directory on app.state
    """
    if config is None:
        config = RegistryConfig()
    if authority is None:
        authority = TrustAuthority.from_config(config.trust)
    if directory is None:
        directory = create_directory(config.storage, authority)

    app = FastAPI(title="Agent Naming Service Registry")
    app.state.config = config
    app.state.authority = authority
    app.state.directory = directory

    app.add_middleware(
        AuthGatewayMiddleware, authority=authority, config=config.gateway
    )
    register_exception_handlers(app)
    register_routes(app, directory, authority)
    return app


def run_server() -> None:
    """Console entry point: load config and serve with uvicorn."""
    import uvicorn

    config = RegistryConfig.load(os.getenv("ANS_CONFIG"))
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(config)
    logger.info("ANS Registry server running on %s:%s", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    run_server()
