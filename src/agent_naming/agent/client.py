"""Client facade for the Agent Naming Service registry."""

import logging
from typing import Any, Callable, Optional
from urllib.parse import quote

import httpx

from ..config import ClientConfig
from ..core.crypto import (
    KeyPair,
    certificate_from_pem,
    certificate_to_pem,
    common_name,
    generate_keypair,
    private_key_from_pem,
    private_key_to_pem,
    public_key_to_pem,
)
from ..core.errors import (
    AgentNamingError,
    AuthError,
    NotFoundError,
    RegistrationError,
    TransportError,
    TrustError,
)
from ..core.events import AgentRegistered, ClientError, Event, EventBus
from ..core.models import AgentMetadata, AgentName, AgentRegistration
from ..core.names import generate_ans_name, parse_ans_name, validate_ans_name
from ..trust.attestation import generate_proof
from ..trust.authority import create_self_signed_certificate
from .token import TokenSigner

logger = logging.getLogger(__name__)

SELF_SIGNED_SUBJECT = "ans-agent"
API_PREFIX = "/api/v1"


class AgentClient:
    """Registers, resolves, discovers and verifies agents through the registry.

    Example:
        ```python
        config = ClientConfig(registry_url="http://localhost:3000")
        async with AgentClient(config) as client:
            await client.request_certificate(adopt=True)
            registration = await client.register_agent("model1", metadata)
            peers = await client.discover_agents("ml-inference")
        ```
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        events: Optional[EventBus] = None,
    ):
        """Initialize client.

        Loads the agent key and certificate from config, or generates a key
        pair and a self-signed certificate when none are configured.

        Args:
            config: Client configuration
            http_client: HTTP client to use (one is created and owned otherwise)
            events: Event bus for client events
        """
        self.config = config
        self.registry_url = config.registry_url.rstrip("/")
        self.events = events or EventBus()

        if config.agent_key and config.agent_cert:
            self._private_key = private_key_from_pem(config.agent_key)
            self._certificate = certificate_from_pem(config.agent_cert)
        else:
            keypair = generate_keypair()
            self._private_key = keypair.private_key
            self._certificate = create_self_signed_certificate(
                keypair, SELF_SIGNED_SUBJECT
            )

        self._owns_http_client = http_client is None
        self._http = (
            httpx.AsyncClient(timeout=config.timeout)
            if http_client is None
            else http_client
        )

    async def close(self) -> None:
        """Close the HTTP client if this client created it."""
        if self._owns_http_client:
            await self._http.aclose()

    async def __aenter__(self) -> "AgentClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def keypair(self) -> KeyPair:
        return KeyPair(self._private_key, self._private_key.public_key())

    @property
    def certificate_pem(self) -> str:
        return certificate_to_pem(self._certificate)

    @property
    def public_key_pem(self) -> str:
        return public_key_to_pem(self._private_key.public_key())

    @property
    def private_key_pem(self) -> str:
        return private_key_to_pem(self._private_key)

    @property
    def token_signer(self) -> TokenSigner:
        return TokenSigner(self.certificate_pem, self._private_key)

    def subscribe(self, listener: Callable[[Event], None]) -> Callable[[], None]:
        """Receive AgentRegistered and ClientError events."""
        return self.events.subscribe(listener)

    parse_ans_name = staticmethod(parse_ans_name)
    generate_ans_name = staticmethod(generate_ans_name)

    def build_ans_name(self, agent_id: str, metadata: AgentMetadata) -> str:
        """Canonical name for an agent: named after its first capability."""
        capability = (
            metadata.capabilities[0].name
            if metadata.capabilities
            else self.config.default_capability
        )
        return generate_ans_name(
            AgentName(
                protocol=self.config.protocol,
                agent_id=agent_id,
                capability=capability,
                provider=metadata.provider,
                version=metadata.version,
                extension=metadata.environment or None,
            )
        )

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        authenticated: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request to the registry and raise on error responses.

        Raises:
            TransportError: On network failure or timeout
            AuthError: On 401
            NotFoundError: On 404
            AgentNamingError: On any other error status
        """
        headers = self.token_signer.auth_headers() if authenticated else {}
        try:
            response = await self._http.request(
                method,
                f"{self.registry_url}{path}",
                headers=headers,
                timeout=self.config.timeout,
                **kwargs,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to registry timed out: {e}") from e
        except httpx.RequestError as e:
            raise TransportError(f"Cannot reach registry: {e}") from e

        if response.status_code >= 400:
            message = self._error_message(response)
            if response.status_code == 401:
                raise AuthError(message)
            if response.status_code == 404:
                raise NotFoundError(message)
            raise AgentNamingError(
                f"Registry returned {response.status_code}: {message}"
            )

        return response

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return str(response.json().get("error", response.text))
        except (ValueError, AttributeError):
            return response.text

    def _fail(
        self, operation: str, error: Exception, ans_name: Optional[str] = None
    ) -> None:
        logger.warning("%s failed: %s", operation, error)
        self.events.emit(
            ClientError(operation=operation, error=error, ans_name=ans_name)
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def register_agent(
        self, agent_id: str, metadata: AgentMetadata
    ) -> AgentRegistration:
        """Register this agent with the registry.

        Args:
            agent_id: Agent identifier segment of the canonical name
            metadata: Agent metadata

        Returns:
            The registration that was sent

        Raises:
            RegistrationError: If the name is malformed or the registry call
                fails
        """
        ans_name = self.build_ans_name(agent_id, metadata)
        registration = AgentRegistration(
            ans_name=ans_name,
            metadata=metadata,
            certificate=self.certificate_pem,
            public_key=self.public_key_pem,
            private_key=(
                self.private_key_pem if self.config.include_private_key else None
            ),
        )

        try:
            validate_ans_name(ans_name)
            await self._request(
                "POST", f"{API_PREFIX}/agents", json=registration.to_wire()
            )
        except AgentNamingError as e:
            self._fail("register", e, ans_name)
            raise RegistrationError(
                f"Failed to register agent {ans_name}: {e}", ans_name=ans_name
            ) from e

        logger.info("Registered agent %s", ans_name)
        self.events.emit(AgentRegistered(ans_name=ans_name, metadata=metadata))
        return registration

    async def _fetch_metadata(self, ans_name: str) -> AgentMetadata:
        response = await self._request(
            "GET", f"{API_PREFIX}/agents/{quote(ans_name, safe='')}"
        )
        try:
            return AgentMetadata.model_validate(response.json()["metadata"])
        except (ValueError, KeyError) as e:
            raise AgentNamingError(f"Malformed registry response: {e}") from e

    async def resolve_agent(self, ans_name: str) -> AgentMetadata:
        """Resolve an agent by canonical name.

        Raises:
            NotFoundError: If the agent is not registered
            TransportError: If the registry cannot be reached
            AgentNamingError: On any other failure
        """
        try:
            return await self._fetch_metadata(ans_name)
        except AgentNamingError as e:
            self._fail("resolve", e, ans_name)
            raise type(e)(f"Failed to resolve agent {ans_name}: {e}") from e

    async def _fetch_agents(self, params: dict[str, str]) -> list[AgentMetadata]:
        response = await self._request("GET", f"{API_PREFIX}/agents", params=params)
        try:
            return [AgentMetadata.model_validate(a) for a in response.json()["agents"]]
        except (ValueError, KeyError) as e:
            raise AgentNamingError(f"Malformed registry response: {e}") from e

    async def discover_agents(
        self, capability: str, provider: Optional[str] = None
    ) -> list[AgentMetadata]:
        """Find agents declaring capability, optionally only from provider.

        Returns:
            Matching agents; empty when nothing matches
        """
        params = {"capability": capability}
        if provider:
            params["provider"] = provider

        try:
            return await self._fetch_agents(params)
        except AgentNamingError as e:
            self._fail("discover", e)
            raise type(e)(f"Failed to discover agents: {e}") from e

    async def list_agents(self) -> list[AgentMetadata]:
        """List every registered agent."""
        try:
            return await self._fetch_agents({})
        except AgentNamingError as e:
            self._fail("list", e)
            raise type(e)(f"Failed to list agents: {e}") from e

    async def verify_capability(self, ans_name: str, capability: str) -> bool:
        """Ask the registry to verify a capability proof signed by this agent.

        Returns:
            True if verified; False when the capability is not declared, the
            proof is rejected, or any error occurs
        """
        try:
            agent = await self._fetch_metadata(ans_name)
            if not agent.has_capability(capability):
                return False

            proof = generate_proof(capability, self._private_key)
            response = await self._request(
                "POST",
                f"{API_PREFIX}/verify",
                json={"ansName": ans_name, "capability": capability, "proof": proof},
            )
            return response.json().get("verified") is True
        except TransportError as e:
            logger.warning("Capability verification for %s failed: %s", ans_name, e)
            return False
        except (AgentNamingError, ValueError, KeyError):
            return False

    async def remove_agent(self, ans_name: str) -> bool:
        """Remove an agent. Returns False if it was not registered."""
        try:
            await self._request(
                "DELETE", f"{API_PREFIX}/agents/{quote(ans_name, safe='')}"
            )
        except NotFoundError:
            return False
        except AgentNamingError as e:
            self._fail("remove", e, ans_name)
            raise type(e)(f"Failed to remove agent {ans_name}: {e}") from e
        return True

    async def request_certificate(
        self, agent_name: Optional[str] = None, adopt: bool = False
    ) -> str:
        """Obtain a CA-issued certificate for this agent's public key.

        Args:
            agent_name: Subject name (default: current certificate subject)
            adopt: Replace the current certificate with the issued one

        Returns:
            Certificate PEM
        """
        agent_name = agent_name or common_name(self._certificate.subject)
        try:
            response = await self._request(
                "POST",
                f"{API_PREFIX}/certificates",
                json={"agentName": agent_name, "publicKey": self.public_key_pem},
            )
            certificate_pem = response.json()["certificate"]
        except (AgentNamingError, ValueError, KeyError) as e:
            self._fail("request_certificate", e)
            raise AgentNamingError(f"Failed to obtain certificate: {e}") from e

        if adopt:
            self._certificate = certificate_from_pem(certificate_pem)
            logger.info("Adopted CA-issued certificate for %s", agent_name)
        return certificate_pem

    async def fetch_ca_certificate(self) -> str:
        """Download the registry's CA certificate."""
        try:
            response = await self._request(
                "GET", f"{API_PREFIX}/ca", authenticated=False
            )
            certificate_pem = response.json()["certificate"]
        except (AgentNamingError, ValueError, KeyError) as e:
            self._fail("fetch_ca_certificate", e)
            raise AgentNamingError(f"Failed to fetch CA certificate: {e}") from e

        if self.config.ca_cert and certificate_from_pem(
            certificate_pem
        ) != certificate_from_pem(self.config.ca_cert):
            raise TrustError("Registry CA does not match the configured CA")
        return certificate_pem
