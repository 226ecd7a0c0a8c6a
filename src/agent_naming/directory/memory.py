"""In-memory agent directory.

All registrations are lost when the process exits.
"""

import logging
import threading
from typing import Callable, Optional

from ..core.crypto import certificate_from_pem, public_key_from_pem
from ..core.errors import CertificateError, NotFoundError, TrustError
from ..core.events import AgentRegistered, AgentRemoved, Event, EventBus
from ..core.models import AgentMetadata, AgentRegistration
from ..core.names import validate_ans_name
from ..trust.attestation import verify_proof
from ..trust.authority import TrustAuthority
from .base import AgentDirectory

logger = logging.getLogger(__name__)


class InMemoryAgentDirectory(AgentDirectory):
    """Agent directory backed by a dict guarded by a lock."""

    def __init__(self, authority: TrustAuthority, events: Optional[EventBus] = None):
        """Initialize directory.

        Args:
            authority: Trust authority used to verify registration certificates
            events: Event bus for lifecycle events (a private one by default)
        """
        self.authority = authority
        self.events = events or EventBus()
        self._agents: dict[str, AgentRegistration] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._agents)

    def __contains__(self, ans_name: object) -> bool:
        with self._lock:
            return ans_name in self._agents

    def subscribe(self, listener: Callable[[Event], None]) -> Callable[[], None]:
        return self.events.subscribe(listener)

    def register(self, registration: AgentRegistration) -> None:
        validate_ans_name(registration.ans_name)

        ans_name = registration.ans_name
        if not self.authority.verify_certificate(registration.certificate):
            logger.warning("Rejected registration of %s: invalid certificate", ans_name)
            raise TrustError("Invalid certificate")

        if not self._key_matches_certificate(registration):
            logger.warning(
                "Rejected registration of %s: public key does not match certificate",
                ans_name,
            )
            raise TrustError("Public key does not match certificate")

        # The private key is never kept.
        stored = registration.model_copy(update={"private_key": None})
        with self._lock:
            replaced = ans_name in self._agents
            self._agents[ans_name] = stored

        action = "Re-registered" if replaced else "Registered"
        logger.info("%s agent %s", action, ans_name)
        self.events.emit(
            AgentRegistered(ans_name=ans_name, metadata=registration.metadata)
        )

    @staticmethod
    def _key_matches_certificate(registration: AgentRegistration) -> bool:
        certificate = certificate_from_pem(registration.certificate)
        try:
            public_key = public_key_from_pem(registration.public_key)
        except CertificateError:
            return False
        return public_key.public_numbers() == certificate.public_key().public_numbers()

    def resolve(self, ans_name: str) -> AgentMetadata:
        return self.get_registration(ans_name).metadata

    def get_registration(self, ans_name: str) -> AgentRegistration:
        with self._lock:
            registration = self._agents.get(ans_name)
        if registration is None:
            raise NotFoundError(f"Agent not found: {ans_name}")
        return registration

    def discover(
        self, capability: str, provider: Optional[str] = None
    ) -> list[AgentMetadata]:
        with self._lock:
            registrations = list(self._agents.values())

        results = []
        for registration in registrations:
            metadata = registration.metadata
            if not metadata.has_capability(capability):
                continue
            if provider and metadata.provider != provider:
                continue
            results.append(metadata)
        return results

    def verify_capability(self, ans_name: str, capability: str, proof: str) -> bool:
        with self._lock:
            registration = self._agents.get(ans_name)
        if registration is None:
            raise NotFoundError(f"Agent not found: {ans_name}")

        if not registration.metadata.has_capability(capability):
            return False

        return verify_proof(capability, proof, registration.public_key)

    def list_agents(self) -> list[AgentMetadata]:
        with self._lock:
            return [registration.metadata for registration in self._agents.values()]

    def remove(self, ans_name: str) -> bool:
        with self._lock:
            existed = self._agents.pop(ans_name, None) is not None

        if existed:
            logger.info("Removed agent %s", ans_name)
            self.events.emit(AgentRemoved(ans_name=ans_name))
        return existed

    def issue_certificate(self, agent_name: str, public_key_pem: str) -> str:
        return self.authority.issue_certificate(agent_name, public_key_pem)
