"""Agent directory interface.

Callers (the HTTP layer, tests) depend only on AgentDirectory so that a
different backing store can be substituted without touching them.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..core.events import Event
from ..core.models import AgentMetadata, AgentRegistration


class AgentDirectory(ABC):
    """Store of agent registrations keyed by canonical name."""

    @abstractmethod
    def register(self, registration: AgentRegistration) -> None:
        """Validate and store a registration, overwriting any existing entry.

        Raises:
            FormatError: If ans_name is not a canonical name
            TrustError: If the certificate does not verify against the CA or
                public_key is not the certificate's key
        """

    @abstractmethod
    def resolve(self, ans_name: str) -> AgentMetadata:
        """Return the metadata registered under ans_name.

        Raises:
            NotFoundError: If no agent is registered under ans_name
        """

    @abstractmethod
    def get_registration(self, ans_name: str) -> AgentRegistration:
        """Return the stored registration (never carrying a private key).

        Raises:
            NotFoundError: If no agent is registered under ans_name
        """

    @abstractmethod
    def discover(
        self, capability: str, provider: Optional[str] = None
    ) -> list[AgentMetadata]:
        """Return agents declaring capability, optionally from provider only."""

    @abstractmethod
    def verify_capability(self, ans_name: str, capability: str, proof: str) -> bool:
        """Check a capability proof against the registered agent's key.

        Raises:
            NotFoundError: If no agent is registered under ans_name
        """

    @abstractmethod
    def list_agents(self) -> list[AgentMetadata]:
        """Snapshot of all registered agents."""

    @abstractmethod
    def remove(self, ans_name: str) -> bool:
        """Delete a registration. Returns False if there was none."""

    @abstractmethod
    def issue_certificate(self, agent_name: str, public_key_pem: str) -> str:
        """Issue a CA-backed certificate for an agent that has not registered yet."""

    @abstractmethod
    def subscribe(self, listener: Callable[[Event], None]) -> Callable[[], None]:
        """Receive AgentRegistered / AgentRemoved events.

        Returns:
            Callable that unsubscribes the listener
        """
