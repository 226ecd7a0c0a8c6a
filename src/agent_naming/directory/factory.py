"""Factory for agent directory backends."""

from ..core.errors import ConfigurationError
from ..core.events import EventBus
from ..trust.authority import TrustAuthority
from .base import AgentDirectory


def create_directory(
    backend: str, authority: TrustAuthority, events: EventBus | None = None
) -> AgentDirectory:
    """Create an AgentDirectory for the configured storage backend.

    Supported values:
        - "memory": In-memory directory.

    "etcd" and "redis" are recognised names with no implementation.
    """
    match backend:
        case "memory":
            from .memory import InMemoryAgentDirectory

            return InMemoryAgentDirectory(authority, events=events)
        case "etcd" | "redis":
            raise ConfigurationError(f"Storage backend not implemented: {backend}")
        case _:
            raise ConfigurationError(f"Unknown storage backend: {backend}")
