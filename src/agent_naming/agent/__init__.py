"""Agent-side functionality: registry client and bearer tokens."""

from .client import AgentClient
from .token import TokenSigner

__all__ = ["AgentClient", "TokenSigner"]
