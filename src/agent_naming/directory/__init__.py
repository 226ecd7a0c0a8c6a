"""Agent directory backends."""

from .base import AgentDirectory
from .factory import create_directory
from .memory import InMemoryAgentDirectory

__all__ = ["AgentDirectory", "InMemoryAgentDirectory", "create_directory"]
