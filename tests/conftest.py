"""Shared fixtures for agent-naming tests."""

import pytest

from agent_naming import TrustAuthority, generate_keypair
from agent_naming.core.crypto import KeyPair


@pytest.fixture(scope="session")
def authority() -> TrustAuthority:
    """One CA for the whole test session."""
    return TrustAuthority()


@pytest.fixture(scope="session")
def agent_keypair() -> KeyPair:
    """Key pair shared by agents that do not need distinct keys."""
    return generate_keypair()
