"""Builders for agent metadata and registrations used across tests."""

from typing import Optional

from agent_naming import (
    AgentCapability,
    AgentEndpoint,
    AgentMetadata,
    AgentRegistration,
    TrustAuthority,
    generate_keypair,
)
from agent_naming.core.crypto import KeyPair, public_key_to_pem


def make_metadata(
    name: str,
    capabilities: list[str],
    provider: str = "acme",
    version: str = "1",
    environment: str = "prod",
) -> AgentMetadata:
    """Build agent metadata declaring the given capability names."""
    return AgentMetadata(
        name=name,
        version=version,
        capabilities=[
            AgentCapability(
                name=capability,
                version="1.0.0",
                description=f"{capability} capability",
                permissions=["read", "execute"],
            )
            for capability in capabilities
        ],
        provider=provider,
        endpoints=[AgentEndpoint(protocol="http", address=f"{name}.local", port=8080)],
        environment=environment,
        security_clearance=2,
    )


def make_registration(
    authority: TrustAuthority,
    ans_name: str,
    metadata: AgentMetadata,
    keypair: Optional[KeyPair] = None,
) -> AgentRegistration:
    """Build a registration backed by a CA-issued certificate."""
    keypair = keypair or generate_keypair()
    public_key_pem = public_key_to_pem(keypair.public_key)
    return AgentRegistration(
        ans_name=ans_name,
        metadata=metadata,
        certificate=authority.issue_certificate(metadata.name, public_key_pem),
        public_key=public_key_pem,
    )
