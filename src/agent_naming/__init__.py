"""Agent Naming Service - naming, discovery and trust for autonomous agents."""

from .agent import AgentClient, TokenSigner
from .config import ClientConfig, GatewayConfig, RegistryConfig, TrustConfig
from .core import (
    AgentCapability,
    AgentEndpoint,
    AgentMetadata,
    AgentName,
    AgentRegistration,
    CapabilityProof,
    KeyPair,
    ValidationResult,
    generate_ans_name,
    generate_keypair,
    parse_ans_name,
)
from .directory import AgentDirectory, InMemoryAgentDirectory
from .trust import (
    TrustAuthority,
    create_self_signed_certificate,
    generate_proof,
    verify_proof,
)
from .validator import CertificateValidator, TokenVerifier

__version__ = "0.1.0"

__all__ = [
    # Agent
    "AgentClient",
    "TokenSigner",
    # Config
    "ClientConfig",
    "GatewayConfig",
    "RegistryConfig",
    "TrustConfig",
    # Core
    "AgentCapability",
    "AgentEndpoint",
    "AgentMetadata",
    "AgentName",
    "AgentRegistration",
    "CapabilityProof",
    "KeyPair",
    "ValidationResult",
    "generate_ans_name",
    "generate_keypair",
    "parse_ans_name",
    # Directory
    "AgentDirectory",
    "InMemoryAgentDirectory",
    # Trust
    "TrustAuthority",
    "create_self_signed_certificate",
    "generate_proof",
    "verify_proof",
    # Validator
    "CertificateValidator",
    "TokenVerifier",
]
