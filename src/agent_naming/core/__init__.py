"""Core functionality for agent-naming."""

from .crypto import (
    KeyPair,
    certificate_from_pem,
    certificate_to_pem,
    generate_keypair,
    private_key_from_pem,
    private_key_to_pem,
    public_key_from_pem,
    public_key_to_pem,
    sign,
    verify,
)
from .errors import (
    AgentNamingError,
    AuthError,
    CertificateError,
    CertificateExpiredError,
    CertificateNotYetValidError,
    ConfigurationError,
    FormatError,
    InvalidCertificateSignatureError,
    NotFoundError,
    RegistrationError,
    TransportError,
    TrustError,
    UntrustedIssuerError,
)
from .events import AgentRegistered, AgentRemoved, ClientError, EventBus
from .models import (
    AgentCapability,
    AgentEndpoint,
    AgentMetadata,
    AgentName,
    AgentRegistration,
    CapabilityProof,
    ValidationResult,
)
from .names import generate_ans_name, parse_ans_name, validate_ans_name

__all__ = [
    # Crypto
    "KeyPair",
    "generate_keypair",
    "sign",
    "verify",
    "private_key_to_pem",
    "private_key_from_pem",
    "public_key_to_pem",
    "public_key_from_pem",
    "certificate_to_pem",
    "certificate_from_pem",
    # Errors
    "AgentNamingError",
    "FormatError",
    "TrustError",
    "CertificateError",
    "CertificateExpiredError",
    "CertificateNotYetValidError",
    "UntrustedIssuerError",
    "InvalidCertificateSignatureError",
    "NotFoundError",
    "AuthError",
    "TransportError",
    "RegistrationError",
    "ConfigurationError",
    # Events
    "AgentRegistered",
    "AgentRemoved",
    "ClientError",
    "EventBus",
    # Models
    "AgentCapability",
    "AgentEndpoint",
    "AgentMetadata",
    "AgentName",
    "AgentRegistration",
    "CapabilityProof",
    "ValidationResult",
    # Names
    "parse_ans_name",
    "generate_ans_name",
    "validate_ans_name",
]
