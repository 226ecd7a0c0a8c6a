"""Exception hierarchy for agent-naming."""


class AgentNamingError(Exception):
    """Base exception for all agent-naming errors."""

    pass


class FormatError(AgentNamingError):
    """Canonical agent name does not match the ANS grammar."""

    pass


# Trust errors
class TrustError(AgentNamingError):
    """Certificate failed verification against the certificate authority."""

    pass


class CertificateError(TrustError):
    """Certificate or key material could not be parsed or issued."""

    pass


class CertificateExpiredError(TrustError):
    """Certificate has expired."""

    pass


class CertificateNotYetValidError(TrustError):
    """Certificate is not yet valid."""

    pass


class UntrustedIssuerError(TrustError):
    """Certificate was not issued by the trusted CA."""

    pass


class InvalidCertificateSignatureError(TrustError):
    """Certificate signature does not verify against the CA key."""

    pass


class NotFoundError(AgentNamingError):
    """Requested agent is not registered."""

    pass


class AuthError(AgentNamingError):
    """Bearer token is missing, malformed, expired or has a bad signature."""

    pass


# Client errors
class TransportError(AgentNamingError):
    """Registry could not be reached or the call timed out."""

    pass


class RegistrationError(AgentNamingError):
    """Registering an agent with the registry failed."""

    def __init__(self, message: str, ans_name: str | None = None):
        super().__init__(message)
        self.ans_name = ans_name


# Configuration errors
class ConfigurationError(AgentNamingError):
    """Invalid or unsupported configuration."""

    pass
