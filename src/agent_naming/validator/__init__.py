"""Registry-side verification of certificates and bearer tokens."""

from .chain import CertificateValidator
from .verifier import TokenVerifier

__all__ = ["CertificateValidator", "TokenVerifier"]
