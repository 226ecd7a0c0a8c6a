"""Certificate chain validation."""

from datetime import datetime, timezone
from typing import Optional

from cryptography import x509

from ..core.crypto import certificate_from_pem, common_name
from ..core.errors import (
    CertificateExpiredError,
    CertificateNotYetValidError,
    InvalidCertificateSignatureError,
    UntrustedIssuerError,
)


class CertificateValidator:
    """Validates agent certificates against a single CA certificate."""

    def __init__(self, ca_certificate: x509.Certificate):
        """Initialize validator.

        Args:
            ca_certificate: Certificate of the trusted CA
        """
        self.ca_certificate = ca_certificate

    def validate_certificate(
        self, certificate: x509.Certificate, now: Optional[datetime] = None
    ) -> None:
        """Validate a certificate (chain of one).

        Args:
            certificate: Certificate to validate
            now: Current time (default: datetime.now(timezone.utc))

        Raises:
            UntrustedIssuerError: If certificate issuer is not the CA
            CertificateExpiredError: If certificate has expired
            CertificateNotYetValidError: If certificate is not yet valid
            InvalidCertificateSignatureError: If certificate signature is invalid
        """
        if now is None:
            now = datetime.now(timezone.utc)

        # Check issuer is the CA
        if certificate.issuer != self.ca_certificate.subject:
            raise UntrustedIssuerError(
                f"Certificate issuer not trusted: {common_name(certificate.issuer)}"
            )

        # Check validity period
        if now < certificate.not_valid_before_utc:
            raise CertificateNotYetValidError(
                f"Certificate not yet valid "
                f"(not_before: {certificate.not_valid_before_utc})"
            )

        if now > certificate.not_valid_after_utc:
            raise CertificateExpiredError(
                f"Certificate expired (not_after: {certificate.not_valid_after_utc})"
            )

        # Verify certificate signature
        try:
            certificate.verify_directly_issued_by(self.ca_certificate)
        except Exception as e:
            raise InvalidCertificateSignatureError(
                "Certificate signature verification failed"
            ) from e

    def is_valid(self, certificate_pem: str) -> bool:
        """Check if a PEM certificate is valid.

        Args:
            certificate_pem: Certificate to check

        Returns:
            True if certificate is valid, False otherwise
        """
        try:
            certificate = certificate_from_pem(certificate_pem)
            self.validate_certificate(certificate)
            return True
        except Exception:
            return False
