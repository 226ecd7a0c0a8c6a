"""Certificate authority for agent certificates."""

import logging
from datetime import timedelta
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from ..config import TrustConfig
from ..core.crypto import (
    KeyPair,
    build_certificate,
    certificate_from_pem,
    certificate_to_pem,
    common_name,
    generate_keypair,
    private_key_from_pem,
    public_key_from_pem,
    public_key_to_pem,
)
from ..core.errors import CertificateError, ConfigurationError
from ..validator.chain import CertificateValidator

logger = logging.getLogger(__name__)

DEFAULT_CA_NAME = "ANS Root CA"
CA_VALIDITY = timedelta(days=3650)


def create_self_signed_certificate(
    keypair: KeyPair, subject_name: str
) -> x509.Certificate:
    """Create a certificate signed by its own key.

    Subject and issuer common name are both subject_name; the certificate is
    valid from now for one year.

    Args:
        keypair: Key pair the certificate is issued for and signed with
        subject_name: Subject and issuer common name

    Returns:
        Self-signed certificate
    """
    issuer = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, subject_name)])
    return build_certificate(
        subject_name=subject_name,
        public_key=keypair.public_key,
        issuer=issuer,
        signing_key=keypair.private_key,
    )


class TrustAuthority:
    """Owns the CA key pair and issues and verifies agent certificates.

    Construct one instance at startup and pass it to the components that
    need it.
    """

    def __init__(
        self,
        ca_name: str = DEFAULT_CA_NAME,
        ca_cert_pem: Optional[str] = None,
        ca_key_pem: Optional[str] = None,
    ):
        """Initialize the authority.

        Args:
            ca_name: Common name used when generating a fresh CA
            ca_cert_pem: Existing CA certificate PEM
            ca_key_pem: Existing CA private key PEM

        Raises:
            ConfigurationError: If only one of ca_cert_pem and ca_key_pem is
                supplied, or the key does not match the certificate
        """
        if bool(ca_cert_pem) != bool(ca_key_pem):
            raise ConfigurationError(
                "CA certificate and CA key must be supplied together"
            )

        if ca_cert_pem and ca_key_pem:
            self._ca_certificate = certificate_from_pem(ca_cert_pem)
            self._ca_private_key = private_key_from_pem(ca_key_pem)
            key_pem = public_key_to_pem(self._ca_private_key.public_key())
            if key_pem != public_key_to_pem(self._ca_certificate.public_key()):
                raise ConfigurationError("CA key does not match CA certificate")
            logger.info("Loaded CA %s", common_name(self._ca_certificate.subject))
        else:
            keypair = generate_keypair()
            self._ca_private_key = keypair.private_key
            self._ca_certificate = self._generate_ca_certificate(keypair, ca_name)
            logger.info("Generated new CA %s", ca_name)

        self._validator = CertificateValidator(self._ca_certificate)

    @classmethod
    def from_config(cls, config: TrustConfig) -> "TrustAuthority":
        """Build an authority from trust configuration."""
        return cls(
            ca_name=config.ca_name,
            ca_cert_pem=config.load_ca_cert(),
            ca_key_pem=config.load_ca_key(),
        )

    @staticmethod
    def _generate_ca_certificate(keypair: KeyPair, ca_name: str) -> x509.Certificate:
        issuer = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, ca_name)])
        return build_certificate(
            subject_name=ca_name,
            public_key=keypair.public_key,
            issuer=issuer,
            signing_key=keypair.private_key,
            validity=CA_VALIDITY,
            is_ca=True,
        )

    @property
    def ca_name(self) -> str:
        """Common name of the CA."""
        return common_name(self._ca_certificate.subject) or ""

    @property
    def ca_certificate(self) -> x509.Certificate:
        """The CA certificate."""
        return self._ca_certificate

    @property
    def public_key(self) -> rsa.RSAPublicKey:
        """The CA public key."""
        return self._ca_private_key.public_key()

    @property
    def public_key_pem(self) -> str:
        """The CA public key as PEM."""
        return public_key_to_pem(self.public_key)

    def get_ca_certificate(self) -> str:
        """Get the CA certificate as PEM for out-of-band trust bootstrapping."""
        return certificate_to_pem(self._ca_certificate)

    def issue_certificate(self, agent_name: str, public_key_pem: str) -> str:
        """Issue a CA-signed certificate for an agent's public key.

        Args:
            agent_name: Subject common name
            public_key_pem: Agent's RSA public key as PEM

        Returns:
            Certificate PEM, valid from now for one year

        Raises:
            CertificateError: If the public key cannot be parsed or agent_name
                is empty
        """
        if not agent_name:
            raise CertificateError("Agent name is required")

        public_key = public_key_from_pem(public_key_pem)
        certificate = build_certificate(
            subject_name=agent_name,
            public_key=public_key,
            issuer=self._ca_certificate.subject,
            signing_key=self._ca_private_key,
        )
        logger.info("Issued certificate for %s", agent_name)
        return certificate_to_pem(certificate)

    def verify_certificate(self, certificate_pem: str) -> bool:
        """Check that a certificate was issued by this CA and is in date.

        Never raises; malformed input or a signature mismatch returns False.
        """
        valid = self._validator.is_valid(certificate_pem)
        if not valid:
            logger.debug("Certificate rejected by %s", self.ca_name)
        return valid
