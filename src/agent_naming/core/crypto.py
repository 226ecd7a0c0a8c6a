"""Cryptographic operations using RSA and X.509."""

import base64
import uuid
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Union

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import NameOID

from .errors import CertificateError

KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537
CERTIFICATE_VALIDITY = timedelta(days=365)

# Bearer tokens
TOKEN_ISSUER = "ans-client"
TOKEN_ALGORITHM = "RS256"
TOKEN_LIFETIME = 3600

PublicKeyLike = Union[str, bytes, rsa.RSAPublicKey]


class KeyPair(NamedTuple):
    """An RSA private key and its public half."""

    private_key: rsa.RSAPrivateKey
    public_key: rsa.RSAPublicKey


def generate_keypair() -> KeyPair:
    """Generate a new 2048-bit RSA keypair.

    Returns:
        KeyPair of (private_key, public_key)
    """
    private_key = rsa.generate_private_key(
        public_exponent=PUBLIC_EXPONENT, key_size=KEY_SIZE
    )
    return KeyPair(private_key, private_key.public_key())


def sign(private_key: rsa.RSAPrivateKey, message: bytes) -> bytes:
    """Sign a message with RSASSA-PKCS1-v1_5 over SHA-256.

    Args:
        private_key: RSA private key
        message: Message to sign

    Returns:
        Signature bytes
    """
    return private_key.sign(message, padding.PKCS1v15(), hashes.SHA256())


def verify(public_key: PublicKeyLike, message: bytes, signature: bytes) -> bool:
    """Verify an RSASSA-PKCS1-v1_5 / SHA-256 signature.

    Args:
        public_key: RSA public key object or PEM
        message: Original message
        signature: Signature to verify

    Returns:
        True if signature is valid, False otherwise
    """
    try:
        if not isinstance(public_key, rsa.RSAPublicKey):
            public_key = public_key_from_pem(public_key)
        public_key.verify(signature, message, padding.PKCS1v15(), hashes.SHA256())
        return True
    except Exception:
        return False


def private_key_to_pem(private_key: rsa.RSAPrivateKey) -> str:
    """Serialize a private key to a PKCS#1 ("RSA PRIVATE KEY") PEM string."""
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


def private_key_from_pem(pem: str | bytes) -> rsa.RSAPrivateKey:
    """Load an unencrypted RSA private key from PEM.

    Raises:
        CertificateError: If the PEM is not an RSA private key
    """
    if isinstance(pem, str):
        pem = pem.encode("ascii")
    try:
        key = serialization.load_pem_private_key(pem, password=None)
    except Exception as e:
        raise CertificateError(f"Invalid private key: {e}") from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise CertificateError("Private key is not an RSA key")
    return key


def public_key_to_pem(public_key: rsa.RSAPublicKey) -> str:
    """Serialize a public key to a SubjectPublicKeyInfo PEM string."""
    return public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")


def public_key_from_pem(pem: str | bytes) -> rsa.RSAPublicKey:
    """Load an RSA public key from PEM.

    Raises:
        CertificateError: If the PEM is not an RSA public key
    """
    if isinstance(pem, str):
        pem = pem.encode("ascii")
    try:
        key = serialization.load_pem_public_key(pem)
    except Exception as e:
        raise CertificateError(f"Invalid public key: {e}") from e
    if not isinstance(key, rsa.RSAPublicKey):
        raise CertificateError("Public key is not an RSA key")
    return key


def certificate_to_pem(certificate: x509.Certificate) -> str:
    """Serialize a certificate to PEM."""
    return certificate.public_bytes(serialization.Encoding.PEM).decode("ascii")


def certificate_from_pem(pem: str | bytes) -> x509.Certificate:
    """Load a certificate from PEM.

    Raises:
        CertificateError: If the PEM cannot be parsed
    """
    if isinstance(pem, str):
        pem = pem.encode("ascii")
    try:
        return x509.load_pem_x509_certificate(pem)
    except Exception as e:
        raise CertificateError(f"Invalid certificate: {e}") from e


def common_name(name: x509.Name) -> str | None:
    """Return the first commonName attribute of an X.509 name, if any."""
    attributes = name.get_attributes_for_oid(NameOID.COMMON_NAME)
    return str(attributes[0].value) if attributes else None


def build_certificate(
    subject_name: str,
    public_key: rsa.RSAPublicKey,
    issuer: x509.Name,
    signing_key: rsa.RSAPrivateKey,
    validity: timedelta = CERTIFICATE_VALIDITY,
    is_ca: bool = False,
) -> x509.Certificate:
    """Build and sign an X.509 certificate.

    Args:
        subject_name: Subject common name
        public_key: Subject's public key
        issuer: Issuer distinguished name
        signing_key: Issuer's private key
        validity: How long the certificate is valid from now
        is_ca: Mark the certificate as a CA certificate

    Returns:
        Signed certificate
    """
    now = datetime.now(timezone.utc)
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, subject_name)])
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(public_key)
        .serial_number(uuid.uuid4().int >> 1)
        .not_valid_before(now)
        .not_valid_after(now + validity)
    )
    if is_ca:
        builder = builder.add_extension(
            x509.BasicConstraints(ca=True, path_length=0), critical=True
        )
    return builder.sign(private_key=signing_key, algorithm=hashes.SHA256())


def b64encode(data: bytes) -> str:
    """Base64 encode bytes to an ASCII string."""
    return base64.b64encode(data).decode("ascii")


def b64decode(data: str) -> bytes:
    """Decode a base64 string, rejecting non-alphabet characters."""
    return base64.b64decode(data, validate=True)
