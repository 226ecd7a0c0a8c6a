"""Bearer token verifier for registry requests."""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Optional

import jwt

from ..core.crypto import (
    TOKEN_ALGORITHM,
    TOKEN_ISSUER,
    certificate_from_pem,
    certificate_to_pem,
    common_name,
)
from ..core.errors import AuthError
from ..core.models import ValidationResult

if TYPE_CHECKING:
    from ..trust.authority import TrustAuthority

logger = logging.getLogger(__name__)


class TokenVerifier:
    """Verifies bearer tokens issued by TokenSigner.

    The token is checked against the public key of the certificate carried
    in its sub claim, so the caller proves possession of that key. With
    require_ca_issued the certificate must also verify against the CA.
    """

    def __init__(
        self,
        authority: "TrustAuthority",
        require_ca_issued: bool = False,
        issuer: str = TOKEN_ISSUER,
        leeway: int = 0,
    ):
        """Initialize verifier.

        Args:
            authority: Trust authority used for the CA-issued check
            require_ca_issued: Reject tokens whose certificate is not CA-issued
            issuer: Expected iss claim
            leeway: Allowed clock skew in seconds
        """
        self.authority = authority
        self.require_ca_issued = require_ca_issued
        self.issuer = issuer
        self.leeway = leeway

    def verify_authorization(
        self, authorization: Optional[str], require_ca_issued: Optional[bool] = None
    ) -> ValidationResult:
        """Verify an Authorization header value.

        Raises:
            AuthError: If the header is missing, not a Bearer header, or the
                token is invalid
        """
        if not authorization:
            raise AuthError("Missing or invalid authorization header")

        scheme, _, token = authorization.partition(" ")
        if scheme != "Bearer" or not token.strip():
            raise AuthError("Missing or invalid authorization header")

        result = self.verify_token(token.strip(), require_ca_issued=require_ca_issued)
        if not result.valid:
            logger.warning("Rejected bearer token: %s", result.error)
            raise AuthError(result.error or "Invalid token")
        return result

    def verify_token(
        self, token: str, require_ca_issued: Optional[bool] = None
    ) -> ValidationResult:
        """Verify a compact JWT.

        Args:
            token: Token to verify
            require_ca_issued: Override the verifier's CA-issued requirement

        Returns:
            ValidationResult with validation outcome
        """
        if require_ca_issued is None:
            require_ca_issued = self.require_ca_issued

        try:
            # Subject certificate is needed to know which key to verify with
            unverified = jwt.decode(token, options={"verify_signature": False})
            subject_pem = unverified.get("sub")
            if not isinstance(subject_pem, str):
                return ValidationResult(
                    valid=False, error="Token has no certificate subject"
                )

            try:
                certificate = certificate_from_pem(subject_pem)
            except Exception as e:
                return ValidationResult(valid=False, error=f"Invalid certificate: {e}")

            try:
                claims = jwt.decode(
                    token,
                    certificate.public_key(),
                    algorithms=[TOKEN_ALGORITHM],
                    issuer=self.issuer,
                    leeway=self.leeway,
                    options={"require": ["exp", "iat", "iss", "sub"]},
                )
            except jwt.ExpiredSignatureError:
                return ValidationResult(valid=False, error="Token expired")
            except jwt.InvalidTokenError as e:
                return ValidationResult(valid=False, error=f"Invalid token: {e}")

            certificate_pem = certificate_to_pem(certificate)
            ca_issued = self.authority.verify_certificate(certificate_pem)
            if require_ca_issued and not ca_issued:
                return ValidationResult(
                    valid=False, error="Certificate not issued by trusted CA"
                )

            return ValidationResult(
                valid=True,
                subject=common_name(certificate.subject),
                issuer=common_name(certificate.issuer),
                certificate=certificate_pem,
                ca_issued=ca_issued,
                claims=claims,
                validated_at=datetime.now(),
            )

        except Exception as e:
            return ValidationResult(valid=False, error=f"Invalid token: {e}")
