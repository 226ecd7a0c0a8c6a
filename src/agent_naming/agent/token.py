"""Bearer token signer for registry requests."""

import time
from typing import Optional

import jwt
from cryptography.hazmat.primitives.asymmetric import rsa

from ..core.crypto import TOKEN_ALGORITHM, TOKEN_ISSUER, TOKEN_LIFETIME


class TokenSigner:
    """Signs bearer tokens that carry the agent's certificate as subject."""

    def __init__(
        self,
        certificate_pem: str,
        private_key: rsa.RSAPrivateKey,
        issuer: str = TOKEN_ISSUER,
        lifetime: int = TOKEN_LIFETIME,
    ):
        """Initialize token signer.

        Args:
            certificate_pem: Agent's certificate, sent as the sub claim
            private_key: Agent's private key, signs the token
            issuer: iss claim
            lifetime: Token validity in seconds (default 3600 = 1 hour)
        """
        self.certificate_pem = certificate_pem
        self.private_key = private_key
        self.issuer = issuer
        self.lifetime = lifetime

    def create_token(self, now: Optional[int] = None) -> str:
        """Create a signed RS256 token.

        Args:
            now: Issue time in seconds since the epoch (default: current time)

        Returns:
            Compact JWT
        """
        issued_at = int(time.time()) if now is None else now
        payload = {
            "iss": self.issuer,
            "sub": self.certificate_pem,
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(payload, self.private_key, algorithm=TOKEN_ALGORITHM)

    def auth_headers(self) -> dict[str, str]:
        """Authorization header carrying a fresh token."""
        return {"Authorization": f"Bearer {self.create_token()}"}
