"""Certificate authority and capability attestation."""

from .attestation import generate_proof, sign_data, verify_proof, verify_signature
from .authority import TrustAuthority, create_self_signed_certificate

__all__ = [
    "TrustAuthority",
    "create_self_signed_certificate",
    "generate_proof",
    "verify_proof",
    "sign_data",
    "verify_signature",
]
