"""Capability proofs.

A proof is a signature over SHA-256 of the capability name, packaged with a
timestamp and nonce as base64-encoded JSON. Only the capability name is
signed: the timestamp and nonce travel alongside but are not bound to the
signature, so a captured proof can be replayed. Real zero-knowledge proofs
and replay protection are not provided.
"""

import time
import uuid

from cryptography.hazmat.primitives.asymmetric import rsa

from ..core.crypto import PublicKeyLike, b64decode, b64encode, sign, verify
from ..core.models import CapabilityProof


def sign_data(data: str, private_key: rsa.RSAPrivateKey) -> str:
    """Sign the UTF-8 bytes of data and return the base64 signature."""
    return b64encode(sign(private_key, data.encode("utf-8")))


def verify_signature(data: str, signature: str, public_key: PublicKeyLike) -> bool:
    """Verify a base64 signature produced by sign_data.

    Returns:
        True if signature is valid, False on any failure
    """
    try:
        return verify(public_key, data.encode("utf-8"), b64decode(signature))
    except Exception:
        return False


def generate_proof(capability: str, signer_private_key: rsa.RSAPrivateKey) -> str:
    """Build a capability proof token.

    Args:
        capability: Capability name being proven
        signer_private_key: Key of the agent claiming the capability

    Returns:
        Base64-of-JSON proof token
    """
    proof = CapabilityProof(
        capability=capability,
        timestamp=int(time.time() * 1000),
        nonce=str(uuid.uuid4()),
        signature=sign_data(capability, signer_private_key),
    )
    return proof.to_token()


def verify_proof(
    capability: str, proof_token: str, signer_public_key: PublicKeyLike
) -> bool:
    """Verify a capability proof token.

    Args:
        capability: Capability the verifier expects
        proof_token: Base64-of-JSON proof token
        signer_public_key: Public key (object or PEM) of the claimed signer

    Returns:
        True if the proof is for capability and its signature verifies,
        False on any decoding or cryptographic failure
    """
    try:
        proof = CapabilityProof.from_token(proof_token)
    except Exception:
        return False

    if proof.capability != capability:
        return False

    return verify_signature(capability, proof.signature, signer_public_key)
