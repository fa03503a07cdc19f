"""
Keypair generation for Solana vanity addresses.

A Solana address is the base58 encoding of a 32-byte Ed25519 public key.
The secret key format used by the Solana CLI and wallets is 64 bytes:
the 32-byte private seed followed by the 32-byte public key.
"""

import base58
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives import serialization

SEED_LENGTH = 32               # bytes
PUBLIC_KEY_LENGTH = 32         # bytes
SECRET_KEY_LENGTH = SEED_LENGTH + PUBLIC_KEY_LENGTH

# Serialization constants cached at module level for performance
_RAW = serialization.Encoding.Raw
_RAW_PRV = serialization.PrivateFormat.Raw
_RAW_PUB = serialization.PublicFormat.Raw
_NO_ENC = serialization.NoEncryption()


def generate_keypair() -> tuple[str, str]:
    """Generate one random keypair.

    This is the hot-path function called in the inner loop of each worker.
    Every call is an independent trial; nothing is cached between calls.

    Returns:
        (public_id, private_material)
        - public_id: base58 address (32-byte public key)
        - private_material: base58 64-byte secret key (seed + public key)
    """
    prv = Ed25519PrivateKey.generate()
    pub_bytes = prv.public_key().public_bytes(_RAW, _RAW_PUB)
    seed_bytes = prv.private_bytes(_RAW, _RAW_PRV, _NO_ENC)

    public_id = base58.b58encode(pub_bytes).decode("ascii")
    private_material = base58.b58encode(seed_bytes + pub_bytes).decode("ascii")
    return public_id, private_material


def public_key_from_seed(seed: bytes) -> bytes:
    """Derive the raw 32-byte public key from a 32-byte Ed25519 seed."""
    prv = Ed25519PrivateKey.from_private_bytes(seed)
    return prv.public_key().public_bytes(_RAW, _RAW_PUB)


def keypair_from_private_material(private_material: str) -> tuple[bytes, bytes]:
    """Split a base58 secret key into (seed, public_key) raw bytes.

    Raises ValueError if the decoded secret key is not 64 bytes long.
    """
    secret = base58.b58decode(private_material)
    if len(secret) != SECRET_KEY_LENGTH:
        raise ValueError(
            f"Secret key must be {SECRET_KEY_LENGTH} bytes, got {len(secret)}"
        )
    return secret[:SEED_LENGTH], secret[SEED_LENGTH:]
