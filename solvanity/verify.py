"""
Verification of found keypairs before they are exported.

Re-derives the public key from the private seed with the `cryptography`
library and checks it against both the reported address and the public
half embedded in the 64-byte secret key.
"""

import base58

from solvanity.core import keypair_from_private_material, public_key_from_seed


def verify_keypair(public_id: str, private_material: str) -> dict:
    """Check that private_material really owns public_id.

    Returns dict with:
        valid, derived_public_id, embedded_public_match, error
    """
    result = {
        "valid": False,
        "derived_public_id": None,
        "embedded_public_match": None,
        "error": None,
    }

    try:
        seed, embedded_pub = keypair_from_private_material(private_material)
        derived_pub = public_key_from_seed(seed)
    except ValueError as e:
        result["error"] = str(e)
        return result

    derived_id = base58.b58encode(derived_pub).decode("ascii")
    result["derived_public_id"] = derived_id
    result["embedded_public_match"] = derived_pub == embedded_pub
    result["valid"] = derived_id == public_id and derived_pub == embedded_pub
    if not result["valid"]:
        result["error"] = "Private key does not derive the reported address"
    return result
