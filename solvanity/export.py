"""
Export found keypairs to JSON files.

Each keypair is written to <directory>/<public_id>.json with owner-only
permissions. The "secretKey" field is the 64-integer array read by
`solana-keygen` and most wallets; "privateKey" is the same bytes in base58.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional, Protocol

import base58

from solvanity.generator import KeypairResult
from solvanity.matcher import SearchPattern

logger = logging.getLogger(__name__)


class KeypairSink(Protocol):
    """Durable destination for found keypairs, keyed by public identifier."""

    def save(self, result: KeypairResult, pattern: SearchPattern) -> str:
        ...

    def close(self) -> None:
        ...


def prepare_export(
    result: KeypairResult,
    pattern: SearchPattern,
    created_at: Optional[datetime] = None,
) -> dict:
    """Build the JSON record for a keypair."""
    created_at = created_at or datetime.now(timezone.utc)
    return {
        "publicKey": result.public_id,
        "privateKey": result.private_material,
        "secretKey": list(base58.b58decode(result.private_material)),
        "isActive": False,
        "createdAt": created_at.isoformat(),
        "prefix": pattern.prefix,
        "suffix": pattern.suffix,
    }


def save_keypair_json(record: dict, path: str) -> str:
    """Write a keypair record with 0600 permissions.

    Returns the absolute path of the saved file.
    """
    abs_path = os.path.abspath(path)
    os.makedirs(os.path.dirname(abs_path) or ".", exist_ok=True)
    fd = os.open(abs_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        json.dump(record, f, indent=2)
        f.write("\n")
        f.flush()
        os.fsync(f.fileno())
    try:
        os.chmod(abs_path, 0o600)
    except OSError:
        pass  # Windows: chmod not fully supported
    return abs_path


class JsonFileSink:
    """KeypairSink writing one JSON file per keypair into a directory."""

    def __init__(self, directory: str):
        self.directory = os.path.abspath(directory)
        self._closed = False

    def path_for(self, public_id: str) -> str:
        return os.path.join(self.directory, f"{public_id}.json")

    def save(self, result: KeypairResult, pattern: SearchPattern) -> str:
        if self._closed:
            raise RuntimeError("Sink is closed")
        path = save_keypair_json(prepare_export(result, pattern), self.path_for(result.public_id))
        logger.info("Address saved to %s", path)
        return path

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            logger.debug("Sink for %s closed", self.directory)

    @property
    def closed(self) -> bool:
        return self._closed
