"""
Runtime settings read from the environment.

A .env file is loaded first (existing variables win), then:

    VANITY_PREFIX            address prefix (default: none)
    VANITY_SUFFIX            address suffix (default: pump)
    VANITY_TIMEOUT_SECONDS   per-search timeout (default: 600)
    VANITY_CORES             worker processes, 0 = auto (default: 20)
    VANITY_OUTPUT_DIR        where found keypairs are written (default: ./keypairs)
    VANITY_MAX_ADDRESSES     stop after this many keypairs, 0 = forever (default: 0)
    VANITY_LOG_LEVEL         logging level name (default: INFO)
"""

import logging
import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from solvanity.errors import ConfigurationError
from solvanity.matcher import SearchPattern, make_pattern


def _get_number(environ: Mapping[str, str], key: str, default, kind=int):
    raw = environ.get(key, "").strip()
    if not raw:
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got '{raw}'") from None


@dataclass(frozen=True)
class Settings:
    prefix: str = ""
    suffix: str = "pump"
    timeout_seconds: float = 600
    cores: int = 20
    output_dir: str = "./keypairs"
    max_addresses: int = 0
    log_level: str = "INFO"

    def __post_init__(self):
        if not math.isfinite(self.timeout_seconds) or self.timeout_seconds <= 0:
            raise ConfigurationError(
                f"VANITY_TIMEOUT_SECONDS must be a finite number > 0, got {self.timeout_seconds}"
            )
        if self.cores < 0:
            raise ConfigurationError(f"VANITY_CORES must be >= 0, got {self.cores}")
        if self.max_addresses < 0:
            raise ConfigurationError(
                f"VANITY_MAX_ADDRESSES must be >= 0, got {self.max_addresses}"
            )
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigurationError(f"Unknown VANITY_LOG_LEVEL '{self.log_level}'")
        make_pattern(self.prefix, self.suffix)

    @property
    def pattern(self) -> SearchPattern:
        return make_pattern(self.prefix, self.suffix)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[str] = None,
    ) -> "Settings":
        """Build settings from `environ`, or from os.environ plus .env."""
        if environ is None:
            load_dotenv(dotenv_path)
            environ = os.environ

        return cls(
            prefix=environ.get("VANITY_PREFIX", ""),
            suffix=environ.get("VANITY_SUFFIX", "pump"),
            timeout_seconds=_get_number(environ, "VANITY_TIMEOUT_SECONDS", 600, float),
            cores=_get_number(environ, "VANITY_CORES", 20),
            output_dir=environ.get("VANITY_OUTPUT_DIR", "") or "./keypairs",
            max_addresses=_get_number(environ, "VANITY_MAX_ADDRESSES", 0),
            log_level=environ.get("VANITY_LOG_LEVEL", "") or "INFO",
        )
