"""Parallel Solana vanity keypair search."""

__version__ = "1.0.0"

from solvanity.errors import (  # noqa: E402
    ConfigurationError,
    SearchExhausted,
    SearchFailed,
    SearchTimedOut,
    VanityError,
)
from solvanity.generator import (  # noqa: E402
    Exhausted,
    Found,
    KeypairResult,
    SearchOutcome,
    SearchStats,
    TimedOut,
    VanityGenerator,
    generate_vanity_keypair,
)
from solvanity.matcher import SearchPattern, matches  # noqa: E402
