"""Pattern matching for vanity address search."""

from dataclasses import dataclass

from solvanity.errors import ConfigurationError

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
MAX_ADDRESS_LENGTH = 44        # base58 chars for a 32-byte key

_BASE58_CHARS = frozenset(BASE58_ALPHABET)


@dataclass(frozen=True)
class SearchPattern:
    """Immutable, picklable pattern shared read-only by all workers.

    An empty prefix or suffix places no constraint on that end.
    """
    prefix: str = ""
    suffix: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.prefix and not self.suffix

    def describe(self) -> str:
        return f"prefix='{self.prefix}' suffix='{self.suffix}'"


def matches(public_id: str, pattern: SearchPattern) -> bool:
    """Test a base58 address against a pattern.

    When both ends are set, either one matching is enough: a candidate
    that starts with the prefix OR ends with the suffix is accepted.
    An empty pattern never matches.
    """
    prefix, suffix = pattern.prefix, pattern.suffix
    return bool(
        (prefix and public_id.startswith(prefix))
        or (suffix and public_id.endswith(suffix))
        or (prefix and suffix
            and public_id.startswith(prefix) and public_id.endswith(suffix))
    )


def validate_base58_pattern(pattern: str) -> str:
    """Validate a pattern contains only base58 characters.

    Returns the stripped pattern; an empty string is allowed.
    Raises ConfigurationError for invalid patterns.
    """
    cleaned = (pattern or "").strip()
    bad = sorted(set(cleaned) - _BASE58_CHARS)
    if bad:
        raise ConfigurationError(
            f"Pattern '{pattern}' contains non-base58 characters: {''.join(bad)}. "
            "0, O, I and l never appear in Solana addresses."
        )
    if len(cleaned) > MAX_ADDRESS_LENGTH:
        raise ConfigurationError(
            f"Pattern length {len(cleaned)} exceeds maximum address length "
            f"of {MAX_ADDRESS_LENGTH} chars."
        )
    return cleaned


def make_pattern(prefix: str = "", suffix: str = "") -> SearchPattern:
    return SearchPattern(
        prefix=validate_base58_pattern(prefix),
        suffix=validate_base58_pattern(suffix),
    )


def estimate_difficulty(pattern: SearchPattern) -> dict:
    """Estimate expected attempts to find a match.

    Returns dict with: expected_attempts, estimated_seconds_per_core, difficulty_description
    """
    if pattern.is_empty:
        return {
            "expected_attempts": None,
            "estimated_seconds_per_core": None,
            "difficulty_description": "Never (empty pattern matches nothing)",
        }

    p_prefix = 58.0 ** -len(pattern.prefix) if pattern.prefix else 0.0
    p_suffix = 58.0 ** -len(pattern.suffix) if pattern.suffix else 0.0
    probability = p_prefix + p_suffix - p_prefix * p_suffix
    expected = 1.0 / probability

    keys_per_sec = 20000  # conservative single-core estimate
    secs = expected / keys_per_sec

    if expected < 100:
        desc = "Instant"
    elif expected < 1_000_000:
        desc = "Seconds"
    elif expected < 50_000_000:
        desc = "Minutes"
    elif expected < 2_000_000_000:
        desc = "Hours"
    elif expected < 100_000_000_000:
        desc = "Days"
    else:
        desc = "Weeks+ (consider a shorter pattern)"

    return {
        "expected_attempts": round(expected),
        "estimated_seconds_per_core": secs,
        "difficulty_description": desc,
    }
