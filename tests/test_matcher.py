import pytest

from solvanity.errors import ConfigurationError
from solvanity.matcher import (
    SearchPattern,
    estimate_difficulty,
    make_pattern,
    matches,
    validate_base58_pattern,
)

ADDRESS = "ABcd7xQ9kLmNoPqRsTuVwXyZ123456789abcdefpump"


class TestMatches:
    def test_prefix_only(self):
        assert matches(ADDRESS, SearchPattern(prefix="ABcd"))
        assert not matches(ADDRESS, SearchPattern(prefix="abcd"))

    def test_suffix_only(self):
        assert matches(ADDRESS, SearchPattern(suffix="pump"))
        assert not matches(ADDRESS, SearchPattern(suffix="PUMP"))

    def test_both_set_accepts_suffix_only_match(self):
        pattern = SearchPattern(prefix="zz", suffix="pump")
        assert matches(ADDRESS, pattern)

    def test_both_set_accepts_prefix_only_match(self):
        pattern = SearchPattern(prefix="AB", suffix="zzzz")
        assert matches(ADDRESS, pattern)

    def test_both_set_accepts_both_matching(self):
        assert matches(ADDRESS, SearchPattern(prefix="AB", suffix="pump"))

    def test_both_set_rejects_neither(self):
        assert not matches(ADDRESS, SearchPattern(prefix="zz", suffix="zzzz"))

    def test_empty_pattern_never_matches(self):
        assert not matches(ADDRESS, SearchPattern())
        assert not matches("", SearchPattern())

    def test_deterministic(self):
        pattern = SearchPattern(prefix="AB", suffix="x")
        results = {matches(ADDRESS, pattern) for _ in range(100)}
        assert results == {True}


class TestValidation:
    def test_strips_whitespace(self):
        assert validate_base58_pattern("  pump ") == "pump"

    def test_empty_allowed(self):
        assert validate_base58_pattern("") == ""
        assert validate_base58_pattern(None) == ""

    @pytest.mark.parametrize("bad", ["0x", "Oops", "Illegal", "l33t", "a-b"])
    def test_rejects_non_base58(self, bad):
        with pytest.raises(ConfigurationError, match="non-base58"):
            validate_base58_pattern(bad)

    def test_rejects_too_long(self):
        with pytest.raises(ConfigurationError, match="exceeds"):
            validate_base58_pattern("a" * 45)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            make_pattern(prefix="0")

    def test_make_pattern(self):
        assert make_pattern(" AB", "pump ") == SearchPattern("AB", "pump")


class TestPattern:
    def test_frozen(self):
        pattern = SearchPattern(prefix="AB")
        with pytest.raises(AttributeError):
            pattern.prefix = "CD"

    def test_is_empty(self):
        assert SearchPattern().is_empty
        assert not SearchPattern(suffix="x").is_empty


class TestDifficulty:
    def test_prefix(self):
        d = estimate_difficulty(SearchPattern(prefix="AB"))
        assert d["expected_attempts"] == 58 ** 2
        assert d["difficulty_description"] == "Seconds"

    def test_either_end_is_easier_than_one(self):
        one = estimate_difficulty(SearchPattern(suffix="pump"))
        both = estimate_difficulty(SearchPattern(prefix="pump", suffix="pump"))
        assert both["expected_attempts"] < one["expected_attempts"]

    def test_empty(self):
        d = estimate_difficulty(SearchPattern())
        assert d["expected_attempts"] is None
        assert d["difficulty_description"].startswith("Never")

    def test_long_pattern(self):
        d = estimate_difficulty(SearchPattern(prefix="abcdefgh"))
        assert d["difficulty_description"].startswith("Weeks+")
