"""Tests for replacement strategies and strategy resolution."""

import logging
import random
import re

import pytest

from anonymization.core.domain import AnonymizationOptions, Match, PatternOverride
from anonymization.logic.strategies import (
    HashStrategy,
    KeyedHashStrategy,
    MaskStrategy,
    RemoveStrategy,
    ReplaceStrategy,
    StrategyResolver,
    rolling_hash,
)
from anonymization.logic.synthetic import SyntheticGenerator


OPTS = AnonymizationOptions()


def _match(pattern_name, text="value", start=0):
    return Match(pattern_name=pattern_name, text=text, start=start, end=start + len(text))


# ── Mask ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "pattern, original, expected",
    [
        ("email", "jane.doe@x.com", "j******e@x.com"),
        ("email", "jane.doe@example.com", "j******e@example.com"),
        ("email", "ab@x.com", "ab@x.com"),
        ("email", "a@x.com", "a@x.com"),
        ("phone", "555-123-4567", "***-***-4567"),
        ("phone", "+1 (555) 123.4567", "***-***-4567"),
        ("phone", "1234", "***-***-1234"),
        ("phone", "12-3", "****"),
        ("ssn", "123-45-6789", "***-**-6789"),
        ("ssn", "123456789", "***-**-6789"),
        ("creditCard", "4111-1111-1111-1234", "****-****-****-1234"),
        ("creditCard", "4111 1111 1111 1234", "****-****-****-1234"),
        ("creditCard", "4111-1111-1111", "**************"),
        ("ipv4", "192.168.1.10", "***.***.*.**"),
        ("hashtag", "#launch", "#******"),
    ],
)
def test_mask(pattern, original, expected):
    assert MaskStrategy().apply(original, pattern, OPTS) == expected


def test_mask_without_format_preservation():
    opts = AnonymizationOptions(preserve_format=False)
    assert MaskStrategy().apply("192.168.1.10", "ipv4", opts) == "*" * 12


def test_mask_email_rule_needs_at_sign():
    assert MaskStrategy().apply("jane.doe", "email", OPTS) == "****.***"


def test_mask_char_option():
    opts = AnonymizationOptions(mask_char="#")
    assert MaskStrategy().apply("555-123-4567", "phone", opts) == "###-###-4567"
    assert MaskStrategy().apply("jane@x.com", "email", opts) == "j##e@x.com"


# ── Hash ─────────────────────────────────────────────────────────────

def test_rolling_hash_known_values():
    assert rolling_hash("") == 0
    assert rolling_hash("ab") == 97 * 31 + 98
    assert rolling_hash("hello") == 99162322
    assert rolling_hash("polygenelubricants") == -(2**31)


def test_rolling_hash_uses_utf16_code_units():
    assert rolling_hash("\U0001F600") == 0xD83D * 31 + 0xDE00


def test_hash_label_shape():
    strategy = HashStrategy()
    assert strategy.apply("hello", "url", OPTS) == "U_5e918d2"
    assert strategy.apply("ab", "email", OPTS) == "E_c21"
    assert strategy.apply("polygenelubricants", "ssn", OPTS) == "S_80000000"
    label = strategy.apply("jane.doe@example.com", "email", OPTS)
    assert re.fullmatch(r"E_[0-9a-f]{1,8}", label)


def test_hash_is_deterministic_but_not_unique():
    strategy = HashStrategy()
    assert strategy.apply("a@b.com", "email", OPTS) == strategy.apply("a@b.com", "email", OPTS)
    # "Aa" and "BB" collide under the rolling hash
    assert strategy.apply("Aa", "hashtag", OPTS) == strategy.apply("BB", "hashtag", OPTS)


def test_keyed_hash():
    label = KeyedHashStrategy("secret").apply("a@b.com", "email", OPTS)
    assert re.fullmatch(r"E_[0-9a-f]{8}", label)
    assert label == KeyedHashStrategy(b"secret").apply("a@b.com", "email", OPTS)
    assert label != KeyedHashStrategy("other").apply("a@b.com", "email", OPTS)


def test_keyed_hash_requires_key():
    with pytest.raises(ValueError):
        KeyedHashStrategy().apply("a@b.com", "email", OPTS)


# ── Replace / Remove ─────────────────────────────────────────────────

def test_replace_shapes():
    strategy = ReplaceStrategy(SyntheticGenerator(random.Random(1)))
    assert re.fullmatch(r"user\d{1,4}@example\.com", strategy.apply("x", "email", OPTS))
    assert re.fullmatch(r"\+1-\d{3}-\d{3}-\d{4}", strategy.apply("x", "phone", OPTS))
    assert re.fullmatch(r"\d{3}-\d{2}-\d{4}", strategy.apply("x", "ssn", OPTS))
    assert re.fullmatch(r"\d{4}-\d{4}-\d{4}-\d{4}", strategy.apply("x", "creditCard", OPTS))
    octets = strategy.apply("x", "ipv4", OPTS).split(".")
    assert len(octets) == 4
    assert all(1 <= int(o) <= 254 for o in octets)


def test_replace_placeholder_for_categories_without_generator():
    strategy = ReplaceStrategy()
    assert strategy.apply("https://x.org", "url", OPTS) == "[ANONYMIZED_URL]"
    assert strategy.apply("EMP-1", "employeeId", OPTS) == "[ANONYMIZED_EMPLOYEEID]"


def test_replace_is_reproducible_with_seed():
    first = ReplaceStrategy(SyntheticGenerator(random.Random(7)))
    second = ReplaceStrategy(SyntheticGenerator(random.Random(7)))
    values = [first.apply("x", name, OPTS) for name in ("email", "phone", "ssn")]
    assert values == [second.apply("x", name, OPTS) for name in ("email", "phone", "ssn")]


def test_remove():
    assert RemoveStrategy().apply("a@b.com", "email", OPTS) == ""


# ── Resolver ─────────────────────────────────────────────────────────

def test_default_strategy_applies():
    resolver = StrategyResolver()
    opts = AnonymizationOptions(default_strategy="remove")
    assert resolver.resolve(_match("email", "a@b.com"), opts) == ("", "remove")


def test_literal_override_wins():
    resolver = StrategyResolver()
    opts = AnonymizationOptions(
        default_strategy="hash",
        overrides={"email": PatternOverride(strategy="remove", replacement="[EMAIL]")},
    )
    assert resolver.resolve(_match("email", "a@b.com"), opts) == ("[EMAIL]", "literal")


def test_empty_literal_override_is_used_verbatim():
    opts = AnonymizationOptions(overrides={"email": PatternOverride(replacement="")})
    assert StrategyResolver().resolve(_match("email", "a@b.com"), opts) == ("", "literal")


def test_strategy_override_beats_default():
    opts = AnonymizationOptions(
        default_strategy="hash",
        overrides={"email": PatternOverride(strategy="remove")},
    )
    resolver = StrategyResolver()
    assert resolver.resolve(_match("email", "a@b.com"), opts) == ("", "remove")
    assert resolver.resolve(_match("phone", "ab"), opts) == ("P_c21", "hash")


def test_unknown_override_falls_through_to_default():
    opts = AnonymizationOptions(
        default_strategy="remove",
        overrides={"email": PatternOverride(strategy="scramble")},
    )
    assert StrategyResolver().resolve(_match("email", "a@b.com"), opts) == ("", "remove")


def test_unknown_default_falls_back_to_mask():
    opts = AnonymizationOptions(default_strategy="scramble")
    assert StrategyResolver().resolve(_match("phone", "555-123-4567"), opts) == (
        "***-***-4567",
        "mask",
    )


def test_callable_override():
    def shout(original, pattern_name, options):
        return original.upper()

    opts = AnonymizationOptions(overrides={"hashtag": PatternOverride(strategy=shout)})
    assert StrategyResolver().resolve(_match("hashtag", "#go"), opts) == ("#GO", "shout")


def test_failing_callable_falls_back_to_mask(caplog):
    def broken(original, pattern_name, options):
        raise RuntimeError("boom")

    opts = AnonymizationOptions(
        default_strategy="hash", overrides={"phone": PatternOverride(strategy=broken)}
    )
    with caplog.at_level(logging.WARNING, logger="anonymization.logic.strategies"):
        result = StrategyResolver().resolve(_match("phone", "555-123-4567"), opts)
    assert result == ("***-***-4567", "mask")
    assert any(r.getMessage().startswith("Strategy failed") for r in caplog.records)


def test_non_string_result_falls_back_to_mask():
    opts = AnonymizationOptions(default_strategy=lambda original, name, options: 42)
    assert StrategyResolver().resolve(_match("ssn", "123-45-6789"), opts) == (
        "***-**-6789",
        "mask",
    )


def test_keyed_hash_without_key_falls_back_to_mask():
    opts = AnonymizationOptions(default_strategy="keyed_hash")
    assert StrategyResolver().resolve(_match("ssn", "123-45-6789"), opts)[1] == "mask"
    keyed = StrategyResolver(hash_key="k").resolve(_match("ssn", "123-45-6789"), opts)
    assert keyed[1] == "keyed_hash"


def test_registered_custom_strategy():
    class Tag(RemoveStrategy):
        name = "tag"

        def apply(self, original, pattern_name, options):
            return f"<{pattern_name}>"

    resolver = StrategyResolver()
    resolver.register(Tag())
    opts = AnonymizationOptions(default_strategy="tag")
    assert resolver.resolve(_match("email", "a@b.com"), opts) == ("<email>", "tag")
