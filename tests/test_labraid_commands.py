from __future__ import annotations

import pytest

from labraid.engine.commands import MOVES, SYNONYMS, Verb, parse_command, resolve_verb


@pytest.mark.parametrize(
    "text, verb",
    [
        ("north", Verb.NORTH),
        ("UP", Verb.NORTH),
        ("w", Verb.NORTH),
        ("west", Verb.WEST),
        ("a", Verb.WEST),
        ("d", Verb.EAST),
        ("down", Verb.SOUTH),
        ("space", Verb.ATTACK),
        ("k", Verb.ATTACK),
        ("auto", Verb.FIGHT),
        ("drink", Verb.CONSUME),
        ("discard", Verb.DROP),
        ("save", Verb.SECURE),
        ("retrieve", Verb.UNSECURE),
        ("use", Verb.EQUIP),
        ("look", Verb.SCAN),
        ("me", Verb.STATUS),
        ("exit", Verb.EXTRACT),
        ("?", Verb.HELP),
        ("dance", Verb.UNKNOWN),
    ],
)
def test_synonyms_resolve(text, verb):
    assert parse_command(text).verb is verb


def test_first_listing_wins_for_shared_words():
    seen = {}
    for verb, words in SYNONYMS:
        for word in words:
            seen.setdefault(word, verb)
    for word, verb in seen.items():
        assert resolve_verb(word) is verb
    assert resolve_verb("w") is Verb.NORTH


def test_argument_keeps_remaining_words():
    cmd = parse_command("  EAT   Instant  Coffee ")
    assert cmd.verb is Verb.CONSUME
    assert cmd.word == "eat"
    assert cmd.arg == "Instant Coffee"
    assert cmd.raw == "EAT   Instant  Coffee"


def test_blank_input_is_ignored():
    assert parse_command("") is None
    assert parse_command("   ") is None


def test_move_deltas():
    assert parse_command("n").delta == (0, -1)
    assert parse_command("s").delta == (0, 1)
    assert parse_command("e").delta == (1, 0)
    assert parse_command("left").delta == (-1, 0)
    assert parse_command("scan").is_move is False
    assert set(MOVES) == {Verb.NORTH, Verb.SOUTH, Verb.EAST, Verb.WEST}
