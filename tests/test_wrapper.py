"""Tests for the greedy line wrapper."""

from __future__ import annotations

import pytest

from smartwrap.formatting.whitespace import HARD_BREAK_BACKSLASH, HARD_BREAK_SPACES, PROTECTED_SPACE
from smartwrap.formatting.wrapper import HardBreak, Word, starts_block, tokenize, wrap

LOREM = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua. Ut enim ad minim veniam, quis nostrud "
    "exercitation ullamco laboris nisi ut aliquip ex ea commodo consequat."
)


def test_tokenize_splits_on_space_runs_and_tags_breaks():
    tokens = tokenize(f"  a   b {HARD_BREAK_SPACES} c {HARD_BREAK_BACKSLASH}")

    assert tokens == (Word("a"), Word("b"), HardBreak(backslash=False), Word("c"), HardBreak(backslash=True))


def test_wrap_indents_continuation_lines_only():
    assert wrap("aa bb cc dd", 10, 2) == "aa bb cc\n  dd"


def test_wrap_collapses_irregular_spacing():
    assert wrap("This   text has irregular   spacing.", 80, 0) == "This text has irregular spacing."


def test_wrap_never_splits_long_words():
    long_word = "x" * 15

    assert wrap(f"a {long_word} b", 10, 0) == f"a\n{long_word}\nb"


def test_wrap_reemits_hard_break_spellings():
    text = f"one {HARD_BREAK_BACKSLASH} two {HARD_BREAK_SPACES} three"

    assert wrap(text, 80, 0) == "one\\\ntwo  \nthree"


def test_wrap_indents_lines_after_a_hard_break():
    assert wrap(f"aa {HARD_BREAK_SPACES} bb cc", 80, 2) == "aa  \n  bb cc"


def test_consecutive_hard_breaks_add_no_blank_line():
    text = f"a {HARD_BREAK_BACKSLASH} {HARD_BREAK_BACKSLASH} b"

    assert wrap(text, 80, 0) == "a\\\n\\\nb"


def test_wrap_restores_protected_whitespace():
    assert wrap(f"see [a{PROTECTED_SPACE}link](u)", 80, 0) == "see [a link](u)"


@pytest.mark.parametrize("width", [10, 20, 33, 80])
def test_wrap_respects_width(width: int):
    for line in wrap(LOREM, width, 0).split("\n"):
        assert len(line) <= width or " " not in line


@pytest.mark.parametrize("width", [12, 30])
def test_wrapped_output_is_a_fixed_point(width: int):
    once = wrap(LOREM, width, 3)

    assert wrap(once.replace("\n", " "), width, 3) == once


def test_block_starter_pulls_previous_word_down():
    result = wrap("aaaa bbbb - cccc", 10, 0)

    assert result == "aaaa\nbbbb -\ncccc"
    assert not any(line.startswith("-") for line in result.split("\n"))


def test_block_starter_stays_when_nothing_can_move():
    assert wrap("aaaaaaaaa #", 10, 0) == "aaaaaaaaa #"


@pytest.mark.parametrize("rule", ["***", "___", "---", "* * *"])
def test_thematic_breaks_never_start_a_wrapped_line(rule: str):
    assert wrap(f"aaaa {rule}", 5, 0) == f"aaaa {rule}"
    assert wrap(f"aaaa bb {rule}", 5, 0) == f"aaaa\nbb {rule}"


@pytest.mark.parametrize(
    "word",
    ["-", "+", "*", "***", "___", "_", "#", "######", "1.", "12)", "==", "---", ">quote", "```py", "~~~", "<div>"],
)
def test_starts_block_recognizes_block_openers(word: str):
    assert starts_block(word)


@pytest.mark.parametrize("word", ["word", "#######", "1.5", "-foo", "*emphasis*", "a>b"])
def test_starts_block_ignores_ordinary_words(word: str):
    assert not starts_block(word)
