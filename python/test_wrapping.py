"""
Tests for the tree-independent parts of the reflow pass: word splitting,
column budgeting, line packing, text block indentation stripping, literal
decoding, the replacement map and the line helpers.

Run: python3 test_wrapping.py
From: python/
"""

import sys

sys.path.insert(0, '.')

from jreflow.diff import describe_changes
from jreflow.models import Replacement, Word
from jreflow.newlines import guess_line_separator, newline_length_at, split_lines
from jreflow.reflow.index import LineMap, needs_processing
from jreflow.reflow.replacements import ReplacementMap
from jreflow.reflow.words import escaped_newline_length, split_words
from jreflow.reflow.wrapping import ColumnBudget, pack_lines, reflow, total_length_at_most
from jreflow.utils.java import decode_escapes, strip_indent, text_block_value


def _texts(words):
    return [w.text for w in words]


# ---------------------------------------------------------------------------
# Newlines and line map
# ---------------------------------------------------------------------------

def test_guess_line_separator():
    assert guess_line_separator("a\r\nb\nc") == "\r\n"
    assert guess_line_separator("a\nb\r\n") == "\n"
    assert guess_line_separator("a\rb") == "\r"
    print("PASS: test_guess_line_separator")


def test_split_lines_matches_java_lines():
    assert split_lines("a\nb\n") == ["a", "b"]
    assert split_lines("a\r\n\r\nb") == ["a", "", "b"]
    assert split_lines("\n") == [""]
    assert split_lines("") == []
    # form feed is not a Java line terminator
    assert split_lines("a\x0cb") == ["a\x0cb"]
    assert newline_length_at("x\r\ny", 1) == 2
    assert newline_length_at("x\ny", 0) == 0
    assert newline_length_at("x", 5) == 0
    print("PASS: test_split_lines_matches_java_lines")


def test_line_map():
    text = "ab\ncde\r\nf"
    line_map = LineMap(text)
    assert line_map.line_count == 3
    assert line_map.line_number(0) == 1
    assert line_map.line_number(3) == 2
    assert line_map.column(5) == 2
    assert line_map.line_number(8) == 3
    assert line_map.line_start(3) == 8
    assert line_map.line_end(4) == 6
    assert line_map.line_end(8) == 9
    assert LineMap("ab\U0001F600cd").column(4) == 5
    assert len(Word("\U0001F600 x")) == 4
    print("PASS: test_line_map")


def test_needs_processing():
    assert not needs_processing("short\nlines\n", 10)
    assert needs_processing("short\n" + "x" * 11 + "\n", 10)
    # exactly at the limit is fine
    assert not needs_processing("x" * 10 + "\r\n", 10)
    assert needs_processing('String s = """\n  a\n  """;', 100)
    # columns are UTF-16 code units: three emoji take six
    assert needs_processing("\U0001F600" * 3, 5)
    assert not needs_processing("\u00e9" * 5, 5)
    print("PASS: test_needs_processing")


# ---------------------------------------------------------------------------
# Word splitting
# ---------------------------------------------------------------------------

def test_split_on_whitespace():
    assert _texts(split_words(["foo bar baz"])) == ["foo", " bar", " baz"]
    assert _texts(split_words([" x"])) == [" x"]
    print("PASS: test_split_on_whitespace")


def test_split_on_escaped_tab():
    assert _texts(split_words(["a\\tb"])) == ["a", "\\tb"]
    print("PASS: test_split_on_escaped_tab")


def test_escaped_newline_is_hard_break():
    words = split_words(["line one\\nline two"])
    assert words == [Word("line"), Word(" one\\n", True), Word("line"), Word(" two")], words
    print("PASS: test_escaped_newline_is_hard_break")


def test_escaped_newline_run_is_one_boundary():
    assert escaped_newline_length("\\r\\n", 0) == 4
    assert escaped_newline_length("\\n\\r", 0) == 2
    words = split_words(["a\\r\\n\\nb"])
    assert words == [Word("a\\r\\n\\n", True), Word("b")], words
    print("PASS: test_escaped_newline_run_is_one_boundary")


def test_escaped_backslash_is_not_a_boundary():
    # Java source a\\tb is a backslash followed by the letter t, not a tab.
    assert _texts(split_words(["a\\\\tb"])) == ["a\\\\tb"]
    assert _texts(split_words(["a\\\\nb c"])) == ["a\\\\nb", " c"]
    print("PASS: test_escaped_backslash_is_not_a_boundary")


def test_words_across_literals():
    # A tail joins the next literal's first word only if that literal has a boundary.
    assert _texts(split_words(["ab", "cd ef"])) == ["abcd", " ef"]
    assert _texts(split_words(["ab", "cd"])) == ["ab", "cd"]
    assert _texts(split_words(["ab cd", "ef"])) == ["ab", " cd", "ef"]
    assert _texts(split_words(["aaaaaaaaaa", "bbbbbbbbbb", "cccccccccc"])) == [
        "aaaaaaaaaa",
        "bbbbbbbbbb",
        "cccccccccc",
    ]
    print("PASS: test_words_across_literals")


# ---------------------------------------------------------------------------
# Column budget and packing
# ---------------------------------------------------------------------------

def test_budget_for_chain():
    budget = ColumnBudget.for_chain(column_limit=30, start_column=4, trailing=2, starts_chain=True)
    assert budget.width == 24
    budget.after_line()
    assert budget.width == 18
    budget.after_line()
    assert budget.width == 18, "continuation shrink happens at most once"

    budget = ColumnBudget.for_chain(column_limit=30, start_column=4, trailing=2, starts_chain=False)
    budget.after_line()
    assert budget.width == 24
    print("PASS: test_budget_for_chain")


def test_trailing_slack_reserved_before_every_line():
    budget = ColumnBudget(width=12, trailing=3)
    words = [Word("aaaa"), Word(" bbbb"), Word(" cc")]
    lines = pack_lines(words, budget)
    # Everything fits in 12, but not once `);`-style slack is reserved.
    assert lines == ["aaaa bbbb", " cc"], lines
    # reserved again before " cc", which fit the narrowed width
    assert budget.width == 6, budget.width
    print("PASS: test_trailing_slack_reserved_before_every_line")


def test_trailing_slack_can_split_last_line_again():
    words = [Word("aaaaa"), Word(" bbbbb"), Word(" ccccc"), Word(" ddddd")]
    out = reflow(words, column_limit=35, start_column=10, trailing=7, starts_chain=False, separator="\n")
    # 23 -> 16 fits "aaaaa bbbbb"; 16 -> 9 is too narrow for " ccccc ddddd"
    assert out == '"aaaaa bbbbb"\n        + " ccccc"\n        + " ddddd"', out
    print("PASS: test_trailing_slack_can_split_last_line_again")


def test_pack_greedy():
    lines = pack_lines([Word("aaaa"), Word(" bbbb"), Word(" cccc")], ColumnBudget(width=10))
    assert lines == ["aaaa bbbb", " cccc"], lines
    print("PASS: test_pack_greedy")


def test_pack_short_lines_keep_taking():
    words = [Word(c) for c in "abcdef"]
    lines = pack_lines(words, ColumnBudget(width=3))
    assert lines == ["abcde", "f"], lines
    print("PASS: test_pack_short_lines_keep_taking")


def test_pack_hard_break():
    lines = pack_lines([Word("ab\\n", True), Word("cd")], ColumnBudget(width=100))
    assert lines == ["ab\\n", "cd"], lines
    print("PASS: test_pack_hard_break")


def test_pack_negative_width_terminates():
    lines = pack_lines([Word("abcdef"), Word(" gh")], ColumnBudget(width=-5))
    assert lines == ["abcdef", " gh"], lines
    print("PASS: test_pack_negative_width_terminates")


def test_pack_long_word_gets_own_line():
    word = "x" * 50
    lines = pack_lines([Word("ab"), Word("cdefg"), Word(" " + word), Word(" end")], ColumnBudget(width=20))
    assert lines == ["abcdefg", " " + word, " end"], lines
    print("PASS: test_pack_long_word_gets_own_line")


def test_total_length_at_most():
    words = [Word("abc"), Word("de")]
    assert total_length_at_most(words, 5)
    assert not total_length_at_most(words, 4)
    assert total_length_at_most([], 0)
    print("PASS: test_total_length_at_most")


def test_reflow_join_mid_chain():
    words = [Word("aaaa"), Word(" bbbb"), Word(" cccc")]
    out = reflow(words, column_limit=20, start_column=8, trailing=0, starts_chain=False, separator="\n")
    assert out == '"aaaa bbbb"\n      + " cccc"', out
    print("PASS: test_reflow_join_mid_chain")


def test_reflow_join_chain_start():
    words = [Word("aaaa"), Word(" bbbb"), Word(" cccc")]
    out = reflow(words, column_limit=20, start_column=8, trailing=0, starts_chain=True, separator="\r\n")
    assert out == '"aaaa bbbb"\r\n            + " cccc"', out
    print("PASS: test_reflow_join_chain_start")


def test_reflow_single_line():
    out = reflow([Word("short")], column_limit=100, start_column=0, trailing=0, starts_chain=True, separator="\n")
    assert out == '"short"'
    print("PASS: test_reflow_single_line")


# ---------------------------------------------------------------------------
# Text blocks and literal values
# ---------------------------------------------------------------------------

def test_strip_indent():
    assert strip_indent("    a\n      b\n    ") == "a\n  b\n"
    # the closing line counts even when blank
    assert strip_indent("    a\n  ") == "  a\n"
    # trailing terminator opts out of stripping
    assert strip_indent("    a\n") == "    a\n"
    assert strip_indent("  a  \n\n  b") == "a\n\nb"
    assert strip_indent("") == ""
    print("PASS: test_strip_indent")


def test_decode_escapes():
    assert decode_escapes("a\\tb") == "a\tb"
    assert decode_escapes("\\\\n") == "\\n"
    assert decode_escapes("\\u0041\\101\\0") == "AA\0"
    assert decode_escapes('say \\"hi\\"') == 'say "hi"'
    assert decode_escapes("a\\\nb", text_block=True) == "ab"
    assert decode_escapes("a\\sb") == "a b"
    print("PASS: test_decode_escapes")


def test_text_block_value():
    literal = '"""\n        hello\n          world\n        """'
    assert text_block_value(literal) == "hello\n  world\n"
    continued = '"""\n      hello\n      world\\\n      """'
    assert text_block_value(continued) == "hello\nworld"
    print("PASS: test_text_block_value")


# ---------------------------------------------------------------------------
# Replacement map
# ---------------------------------------------------------------------------

def test_replacement_map_applies_descending():
    text = "0123456789"
    replacements = ReplacementMap()
    assert replacements.put(Replacement(2, 4, "AB-long"))
    assert replacements.put(Replacement(6, 7, ""))
    assert replacements.ranges() == [(2, 4), (6, 7)]
    assert replacements.apply(text) == "01AB-long45789"
    print("PASS: test_replacement_map_applies_descending")


def test_replacement_map_same_range_overwrites():
    replacements = ReplacementMap()
    replacements.put(Replacement(0, 3, "x"))
    replacements.put(Replacement(0, 3, "y"))
    assert len(replacements) == 1
    assert replacements.apply("abcdef") == "ydef"
    print("PASS: test_replacement_map_same_range_overwrites")


def test_replacement_map_rejects_partial_overlap():
    replacements = ReplacementMap()
    replacements.put(Replacement(0, 5, "x"))
    assert not replacements.put(Replacement(3, 8, "y"))
    assert replacements.put(Replacement(5, 8, "z"))
    assert replacements.apply("abcdefghij") == "xzij"
    assert not ReplacementMap()
    print("PASS: test_replacement_map_rejects_partial_overlap")


# ---------------------------------------------------------------------------
# Change description
# ---------------------------------------------------------------------------

def test_describe_changes():
    assert describe_changes("a\nb\n", "a\nb\n") == ""
    out = describe_changes("a\nb\nc\n", "a\nB\nc\n")
    assert "@@ line 2 @@" in out, out
    assert "-b" in out and "+B" in out, out
    print("PASS: test_describe_changes")


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

if __name__ == '__main__':
    tests = [
        test_guess_line_separator,
        test_split_lines_matches_java_lines,
        test_line_map,
        test_needs_processing,
        test_split_on_whitespace,
        test_split_on_escaped_tab,
        test_escaped_newline_is_hard_break,
        test_escaped_newline_run_is_one_boundary,
        test_escaped_backslash_is_not_a_boundary,
        test_words_across_literals,
        test_budget_for_chain,
        test_trailing_slack_reserved_before_every_line,
        test_trailing_slack_can_split_last_line_again,
        test_pack_greedy,
        test_pack_short_lines_keep_taking,
        test_pack_hard_break,
        test_pack_negative_width_terminates,
        test_pack_long_word_gets_own_line,
        test_total_length_at_most,
        test_reflow_join_mid_chain,
        test_reflow_join_chain_start,
        test_reflow_single_line,
        test_strip_indent,
        test_decode_escapes,
        test_text_block_value,
        test_replacement_map_applies_descending,
        test_replacement_map_same_range_overwrites,
        test_replacement_map_rejects_partial_overlap,
        test_describe_changes,
    ]

    passed = 0
    failed = 0
    for t in tests:
        try:
            t()
            passed += 1
        except Exception as e:
            print(f"FAIL: {t.__name__} — {e}")
            failed += 1

    print(f"\n{'=' * 50}")
    print(f"Results: {passed} passed, {failed} failed out of {len(tests)} tests")
    if failed > 0:
        sys.exit(1)
    else:
        print("All tests passed!")
