"""Tests for the lexical macro scanner."""

from __future__ import annotations

import pytest

from elysium.index.models import Position, Span
from elysium.index.scanner import TokenKind, scan_calls, tokenize

HOOK_MACROS = frozenset({"HOOK", "HOOK_RUN"})


def _span(line: int, start: int, end: int) -> Span:
    return Span(Position(line, start), Position(line, end))


class TestTokenize:
    """Token stream tests."""

    def test_skips_whitespace_and_comments(self) -> None:
        """Only significant tokens are produced."""
        tokens = list(tokenize("int x = 1; // trailing\n/* block */ y"))
        assert [t.text for t in tokens] == ["int", "x", "=", "1", ";", "y"]

    def test_classifies_literals(self) -> None:
        """Strings and chars keep their quotes and kinds."""
        tokens = list(tokenize("f(\"a\\\"b\", 'c', 0x1F)"))
        kinds = [t.kind for t in tokens]
        assert TokenKind.STRING in kinds
        assert TokenKind.CHAR in kinds
        assert TokenKind.NUMBER in kinds
        assert tokens[2].text == '"a\\"b"'

    def test_drops_preprocessor_lines(self) -> None:
        """Directives with continuations are skipped entirely."""
        text = "#define X(a) \\\n    a + 1\nint y;\n"
        assert [t.text for t in tokenize(text)] == ["int", "y", ";"]

    def test_hash_mid_line_is_punctuation(self) -> None:
        """A # that is not first on its line is an ordinary token."""
        assert [t.text for t in tokenize("a # b")] == ["a", "#", "b"]


class TestScanCalls:
    """Call recognition tests."""

    def test_single_line_call(self) -> None:
        """A simple call yields spans for the call, name and argument."""
        # Given
        text = "HOOK(boot);\n"

        # When
        calls = list(scan_calls(text, HOOK_MACROS))

        # Then
        assert len(calls) == 1
        call = calls[0]
        assert call.macro == "HOOK"
        assert call.span == _span(0, 0, 10)
        assert call.name_span == _span(0, 0, 4)
        assert len(call.arguments) == 1
        arg = call.arguments[0]
        assert arg.text == "boot"
        assert arg.span == _span(0, 5, 9)
        assert arg.region == _span(0, 5, 9)

    def test_call_spanning_lines(self) -> None:
        """Arguments on separate lines keep their own positions."""
        # Given
        text = "HOOK_RUN(\n    alpha,\n    beta\n)"

        # When
        (call,) = scan_calls(text, HOOK_MACROS)

        # Then
        assert [a.text for a in call.arguments] == ["alpha", "beta"]
        assert call.arguments[0].span == _span(1, 4, 9)
        assert call.arguments[1].span == _span(2, 4, 8)
        assert call.span == Span(Position(0, 0), Position(3, 1))

    def test_ignores_comments_and_strings(self) -> None:
        """Macro names inside comments or literals are not calls."""
        text = '// HOOK(x)\n/* HOOK(y) */\nconst char *s = "HOOK(z)";\n'
        assert list(scan_calls(text, HOOK_MACROS)) == []

    def test_skips_macro_definitions(self) -> None:
        """#define lines are not invocations."""
        text = "#define HOOK(name) void name(void)\n#define HOOK_RUN(n) \\\n  run(n)\nHOOK(real)\n"
        calls = list(scan_calls(text, HOOK_MACROS))
        assert [c.arguments[0].text for c in calls] == ["real"]

    @pytest.mark.parametrize("text", ["MY_HOOK(x)", "HOOK_X(y)", "HOOK;", "HOOK_RUN"])
    def test_requires_exact_name_followed_by_paren(self, text: str) -> None:
        """Only whole identifiers followed by '(' count."""
        assert list(scan_calls(text, HOOK_MACROS)) == []

    def test_whitespace_between_name_and_paren(self) -> None:
        """Whitespace before the opening paren is allowed."""
        (call,) = scan_calls("HOOK (x)", HOOK_MACROS)
        assert call.arguments[0].text == "x"

    def test_nested_parens_and_braces_stay_in_one_argument(self) -> None:
        """Commas inside nested brackets do not split arguments."""
        text = 'INIT_TARGET(a, S, C, DEPS("x", "y"))\nINIT_TARGET(b, S, C, {"z", "w"})'
        calls = list(scan_calls(text, {"INIT_TARGET"}))
        assert [len(c.arguments) for c in calls] == [4, 4]
        strings = [t.text for t in calls[0].arguments[3].tokens if t.is_string]
        assert strings == ['"x"', '"y"']
        assert calls[0].arguments[3].text == 'DEPS ( "x" , "y" )'

    def test_unterminated_call_at_end_is_dropped(self) -> None:
        """An open call at end of input produces nothing."""
        assert list(scan_calls("HOOK(a, b", HOOK_MACROS)) == []

    def test_semicolon_abandons_half_typed_call(self) -> None:
        """Scanning recovers after a ';' that ends a half-typed call."""
        text = "HOOK_RUN(a;\nHOOK(b)\n"
        calls = list(scan_calls(text, HOOK_MACROS))
        assert [(c.macro, c.arguments[0].text) for c in calls] == [("HOOK", "b")]

    def test_complete_call_inside_abandoned_call_is_found(self) -> None:
        """A half-typed call does not hide the complete calls after its '('."""
        # Given
        text = "HOOK_RUN(\nHOOK(later);\nHOOK_RUN(later)\n"

        # When
        calls = list(scan_calls(text, HOOK_MACROS))

        # Then
        assert [(c.macro, c.arguments[0].text) for c in calls] == [
            ("HOOK", "later"),
            ("HOOK_RUN", "later"),
        ]
        assert calls[0].name_span == _span(1, 0, 4)

    def test_complete_call_inside_unterminated_call_is_found(self) -> None:
        """A call left open at end of input still yields the calls inside it."""
        calls = list(scan_calls("HOOK_RUN(a,\nHOOK(b)\n", HOOK_MACROS))
        assert [(c.macro, c.arguments[0].text) for c in calls] == [("HOOK", "b")]

    def test_digit_separator_is_part_of_number(self) -> None:
        """A C23 digit separator does not open a character literal."""
        # Given
        text = "x = 1'000; HOOK_RUN(a);\n"

        # When
        tokens = [t.text for t in tokenize(text)]
        calls = list(scan_calls(text, HOOK_MACROS))

        # Then
        assert tokens[2] == "1'000"
        assert [c.macro for c in calls] == ["HOOK_RUN"]

    def test_char_literal_still_recognised(self) -> None:
        tokens = list(tokenize("c = 'x'; HOOK(a)"))
        assert tokens[2].kind is TokenKind.CHAR
        assert tokens[2].text == "'x'"

    def test_stray_closer_abandons_call(self) -> None:
        """A mismatched closer abandons the call and scanning resumes."""
        text = "HOOK_RUN(a ]\nHOOK(b)"
        calls = list(scan_calls(text, HOOK_MACROS))
        assert [c.macro for c in calls] == ["HOOK"]

    def test_empty_argument_list(self) -> None:
        """HOOK_RUN() has one empty argument with a zero-width region."""
        (call,) = scan_calls("HOOK_RUN()", HOOK_MACROS)
        (arg,) = call.arguments
        assert arg.is_empty
        assert arg.text == ""
        assert arg.region == _span(0, 9, 9)
        assert arg.span == _span(0, 9, 9)

    def test_empty_middle_argument(self) -> None:
        """Empty slots between commas keep their index and region."""
        (call,) = scan_calls("HOOK_RUN(a, , b)", HOOK_MACROS)
        assert [a.index for a in call.arguments] == [0, 1, 2]
        assert call.arguments[1].is_empty
        assert call.arguments[1].region == _span(0, 11, 12)
        assert call.arguments[2].region == _span(0, 13, 15)
        assert call.arguments[2].span == _span(0, 14, 15)

    def test_columns_count_code_points(self) -> None:
        """Non-ASCII text before a call counts one column per character."""
        (call,) = scan_calls("/* é */ HOOK(a)", HOOK_MACROS)
        assert call.name_span == _span(0, 8, 12)

    def test_no_macros_yields_nothing(self) -> None:
        assert list(scan_calls("HOOK(a)", ())) == []

    @pytest.mark.parametrize(
        "text",
        [
            '"unterminated string HOOK(a)',
            "/* unterminated comment HOOK(a)",
            "HOOK(((((",
            ")))) HOOK )",
            "'",
            "\x00\x01HOOK(�)",
        ],
    )
    def test_malformed_input_never_raises(self, text: str) -> None:
        """The scanner is total over arbitrary text."""
        list(scan_calls(text, HOOK_MACROS))

    def test_scan_is_restartable(self) -> None:
        """Scanning the same text twice gives equal results."""
        text = "HOOK(a)\nHOOK_RUN(a, b)\n"
        assert list(scan_calls(text, HOOK_MACROS)) == list(scan_calls(text, HOOK_MACROS))
