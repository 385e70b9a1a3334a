# =============================================================================
# test_scanner.py - Scanner Unit Tests
# =============================================================================
# Tests for the LASM source scanner.
#
# Test coverage includes:
#   - Word, string, comment and punctuation lexemes
#   - Source positions (line, column, offset) across line endings
#   - Unterminated strings and escaped quotes
#   - Laziness and restartability
# =============================================================================

import pytest
from lasm_syntax.errors import SourcePosition
from lasm_syntax.highlighter.scanner import Scanner, Lexeme, LexemeKind


# =============================================================================
# Helper Functions
# =============================================================================

def scan(source: str, comment_sigil: str = ";") -> list[Lexeme]:
    """Scan source and return all lexemes as a list."""
    return list(Scanner(source, comment_sigil))


def kinds(source: str) -> list[LexemeKind]:
    return [lexeme.kind for lexeme in scan(source)]


def texts(source: str) -> list[str]:
    return [lexeme.text for lexeme in scan(source)]


# =============================================================================
# Basic Lexeme Recognition Tests
# =============================================================================

class TestBasicLexemes:
    """Test lexeme recognition for simple inputs."""

    def test_empty_source(self):
        """Empty source produces no lexemes."""
        assert scan("") == []

    def test_whitespace_only(self):
        """Whitespace and line breaks are never emitted."""
        assert scan("  \t \n\r\n   ") == []

    def test_single_word(self):
        lexemes = scan("halt")
        assert len(lexemes) == 1
        assert lexemes[0].kind == LexemeKind.WORD
        assert lexemes[0].text == "halt"

    def test_instruction_with_operands(self):
        """Commas are separate punctuation lexemes."""
        assert texts("cpy a0, 0x10") == ["cpy", "a0", ",", "0x10"]
        assert kinds("cpy a0, 0x10") == [
            LexemeKind.WORD,
            LexemeKind.WORD,
            LexemeKind.PUNCTUATION,
            LexemeKind.WORD,
        ]

    def test_comma_without_spaces(self):
        assert texts("add a0,a1") == ["add", "a0", ",", "a1"]

    def test_sigils_stay_in_words(self):
        """Directive and label sigils are part of the word."""
        assert texts(".loop") == [".loop"]
        assert texts("#d8 12") == ["#d8", "12"]

    def test_stray_characters_form_words(self):
        """Unusual characters are grouped into words for the classifier."""
        assert texts("@@ a0") == ["@@", "a0"]


# =============================================================================
# Comment Tests
# =============================================================================

class TestComments:
    """Test comment scanning."""

    def test_full_line_comment(self):
        lexemes = scan("; just a comment")
        assert len(lexemes) == 1
        assert lexemes[0].kind == LexemeKind.COMMENT
        assert lexemes[0].text == "; just a comment"

    def test_trailing_comment(self):
        assert texts("halt ; stop here") == ["halt", "; stop here"]

    def test_comment_ends_at_line_break(self):
        """A comment does not swallow the next line."""
        assert texts("; note\nhalt") == ["; note", "halt"]

    def test_comment_directly_after_word(self):
        assert texts("halt;done") == ["halt", ";done"]

    def test_quote_inside_comment(self):
        """Quotes inside a comment do not start a string."""
        lexemes = scan('; say "hi')
        assert [l.kind for l in lexemes] == [LexemeKind.COMMENT]

    def test_custom_comment_sigil(self):
        lexemes = scan("halt // stop", comment_sigil="/")
        assert [l.text for l in lexemes] == ["halt", "// stop"]
        assert lexemes[1].kind == LexemeKind.COMMENT

    def test_comment_excludes_carriage_return(self):
        lexemes = scan("; note\r\nhalt")
        assert lexemes[0].text == "; note"


# =============================================================================
# String Literal Tests
# =============================================================================

class TestStrings:
    """Test string literal scanning."""

    def test_simple_string(self):
        lexemes = scan('"Hello"')
        assert len(lexemes) == 1
        assert lexemes[0].kind == LexemeKind.STRING
        assert lexemes[0].text == '"Hello"'

    def test_string_with_spaces(self):
        """Whitespace inside a string does not split it."""
        assert texts('#str "Hello World"') == ["#str", '"Hello World"']

    def test_string_with_comment_sigil(self):
        """The comment sigil inside a string is literal text."""
        lexemes = scan('"a;b" ; c')
        assert lexemes[0].kind == LexemeKind.STRING
        assert lexemes[0].text == '"a;b"'
        assert lexemes[1].kind == LexemeKind.COMMENT

    def test_empty_string(self):
        assert texts('""') == ['""']

    def test_escaped_quote(self):
        """An escaped quote does not terminate the string."""
        lexemes = scan(r'"say \"hi\"" halt')
        assert lexemes[0].kind == LexemeKind.STRING
        assert lexemes[0].text == r'"say \"hi\""'
        assert lexemes[1].text == "halt"

    def test_escaped_backslash_before_quote(self):
        """A backslash escaping a backslash leaves the quote free to close."""
        lexemes = scan(r'"a\\" halt')
        assert lexemes[0].kind == LexemeKind.STRING
        assert lexemes[0].text == r'"a\\"'

    def test_unterminated_string(self):
        """An unterminated string becomes INVALID up to end of line."""
        lexemes = scan('#str "oops ; not a comment\nhalt')
        assert [l.kind for l in lexemes] == [
            LexemeKind.WORD,
            LexemeKind.INVALID,
            LexemeKind.WORD,
        ]
        assert lexemes[1].text == '"oops ; not a comment'
        assert lexemes[1].error == "unterminated string literal"
        assert lexemes[2].text == "halt"

    def test_unterminated_string_at_end_of_input(self):
        lexemes = scan('"abc')
        assert lexemes[0].kind == LexemeKind.INVALID
        assert lexemes[0].text == '"abc'

    def test_trailing_backslash_does_not_escape_line_break(self):
        lexemes = scan('"abc\\\nhalt')
        assert lexemes[0].kind == LexemeKind.INVALID
        assert lexemes[0].text == '"abc\\'
        assert lexemes[1].text == "halt"

    def test_string_directly_after_word(self):
        assert kinds('ab"c"') == [LexemeKind.WORD, LexemeKind.STRING]


# =============================================================================
# Position Tracking Tests
# =============================================================================

class TestPositions:
    """Test line, column and offset tracking."""

    def test_columns_on_first_line(self):
        lexemes = scan("cpy a0, 0x10")
        columns = [l.range.start.column for l in lexemes]
        assert columns == [1, 5, 7, 9]

    def test_range_end_is_exclusive(self):
        lexeme = scan("  halt")[0]
        assert lexeme.range.start.offset == 2
        assert lexeme.range.end.offset == 6
        assert lexeme.range.end.column == 7
        assert lexeme.range.length == 4

    def test_line_numbers(self):
        lexemes = scan("halt\n  push a0\n\ncall a1")
        lines = [(l.text, l.range.start.line, l.range.start.column) for l in lexemes]
        assert lines == [
            ("halt", 1, 1),
            ("push", 2, 3),
            ("a0", 2, 8),
            ("call", 4, 1),
            ("a1", 4, 6),
        ]

    def test_crlf_line_endings(self):
        """CRLF counts as a single line break."""
        lexemes = scan("halt\r\npush a0")
        assert lexemes[1].range.start.line == 2
        assert lexemes[1].range.start.column == 1
        assert lexemes[1].range.start.offset == 6

    def test_lone_carriage_return(self):
        lexemes = scan("halt\rpush")
        assert lexemes[1].range.start.line == 2

    def test_offsets_index_source(self):
        """Every lexeme's offsets slice back to its exact text."""
        source = 'cpy a0, 1 ; x\n#str "a b"\n.end:\n'
        for lexeme in scan(source):
            start, end = lexeme.range.start.offset, lexeme.range.end.offset
            assert source[start:end] == lexeme.text


# =============================================================================
# Iteration Behaviour Tests
# =============================================================================

class TestIteration:
    """Test that scanning is lazy and restartable."""

    def test_scan_is_lazy(self):
        scanner = Scanner("halt\nhalt\nhalt")
        iterator = iter(scanner)
        first = next(iterator)
        assert first.text == "halt"
        assert first.range.start.line == 1

    def test_restartable(self):
        """Iterating twice yields the same lexemes."""
        scanner = Scanner("cpy a0, 1 ; c\n.loop")
        assert list(scanner) == list(scanner)

    def test_restart_after_partial_iteration(self):
        scanner = Scanner("a b c")
        partial = scanner.scan()
        next(partial)
        assert [l.text for l in scanner] == ["a", "b", "c"]

    def test_interleaved_iterators_are_independent(self):
        """A second pass over the scanner does not disturb the first."""
        scanner = Scanner("cpy a0, 1 ; c\n.loop")
        first = iter(scanner)
        head = next(first)
        second = list(iter(scanner))
        rest = list(first)
        assert [head] + rest == second
        assert len(rest) == 5

    def test_positions_survive_interleaving(self):
        scanner = Scanner("halt\npush a0")
        first = iter(scanner)
        second = iter(scanner)
        next(first)
        next(second)
        next(second)
        assert next(first).range.start == SourcePosition(2, 1, 5)
        assert next(second).range.start == SourcePosition(2, 6, 10)

    @pytest.mark.parametrize("source", [
        '"', "\\", ",,,", '"\\', ";", "\r", "#", ".", '"a\\"',
    ])
    def test_never_raises(self, source):
        """Odd input always scans without an exception."""
        lexemes = scan(source)
        assert all(isinstance(l, Lexeme) for l in lexemes)
