"""
LASM Source Scanner
===================

This module splits LASM source text into raw lexemes. It performs no
classification beyond recognizing the few shapes that need special scanning
rules; deciding what a word means is the classifier's job.

Lexeme Kinds
------------
- WORD: Maximal run of non-whitespace, non-quote, non-comment characters
- STRING: Double-quoted string ("hello"), escapes like \\" kept in the text
- COMMENT: Comment sigil to end of line (; by default)
- PUNCTUATION: Operand separator (,)
- INVALID: Unterminated string literal, spanning to end of line

Whitespace and line breaks separate lexemes and are never emitted. The
scanner never raises: malformed input becomes INVALID lexemes so that the
rest of the document can still be highlighted while the user is typing.

Example
-------
>>> from lasm_syntax.highlighter.scanner import Scanner
>>> for lexeme in Scanner('cpy a0, 0x10 ; init'):
...     print(lexeme)
Lexeme(WORD, 'cpy', 1:1)
Lexeme(WORD, 'a0', 1:5)
Lexeme(PUNCTUATION, ',', 1:7)
Lexeme(WORD, '0x10', 1:9)
Lexeme(COMMENT, '; init', 1:14)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional

from lasm_syntax.errors import SourcePosition, SourceRange


# =============================================================================
# Lexeme Kinds
# =============================================================================

class LexemeKind(Enum):
    """Shape of a raw lexeme, as recognized by the scanner."""
    WORD = auto()         # Anything else, classified later
    STRING = auto()       # Terminated double-quoted string
    COMMENT = auto()      # Comment to end of line
    PUNCTUATION = auto()  # Operand separator
    INVALID = auto()      # Unterminated string


# =============================================================================
# Lexeme Data Class
# =============================================================================

@dataclass(frozen=True)
class Lexeme:
    """
    A raw token with its exact source text and position.

    Attributes:
        kind: The LexemeKind
        text: Exact source text covered by the lexeme
        range: Span of the lexeme in the document
        error: Why the lexeme is INVALID (None otherwise)
    """
    kind: LexemeKind
    text: str
    range: SourceRange
    error: Optional[str] = None

    def __repr__(self) -> str:
        return f"Lexeme({self.kind.name}, {self.text!r}, {self.range.start})"

    @property
    def line(self) -> int:
        return self.range.start.line


# =============================================================================
# Cursor
# =============================================================================

class _Cursor:
    """
    Read position within one scan of a source text.

    Each call to Scanner.scan() gets its own cursor, so several iterators
    over the same Scanner never disturb one another.
    """

    LINE_BREAKS = "\r\n"

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self, offset: int = 0) -> str:
        """
        Look at character at current position + offset without advancing.

        Returns empty string if past end of source.
        """
        pos = self.pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def at_line_break(self) -> bool:
        # Note: Must check for non-empty string first because '' in '\r\n' is True
        char = self.peek()
        return bool(char) and char in self.LINE_BREAKS

    def advance(self) -> str:
        """
        Consume and return the current character, advancing position.

        A lone CR, a lone LF and a CRLF pair each end exactly one line.
        """
        if self.at_end():
            return ""

        char = self.source[self.pos]
        self.pos += 1

        if char == "\n" or (char == "\r" and self.peek() != "\n"):
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        return char

    def position(self) -> SourcePosition:
        return SourcePosition(self.line, self.column, self.pos)


# =============================================================================
# Scanner Implementation
# =============================================================================

class Scanner:
    """
    Splits LASM source into lexemes.

    The scanner is lazy and restartable: iterating it (or calling scan())
    always starts from the beginning of the text, producing a fresh
    generator each time. Generators are independent and may be interleaved.

    Usage:
        scanner = Scanner(source_text)
        lexemes = list(scanner)

    Attributes:
        source: The document text being scanned
        comment_sigil: Character that starts a line comment
    """

    QUOTE = '"'
    ESCAPE = "\\"
    SEPARATORS = ","

    def __init__(self, source: str, comment_sigil: str = ";"):
        self.source = source
        self.comment_sigil = comment_sigil

    def __iter__(self) -> Iterator[Lexeme]:
        return self.scan()

    def scan(self) -> Iterator[Lexeme]:
        """
        Generate lexemes from the start of the source.

        Yields:
            Lexeme objects in document order
        """
        cursor = _Cursor(self.source)

        while not cursor.at_end():
            char = cursor.peek()

            if char.isspace():
                cursor.advance()
                continue

            if char == self.comment_sigil:
                yield self._scan_comment(cursor)
            elif char == self.QUOTE:
                yield self._scan_string(cursor)
            elif char in self.SEPARATORS:
                start = cursor.position()
                cursor.advance()
                yield self._make_lexeme(cursor, LexemeKind.PUNCTUATION, start)
            else:
                yield self._scan_word(cursor)

    def _make_lexeme(
        self,
        cursor: _Cursor,
        kind: LexemeKind,
        start: SourcePosition,
        error: Optional[str] = None,
    ) -> Lexeme:
        """Create a lexeme spanning from start to the cursor position."""
        return Lexeme(
            kind=kind,
            text=self.source[start.offset:cursor.pos],
            range=SourceRange(start, cursor.position()),
            error=error,
        )

    # =========================================================================
    # Lexeme Scanning
    # =========================================================================

    def _scan_comment(self, cursor: _Cursor) -> Lexeme:
        """Scan from the comment sigil to end of line."""
        start = cursor.position()
        while not cursor.at_end() and not cursor.at_line_break():
            cursor.advance()
        return self._make_lexeme(cursor, LexemeKind.COMMENT, start)

    def _scan_string(self, cursor: _Cursor) -> Lexeme:
        """
        Scan a double-quoted string literal.

        A backslash escapes the next character, so \\" does not end the
        string. Reaching end of line or end of input first produces an
        INVALID lexeme covering the rest of the line.
        """
        start = cursor.position()
        cursor.advance()  # consume opening "

        while not cursor.at_end() and not cursor.at_line_break():
            char = cursor.advance()

            if char == self.QUOTE:
                return self._make_lexeme(cursor, LexemeKind.STRING, start)

            if char == self.ESCAPE and not cursor.at_end() and not cursor.at_line_break():
                cursor.advance()  # escaped character

        return self._make_lexeme(
            cursor, LexemeKind.INVALID, start, error="unterminated string literal"
        )

    def _scan_word(self, cursor: _Cursor) -> Lexeme:
        """Scan a maximal run of ordinary characters."""
        start = cursor.position()
        while not cursor.at_end():
            char = cursor.peek()
            if (
                char.isspace()
                or char == self.QUOTE
                or char == self.comment_sigil
                or char in self.SEPARATORS
            ):
                break
            cursor.advance()
        return self._make_lexeme(cursor, LexemeKind.WORD, start)
