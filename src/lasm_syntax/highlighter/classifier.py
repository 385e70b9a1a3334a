"""
LASM Lexeme Classifier
======================

This module assigns every lexeme exactly one semantic category. It looks at
the lexeme itself plus the tokens already classified on the same line; label
references and directive operands are refined by later stages.

Classification Rules
--------------------
Rules are tried in order; the first match wins.

| Lexeme                          | Category          |
|---------------------------------|-------------------|
| ; comment                       | COMMENT           |
| ,                               | PUNCTUATION       |
| "string"                        | STRING_LITERAL    |
| unterminated "string            | INVALID           |
| #str, #d8, #d16, #d32           | DIRECTIVE_KEYWORD |
| # anything else                 | INVALID           |
| .name (first token on the line) | LABEL_DECLARATION |
| .name elsewhere                 | INVALID           |
| 42, -7, 0xFF, 0b1010, 0o17      | INTEGER_LITERAL   |
| cpy, add, jp, ...               | MNEMONIC          |
| a0, avr, pc, ...                | REGISTER          |
| other bare words                | IDENTIFIER        |
| anything else                   | INVALID           |

Number Formats
--------------
| Format      | Prefix | Example    | Value |
|-------------|--------|------------|-------|
| Decimal     | (none) | 123, -5    | 123   |
| Hexadecimal | 0x     | 0x7F       | 127   |
| Binary      | 0b     | 0b1010     | 10    |
| Octal       | 0o     | 0o177      | 127   |

An optional '+' or '-' sign may precede any format, and '_' may separate
digits (0xFFFF_0000).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional, Sequence
import re

from lasm_syntax.errors import DiagnosticCode, DiagnosticCollector, SourceRange
from lasm_syntax.grammar import DEFAULT_GRAMMAR, DIRECTIVE_SIGIL, LABEL_SIGIL, Grammar
from lasm_syntax.highlighter.scanner import Lexeme, LexemeKind


# =============================================================================
# Token Categories
# =============================================================================

class TokenCategory(Enum):
    """Semantic category of a token, as consumed by the presentation layer."""
    MNEMONIC = "mnemonic"
    REGISTER = "register"
    INTEGER_LITERAL = "integerLiteral"
    STRING_LITERAL = "stringLiteral"
    DIRECTIVE_KEYWORD = "directiveKeyword"
    LABEL_DECLARATION = "labelDeclaration"
    LABEL_REFERENCE = "labelReference"
    IDENTIFIER = "identifier"
    COMMENT = "comment"
    PUNCTUATION = "punctuation"
    INVALID = "invalid"


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A classified span of source text.

    Attributes:
        category: The TokenCategory
        text: Exact source text
        range: Span in the document
        metadata: Stage-specific details, e.g. "value" for integer literals,
            "name" for labels, "bit_width" for directives, "reason" for
            invalid tokens. Compared for equality but left out of the hash,
            so tokens can be used as set members and dict keys.
    """
    category: TokenCategory
    text: str
    range: SourceRange
    metadata: dict = field(default_factory=dict, hash=False)

    def __repr__(self) -> str:
        return f"Token({self.category.name}, {self.text!r}, {self.range.start})"

    @property
    def line(self) -> int:
        return self.range.start.line

    def to_dict(self) -> dict:
        data = {
            "category": self.category.value,
            "text": self.text,
            "range": self.range.to_dict(),
        }
        if self.metadata:
            data["metadata"] = {
                key: value.to_dict() if hasattr(value, "to_dict") else value
                for key, value in self.metadata.items()
            }
        return data


# =============================================================================
# Literal Parsing
# =============================================================================

INTEGER_PATTERN = re.compile(
    r"""^[+-]?(?:
        0[xX][0-9A-Fa-f][0-9A-Fa-f_]*   # hexadecimal
      | 0[bB][01][01_]*                 # binary
      | 0[oO][0-7][0-7_]*               # octal
      | [0-9][0-9_]*                    # decimal
    )$""",
    re.VERBOSE,
)

# Words that start like a number but fail INTEGER_PATTERN are malformed numbers
NUMERIC_START_PATTERN = re.compile(r"^[+-]?[0-9]")

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_RADIX_PREFIXES = {"x": 16, "b": 2, "o": 8}

# Escape sequences in strings
ESCAPE_SEQUENCES = {
    "n": "\n",      # Newline
    "r": "\r",      # Carriage return
    "t": "\t",      # Tab
    "\\": "\\",     # Backslash
    '"': '"',       # Double quote
    "'": "'",       # Single quote
    "0": "\0",      # Null
}


def parse_integer(text: str) -> Optional[int]:
    """
    Parse a LASM integer literal.

    Returns:
        The integer value, or None if text is not a valid literal
    """
    if not INTEGER_PATTERN.match(text):
        return None

    sign = 1
    if text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    digits = text.replace("_", "")
    base = 10
    if len(digits) > 1 and digits[0] == "0" and digits[1].lower() in _RADIX_PREFIXES:
        base = _RADIX_PREFIXES[digits[1].lower()]
        digits = digits[2:]

    return sign * int(digits, base)


def decode_string(text: str) -> str:
    """
    Decode a quoted string literal into its value.

    Supports escape sequences: \\n, \\r, \\t, \\\\, \\", \\', \\0, \\xNN.
    Unknown escapes are kept as the escaped character.
    """
    body = text[1:-1] if len(text) >= 2 and text.endswith('"') else text[1:]
    chars = []
    i = 0
    while i < len(body):
        char = body[i]
        if char != "\\" or i + 1 >= len(body):
            chars.append(char)
            i += 1
            continue

        escaped = body[i + 1]
        i += 2
        if escaped in ESCAPE_SEQUENCES:
            chars.append(ESCAPE_SEQUENCES[escaped])
        elif escaped == "x":
            hex_digits = ""
            while len(hex_digits) < 2 and i < len(body) and body[i] in "0123456789abcdefABCDEF":
                hex_digits += body[i]
                i += 1
            chars.append(chr(int(hex_digits, 16)) if hex_digits else "x")
        else:
            chars.append(escaped)
    return "".join(chars)


def label_name(text: str) -> str:
    """Strip the label sigil and an optional trailing ':' from a declaration."""
    name = text[len(LABEL_SIGIL):]
    if name.endswith(":"):
        name = name[:-1]
    return name


# =============================================================================
# Classifier Implementation
# =============================================================================

class Classifier:
    """
    Assigns a TokenCategory to each lexeme.

    Usage:
        classifier = Classifier(grammar)
        tokens = list(classifier.classify_all(Scanner(source), collector))

    Attributes:
        grammar: Tables of mnemonics, registers and directives
        case_sensitive: Match mnemonics and registers exactly as written
    """

    def __init__(self, grammar: Grammar = DEFAULT_GRAMMAR, case_sensitive: bool = False):
        self.grammar = grammar
        self.case_sensitive = case_sensitive

    def classify_all(
        self,
        lexemes: Iterable[Lexeme],
        collector: Optional[DiagnosticCollector] = None,
    ) -> Iterator[Token]:
        """
        Classify a lexeme stream, tracking per-line context.

        Each INVALID token also adds a MalformedLexeme diagnostic to
        collector (when one is given).

        Yields:
            One Token per lexeme, in order
        """
        line_tokens: list[Token] = []
        current_line = 0

        for lexeme in lexemes:
            if lexeme.line != current_line:
                current_line = lexeme.line
                line_tokens = []

            token = self.classify(lexeme, line_tokens)
            line_tokens.append(token)

            if token.category is TokenCategory.INVALID and collector is not None:
                collector.error(
                    DiagnosticCode.MALFORMED_LEXEME,
                    token.range,
                    token.metadata["reason"],
                    hint=token.metadata.get("hint"),
                )

            yield token

    def classify(self, lexeme: Lexeme, line_tokens: Sequence[Token] = ()) -> Token:
        """
        Classify one lexeme.

        Args:
            lexeme: The lexeme to classify
            line_tokens: Tokens already classified on the same line

        Returns:
            The classified Token
        """
        kind = lexeme.kind

        if kind is LexemeKind.COMMENT:
            return self._token(TokenCategory.COMMENT, lexeme)

        if kind is LexemeKind.PUNCTUATION:
            return self._token(TokenCategory.PUNCTUATION, lexeme)

        if kind is LexemeKind.STRING:
            return self._token(
                TokenCategory.STRING_LITERAL, lexeme, value=decode_string(lexeme.text)
            )

        if kind is LexemeKind.INVALID:
            return self._invalid(lexeme, lexeme.error or "malformed lexeme")

        return self._classify_word(lexeme, line_tokens)

    def _classify_word(self, lexeme: Lexeme, line_tokens: Sequence[Token]) -> Token:
        text = lexeme.text

        # Directive keyword
        if text.startswith(DIRECTIVE_SIGIL):
            name = text[len(DIRECTIVE_SIGIL):]
            directive = self.grammar.get_directive(name)
            if directive is None:
                known = ", ".join(f"#{d}" for d in self.grammar.directives)
                return self._invalid(
                    lexeme, f"unknown directive '{text}'", hint=f"expected one of {known}"
                )
            return self._token(TokenCategory.DIRECTIVE_KEYWORD, lexeme, directive=name)

        # Label declaration
        if text.startswith(LABEL_SIGIL):
            name = label_name(text)
            if line_tokens:
                return self._invalid(
                    lexeme,
                    f"label declaration '{text}' must be the first token on its line",
                    hint=f"to jump to it, use 'jp {name}'" if name else None,
                )
            if not IDENTIFIER_PATTERN.match(name):
                return self._invalid(lexeme, f"invalid label name '{text}'")
            return self._token(TokenCategory.LABEL_DECLARATION, lexeme, name=name)

        # Integer literal
        if NUMERIC_START_PATTERN.match(text):
            value = parse_integer(text)
            if value is None:
                return self._invalid(lexeme, f"malformed integer literal '{text}'")
            return self._token(TokenCategory.INTEGER_LITERAL, lexeme, value=value)

        # A jump operand is always a label name, even one spelled like a
        # mnemonic or register (".reset" ... "jp reset")
        if line_tokens and self._is_jump(line_tokens[-1]) and IDENTIFIER_PATTERN.match(text):
            return self._token(TokenCategory.IDENTIFIER, lexeme)

        if self.grammar.is_mnemonic(text, self.case_sensitive):
            return self._token(TokenCategory.MNEMONIC, lexeme)

        if self.grammar.is_register(text, self.case_sensitive):
            return self._token(TokenCategory.REGISTER, lexeme)

        if IDENTIFIER_PATTERN.match(text):
            return self._token(TokenCategory.IDENTIFIER, lexeme)

        return self._invalid(lexeme, f"unexpected characters '{text}'")

    def _is_jump(self, token: Token) -> bool:
        return (
            token.category is TokenCategory.MNEMONIC
            and self.grammar.is_jump(token.text, self.case_sensitive)
        )

    # =========================================================================
    # Token Creation
    # =========================================================================

    @staticmethod
    def _token(category: TokenCategory, lexeme: Lexeme, **metadata) -> Token:
        return Token(category, lexeme.text, lexeme.range, metadata)

    @staticmethod
    def _invalid(lexeme: Lexeme, reason: str, hint: Optional[str] = None) -> Token:
        metadata = {"reason": reason}
        if hint:
            metadata["hint"] = hint
        return Token(TokenCategory.INVALID, lexeme.text, lexeme.range, metadata)
