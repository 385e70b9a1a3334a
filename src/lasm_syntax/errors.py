"""
LASM Syntax Error Hierarchy and Diagnostics
===========================================

This module defines the exception hierarchy for the LASM syntax toolkit and
the diagnostic records produced while highlighting a document.

Two distinct failure channels exist:

1. **Exceptions** are raised for caller mistakes that live outside the
   document text: an unreadable grammar file or an invalid configuration
   value. They all inherit from LasmError.

2. **Diagnostics** describe likely authoring mistakes in the document itself.
   They never abort the pipeline; the highlighter always returns a complete
   token sequence alongside whatever diagnostics it found.

Exception Hierarchy
-------------------
LasmError (base)
├── GrammarError - grammar file unreadable or malformed
└── ConfigurationError - invalid configuration value

Diagnostic Codes
----------------
- MalformedLexeme - unterminated string, stray sigil, malformed number
- DuplicateLabel - label declared more than once
- UnresolvedLabelReference - jump to an undeclared label
- DirectiveOperandMissing - directive without an operand
- DirectiveOperandKindMismatch - operand of the wrong literal kind
- DirectiveOperandOutOfRange - integer does not fit the directive width
- DirectiveOperandUnexpected - surplus operands after a directive

Diagnostic messages follow this format when rendered:
    filename:line:column: error: description
    source_line_text
        ^^^^^ (underline of the offending range)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import re


# =============================================================================
# Base Exception Class
# =============================================================================

class LasmError(Exception):
    """
    Base exception for all LASM syntax toolkit errors.

    Callers can catch every toolkit error with a single except clause:

        try:
            grammar = load_grammar("custom.json")
        except LasmError as e:
            print(f"Error: {e}")
    """

    def __init__(self, message: str, hint: Optional[str] = None):
        self.message = message
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.hint:
            return f"{self.message}\nhint: {self.hint}"
        return self.message


class GrammarError(LasmError):
    """
    A grammar definition could not be loaded.

    Raised when:
    - The grammar file does not exist or cannot be read
    - The file is not valid JSON
    - An entry is not a valid mnemonic or register name
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message, hint=hint)


class ConfigurationError(LasmError):
    """
    A configuration value is invalid.

    Raised by HighlighterConfig.validate() and HighlighterConfig.from_env()
    when a setting is out of range or cannot be parsed.
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True, order=True)
class SourcePosition:
    """
    A position in a document.

    Attributes:
        line: Line number (1-indexed)
        column: Column number (1-indexed, in characters)
        offset: Character offset from the start of the document (0-indexed)
    """
    line: int
    column: int
    offset: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True, order=True)
class SourceRange:
    """
    A half-open span of a document: start is inclusive, end is exclusive.
    """
    start: SourcePosition
    end: SourcePosition

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"

    @property
    def length(self) -> int:
        """Number of characters covered by the range."""
        return self.end.offset - self.start.offset

    def overlaps(self, other: "SourceRange") -> bool:
        """Return True if the two ranges share at least one character."""
        return (
            self.start.offset < other.end.offset
            and other.start.offset < self.end.offset
        )

    def to_dict(self) -> dict:
        return {
            "start": {
                "line": self.start.line,
                "column": self.start.column,
                "offset": self.start.offset,
            },
            "end": {
                "line": self.end.line,
                "column": self.end.column,
                "offset": self.end.offset,
            },
        }


# =============================================================================
# Diagnostics
# =============================================================================

class Severity(Enum):
    """How seriously a consumer should present a diagnostic."""
    ERROR = "error"
    WARNING = "warning"


class DiagnosticCode(Enum):
    """Classification of every diagnostic the highlighter can emit."""
    MALFORMED_LEXEME = "MalformedLexeme"
    DUPLICATE_LABEL = "DuplicateLabel"
    UNRESOLVED_LABEL_REFERENCE = "UnresolvedLabelReference"
    DIRECTIVE_OPERAND_MISSING = "DirectiveOperandMissing"
    DIRECTIVE_OPERAND_KIND_MISMATCH = "DirectiveOperandKindMismatch"
    DIRECTIVE_OPERAND_OUT_OF_RANGE = "DirectiveOperandOutOfRange"
    DIRECTIVE_OPERAND_UNEXPECTED = "DirectiveOperandUnexpected"


@dataclass(frozen=True)
class Diagnostic:
    """
    A non-fatal annotation attached to a span of the document.

    Attributes:
        code: The DiagnosticCode classifying the problem
        range: The span the diagnostic applies to
        message: Human-readable description
        severity: Severity.ERROR or Severity.WARNING
        hint: A suggestion for fixing the problem (optional)
    """
    code: DiagnosticCode
    range: SourceRange
    message: str
    severity: Severity = Severity.ERROR
    hint: Optional[str] = None

    def sort_key(self) -> tuple:
        """Key giving a deterministic presentation order."""
        return (
            self.range.start.offset,
            self.range.end.offset,
            self.code.value,
            self.message,
        )

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> dict:
        data = {
            "code": self.code.value,
            "severity": self.severity.value,
            "message": self.message,
            "range": self.range.to_dict(),
        }
        if self.hint:
            data["hint"] = self.hint
        return data


# =============================================================================
# Diagnostic Collection
# =============================================================================

class DiagnosticCollector:
    """
    Collects diagnostics while a document is highlighted.

    Each pipeline stage adds to the same collector so that the emitter can
    order and deliver everything together. Unlike an error collector for a
    batch compiler, this one never raises: editor tooling must keep going
    no matter how broken the text is.

    Example:
        collector = DiagnosticCollector()
        collector.error(DiagnosticCode.DUPLICATE_LABEL, token.range,
                        "duplicate label 'loop'")
        if collector.has_errors():
            ...
    """

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic to the collection."""
        self.diagnostics.append(diagnostic)

    def report(
        self,
        code: DiagnosticCode,
        range: SourceRange,
        message: str,
        severity: Severity = Severity.ERROR,
        hint: Optional[str] = None,
    ) -> Diagnostic:
        """Record a diagnostic with an explicit severity and return it."""
        diagnostic = Diagnostic(code, range, message, severity, hint)
        self.add(diagnostic)
        return diagnostic

    def error(
        self,
        code: DiagnosticCode,
        range: SourceRange,
        message: str,
        hint: Optional[str] = None,
    ) -> Diagnostic:
        """Record an error-severity diagnostic and return it."""
        diagnostic = Diagnostic(code, range, message, Severity.ERROR, hint)
        self.add(diagnostic)
        return diagnostic

    def warning(
        self,
        code: DiagnosticCode,
        range: SourceRange,
        message: str,
        hint: Optional[str] = None,
    ) -> Diagnostic:
        """Record a warning-severity diagnostic and return it."""
        diagnostic = Diagnostic(code, range, message, Severity.WARNING, hint)
        self.add(diagnostic)
        return diagnostic

    def has_errors(self) -> bool:
        """Return True if any error-severity diagnostic was collected."""
        return any(d.is_error for d in self.diagnostics)

    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.is_error)

    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if not d.is_error)

    def sorted(self) -> list[Diagnostic]:
        """Return the diagnostics ordered by range start."""
        return sorted(self.diagnostics, key=Diagnostic.sort_key)

    def clear(self) -> None:
        self.diagnostics.clear()

    def __len__(self) -> int:
        return len(self.diagnostics)


# =============================================================================
# Diagnostic Rendering
# =============================================================================

# Same line breaks the scanner counts; str.splitlines() also splits on
# form feeds, vertical tabs and Unicode separators
LINE_BREAK_PATTERN = re.compile(r"\r\n|\r|\n")


def format_diagnostic(
    diagnostic: Diagnostic,
    source: Optional[str] = None,
    filename: str = "<input>",
) -> str:
    """
    Format a diagnostic with location, source context, and hint.

    Example output:
        demo.lasm:4:8: error: reference to undeclared label 'lop'
            jp lop
               ^^^
        hint: did you mean 'loop'?

    Args:
        diagnostic: The diagnostic to render
        source: Full document text, used to show the offending line
        filename: Name printed in the location prefix

    Returns:
        The formatted multi-line message
    """
    start = diagnostic.range.start
    end = diagnostic.range.end
    parts = [
        f"{filename}:{start}: {diagnostic.severity.value}: {diagnostic.message}"
    ]

    # Source context with caret underline
    if source is not None:
        lines = LINE_BREAK_PATTERN.split(source)
        if 0 < start.line <= len(lines):
            source_line = lines[start.line - 1]
            parts.append(f"    {source_line}")
            if end.line == start.line:
                width = max(1, end.column - start.column)
            else:
                width = max(1, len(source_line) - start.column + 1)
            padding = " " * (4 + start.column - 1)
            parts.append(f"{padding}{'^' * width}")

    if diagnostic.hint:
        parts.append(f"hint: {diagnostic.hint}")

    return "\n".join(parts)


def format_report(
    diagnostics: list[Diagnostic],
    source: Optional[str] = None,
    filename: str = "<input>",
) -> str:
    """
    Format a batch of diagnostics followed by a summary line.

    Returns:
        Formatted string with every diagnostic and an error/warning count
    """
    lines = []

    for diagnostic in diagnostics:
        lines.append(format_diagnostic(diagnostic, source, filename))
        lines.append("")  # Blank line between diagnostics

    errors = sum(1 for d in diagnostics if d.is_error)
    warnings = len(diagnostics) - errors
    error_word = "error" if errors == 1 else "errors"
    warning_word = "warning" if warnings == 1 else "warnings"
    lines.append(f"{filename}: {errors} {error_word}, {warnings} {warning_word}")

    return "\n".join(lines)
