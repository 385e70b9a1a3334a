"""
LASM Token Stream Emitter
=========================

Final pipeline stage. It merges the classified, resolved and validated tokens
with the collected diagnostics into a TokenStream: the single result object
handed to the presentation layer.

Ordering Guarantees
-------------------
- Tokens are sorted by range start and never overlap. Together they cover
  every non-whitespace character of the document.
- Diagnostics are sorted by range start, then range end, code and message,
  so identical input always yields identical output.

Semantic Tokens
---------------
TokenStream.semantic_tokens() produces the delta-encoded integer array used
by the Language Server Protocol: five integers per token,

    deltaLine, deltaStartChar, length, tokenType, tokenModifiers

where tokenType indexes TokenStream.LEGEND and tokenModifiers is a bit set
over TokenStream.MODIFIERS. Lines and characters are 0-based there, unlike
SourcePosition.
"""

from dataclasses import dataclass, field
from typing import Any, Optional
import logging

from lasm_syntax.errors import Diagnostic, DiagnosticCollector, Severity
from lasm_syntax.highlighter.classifier import Token, TokenCategory
from lasm_syntax.highlighter.labels import LabelTable

logger = logging.getLogger(__name__)


# =============================================================================
# Token Stream
# =============================================================================

@dataclass(frozen=True)
class TokenStream:
    """
    Highlighting result for one document version.

    Attributes:
        version: Document version/identifier supplied by the caller
        tokens: Tokens in document order
        diagnostics: Diagnostics in presentation order
        labels: Label table built for the document
        dropped_diagnostics: Number of diagnostics cut by max_diagnostics
    """

    LEGEND = tuple(category.value for category in TokenCategory)
    MODIFIERS = ("declaration", "unresolved")

    version: Any
    tokens: tuple[Token, ...]
    diagnostics: tuple[Diagnostic, ...]
    labels: LabelTable = field(default_factory=LabelTable)
    dropped_diagnostics: int = 0

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)

    def tokens_of(self, category: TokenCategory) -> list[Token]:
        """Return every token of one category."""
        return [t for t in self.tokens if t.category is category]

    def token_at(self, offset: int) -> Optional[Token]:
        """Return the token covering a character offset, if any."""
        for token in self.tokens:
            if token.range.start.offset <= offset < token.range.end.offset:
                return token
            if token.range.start.offset > offset:
                break
        return None

    def semantic_tokens(self) -> list[int]:
        """
        Encode the tokens as an LSP semantic token array.

        Returns:
            Flat list of integers, five per token
        """
        data = []
        previous_line = 0
        previous_char = 0

        for token in self.tokens:
            line = token.range.start.line - 1
            char = token.range.start.column - 1
            delta_line = line - previous_line
            delta_char = char - previous_char if delta_line == 0 else char

            data.extend((
                delta_line,
                delta_char,
                token.range.length,
                self.LEGEND.index(token.category.value),
                self._modifiers(token),
            ))
            previous_line, previous_char = line, char

        return data

    @staticmethod
    def _modifiers(token: Token) -> int:
        bits = 0
        if token.category is TokenCategory.LABEL_DECLARATION:
            bits |= 1 << TokenStream.MODIFIERS.index("declaration")
        if (
            token.category is TokenCategory.LABEL_REFERENCE
            and not token.metadata.get("resolved", False)
        ):
            bits |= 1 << TokenStream.MODIFIERS.index("unresolved")
        return bits

    def to_dict(self) -> dict:
        """Return a JSON-serializable representation."""
        return {
            "version": self.version,
            "tokens": [token.to_dict() for token in self.tokens],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "labels": self.labels.to_dict(),
            "dropped_diagnostics": self.dropped_diagnostics,
        }


# =============================================================================
# Emitter Implementation
# =============================================================================

class TokenStreamEmitter:
    """
    Builds the final TokenStream.

    Attributes:
        max_diagnostics: Maximum number of diagnostics delivered (None for
            unlimited). Tokens are never capped.
    """

    def __init__(self, max_diagnostics: Optional[int] = None):
        self.max_diagnostics = max_diagnostics

    def emit(
        self,
        tokens: list[Token],
        collector: DiagnosticCollector,
        labels: LabelTable,
        version: Any = None,
    ) -> TokenStream:
        """
        Order tokens and diagnostics and package them.

        Args:
            tokens: Output of the previous stages
            collector: Diagnostics gathered by every stage
            labels: The document's label table
            version: Document version the result is keyed to
        """
        ordered = sorted(tokens, key=lambda t: (t.range.start.offset, t.range.end.offset))
        for previous, current in zip(ordered, ordered[1:]):
            if previous.range.overlaps(current.range):
                logger.warning(
                    "Overlapping tokens %r and %r", previous, current
                )

        diagnostics = collector.sorted()
        dropped = 0
        if self.max_diagnostics is not None and len(diagnostics) > self.max_diagnostics:
            dropped = len(diagnostics) - self.max_diagnostics
            diagnostics = diagnostics[:self.max_diagnostics]
            logger.info(
                "Dropped %d diagnostic(s) beyond the limit of %d",
                dropped, self.max_diagnostics,
            )

        logger.debug(
            "Emitting %d token(s) and %d diagnostic(s) for version %r",
            len(ordered), len(diagnostics), version,
        )
        return TokenStream(
            version=version,
            tokens=tuple(ordered),
            diagnostics=tuple(diagnostics),
            labels=labels,
            dropped_diagnostics=dropped,
        )
