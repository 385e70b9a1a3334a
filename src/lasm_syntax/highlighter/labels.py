"""
LASM Label Resolver
===================

Labels in LASM have whole-file scope: a jump may target a label declared
further down the document. Resolution therefore runs in two phases over the
complete token list:

Phase 1 (Declaration Collection)
    Every LABEL_DECLARATION token is recorded in a LabelTable. A second
    declaration of the same name is reported as DuplicateLabel; the first
    declaration stays canonical.

Phase 2 (Reference Resolution)
    Every IDENTIFIER directly after a jump mnemonic (jp) on the same line is
    re-tagged LABEL_REFERENCE and looked up. Resolved references carry the
    declaration range in their metadata; unresolved ones keep their category
    and produce an UnresolvedLabelReference diagnostic.

Example
-------
    jp end          ; forward reference, resolved in phase 2
    .end
    halt
"""

from dataclasses import dataclass, replace
from typing import Iterator, Optional
import logging

from lasm_syntax.errors import (
    DiagnosticCode,
    DiagnosticCollector,
    Severity,
    SourceRange,
)
from lasm_syntax.grammar import DEFAULT_GRAMMAR, Grammar
from lasm_syntax.highlighter.classifier import Token, TokenCategory

logger = logging.getLogger(__name__)


# =============================================================================
# Label Table
# =============================================================================

@dataclass(frozen=True)
class LabelEntry:
    """A declared label and where it was declared."""
    name: str
    range: SourceRange

    def to_dict(self) -> dict:
        return {"name": self.name, "range": self.range.to_dict()}


class LabelTable:
    """
    Mapping from label name to its (first) declaration.

    Names are case-sensitive and unique. Iteration follows declaration order.
    """

    def __init__(self) -> None:
        self._entries: dict[str, LabelEntry] = {}

    def declare(self, name: str, range: SourceRange) -> Optional[LabelEntry]:
        """
        Record a declaration.

        Returns:
            None if the name was new, otherwise the existing entry (which is
            kept unchanged)
        """
        existing = self._entries.get(name)
        if existing is not None:
            return existing
        self._entries[name] = LabelEntry(name, range)
        return None

    def lookup(self, name: str) -> Optional[LabelEntry]:
        return self._entries.get(name)

    def names(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LabelEntry]:
        return iter(self._entries.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LabelTable):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return f"LabelTable({', '.join(self._entries)})"

    def to_dict(self) -> dict:
        return {name: entry.range.to_dict() for name, entry in self._entries.items()}


# =============================================================================
# Resolver Implementation
# =============================================================================

class LabelResolver:
    """
    Two-phase label resolution over a classified token list.

    Usage:
        resolver = LabelResolver(grammar)
        tokens, labels = resolver.run(tokens, collector)

    Attributes:
        grammar: Supplies the set of jump mnemonics
        case_sensitive: Match jump mnemonics exactly as written
        unresolved_severity: Severity of UnresolvedLabelReference diagnostics
    """

    def __init__(
        self,
        grammar: Grammar = DEFAULT_GRAMMAR,
        case_sensitive: bool = False,
        unresolved_severity: Severity = Severity.ERROR,
    ):
        self.grammar = grammar
        self.case_sensitive = case_sensitive
        self.unresolved_severity = unresolved_severity

    def run(
        self,
        tokens: list[Token],
        collector: DiagnosticCollector,
    ) -> tuple[list[Token], LabelTable]:
        """Run both phases and return the re-tagged tokens and the table."""
        table = self.collect(tokens, collector)
        resolved = self.resolve(tokens, table, collector)
        return resolved, table

    # =========================================================================
    # Phase 1: Declaration Collection
    # =========================================================================

    def collect(self, tokens: list[Token], collector: DiagnosticCollector) -> LabelTable:
        """Build the LabelTable, reporting duplicate declarations."""
        table = LabelTable()

        for token in tokens:
            if token.category is not TokenCategory.LABEL_DECLARATION:
                continue

            name = token.metadata["name"]
            existing = table.declare(name, token.range)
            if existing is not None:
                collector.error(
                    DiagnosticCode.DUPLICATE_LABEL,
                    token.range,
                    f"duplicate label '{name}'",
                    hint=f"'{name}' was first declared at {existing.range.start}",
                )

        logger.debug("Collected %d label(s)", len(table))
        return table

    # =========================================================================
    # Phase 2: Reference Resolution
    # =========================================================================

    def resolve(
        self,
        tokens: list[Token],
        table: LabelTable,
        collector: DiagnosticCollector,
    ) -> list[Token]:
        """Re-tag jump operands as label references and look them up."""
        result = []
        unresolved = 0

        for index, token in enumerate(tokens):
            if not self._is_jump_operand(tokens, index):
                result.append(token)
                continue

            name = token.text
            entry = table.lookup(name)
            if entry is not None:
                metadata = {"name": name, "resolved": True, "declaration": entry.range}
            else:
                metadata = {"name": name, "resolved": False}
                unresolved += 1
                similar = find_similar_labels(name, table.names())
                hint = None
                if similar:
                    suggestions = ", ".join(f"'{s}'" for s in similar)
                    hint = f"did you mean {suggestions}?"
                collector.report(
                    DiagnosticCode.UNRESOLVED_LABEL_REFERENCE,
                    token.range,
                    f"reference to undeclared label '{name}'",
                    self.unresolved_severity,
                    hint,
                )

            result.append(replace(
                token,
                category=TokenCategory.LABEL_REFERENCE,
                metadata=metadata,
            ))

        logger.debug("Resolved label references (%d unresolved)", unresolved)
        return result

    def _is_jump_operand(self, tokens: list[Token], index: int) -> bool:
        token = tokens[index]
        if token.category is not TokenCategory.IDENTIFIER or index == 0:
            return False
        previous = tokens[index - 1]
        return (
            previous.category is TokenCategory.MNEMONIC
            and previous.line == token.line
            and self.grammar.is_jump(previous.text, self.case_sensitive)
        )


# =============================================================================
# Hint Helpers
# =============================================================================

def find_similar_labels(name: str, candidates: list[str]) -> list[str]:
    """
    Find label names close to name, for "did you mean" hints.

    Uses simple edit distance heuristic.
    """
    name_lower = name.lower()
    similar = []

    for candidate in candidates:
        candidate_lower = candidate.lower()
        # Check for simple typos: off by one char, case difference
        if (
            candidate_lower == name_lower or
            abs(len(candidate) - len(name)) <= 1 and
            _edit_distance(name_lower, candidate_lower) <= 2
        ):
            similar.append(candidate)

    return similar[:3]  # Return at most 3 suggestions


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = range(len(s2) + 1)
    for i, c1 in enumerate(s1):
        new_distances = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                new_distances.append(distances[j])
            else:
                new_distances.append(1 + min((
                    distances[j],
                    distances[j + 1],
                    new_distances[-1]
                )))
        distances = new_distances

    return distances[-1]
