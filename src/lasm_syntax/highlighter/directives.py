"""
LASM Directive Validator
========================

Checks the operands of the data directives against the literal kind each one
embeds:

| Directive | Operand           | Valid range      |
|-----------|-------------------|------------------|
| #str      | string literal    | any              |
| #d8       | integer literal   | 0 to 255         |
| #d16      | integer literal   | 0 to 65535       |
| #d32      | integer literal   | 0 to 4294967295  |

Each directive takes exactly one operand on its own line. Comments are not
operands and commas only separate operands.

Diagnostics are additive: a string passed to #d8 is reported, but the
operand is still highlighted as a string literal. The only change made to the
token list is the metadata attached to each directive keyword (expected
literal kind and bit width).
"""

from dataclasses import replace
import logging

from lasm_syntax.errors import DiagnosticCode, DiagnosticCollector, SourceRange
from lasm_syntax.grammar import DEFAULT_GRAMMAR, DirectiveInfo, Grammar, LiteralKind
from lasm_syntax.highlighter.classifier import Token, TokenCategory

logger = logging.getLogger(__name__)


# Category an operand must have for each literal kind
_EXPECTED_CATEGORY = {
    LiteralKind.STRING: TokenCategory.STRING_LITERAL,
    LiteralKind.INTEGER: TokenCategory.INTEGER_LITERAL,
}

# Operand categories that are never treated as a data operand
_NON_OPERANDS = (TokenCategory.COMMENT, TokenCategory.PUNCTUATION)


def _describe(token: Token) -> str:
    """Short human description of an operand's category."""
    return {
        TokenCategory.STRING_LITERAL: "a string literal",
        TokenCategory.INTEGER_LITERAL: "an integer literal",
        TokenCategory.REGISTER: "a register",
        TokenCategory.MNEMONIC: "a mnemonic",
        TokenCategory.IDENTIFIER: "an identifier",
        TokenCategory.LABEL_REFERENCE: "a label reference",
        TokenCategory.DIRECTIVE_KEYWORD: "a directive",
    }.get(token.category, f"'{token.text}'")


class DirectiveValidator:
    """
    Validates directive operands and annotates directive keywords.

    Usage:
        validator = DirectiveValidator(grammar)
        tokens = validator.validate(tokens, collector)

    Attributes:
        grammar: Supplies the directive table
    """

    def __init__(self, grammar: Grammar = DEFAULT_GRAMMAR):
        self.grammar = grammar

    def validate(self, tokens: list[Token], collector: DiagnosticCollector) -> list[Token]:
        """
        Check every directive in the token list.

        Returns:
            The token list with metadata attached to directive keywords;
            every other token is returned unchanged
        """
        result = list(tokens)
        checked = 0

        for index, token in enumerate(tokens):
            if token.category is not TokenCategory.DIRECTIVE_KEYWORD:
                continue

            directive = self.grammar.get_directive(token.metadata["directive"])
            result[index] = replace(token, metadata={
                "directive": directive.name,
                "literal_kind": directive.literal_kind.value,
                "bit_width": directive.bit_width,
            })

            operands = self._operands(tokens, index)
            self._check(token, directive, operands, collector)
            checked += 1

        logger.debug("Validated %d directive(s)", checked)
        return result

    def _operands(self, tokens: list[Token], index: int) -> list[Token]:
        """Collect the operand tokens following a directive on its line."""
        line = tokens[index].line
        operands = []
        for token in tokens[index + 1:]:
            if token.line != line:
                break
            if token.category not in _NON_OPERANDS:
                operands.append(token)
        return operands

    def _check(
        self,
        token: Token,
        directive: DirectiveInfo,
        operands: list[Token],
        collector: DiagnosticCollector,
    ) -> None:
        expected = "a string literal" if directive.literal_kind is LiteralKind.STRING \
            else f"a {directive.bit_width}-bit unsigned integer literal"

        if not operands:
            collector.error(
                DiagnosticCode.DIRECTIVE_OPERAND_MISSING,
                token.range,
                f"'{token.text}' expects {expected}",
            )
            return

        operand = operands[0]

        # Malformed operands already carry a MalformedLexeme diagnostic
        if operand.category is TokenCategory.INVALID:
            pass
        elif operand.category is not _EXPECTED_CATEGORY[directive.literal_kind]:
            collector.error(
                DiagnosticCode.DIRECTIVE_OPERAND_KIND_MISMATCH,
                operand.range,
                f"'{token.text}' expects {expected}, got {_describe(operand)}",
            )
        elif directive.literal_kind is LiteralKind.INTEGER:
            value = operand.metadata["value"]
            if not directive.fits(value):
                collector.error(
                    DiagnosticCode.DIRECTIVE_OPERAND_OUT_OF_RANGE,
                    operand.range,
                    f"value {value} does not fit in {directive.bit_width} bits "
                    f"for '{token.text}'",
                    hint=f"valid range is 0 to {directive.max_value}",
                )

        if len(operands) > 1:
            surplus = SourceRange(operands[1].range.start, operands[-1].range.end)
            count = len(operands) - 1
            collector.error(
                DiagnosticCode.DIRECTIVE_OPERAND_UNEXPECTED,
                surplus,
                f"'{token.text}' takes exactly one operand, "
                f"found {count} extra operand{'s' if count > 1 else ''}",
                hint=f"use one '{token.text}' line per value",
            )
