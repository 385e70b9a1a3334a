"""
LASM Grammar Package
====================

Vocabulary shared by every stage of the highlighter: the MRVM instruction
mnemonics, the register file and the data directives.

Modules:
    lasm: Built-in tables and the immutable Grammar bundle.
    loader: JSON grammar extension files.

Usage:
    from lasm_syntax.grammar import DEFAULT_GRAMMAR, load_grammar

    grammar = load_grammar("project-macros.json", base=DEFAULT_GRAMMAR)
"""

from lasm_syntax.grammar.lasm import (
    # Core types
    Grammar,
    LiteralKind,
    MnemonicInfo,
    DirectiveInfo,
    # Tables
    DEFAULT_GRAMMAR,
    MNEMONIC_TABLE,
    MNEMONICS,
    JUMP_MNEMONICS,
    REGISTERS,
    DIRECTIVE_TABLE,
    DIRECTIVE_SIGIL,
    LABEL_SIGIL,
)
from lasm_syntax.grammar.loader import grammar_from_dict, load_grammar

__all__ = [
    # Core types
    "Grammar",
    "LiteralKind",
    "MnemonicInfo",
    "DirectiveInfo",
    # Tables
    "DEFAULT_GRAMMAR",
    "MNEMONIC_TABLE",
    "MNEMONICS",
    "JUMP_MNEMONICS",
    "REGISTERS",
    "DIRECTIVE_TABLE",
    "DIRECTIVE_SIGIL",
    "LABEL_SIGIL",
    # Loading
    "grammar_from_dict",
    "load_grammar",
]
