"""
LASM Syntax - Highlighting Core for LASM Assembly
=================================================

This package classifies LASM source text for syntax highlighting. LASM is the
assembly language of the MRVM virtual machine, a 32-bit register machine.

Given a document, the highlighter returns every lexical unit tagged with a
semantic category (mnemonic, register, literal, directive, label declaration,
label reference, ...) along with non-fatal diagnostics for likely authoring
mistakes. It is meant to sit behind an editor extension that colors the text;
it never assembles or runs code.

Main Components
---------------
- **highlighter**: The scanning/classification pipeline
    Produces a TokenStream (tokens + diagnostics + label table)

- **grammar**: Mnemonic, register and directive tables
    Immutable, shared by every highlighting call, extensible via JSON

- **config**: HighlighterConfig (comment sigil, case policy, limits)

- **cli**: The lasmtok command-line tool

Quick Start
-----------
Highlight a string:
    >>> from lasm_syntax import highlight
    >>> stream = highlight("jp end\\n.end\\nhalt")
    >>> [t.category.value for t in stream.tokens]
    ['mnemonic', 'labelReference', 'labelDeclaration', 'mnemonic']

Reuse one highlighter across edits:
    >>> from lasm_syntax import Highlighter
    >>> highlighter = Highlighter()
    >>> stream = highlighter.highlight(text, version=7)

Or use the command-line tool:
    $ lasmtok tokens program.lasm
    $ lasmtok check program.lasm
"""

__version__ = "0.3.0"
__author__ = "LASM Syntax Contributors"

from lasm_syntax.config import HighlighterConfig
from lasm_syntax.errors import (
    ConfigurationError,
    Diagnostic,
    DiagnosticCode,
    GrammarError,
    LasmError,
    Severity,
    SourcePosition,
    SourceRange,
)
from lasm_syntax.grammar import DEFAULT_GRAMMAR, Grammar, load_grammar
from lasm_syntax.highlighter import (
    Highlighter,
    Token,
    TokenCategory,
    TokenStream,
    highlight,
)

__all__ = [
    "__version__",
    # Highlighting
    "Highlighter",
    "highlight",
    "Token",
    "TokenCategory",
    "TokenStream",
    # Grammar and configuration
    "Grammar",
    "DEFAULT_GRAMMAR",
    "load_grammar",
    "HighlighterConfig",
    # Diagnostics and errors
    "Diagnostic",
    "DiagnosticCode",
    "Severity",
    "SourcePosition",
    "SourceRange",
    "LasmError",
    "GrammarError",
    "ConfigurationError",
]
