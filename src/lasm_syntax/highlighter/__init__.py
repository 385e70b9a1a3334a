"""
LASM Highlighter
================

Turns LASM source text into a stream of classified tokens plus diagnostics,
for consumption by an editor's presentation layer.

Main Components
---------------
- **Highlighter**: Facade running the whole pipeline
- **Scanner**: Splits source into lexemes (words, strings, comments, commas)
- **Classifier**: Assigns each lexeme a TokenCategory
- **LabelResolver**: Two-phase label declaration/reference resolution
- **DirectiveValidator**: Operand checks for #str, #d8, #d16, #d32
- **TokenStreamEmitter**: Orders tokens and diagnostics into a TokenStream

Example Usage
-------------
>>> from lasm_syntax.highlighter import highlight
>>> stream = highlight("#d8 300")
>>> [d.code.value for d in stream.diagnostics]
['DirectiveOperandOutOfRange']
"""

from lasm_syntax.highlighter.scanner import Lexeme, LexemeKind, Scanner
from lasm_syntax.highlighter.classifier import (
    Classifier,
    Token,
    TokenCategory,
    decode_string,
    parse_integer,
)
from lasm_syntax.highlighter.labels import (
    LabelEntry,
    LabelResolver,
    LabelTable,
    find_similar_labels,
)
from lasm_syntax.highlighter.directives import DirectiveValidator
from lasm_syntax.highlighter.emitter import TokenStream, TokenStreamEmitter
from lasm_syntax.highlighter.highlighter import Highlighter, highlight

__all__ = [
    # Main class and functions
    "Highlighter",
    "highlight",
    "TokenStream",
    # Scanner
    "Scanner",
    "Lexeme",
    "LexemeKind",
    # Classifier
    "Classifier",
    "Token",
    "TokenCategory",
    "parse_integer",
    "decode_string",
    # Labels
    "LabelResolver",
    "LabelTable",
    "LabelEntry",
    "find_similar_labels",
    # Directives
    "DirectiveValidator",
    # Emitter
    "TokenStreamEmitter",
]
