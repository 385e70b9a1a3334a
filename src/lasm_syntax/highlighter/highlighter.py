"""
LASM Highlighter - Main Interface
=================================

This module provides the Highlighter class, the primary interface for turning
LASM source text into classified tokens and diagnostics. It coordinates the
scanner, classifier, label resolver, directive validator and emitter.

Example Usage
-------------
>>> from lasm_syntax.highlighter import Highlighter
>>>
>>> highlighter = Highlighter()
>>> stream = highlighter.highlight('''
... .start
...     cpy a0, 0x10    ; counter
...     jp start
... #str "done"
... ''', version=1)
>>>
>>> for token in stream.tokens:
...     print(token.category.value, token.text)
>>> for diagnostic in stream.diagnostics:
...     print(diagnostic.message)

Every call is independent: the highlighter holds only the immutable grammar
and configuration, and each document gets a fresh label table and diagnostic
collector. Highlighting never raises on document content.
"""

from pathlib import Path
from typing import Any, Optional
import logging

from lasm_syntax.config import HighlighterConfig
from lasm_syntax.errors import DiagnosticCollector
from lasm_syntax.grammar import DEFAULT_GRAMMAR, Grammar
from lasm_syntax.highlighter.classifier import Classifier
from lasm_syntax.highlighter.directives import DirectiveValidator
from lasm_syntax.highlighter.emitter import TokenStream, TokenStreamEmitter
from lasm_syntax.highlighter.labels import LabelResolver
from lasm_syntax.highlighter.scanner import Scanner

logger = logging.getLogger(__name__)


class Highlighter:
    """
    Main LASM highlighting class.

    The pipeline runs five stages in order:

    1. Scanner: source text to lexemes
    2. Classifier: lexemes to tokens (plus MalformedLexeme diagnostics)
    3. LabelResolver: declaration collection, then reference resolution
    4. DirectiveValidator: operand checks for #str, #d8, #d16, #d32
    5. TokenStreamEmitter: ordering and packaging

    Attributes:
        grammar: Mnemonic, register and directive tables
        config: HighlighterConfig in effect
    """

    def __init__(
        self,
        grammar: Optional[Grammar] = None,
        config: Optional[HighlighterConfig] = None,
    ):
        """
        Initialize the highlighter.

        Args:
            grammar: Grammar to use (default: DEFAULT_GRAMMAR)
            config: Configuration (default: HighlighterConfig())

        Raises:
            ConfigurationError: If config is invalid
        """
        self.grammar = grammar if grammar is not None else DEFAULT_GRAMMAR
        self.config = config if config is not None else HighlighterConfig()
        self.config.validate()

        self._classifier = Classifier(self.grammar, self.config.case_sensitive)
        self._resolver = LabelResolver(
            self.grammar,
            self.config.case_sensitive,
            self.config.unresolved_label_severity,
        )
        self._validator = DirectiveValidator(self.grammar)
        self._emitter = TokenStreamEmitter(self.config.max_diagnostics)

    def highlight(self, source: str, version: Any = None) -> TokenStream:
        """
        Tokenize and classify a document.

        Args:
            source: Full document text
            version: Document version/identifier, copied into the result

        Returns:
            TokenStream with ordered tokens and diagnostics
        """
        collector = DiagnosticCollector()

        scanner = Scanner(source, self.config.comment_sigil)
        tokens = list(self._classifier.classify_all(scanner, collector))
        tokens, labels = self._resolver.run(tokens, collector)
        tokens = self._validator.validate(tokens, collector)

        return self._emitter.emit(tokens, collector, labels, version)

    def highlight_file(
        self,
        path: str | Path,
        encoding: str = "utf-8",
        version: Any = None,
    ) -> TokenStream:
        """
        Read and highlight a source file.

        Line endings are preserved, so CRLF files keep their exact offsets.

        Raises:
            FileNotFoundError: If the file does not exist
            UnicodeDecodeError: If the file is not valid in encoding
        """
        path = Path(path)
        logger.debug("Highlighting %s", path)
        with open(path, encoding=encoding, newline="") as f:
            source = f.read()
        return self.highlight(source, version=version if version is not None else str(path))


def highlight(
    source: str,
    version: Any = None,
    grammar: Optional[Grammar] = None,
    config: Optional[HighlighterConfig] = None,
) -> TokenStream:
    """
    Convenience function to highlight a document.

    Args:
        source: Full document text
        version: Document version/identifier
        grammar: Grammar to use (default: DEFAULT_GRAMMAR)
        config: Configuration (default: HighlighterConfig())

    Returns:
        TokenStream for the document
    """
    return Highlighter(grammar, config).highlight(source, version)
