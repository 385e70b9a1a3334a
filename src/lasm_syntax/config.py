"""
LASM Highlighter - Configuration
================================

Settings that shape how a document is tokenized. Configuration can come from:
- Default values (defined here)
- Environment variables (HighlighterConfig.from_env)
- Explicit keyword arguments

Defaults match the stock LASM dialect: ';' comments, case-insensitive
mnemonics and registers, every diagnostic delivered.
"""

from dataclasses import dataclass
from typing import Optional
import os

from lasm_syntax.errors import ConfigurationError, Severity


_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class HighlighterConfig:
    """
    Configuration for one Highlighter.

    Attributes:
        comment_sigil: Character that starts a line comment (default: ";")
        case_sensitive: Match mnemonics and registers exactly as written
            (default: False, so "CPY" and "cpy" are both mnemonics).
            Directives always match exactly.
        max_diagnostics: Cap on diagnostics returned per document
            (default: None, meaning unlimited). Tokens are never capped.
        unresolved_severity: Severity of UnresolvedLabelReference
            diagnostics, "error" or "warning" (default: "error")
    """

    comment_sigil: str = ";"
    case_sensitive: bool = False
    max_diagnostics: Optional[int] = None
    unresolved_severity: str = "error"

    # ═══════════════════════════════════════════════════════════════════════════
    # FACTORY METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "HighlighterConfig":
        """
        Create HighlighterConfig from environment variables.

        Environment variables (all optional):
            LASM_COMMENT_SIGIL: Comment character
            LASM_CASE_SENSITIVE: "1"/"true"/"yes"/"on" or "0"/"false"/"no"/"off"
            LASM_MAX_DIAGNOSTICS: Diagnostic cap (integer, empty for none)
            LASM_UNRESOLVED_SEVERITY: "error" or "warning"

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            A validated HighlighterConfig

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        config = cls()

        if sigil := env.get("LASM_COMMENT_SIGIL"):
            config.comment_sigil = sigil

        if case_sensitive := env.get("LASM_CASE_SENSITIVE"):
            value = case_sensitive.strip().lower()
            if value in _TRUE_VALUES:
                config.case_sensitive = True
            elif value in _FALSE_VALUES:
                config.case_sensitive = False
            else:
                raise ConfigurationError(
                    f"LASM_CASE_SENSITIVE: expected a boolean, got {case_sensitive!r}"
                )

        if max_diagnostics := env.get("LASM_MAX_DIAGNOSTICS"):
            try:
                config.max_diagnostics = int(max_diagnostics)
            except ValueError:
                raise ConfigurationError(
                    f"LASM_MAX_DIAGNOSTICS: expected an integer, got {max_diagnostics!r}"
                )

        if severity := env.get("LASM_UNRESOLVED_SEVERITY"):
            config.unresolved_severity = severity.strip().lower()

        config.validate()
        return config

    # ═══════════════════════════════════════════════════════════════════════════
    # HELPER METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    def validate(self) -> None:
        """
        Check every setting.

        Raises:
            ConfigurationError: If a setting is invalid
        """
        if len(self.comment_sigil) != 1:
            raise ConfigurationError(
                f"comment sigil must be a single character, got {self.comment_sigil!r}"
            )
        if self.comment_sigil.isspace() or self.comment_sigil in '",#.':
            raise ConfigurationError(
                f"comment sigil {self.comment_sigil!r} is reserved",
                hint="use a character that cannot appear in an operand, such as ';'",
            )
        if self.max_diagnostics is not None and self.max_diagnostics < 0:
            raise ConfigurationError(
                f"max_diagnostics must be non-negative, got {self.max_diagnostics}"
            )
        if self.unresolved_severity not in {s.value for s in Severity}:
            raise ConfigurationError(
                f"unknown severity {self.unresolved_severity!r}",
                hint="expected 'error' or 'warning'",
            )

    @property
    def unresolved_label_severity(self) -> Severity:
        return Severity(self.unresolved_severity)
