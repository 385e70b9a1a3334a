# =============================================================================
# test_config.py - Highlighter Configuration Tests
# =============================================================================
# Tests for HighlighterConfig defaults, validation and environment loading.
# =============================================================================

import pytest
from lasm_syntax.config import HighlighterConfig
from lasm_syntax.errors import ConfigurationError, LasmError, Severity
from lasm_syntax.highlighter import Highlighter, TokenCategory


class TestDefaults:
    """Test default configuration values."""

    def test_defaults(self):
        config = HighlighterConfig()
        assert config.comment_sigil == ";"
        assert config.case_sensitive is False
        assert config.max_diagnostics is None
        assert config.unresolved_label_severity is Severity.ERROR

    def test_defaults_are_valid(self):
        HighlighterConfig().validate()


class TestValidate:
    """Test rejection of invalid settings."""

    @pytest.mark.parametrize("sigil", ["", "//", " ", "\t", '"', ",", "#", "."])
    def test_bad_comment_sigil(self, sigil):
        with pytest.raises(ConfigurationError):
            HighlighterConfig(comment_sigil=sigil).validate()

    def test_negative_max_diagnostics(self):
        with pytest.raises(ConfigurationError):
            HighlighterConfig(max_diagnostics=-1).validate()

    def test_zero_max_diagnostics_allowed(self):
        HighlighterConfig(max_diagnostics=0).validate()

    def test_unknown_severity(self):
        with pytest.raises(ConfigurationError) as exc_info:
            HighlighterConfig(unresolved_severity="fatal").validate()
        assert "expected 'error' or 'warning'" in str(exc_info.value)

    def test_highlighter_validates_config(self):
        with pytest.raises(LasmError):
            Highlighter(config=HighlighterConfig(comment_sigil="#"))


class TestFromEnv:
    """Test loading configuration from environment variables."""

    def test_empty_environment(self):
        assert HighlighterConfig.from_env({}) == HighlighterConfig()

    def test_all_variables(self):
        config = HighlighterConfig.from_env({
            "LASM_COMMENT_SIGIL": "!",
            "LASM_CASE_SENSITIVE": "yes",
            "LASM_MAX_DIAGNOSTICS": "10",
            "LASM_UNRESOLVED_SEVERITY": "Warning",
        })
        assert config.comment_sigil == "!"
        assert config.case_sensitive is True
        assert config.max_diagnostics == 10
        assert config.unresolved_label_severity is Severity.WARNING

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("TRUE", True), ("on", True),
        ("0", False), ("false", False), ("off", False),
    ])
    def test_boolean_values(self, value, expected):
        config = HighlighterConfig.from_env({"LASM_CASE_SENSITIVE": value})
        assert config.case_sensitive is expected

    def test_bad_boolean(self):
        with pytest.raises(ConfigurationError) as exc_info:
            HighlighterConfig.from_env({"LASM_CASE_SENSITIVE": "maybe"})
        assert "LASM_CASE_SENSITIVE" in str(exc_info.value)

    def test_bad_integer(self):
        with pytest.raises(ConfigurationError):
            HighlighterConfig.from_env({"LASM_MAX_DIAGNOSTICS": "lots"})

    def test_empty_value_means_default(self):
        config = HighlighterConfig.from_env({"LASM_MAX_DIAGNOSTICS": ""})
        assert config.max_diagnostics is None

    def test_invalid_value_fails_validation(self):
        with pytest.raises(ConfigurationError):
            HighlighterConfig.from_env({"LASM_COMMENT_SIGIL": "##"})

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("LASM_MAX_DIAGNOSTICS", "3")
        assert HighlighterConfig.from_env().max_diagnostics == 3


class TestConfigEffects:
    """Test that settings change highlighting behaviour."""

    def test_custom_comment_sigil(self):
        highlighter = Highlighter(config=HighlighterConfig(comment_sigil="!"))
        stream = highlighter.highlight("halt ! stop ; here")
        assert stream.tokens[1].category == TokenCategory.COMMENT
        assert stream.tokens[1].text == "! stop ; here"

    def test_semicolon_not_comment_with_other_sigil(self):
        highlighter = Highlighter(config=HighlighterConfig(comment_sigil="!"))
        stream = highlighter.highlight("halt ;x")
        assert stream.tokens[1].category != TokenCategory.COMMENT

    def test_case_sensitive(self):
        highlighter = Highlighter(config=HighlighterConfig(case_sensitive=True))
        stream = highlighter.highlight("HALT")
        assert stream.tokens[0].category == TokenCategory.IDENTIFIER

    def test_unresolved_as_warning(self):
        highlighter = Highlighter(config=HighlighterConfig(unresolved_severity="warning"))
        stream = highlighter.highlight("jp missing")
        assert stream.warnings and not stream.errors
        assert not stream.has_errors()
