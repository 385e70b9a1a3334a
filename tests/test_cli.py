# =============================================================================
# test_cli.py - lasmtok Command-Line Tests
# =============================================================================
# Tests for the lasmtok CLI using Click's test runner.
#
# Test coverage includes:
#   - tokens: text and JSON output, comment filtering
#   - check: exit codes, strict mode, JSON output, multiple files
#   - labels and grammar listings
#   - Grammar files, environment configuration and error exit codes
# =============================================================================

import json

import pytest
from click.testing import CliRunner

from lasm_syntax import __version__
from lasm_syntax.cli.errors import ExitCode
from lasm_syntax.cli.lasmtok import main


PROGRAM = """\
; demo
.start
    cpy a0, 0x10
    jp start
#d8 5
"""

BROKEN = """\
#d8 300
jp nowhere
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def write(tmp_path):
    """Write a file under tmp_path and return its absolute path as a string."""
    def _write(name: str, content: str) -> str:
        path = tmp_path / name
        path.write_text(content)
        return str(path)
    return _write


# =============================================================================
# Tokens Command Tests
# =============================================================================

class TestTokensCommand:
    """Test the tokens command."""

    def test_text_output(self, runner, write):
        prog = write("prog.lasm", PROGRAM)
        result = runner.invoke(main, ["tokens", prog])

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert len(lines) == 10
        assert "comment" in lines[0]
        assert "labelDeclaration" in lines[1]
        assert "'cpy'" in lines[2]
        assert "= 16" in lines[5]
        assert "-> 2:1" in lines[7]
        assert "(8-bit integer)" in lines[8]

    def test_no_comments(self, runner, write):
        prog = write("prog.lasm", PROGRAM)
        result = runner.invoke(main, ["tokens", "--no-comments", prog])

        assert result.exit_code == 0
        assert "comment" not in result.output
        assert len(result.output.splitlines()) == 9

    def test_invalid_token_reason(self, runner, write):
        bad = write("bad.lasm", '#str "open\n')
        result = runner.invoke(main, ["tokens", bad])

        assert result.exit_code == 0
        assert "! unterminated string literal" in result.output

    def test_unresolved_reference_marker(self, runner, write):
        prog = write("prog.lasm", "jp nowhere\n")
        result = runner.invoke(main, ["tokens", prog])

        assert "-> (unresolved)" in result.output

    def test_json_output(self, runner, write):
        prog = write("prog.lasm", PROGRAM)
        result = runner.invoke(main, ["tokens", "-f", "json", "--no-comments", prog])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["version"] == prog
        assert data["tokens"][0]["category"] == "labelDeclaration"
        assert data["labels"]["start"]["start"]["line"] == 2
        assert data["diagnostics"] == []

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["tokens", str(tmp_path / "does-not-exist.lasm")])
        assert result.exit_code == ExitCode.INVALID_ARGS


# =============================================================================
# Check Command Tests
# =============================================================================

class TestCheckCommand:
    """Test the check command and its exit codes."""

    def test_clean_file(self, runner, write):
        prog = write("prog.lasm", PROGRAM)
        result = runner.invoke(main, ["check", prog])

        assert result.exit_code == ExitCode.SUCCESS
        assert result.output == ""

    def test_clean_file_verbose(self, runner, write):
        prog = write("prog.lasm", PROGRAM)
        result = runner.invoke(main, ["-v", "check", prog])

        assert result.exit_code == ExitCode.SUCCESS
        assert f"{prog}: ok" in result.output

    def test_errors_fail(self, runner, write):
        broken = write("broken.lasm", BROKEN)
        result = runner.invoke(main, ["check", broken])

        assert result.exit_code == ExitCode.DIAGNOSTICS_FOUND
        assert f"{broken}:1:5: error: value 300 does not fit in 8 bits" in result.output
        assert "hint: valid range is 0 to 255" in result.output
        assert f"{broken}:2:4: error: reference to undeclared label 'nowhere'" in result.output
        assert f"{broken}: 2 errors, 0 warnings" in result.output

    def test_warnings_pass_unless_strict(self, runner, write):
        env = {"LASM_UNRESOLVED_SEVERITY": "warning"}
        warn = write("warn.lasm", "jp nowhere\n")

        result = runner.invoke(main, ["check", warn], env=env)
        assert result.exit_code == ExitCode.SUCCESS
        assert "warning: reference to undeclared label" in result.output

        result = runner.invoke(main, ["check", "--strict", warn], env=env)
        assert result.exit_code == ExitCode.DIAGNOSTICS_FOUND

    def test_multiple_files(self, runner, write):
        good = write("good.lasm", PROGRAM)
        bad = write("bad.lasm", BROKEN)
        result = runner.invoke(main, ["check", good, bad])

        assert result.exit_code == ExitCode.DIAGNOSTICS_FOUND
        assert f"{bad}: 2 errors" in result.output
        assert good not in result.output

    def test_json_output(self, runner, write):
        good = write("good.lasm", PROGRAM)
        bad = write("bad.lasm", BROKEN)
        result = runner.invoke(main, ["check", "-f", "json", good, bad])

        assert result.exit_code == ExitCode.DIAGNOSTICS_FOUND
        data = json.loads(result.output)
        assert data[good] == []
        assert [d["code"] for d in data[bad]] == [
            "DirectiveOperandOutOfRange",
            "UnresolvedLabelReference",
        ]

    def test_diagnostic_cap(self, runner, write):
        bad = write("bad.lasm", BROKEN)
        result = runner.invoke(main, ["check", bad], env={"LASM_MAX_DIAGNOSTICS": "1"})

        assert result.exit_code == ExitCode.DIAGNOSTICS_FOUND
        assert "(1 more not shown)" in result.output
        assert "undeclared label" not in result.output

    def test_requires_a_file(self, runner):
        result = runner.invoke(main, ["check"])
        assert result.exit_code == ExitCode.INVALID_ARGS


# =============================================================================
# Labels Command Tests
# =============================================================================

class TestLabelsCommand:
    """Test the labels command."""

    def test_lists_labels_with_counts(self, runner, write):
        prog = write("prog.lasm", ".loop\njp loop\njp loop\n.end\n")
        result = runner.invoke(main, ["labels", prog])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].split() == ["loop", "line", "1", "2", "references"]
        assert lines[1].split() == ["end", "line", "4", "0", "references"]

    def test_single_reference(self, runner, write):
        prog = write("prog.lasm", ".x\njp x\n")
        result = runner.invoke(main, ["labels", prog])

        assert result.output.split()[-2:] == ["1", "reference"]

    def test_no_labels(self, runner, write):
        prog = write("prog.lasm", "halt\n")
        result = runner.invoke(main, ["labels", prog])

        assert result.exit_code == 0
        assert result.output.strip() == "No labels declared."


# =============================================================================
# Grammar Tests
# =============================================================================

class TestGrammar:
    """Test the grammar command and --grammar option."""

    def test_show_grammar(self, runner):
        result = runner.invoke(main, ["grammar"])

        assert result.exit_code == 0
        assert "Mnemonics:" in result.output
        assert "Registers:" in result.output
        assert "Directives:" in result.output
        assert "cpy" in result.output
        assert "8-bit unsigned integer" in result.output

    def test_grammar_file(self, runner, write):
        macros = write("macros.json", json.dumps({
            "mnemonics": {"swap": "swap two registers"},
            "registers": ["tmp0"],
        }))
        prog = write("prog.lasm", "swap tmp0, a0\n")
        result = runner.invoke(main, ["-g", macros, "tokens", prog])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert "mnemonic" in lines[0]
        assert "register" in lines[1]

    def test_grammar_file_listed(self, runner, write):
        macros = write("macros.json", json.dumps({"mnemonics": {"swap": "swap two registers"}}))
        result = runner.invoke(main, ["--grammar", macros, "grammar"])

        assert "swap two registers" in result.output

    def test_bad_grammar_file(self, runner, write):
        macros = write("macros.json", "{ broken")
        prog = write("prog.lasm", "halt\n")
        result = runner.invoke(main, ["-g", macros, "tokens", prog])

        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "Error:" in result.output
        assert "invalid JSON" in result.output


# =============================================================================
# Global Option Tests
# =============================================================================

class TestGlobalOptions:
    """Test version output and environment configuration errors."""

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_bad_environment(self, runner, write):
        prog = write("prog.lasm", "halt\n")
        result = runner.invoke(main, ["check", prog], env={"LASM_CASE_SENSITIVE": "maybe"})

        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "LASM_CASE_SENSITIVE" in result.output

    def test_case_sensitive_environment(self, runner, write):
        prog = write("prog.lasm", "HALT\n")
        result = runner.invoke(main, ["tokens", prog], env={"LASM_CASE_SENSITIVE": "1"})

        assert "identifier" in result.output
