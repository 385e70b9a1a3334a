"""
lasmtok - LASM Tokenizer Command-Line Interface
===============================================

This module implements a command-line front end for the LASM highlighter.
It is a reference consumer of the token stream: it prints what an editor
would color, and lints files the way an editor would underline them.

Usage Examples
--------------
Dump the classified tokens of a file:
    $ lasmtok tokens program.lasm

As JSON, for another tool to consume:
    $ lasmtok tokens --format json program.lasm

Check files and fail on errors (e.g. in CI):
    $ lasmtok check src/*.lasm

Treat warnings as failures too:
    $ lasmtok check --strict program.lasm

Show declared labels:
    $ lasmtok labels program.lasm

Highlight project-specific macros:
    $ lasmtok --grammar macros.json tokens program.lasm

Environment Variables
---------------------
LASM_COMMENT_SIGIL, LASM_CASE_SENSITIVE, LASM_MAX_DIAGNOSTICS and
LASM_UNRESOLVED_SEVERITY configure the highlighter (see HighlighterConfig).

Exit Codes
----------
0 - Success
1 - Diagnostics found (check command)
2 - Invalid arguments, grammar or configuration
3 - Internal error
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from lasm_syntax import __version__
from lasm_syntax.cli.errors import ExitCode, handle_cli_exception
from lasm_syntax.config import HighlighterConfig
from lasm_syntax.errors import format_report
from lasm_syntax.grammar import DEFAULT_GRAMMAR, load_grammar
from lasm_syntax.highlighter import Highlighter, Token, TokenCategory, TokenStream

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Stores common options and builds the Highlighter on first use.
    """

    def __init__(self) -> None:
        self.verbose: bool = False
        self.grammar_path: Optional[Path] = None
        self._highlighter: Optional[Highlighter] = None

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.WARNING
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )

    @property
    def highlighter(self) -> Highlighter:
        """
        The Highlighter for this invocation.

        Raises:
            GrammarError: If --grammar names an invalid file
            ConfigurationError: If an LASM_* environment variable is invalid
        """
        if self._highlighter is None:
            grammar = DEFAULT_GRAMMAR
            if self.grammar_path is not None:
                grammar = load_grammar(self.grammar_path)
                logger.debug("Loaded grammar extension %s", self.grammar_path)
            self._highlighter = Highlighter(grammar, HighlighterConfig.from_env())
        return self._highlighter


pass_context = click.make_pass_decorator(Context, ensure=True)


def read_source(path: Path) -> str:
    """Read a source file, keeping its line endings intact."""
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def format_token(token: Token) -> str:
    """Format one token as a single line of text."""
    start = token.range.start
    line = f"{start.line:>5}:{start.column:<4} {token.category.value:<17} {token.text!r}"

    metadata = token.metadata
    if token.category is TokenCategory.LABEL_REFERENCE:
        if metadata.get("resolved"):
            line += f"  -> {metadata['declaration'].start}"
        else:
            line += "  -> (unresolved)"
    elif token.category is TokenCategory.INTEGER_LITERAL:
        line += f"  = {metadata['value']}"
    elif token.category is TokenCategory.DIRECTIVE_KEYWORD:
        if metadata.get("bit_width"):
            line += f"  ({metadata['bit_width']}-bit {metadata['literal_kind']})"
        else:
            line += f"  ({metadata.get('literal_kind', '?')})"
    elif token.category is TokenCategory.INVALID:
        line += f"  ! {metadata['reason']}"

    return line


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.option(
    "-g", "--grammar",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON grammar file adding mnemonics and registers",
)
@click.version_option(version=__version__, prog_name="lasmtok")
@pass_context
def main(ctx: Context, verbose: bool, grammar: Optional[Path]) -> None:
    """
    Tokenize and check LASM assembly source.

    LASM is the assembly language of the MRVM virtual machine. lasmtok
    shows how each part of a file is classified for syntax highlighting
    and reports likely mistakes: malformed literals, duplicate or missing
    labels, and bad directive operands.
    """
    ctx.verbose = verbose
    ctx.grammar_path = grammar
    ctx.setup_logging()


# =============================================================================
# Tokens Command
# =============================================================================

@main.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-f", "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text)",
)
@click.option(
    "--no-comments",
    is_flag=True,
    help="Omit comment tokens from the output",
)
@pass_context
def tokens(ctx: Context, input_file: Path, output_format: str, no_comments: bool) -> None:
    """
    Print the classified tokens of INPUT_FILE.

    \b
    Examples:
        lasmtok tokens hello.lasm
        lasmtok tokens --format json hello.lasm
    """
    try:
        stream = ctx.highlighter.highlight_file(input_file)
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)

    shown = [
        t for t in stream.tokens
        if not (no_comments and t.category is TokenCategory.COMMENT)
    ]

    if output_format == "json":
        data = stream.to_dict()
        data["tokens"] = [t.to_dict() for t in shown]
        click.echo(json.dumps(data, indent=2))
        return

    for token in shown:
        click.echo(format_token(token))


# =============================================================================
# Check Command
# =============================================================================

@main.command()
@click.argument(
    "input_files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--strict",
    is_flag=True,
    help="Fail on warnings as well as errors",
)
@click.option(
    "-f", "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text)",
)
@pass_context
def check(ctx: Context, input_files: tuple[Path, ...], strict: bool, output_format: str) -> None:
    """
    Report diagnostics for one or more files.

    Exits with status 1 if any file has an error (or, with --strict,
    any diagnostic at all).

    \b
    Examples:
        lasmtok check hello.lasm
        lasmtok check --strict src/*.lasm
    """
    failed = False
    results = {}

    for input_file in input_files:
        try:
            source = read_source(input_file)
            stream = ctx.highlighter.highlight(source, version=str(input_file))
        except Exception as e:
            handle_cli_exception(e, verbose=ctx.verbose)

        if stream.has_errors() or (strict and stream.diagnostics):
            failed = True

        if output_format == "json":
            results[str(input_file)] = [d.to_dict() for d in stream.diagnostics]
        elif stream.diagnostics:
            click.echo(format_report(list(stream.diagnostics), source, str(input_file)))
            if stream.dropped_diagnostics:
                click.echo(f"({stream.dropped_diagnostics} more not shown)")
        elif ctx.verbose:
            click.echo(f"{input_file}: ok")

    if output_format == "json":
        click.echo(json.dumps(results, indent=2))

    if failed:
        sys.exit(ExitCode.DIAGNOSTICS_FOUND)


# =============================================================================
# Labels Command
# =============================================================================

@main.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@pass_context
def labels(ctx: Context, input_file: Path) -> None:
    """
    List the labels declared in INPUT_FILE with their reference counts.
    """
    try:
        stream = ctx.highlighter.highlight_file(input_file)
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)

    if not stream.labels:
        click.echo("No labels declared.")
        return

    references = _count_references(stream)
    for entry in stream.labels:
        count = references.get(entry.name, 0)
        click.echo(
            f"{entry.name:<24} line {entry.range.start.line:<5} "
            f"{count} reference{'' if count == 1 else 's'}"
        )


def _count_references(stream: TokenStream) -> dict[str, int]:
    counts: dict[str, int] = {}
    for token in stream.tokens_of(TokenCategory.LABEL_REFERENCE):
        if token.metadata.get("resolved"):
            name = token.metadata["name"]
            counts[name] = counts.get(name, 0) + 1
    return counts


# =============================================================================
# Grammar Command
# =============================================================================

@main.command("grammar")
@pass_context
def show_grammar(ctx: Context) -> None:
    """
    Print the active mnemonics, registers and directives.
    """
    try:
        grammar = ctx.highlighter.grammar
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)

    click.echo("Mnemonics:")
    for name in sorted(grammar.mnemonics):
        info = grammar.mnemonics[name]
        click.echo(f"  {name:<8} {info.operands:<28} {info.description}".rstrip())

    click.echo("\nRegisters:")
    click.echo("  " + " ".join(sorted(grammar.registers)))

    click.echo("\nDirectives:")
    for name, info in grammar.directives.items():
        kind = info.literal_kind.value
        if info.bit_width:
            kind = f"{info.bit_width}-bit unsigned {kind}"
        click.echo(f"  #{name:<7} {kind}")


if __name__ == "__main__":
    main()
