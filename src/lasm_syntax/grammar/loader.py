"""
Grammar extension files.

A grammar file is a JSON object adding mnemonics and registers on top of a
base grammar (normally DEFAULT_GRAMMAR). This lets a project highlight custom
helper macros without touching the built-in tables.

    {
        "mnemonics": {
            "swap": {"operands": "reg, reg", "description": "swap registers"},
            "nop": "do nothing"
        },
        "registers": ["tmp0", "tmp1"],
        "jump_mnemonics": ["jz"]
    }

Mnemonics may be given as a list of names, or as an object mapping each name
to either a description string or an object with "operands" and
"description". Directives cannot be extended.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from lasm_syntax.errors import GrammarError
from lasm_syntax.grammar.lasm import (
    DEFAULT_GRAMMAR,
    NAME_PATTERN,
    Grammar,
    MnemonicInfo,
)

logger = logging.getLogger(__name__)

_KNOWN_KEYS = frozenset({"mnemonics", "registers", "jump_mnemonics"})


def _check_name(name: Any, what: str, path: Optional[str]) -> str:
    if not isinstance(name, str) or not NAME_PATTERN.match(name.lower()):
        raise GrammarError(
            f"invalid {what} name {name!r}",
            path=path,
            hint="names must start with a letter or '_' and contain only "
                 "letters, digits and '_'",
        )
    return name.lower()


def _parse_mnemonics(raw: Any, path: Optional[str]) -> list[MnemonicInfo]:
    if isinstance(raw, list):
        return [
            MnemonicInfo(_check_name(name, "mnemonic", path), "", "")
            for name in raw
        ]

    if not isinstance(raw, dict):
        raise GrammarError("'mnemonics' must be a list or an object", path=path)

    result = []
    for name, entry in raw.items():
        name = _check_name(name, "mnemonic", path)
        if isinstance(entry, str):
            result.append(MnemonicInfo(name, "", entry))
        elif isinstance(entry, dict):
            result.append(MnemonicInfo(
                name,
                str(entry.get("operands", "")),
                str(entry.get("description", "")),
            ))
        elif entry is None:
            result.append(MnemonicInfo(name, "", ""))
        else:
            raise GrammarError(
                f"mnemonic '{name}' must map to a string or an object",
                path=path,
            )
    return result


def _parse_names(raw: Any, key: str, path: Optional[str]) -> list[str]:
    if not isinstance(raw, list):
        raise GrammarError(f"'{key}' must be a list of names", path=path)
    return [_check_name(name, key.rstrip("s"), path) for name in raw]


def grammar_from_dict(
    data: Any,
    base: Grammar = DEFAULT_GRAMMAR,
    path: Optional[str] = None,
) -> Grammar:
    """
    Build a grammar by extending base with the entries in data.

    Raises:
        GrammarError: If data does not have the expected shape
    """
    if not isinstance(data, dict):
        raise GrammarError("grammar must be a JSON object", path=path)

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise GrammarError(
            f"unknown grammar key(s): {', '.join(unknown)}",
            path=path,
            hint=f"expected any of: {', '.join(sorted(_KNOWN_KEYS))}",
        )

    mnemonics = _parse_mnemonics(data.get("mnemonics", []), path)
    registers = _parse_names(data.get("registers", []), "registers", path)
    jumps = _parse_names(data.get("jump_mnemonics", []), "jump_mnemonics", path)

    # A jump helper must also be highlighted as a mnemonic
    declared = {m.name for m in mnemonics} | set(base.mnemonics)
    for name in jumps:
        if name not in declared:
            mnemonics.append(MnemonicInfo(name, "label", "jump to a label"))

    clashes = sorted(
        ({m.name for m in mnemonics} & (base.registers | set(registers)))
        | (set(registers) & set(base.mnemonics))
    )
    if clashes:
        raise GrammarError(
            f"name(s) declared as both mnemonic and register: {', '.join(clashes)}",
            path=path,
        )

    logger.debug(
        "Extending grammar with %d mnemonic(s), %d register(s), %d jump(s)",
        len(mnemonics), len(registers), len(jumps),
    )
    return base.extend(
        mnemonics=mnemonics,
        registers=registers,
        jump_mnemonics=jumps,
    )


def load_grammar(path: str | Path, base: Grammar = DEFAULT_GRAMMAR) -> Grammar:
    """
    Load a grammar extension file.

    Args:
        path: Path to a JSON grammar file
        base: Grammar to extend

    Returns:
        A new Grammar; base is not modified

    Raises:
        GrammarError: If the file cannot be read or is malformed
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise GrammarError(f"cannot read grammar file: {e.strerror}", path=str(path))

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise GrammarError(
            f"invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}",
            path=str(path),
        )

    return grammar_from_dict(data, base=base, path=str(path))
