"""
LASM Grammar Tables
===================

Static vocabulary of the LASM assembly language: instruction mnemonics,
register names and data directives.

LASM targets the MRVM virtual machine, a 32-bit register machine whose
instructions are all four bytes wide. Source files are assembled through a
customasm rule set, which also contributes a handful of helper mnemonics
(jp, zro, inc, dec, not) that expand to native instructions.

Register File
-------------
| Group      | Names         | Purpose                              |
|------------|---------------|--------------------------------------|
| Arithmetic | a0 - a7       | general purpose                      |
| Call       | c0 - c1       | call arguments                       |
| Accumulate | ac0 - ac2     | accumulators                         |
| Reserved   | rr0 - rr7     | scratch registers for helper macros  |
| Special    | avr, pc, af   | address value, program counter, flags|
| Stack      | ssp, usp      | supervisor / user stack pointers     |
| Exception  | et, era, ew   | exception type, return address, word |
| Memory     | mtt, pda, smt | mapping table, page dir, supervisor  |

Directives
----------
| Directive | Operand           |
|-----------|-------------------|
| #str      | string literal    |
| #d8       | 8-bit unsigned    |
| #d16      | 16-bit unsigned   |
| #d32      | 32-bit unsigned   |

The tables are built once at import time and never mutated. A Grammar
instance bundles them and is passed by reference into every highlighting
call; Grammar.extend() returns a new instance instead of modifying one.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional
import re


# =============================================================================
# Core Types
# =============================================================================

class LiteralKind(Enum):
    """Kind of literal a data directive embeds."""
    STRING = "string"
    INTEGER = "integer"


@dataclass(frozen=True)
class MnemonicInfo:
    """
    Description of one instruction mnemonic.

    Attributes:
        name: Canonical (lower-case) mnemonic
        operands: Operand shape, for display purposes (e.g. "reg, reg|lit")
        description: One-line summary of what the instruction does
    """
    name: str
    operands: str
    description: str


@dataclass(frozen=True)
class DirectiveInfo:
    """
    Description of a data directive.

    Attributes:
        name: Directive name without the leading '#'
        literal_kind: The literal kind its single operand must have
        bit_width: Unsigned width for integer directives, None for strings
        description: One-line summary
    """
    name: str
    literal_kind: LiteralKind
    bit_width: Optional[int]
    description: str

    @property
    def max_value(self) -> Optional[int]:
        """Largest value an integer operand may take."""
        if self.bit_width is None:
            return None
        return (1 << self.bit_width) - 1

    def fits(self, value: int) -> bool:
        """Check whether an integer fits the directive's unsigned width."""
        if self.bit_width is None:
            return False
        return 0 <= value <= (1 << self.bit_width) - 1


# =============================================================================
# Instruction Set
# =============================================================================

def _mnemonics(*entries: tuple[str, str, str]) -> Mapping[str, MnemonicInfo]:
    return MappingProxyType({
        name: MnemonicInfo(name, operands, description)
        for name, operands, description in entries
    })


MNEMONIC_TABLE: Mapping[str, MnemonicInfo] = _mnemonics(
    # Data movement
    ("cpy", "reg, reg|lit", "copy a value into a register"),
    ("ex", "reg, reg", "exchange two registers"),
    # Arithmetic
    ("add", "reg, reg|lit", "add to a register"),
    ("sub", "reg, reg|lit", "subtract from a register"),
    ("mul", "reg, reg|lit", "multiply a register"),
    ("div", "reg, reg|lit, mode", "divide a register"),
    ("mod", "reg, reg|lit, mode", "remainder of a division"),
    # Bitwise
    ("and", "reg, reg|lit", "bitwise AND"),
    ("bor", "reg, reg|lit", "bitwise OR"),
    ("xor", "reg, reg|lit", "bitwise exclusive OR"),
    ("shl", "reg, reg|lit", "shift left"),
    ("shr", "reg, reg|lit", "shift right"),
    # Flags and control flow
    ("cmp", "reg, reg|lit", "compare two values and set flags"),
    ("jpr", "reg|lit", "relative jump"),
    ("lsm", "reg|lit", "leave supervisor mode"),
    ("itr", "reg|lit", "raise an interrupt"),
    ("if", "reg|lit", "run next instruction if a flag is set"),
    ("ifor", "reg|lit, reg|lit", "run next instruction if either flag is set"),
    ("ifand", "reg|lit, reg|lit", "run next instruction if both flags are set"),
    ("ifn", "reg|lit", "run next instruction if a flag is clear"),
    ("if2", "reg|lit, reg|lit, cond", "two-flag conditional"),
    # Memory
    ("lsa", "reg, reg|lit, reg|lit", "load from a stack-relative address"),
    ("lea", "reg|lit, reg|lit, reg|lit", "load from an effective address into avr"),
    ("wsa", "reg|lit, reg|lit, reg|lit", "write to a stack-relative address"),
    ("wea", "reg|lit, reg|lit, reg|lit", "write avr to an effective address"),
    ("srm", "reg|lit, reg|lit, reg", "swap a register with memory"),
    # Stack and calls
    ("push", "reg|lit", "push onto the stack"),
    ("pop", "reg", "pop from the stack"),
    ("call", "reg|lit", "call a subroutine"),
    # Hardware and machine state
    ("hwd", "reg, reg|lit, reg|lit", "query hardware device information"),
    ("cycles", "reg", "read the cycle counter"),
    ("halt", "", "halt the processor"),
    ("reset", "reg|lit", "reset the motherboard"),
    # Assembler helpers
    ("jp", "label", "jump to a label"),
    ("zro", "reg", "set a register to zero"),
    ("inc", "reg", "increment a register"),
    ("dec", "reg", "decrement a register"),
    ("not", "reg", "bitwise NOT"),
)

MNEMONICS: frozenset[str] = frozenset(MNEMONIC_TABLE)

# Mnemonics whose operand is a label name
JUMP_MNEMONICS: frozenset[str] = frozenset({"jp"})


# =============================================================================
# Register File
# =============================================================================

REGISTERS: frozenset[str] = frozenset(
    [f"a{i}" for i in range(8)]
    + [f"c{i}" for i in range(2)]
    + [f"ac{i}" for i in range(3)]
    + [f"rr{i}" for i in range(8)]
    + ["avr", "pc", "af", "ssp", "usp", "et", "era", "ew", "mtt", "pda", "smt"]
)


# =============================================================================
# Directives
# =============================================================================

DIRECTIVE_TABLE: Mapping[str, DirectiveInfo] = MappingProxyType({
    "str": DirectiveInfo("str", LiteralKind.STRING, None, "embed a string"),
    "d8": DirectiveInfo("d8", LiteralKind.INTEGER, 8, "embed an 8-bit value"),
    "d16": DirectiveInfo("d16", LiteralKind.INTEGER, 16, "embed a 16-bit value"),
    "d32": DirectiveInfo("d32", LiteralKind.INTEGER, 32, "embed a 32-bit value"),
})

DIRECTIVE_SIGIL = "#"
LABEL_SIGIL = "."

# Shape of a mnemonic or register name accepted from grammar extensions
NAME_PATTERN = re.compile(r"^[a-z_][a-z0-9_]*$")


# =============================================================================
# Grammar Bundle
# =============================================================================

@dataclass(frozen=True)
class Grammar:
    """
    Immutable bundle of the tables the classifier consults.

    Mnemonics and registers are stored in lower case. Lookups can be made
    case-insensitive by the caller; directives always match exactly.
    """
    mnemonics: Mapping[str, MnemonicInfo] = field(default_factory=lambda: MNEMONIC_TABLE)
    registers: frozenset[str] = field(default=REGISTERS)
    directives: Mapping[str, DirectiveInfo] = field(default_factory=lambda: DIRECTIVE_TABLE)
    jump_mnemonics: frozenset[str] = field(default=JUMP_MNEMONICS)

    def is_mnemonic(self, text: str, case_sensitive: bool = False) -> bool:
        return (text if case_sensitive else text.lower()) in self.mnemonics

    def is_register(self, text: str, case_sensitive: bool = False) -> bool:
        return (text if case_sensitive else text.lower()) in self.registers

    def is_jump(self, text: str, case_sensitive: bool = False) -> bool:
        return (text if case_sensitive else text.lower()) in self.jump_mnemonics

    def get_directive(self, name: str) -> Optional[DirectiveInfo]:
        """Look up a directive by its name without the '#' sigil."""
        return self.directives.get(name)

    def get_mnemonic(self, text: str) -> Optional[MnemonicInfo]:
        return self.mnemonics.get(text.lower())

    def extend(
        self,
        mnemonics: Optional[Iterable[MnemonicInfo]] = None,
        registers: Optional[Iterable[str]] = None,
        jump_mnemonics: Optional[Iterable[str]] = None,
    ) -> "Grammar":
        """
        Return a new Grammar with additional mnemonics and registers.

        Existing entries with the same name are replaced in the new grammar
        only; this instance is left untouched.
        """
        merged = dict(self.mnemonics)
        for info in mnemonics or ():
            merged[info.name.lower()] = info

        return Grammar(
            mnemonics=MappingProxyType(merged),
            registers=self.registers | {r.lower() for r in registers or ()},
            directives=self.directives,
            jump_mnemonics=(
                self.jump_mnemonics | {j.lower() for j in jump_mnemonics or ()}
            ),
        )


DEFAULT_GRAMMAR = Grammar()
