"""
CHIP-8 Assembly Language Parser (Pass 1)
========================================

This module recognizes CHIP-8 instructions line by line and turns them into
Statement records placed at absolute addresses. It is the first of the two
assembly passes:

- Tracks the 16-bit program counter, starting at the load address $200
- Records label definitions in the symbol table
- Validates every mnemonic's operands against the instruction grammar
- Appends one Statement per instruction, per .byte value and per .word value

Address operands (call, jp, jp v0, ld i) are kept as raw text. They are
resolved by the code generator once every label is known, which is what
makes forward references work.

Source Syntax
-------------
```asm
        .org  $200          ; set the program counter
start:  cls                 ; label definition, then an instruction
        ld    v0, $0A       ; immediate load
        ld    i, sprite     ; forward reference
        drw   v0, v1, 5
        jp    start
sprite: .byte $F0, $90, $F0 ; raw data
        .word $1234
```

Operand Disambiguation
----------------------
Several mnemonics have more than one encoding. The parser tries a register
parse on the operand that tells the forms apart:

| Mnemonic | Forms                                                    |
|----------|----------------------------------------------------------|
| add      | vx, vy / i, vx / vx, nn                                  |
| se, sne  | vx, vy / vx, nn                                          |
| jp       | v0, addr / addr                                          |
| ld       | vx, vy / vx, nn / vx, dt / vx, k / vx, [i] / i, addr /   |
|          | b, vx / dt, vx / f, vx / [i], vx / st, vx                |
| shl, shr | vx / vx, vy                                              |

Any error aborts the parse: there is no recovery or resynchronization.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional
import logging

from chip8_sdk.errors import (
    DirectiveError,
    OperandError,
    OperandRangeError,
    SourceLocation,
    UnknownMnemonicError,
)
from chip8_sdk.assembler.lexer import Token, tokenize_line
from chip8_sdk.assembler.opcodes import (
    ENCODING_TABLE,
    LOAD_ADDRESS,
    MAX_BYTE,
    MAX_NIBBLE,
    MAX_WORD,
    InstructionKind,
    Register,
    usage_for,
)
from chip8_sdk.assembler.operands import parse_integer, parse_register

logger = logging.getLogger(__name__)


# =============================================================================
# Statement Data Classes
# =============================================================================

@dataclass
class Statement:
    """
    One emitted unit of program: an instruction, a .byte value or a .word value.

    Attributes:
        kind: Which instruction form or data directive this is
        offset: Absolute address the statement is placed at
        size: Encoded length in bytes (1 for .byte, 2 otherwise)
        location: Source location of the mnemonic
        x: First register operand (0-15)
        y: Second register operand (0-15)
        n: Nibble immediate
        nn: Byte immediate
        value: Data value of .byte/.word
        address: Raw label-or-literal text, resolved by the code generator
        address_location: Source location of the address operand
        source_line: Source text the statement came from
    """
    kind: InstructionKind
    offset: int
    size: int
    location: SourceLocation
    x: int = 0
    y: int = 0
    n: int = 0
    nn: int = 0
    value: int = 0
    address: Optional[str] = None
    address_location: Optional[SourceLocation] = None
    source_line: str = ""

    @property
    def end(self) -> int:
        """Address just past this statement."""
        return self.offset + self.size


@dataclass
class ParseResult:
    """
    Output of the first pass.

    Attributes:
        statements: Statements in program order
        symbols: Label name -> address
        lines: Source lines, for listings (index 0 is line 1)
        filename: Name of the parsed source
    """
    statements: list[Statement] = field(default_factory=list)
    symbols: dict[str, int] = field(default_factory=dict)
    lines: list[str] = field(default_factory=list)
    filename: str = "<input>"


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    First pass of the CHIP-8 assembler.

    A Parser instance owns the state of one assembly run: the statement
    list, the symbol table and the program counter. Each call to parse()
    starts from a clean state.

    Usage:
        result = Parser("game.s").parse(source)
        for stmt in result.statements:
            print(f"${stmt.offset:04X} {stmt.kind.name}")
    """

    def __init__(self, filename: str = "<input>"):
        self.filename = filename
        self._reset()

        # mnemonic -> handler(mnemonic_token, operand_tokens)
        self._handlers: dict[str, Callable[[Token, list[Token]], None]] = {
            ".org": self._parse_org,
            ".byte": self._parse_byte,
            ".word": self._parse_word,
            "add": self._parse_add,
            "and": self._parse_register_pair,
            "call": self._parse_call,
            "cls": self._parse_no_operands,
            "drw": self._parse_drw,
            "jp": self._parse_jp,
            "ld": self._parse_ld,
            "or": self._parse_register_pair,
            "ret": self._parse_no_operands,
            "rnd": self._parse_rnd,
            "se": self._parse_skip_equal,
            "shl": self._parse_shift,
            "shr": self._parse_shift,
            "sknp": self._parse_key_skip,
            "skp": self._parse_key_skip,
            "sne": self._parse_skip_equal,
            "sub": self._parse_register_pair,
            "subn": self._parse_register_pair,
            "xor": self._parse_register_pair,
        }

    def _reset(self) -> None:
        self._statements: list[Statement] = []
        self._symbols: dict[str, int] = {}
        self._pc = LOAD_ADDRESS
        self._line_number = 0
        self._source_line = ""

    # =========================================================================
    # Public Interface
    # =========================================================================

    def parse(self, source: str) -> ParseResult:
        """
        Parse a complete source text.

        Args:
            source: Assembly source code

        Returns:
            ParseResult with statements and symbol table

        Raises:
            AssemblerError: On the first lexical or grammar error
        """
        self._reset()
        lines = split_lines(source)

        for line_number, line in enumerate(lines, start=1):
            self.parse_line(line, line_number)

        logger.debug(
            f"{self.filename}: {len(self._statements)} statements, "
            f"{len(self._symbols)} symbols"
        )

        return ParseResult(
            statements=self._statements,
            symbols=self._symbols,
            lines=lines,
            filename=self.filename,
        )

    def parse_line(self, line: str, line_number: int) -> None:
        """
        Parse one source line, appending its statements.

        Args:
            line: Source text of the line
            line_number: 1-indexed line number for error messages
        """
        self._line_number = line_number
        self._source_line = line.rstrip("\r\n")

        tokens = tokenize_line(line, self.filename, line_number)
        if not tokens:
            return

        if tokens[0].is_label:
            self._define_label(tokens[0])
            tokens = tokens[1:]
            if not tokens:
                return

        mnemonic = tokens[0]
        handler = self._handlers.get(mnemonic.text)
        if handler is None:
            raise UnknownMnemonicError(
                mnemonic.text,
                location=mnemonic.location,
                source_line=self._source_line,
            )

        handler(mnemonic, tokens[1:])

    @property
    def program_counter(self) -> int:
        """Address the next statement will be placed at."""
        return self._pc

    # =========================================================================
    # Labels
    # =========================================================================

    def _define_label(self, token: Token) -> None:
        name = token.text[:-1]
        previous = self._symbols.get(name)
        if previous is not None and previous != self._pc:
            logger.warning(
                f"{token.location}: label '{name}' redefined "
                f"(was ${previous:04X}, now ${self._pc:04X})"
            )
        # Last definition wins
        self._symbols[name] = self._pc
        logger.debug(f"label '{name}' = ${self._pc:04X}")

    # =========================================================================
    # Statement Emission
    # =========================================================================

    def _emit(self, kind: InstructionKind, mnemonic: Token, **fields) -> Statement:
        """Append a statement at the program counter and advance it."""
        stmt = Statement(
            kind=kind,
            offset=self._pc,
            size=ENCODING_TABLE[kind].size,
            location=mnemonic.location,
            source_line=self._source_line,
            **fields,
        )
        self._statements.append(stmt)
        # 16-bit program counter wraps
        self._pc = (self._pc + stmt.size) & MAX_WORD
        return stmt

    def _emit_address(self, kind: InstructionKind, mnemonic: Token, operand: Token) -> None:
        self._emit(
            kind,
            mnemonic,
            address=operand.text,
            address_location=operand.location,
        )

    # =========================================================================
    # Operand Helpers
    # =========================================================================

    def _operand_error(
        self,
        mnemonic: Token,
        reason: str,
        token: Optional[Token] = None,
    ) -> OperandError:
        """Build an OperandError pointing at token (or the whole line)."""
        if token is not None:
            location = token.location
        else:
            location = SourceLocation(self.filename, self._line_number)
        usage = " | ".join(usage_for(mnemonic.text)) or None
        return OperandError(
            mnemonic.text,
            reason,
            location=location,
            source_line=self._source_line,
            usage=usage,
        )

    def _expect_count(self, mnemonic: Token, operands: list[Token], *counts: int) -> None:
        if len(operands) not in counts:
            if len(operands) < min(counts):
                reason = "missing argument(s)"
            else:
                reason = "unexpected argument(s)"
            raise self._operand_error(mnemonic, reason)

    def _general_register(self, mnemonic: Token, token: Token) -> int:
        """Parse a V0-VF operand, or fail pointing at the token."""
        register = parse_register(token.text)
        if register is None or not register.is_general:
            raise self._operand_error(mnemonic, f"invalid register '{token.text}'", token)
        return int(register)

    def _immediate(self, mnemonic: Token, token: Token, max_value: int) -> int:
        """Parse an immediate operand bounded by max_value."""
        if parse_register(token.text) is not None:
            raise self._operand_error(
                mnemonic, f"register '{token.text}' where a value was expected", token
            )
        value = parse_integer(token.text, max_value)
        if value is None:
            raise OperandRangeError(
                mnemonic.text,
                token.text,
                max_value,
                location=token.location,
                source_line=self._source_line,
            )
        return value

    # =========================================================================
    # Directives
    # =========================================================================

    def _parse_org(self, mnemonic: Token, operands: list[Token]) -> None:
        if len(operands) != 1:
            raise DirectiveError(
                "missing or unexpected argument(s) to '.org'",
                location=mnemonic.location,
                source_line=self._source_line,
            )
        origin = parse_integer(operands[0].text, MAX_WORD)
        if origin is None:
            raise DirectiveError(
                f"invalid argument '{operands[0].text}' to '.org'",
                location=operands[0].location,
                source_line=self._source_line,
            )
        self._pc = origin & MAX_WORD

    def _parse_data(
        self,
        mnemonic: Token,
        operands: list[Token],
        kind: InstructionKind,
        max_value: int,
    ) -> None:
        if not operands:
            raise DirectiveError(
                f"missing argument to '{mnemonic.text}'",
                location=mnemonic.location,
                source_line=self._source_line,
            )
        for operand in operands:
            value = parse_integer(operand.text, max_value)
            if value is None:
                raise DirectiveError(
                    f"invalid argument '{operand.text}' to '{mnemonic.text}'",
                    location=operand.location,
                    source_line=self._source_line,
                    hint=f"maximum is ${max_value:X}",
                )
            self._emit(kind, mnemonic, value=value)

    def _parse_byte(self, mnemonic: Token, operands: list[Token]) -> None:
        self._parse_data(mnemonic, operands, InstructionKind.DEFINE_BYTE, MAX_BYTE)

    def _parse_word(self, mnemonic: Token, operands: list[Token]) -> None:
        self._parse_data(mnemonic, operands, InstructionKind.DEFINE_WORD, MAX_WORD)

    # =========================================================================
    # Instructions
    # =========================================================================

    def _parse_no_operands(self, mnemonic: Token, operands: list[Token]) -> None:
        """cls, ret"""
        self._expect_count(mnemonic, operands, 0)
        kind = InstructionKind.CLS if mnemonic.text == "cls" else InstructionKind.RET
        self._emit(kind, mnemonic)

    def _parse_register_pair(self, mnemonic: Token, operands: list[Token]) -> None:
        """and, or, xor, sub, subn"""
        kinds = {
            "and": InstructionKind.AND_VX_VY,
            "or": InstructionKind.OR_VX_VY,
            "xor": InstructionKind.XOR_VX_VY,
            "sub": InstructionKind.SUB_VX_VY,
            "subn": InstructionKind.SUBN_VX_VY,
        }
        self._expect_count(mnemonic, operands, 2)
        x = self._general_register(mnemonic, operands[0])
        y = self._general_register(mnemonic, operands[1])
        self._emit(kinds[mnemonic.text], mnemonic, x=x, y=y)

    def _parse_shift(self, mnemonic: Token, operands: list[Token]) -> None:
        """shl vx / shr vx, with an optional vy source register."""
        self._expect_count(mnemonic, operands, 1, 2)
        x = self._general_register(mnemonic, operands[0])
        y = self._general_register(mnemonic, operands[1]) if len(operands) == 2 else 0
        if mnemonic.text == "shl":
            kind = InstructionKind.SHL_VX_VY
        else:
            kind = InstructionKind.SHR_VX_VY
        self._emit(kind, mnemonic, x=x, y=y)

    def _parse_key_skip(self, mnemonic: Token, operands: list[Token]) -> None:
        """skp vx, sknp vx"""
        self._expect_count(mnemonic, operands, 1)
        x = self._general_register(mnemonic, operands[0])
        if mnemonic.text == "skp":
            kind = InstructionKind.SKP_VX
        else:
            kind = InstructionKind.SKNP_VX
        self._emit(kind, mnemonic, x=x)

    def _parse_call(self, mnemonic: Token, operands: list[Token]) -> None:
        self._expect_count(mnemonic, operands, 1)
        self._emit_address(InstructionKind.CALL_ADDR, mnemonic, operands[0])

    def _parse_jp(self, mnemonic: Token, operands: list[Token]) -> None:
        if operands and parse_register(operands[0].text) == Register.V0:
            self._expect_count(mnemonic, operands, 2)
            self._emit_address(InstructionKind.JP_V0_ADDR, mnemonic, operands[1])
        else:
            self._expect_count(mnemonic, operands, 1)
            self._emit_address(InstructionKind.JP_ADDR, mnemonic, operands[0])

    def _parse_drw(self, mnemonic: Token, operands: list[Token]) -> None:
        self._expect_count(mnemonic, operands, 3)
        x = self._general_register(mnemonic, operands[0])
        y = self._general_register(mnemonic, operands[1])
        n = self._immediate(mnemonic, operands[2], MAX_NIBBLE)
        self._emit(InstructionKind.DRW_VX_VY_N, mnemonic, x=x, y=y, n=n)

    def _parse_rnd(self, mnemonic: Token, operands: list[Token]) -> None:
        self._expect_count(mnemonic, operands, 2)
        x = self._general_register(mnemonic, operands[0])
        nn = self._immediate(mnemonic, operands[1], MAX_BYTE)
        self._emit(InstructionKind.RND_VX_NN, mnemonic, x=x, nn=nn)

    def _parse_skip_equal(self, mnemonic: Token, operands: list[Token]) -> None:
        """se / sne with a register or an immediate as second operand."""
        self._expect_count(mnemonic, operands, 2)
        x = self._general_register(mnemonic, operands[0])
        equal = mnemonic.text == "se"

        if parse_register(operands[1].text) is not None:
            y = self._general_register(mnemonic, operands[1])
            kind = InstructionKind.SE_VX_VY if equal else InstructionKind.SNE_VX_VY
            self._emit(kind, mnemonic, x=x, y=y)
        else:
            nn = self._immediate(mnemonic, operands[1], MAX_BYTE)
            kind = InstructionKind.SE_VX_NN if equal else InstructionKind.SNE_VX_NN
            self._emit(kind, mnemonic, x=x, nn=nn)

    def _parse_add(self, mnemonic: Token, operands: list[Token]) -> None:
        """add vx, vy / add i, vx / add vx, nn"""
        self._expect_count(mnemonic, operands, 2)
        target = parse_register(operands[0].text)

        if parse_register(operands[1].text) is not None:
            source = self._general_register(mnemonic, operands[1])
            if target == Register.I:
                self._emit(InstructionKind.ADD_I_VX, mnemonic, x=source)
            elif target is not None and target.is_general:
                self._emit(InstructionKind.ADD_VX_VY, mnemonic, x=int(target), y=source)
            else:
                raise self._operand_error(
                    mnemonic, f"invalid register '{operands[0].text}'", operands[0]
                )
        else:
            x = self._general_register(mnemonic, operands[0])
            nn = self._immediate(mnemonic, operands[1], MAX_BYTE)
            self._emit(InstructionKind.ADD_VX_NN, mnemonic, x=x, nn=nn)

    def _parse_ld(self, mnemonic: Token, operands: list[Token]) -> None:
        """All ld forms, selected by the destination register."""
        self._expect_count(mnemonic, operands, 2)
        target_token, source_token = operands
        target = parse_register(target_token.text)

        if target is None:
            raise self._operand_error(
                mnemonic, f"invalid register '{target_token.text}'", target_token
            )

        if target.is_general:
            self._parse_ld_into_register(mnemonic, int(target), source_token)
        elif target == Register.I:
            self._emit_address(InstructionKind.LD_I_ADDR, mnemonic, source_token)
        else:
            kinds = {
                Register.B: InstructionKind.LD_B_VX,
                Register.DT: InstructionKind.LD_DT_VX,
                Register.F: InstructionKind.LD_F_VX,
                Register.I_INDIRECT: InstructionKind.LD_I_VX,
                Register.ST: InstructionKind.LD_ST_VX,
            }
            kind = kinds.get(target)
            if kind is None:
                raise self._operand_error(
                    mnemonic, f"invalid register '{target_token.text}'", target_token
                )
            x = self._general_register(mnemonic, source_token)
            self._emit(kind, mnemonic, x=x)

    def _parse_ld_into_register(self, mnemonic: Token, x: int, source_token: Token) -> None:
        source = parse_register(source_token.text)

        if source is None:
            nn = self._immediate(mnemonic, source_token, MAX_BYTE)
            self._emit(InstructionKind.LD_VX_NN, mnemonic, x=x, nn=nn)
            return

        if source.is_general:
            self._emit(InstructionKind.LD_VX_VY, mnemonic, x=x, y=int(source))
            return

        kinds = {
            Register.DT: InstructionKind.LD_VX_DT,
            Register.K: InstructionKind.LD_VX_K,
            Register.I_INDIRECT: InstructionKind.LD_VX_I,
        }
        kind = kinds.get(source)
        if kind is None:
            raise self._operand_error(
                mnemonic, f"invalid register '{source_token.text}'", source_token
            )
        self._emit(kind, mnemonic, x=x)


# =============================================================================
# Convenience Functions
# =============================================================================

def split_lines(source: str) -> list[str]:
    """
    Split source text into lines at newline characters only.

    A trailing carriage return is removed from each line. Form feeds and
    vertical tabs stay inside their line, where the lexer treats them as
    separators.
    """
    lines = source.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_source(source: str, filename: str = "<input>") -> ParseResult:
    """
    Run the first pass over a source text.

    Args:
        source: Assembly source code
        filename: Name of the source for error messages

    Returns:
        ParseResult with statements in program order and the symbol table

    Raises:
        AssemblerError: On the first lexical or grammar error
    """
    return Parser(filename).parse(source)
