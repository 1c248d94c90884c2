from dataclasses import dataclass
from decimal import Decimal
from typing import List

from .curvescript import OPCODES, Command
from .errors import InvalidAmount
from .fixedpoint import ZERO, to_decimal


@dataclass
class Instruction:
    opcode: str
    operand: Decimal


def compile_program(commands: List[Command]) -> List[Instruction]:
    """Compile parsed Commands into CurveVM instructions with Decimal operands."""
    instructions: List[Instruction] = []
    for cmd in commands:
        op = cmd.opcode.upper()
        if op not in OPCODES:
            raise ValueError(f"Unknown command: {cmd.opcode}")
        amount = to_decimal(cmd.operand)
        if amount <= ZERO:
            raise InvalidAmount(f"Amount must be positive on line {cmd.line}: {cmd.operand}")
        instructions.append(Instruction(opcode=op, operand=amount))
    return instructions
