from dataclasses import dataclass
from typing import List

OPCODES = ("BUY", "SELL", "QUOTE_BUY", "QUOTE_SELL")


@dataclass
class Command:
    opcode: str
    operand: str
    line: int = 0


def parse(script: str) -> List[Command]:
    """Parse a trade script: one ``OPCODE amount`` per line, ``#`` starts a comment."""
    commands: List[Command] = []
    for number, line in enumerate(script.splitlines(), start=1):
        line = line.split("#", 1)[0].strip()
        if not line:
            continue
        parts = line.split()
        if len(parts) != 2 or parts[0].upper() not in OPCODES:
            raise ValueError(f"Invalid statement on line {number}: {line}")
        commands.append(Command(opcode=parts[0].upper(), operand=parts[1], line=number))
    return commands
