import logging
from typing import List, Union

from .compiler import Instruction
from .engine import BuyQuote, BuyResult, CurveEngine, SellQuote, SellResult
from .errors import CurveError

log = logging.getLogger(__name__)

Outcome = Union[BuyQuote, SellQuote, BuyResult, SellResult]


class CurveVM:
    """Runs compiled trade programs against a CurveEngine."""

    def __init__(self, engine: CurveEngine) -> None:
        self.engine = engine
        self.executed = 0

    def step(self, ins: Instruction) -> Outcome:
        op = ins.opcode.upper()
        if op == "BUY":
            return self.engine.execute_buy(ins.operand)
        elif op == "SELL":
            return self.engine.execute_sell(ins.operand)
        elif op == "QUOTE_BUY":
            return self.engine.quote_buy(ins.operand)
        elif op == "QUOTE_SELL":
            return self.engine.quote_sell(ins.operand)
        else:
            raise ValueError(f"Unknown opcode: {ins.opcode}")

    def execute(self, program: List[Instruction]) -> List[Outcome]:
        outcomes: List[Outcome] = []
        for index, ins in enumerate(program):
            try:
                outcomes.append(self.step(ins))
            except CurveError as e:
                log.warning(f"Instruction {index} ({ins.opcode} {ins.operand}) rejected: {e}")
                raise
            self.executed += 1
        return outcomes
