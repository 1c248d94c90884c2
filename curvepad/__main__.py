"""
Replay a trade script against a fresh bonding curve.

Run:
  python -m curvepad trades.txt --params curve.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .compiler import compile_program
from .curvescript import parse
from .curvevm import CurveVM, Outcome
from .engine import BuyQuote, BuyResult, CurveEngine, SellQuote, SellResult
from .errors import CurveError
from .fixedpoint import display
from .milestones import BurnExecuted, MilestoneEvent
from .params import CurveParams


def describe(outcome: Outcome) -> str:
    if isinstance(outcome, BuyResult):
        return (f"BUY        tokens_out={display(outcome.tokens_out)} fee={display(outcome.fee)} "
                f"price={display(outcome.price_after)}")
    if isinstance(outcome, SellResult):
        return (f"SELL       net_out={display(outcome.net_out)} fee={display(outcome.fee)} "
                f"price={display(outcome.price_after)}")
    if isinstance(outcome, BuyQuote):
        return (f"QUOTE_BUY  tokens_out={display(outcome.tokens_out)} fee={display(outcome.fee)} "
                f"price_before={display(outcome.price_before_trade)}")
    if isinstance(outcome, SellQuote):
        return (f"QUOTE_SELL net_out={display(outcome.net_out)} fee={display(outcome.fee)} "
                f"price_after={display(outcome.price_after_trade)}")
    raise TypeError(f"Unexpected outcome {outcome!r}")


def describe_event(event: MilestoneEvent) -> str:
    text = f"  milestone {event.name} at market cap {display(event.market_cap)}"
    if isinstance(event, BurnExecuted):
        text += f", burned {display(event.amount)}"
    return text


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="curvepad", description="Replay a trade script against a bonding curve")
    parser.add_argument("script", help="Trade script (one 'OPCODE amount' per line)")
    parser.add_argument("--params", help="JSON file with curve parameters")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        params = CurveParams.from_json(args.params) if args.params else CurveParams()
        program = compile_program(parse(Path(args.script).read_text(encoding="utf-8")))
        engine = CurveEngine(params)
        outcomes = CurveVM(engine).execute(program)
    except (CurveError, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    for outcome in outcomes:
        print(describe(outcome))
        for event in getattr(outcome, "milestones", ()):
            print(describe_event(event))
    print(json.dumps(engine.snapshot(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
