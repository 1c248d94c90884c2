import os
import sys
from decimal import Decimal

import pytest

# Ensure the package is on the path when running tests from a checkout
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from curvepad.curvescript import parse
from curvepad.compiler import Instruction, compile_program
from curvepad.curvevm import CurveVM
from curvepad.engine import BuyQuote, BuyResult, CurveEngine, SellQuote, SellResult
from curvepad.errors import InsufficientBalance, InvalidAmount
from curvepad.milestones import MilestoneRecorder


def test_buy_pipeline():
    script = "BUY 100"
    ast = parse(script)
    program = compile_program(ast)
    assert program == [Instruction("BUY", Decimal("100"))]
    engine = CurveEngine()
    outcomes = CurveVM(engine).execute(program)
    assert isinstance(outcomes[0], BuyResult)
    assert outcomes[0].tokens_out == Decimal("15344637526702.880859375")
    assert engine.pool_balance == Decimal("115")


def test_all_opcodes_pipeline():
    script = """
    # launch day
    QUOTE_BUY 100
    buy 100
    QUOTE_SELL 5000   # check the exit
    SELL 5000
    """
    program = compile_program(parse(script))
    assert [ins.opcode for ins in program] == ["QUOTE_BUY", "BUY", "QUOTE_SELL", "SELL"]
    engine = CurveEngine()
    vm = CurveVM(engine)
    quote_buy, bought, quote_sell, sold = vm.execute(program)
    assert isinstance(quote_buy, BuyQuote)
    assert isinstance(quote_sell, SellQuote)
    assert isinstance(sold, SellResult)
    assert quote_buy.tokens_out == bought.tokens_out
    assert quote_sell.net_out == sold.net_out
    assert vm.executed == 4
    assert engine.current_supply == engine.fp.sub(
        engine.fp.add(Decimal("800000000"), bought.tokens_out), Decimal("5000")
    )


def test_pipeline_reports_milestones():
    engine = CurveEngine()
    recorder = MilestoneRecorder()
    engine.subscribe(recorder)
    CurveVM(engine).execute(compile_program(parse("BUY 250000")))
    assert recorder.names() == ["ListingReady", "FirstBurnExecuted", "SecondBurnExecuted"]


def test_failed_instruction_keeps_earlier_trades():
    engine = CurveEngine()
    vm = CurveVM(engine)
    program = compile_program(parse("BUY 100\nSELL 99999999999999999"))
    with pytest.raises(InsufficientBalance):
        vm.execute(program)
    assert vm.executed == 1
    assert engine.pool_balance == Decimal("115")


@pytest.mark.parametrize("script", ["BUY", "BUY 1 2", "MINT 5", "MIGRATE_TO_AMM 1"])
def test_parse_rejects_bad_statements(script):
    with pytest.raises(ValueError):
        parse(script)


def test_parse_tracks_line_numbers():
    commands = parse("\n\nSELL 3\n")
    assert commands[0].line == 3
    assert commands[0].operand == "3"


@pytest.mark.parametrize("script", ["BUY 0", "SELL -1", "BUY lots"])
def test_compile_rejects_bad_amounts(script):
    with pytest.raises(InvalidAmount):
        compile_program(parse(script))


def test_vm_rejects_unknown_opcode():
    with pytest.raises(ValueError):
        CurveVM(CurveEngine()).execute([Instruction("ADD_LIQUIDITY", Decimal(1))])
