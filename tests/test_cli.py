import json
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from curvepad.__main__ import describe, main
from curvepad.engine import CurveEngine


def test_replays_script(tmp_path, capsys):
    script = tmp_path / "trades.txt"
    script.write_text("QUOTE_BUY 100\nBUY 250000\nSELL 1000\n")
    assert main([str(script)]) == 0
    out = capsys.readouterr().out
    lines = out.splitlines()
    assert lines[0].startswith("QUOTE_BUY  tokens_out=15344637526702.880859375 fee=1")
    assert lines[1].startswith("BUY ")
    assert "milestone ListingReady" in lines[2]
    assert "milestone SecondBurnExecuted" in lines[4] and "burned 11138.22" in lines[4]
    assert lines[5].startswith("SELL ")
    snapshot = json.loads("\n".join(lines[6:]))
    assert snapshot["fired_milestones"] == ["listing", "first_burn", "second_burn"]


def test_uses_params_file(tmp_path, capsys):
    script = tmp_path / "trades.txt"
    script.write_text("BUY 10\n")
    params = tmp_path / "curve.json"
    params.write_text(json.dumps({"fee_rate": "0", "initial_supply": 1000}))
    assert main([str(script), "--params", str(params)]) == 0
    out = capsys.readouterr().out
    snapshot = json.loads(out[out.index("{"):])
    assert snapshot["fee_rate"] == "0"
    assert snapshot["initial_supply"] == "1000"


def test_reports_errors(tmp_path, capsys):
    script = tmp_path / "trades.txt"
    script.write_text("SELL 900000000\n")
    assert main([str(script)]) == 1
    assert "error:" in capsys.readouterr().err


def test_missing_script(tmp_path, capsys):
    assert main([str(tmp_path / "missing.txt")]) == 1
    assert "error:" in capsys.readouterr().err


def test_describe_formats_each_outcome():
    engine = CurveEngine()
    assert describe(engine.quote_buy(100)).startswith("QUOTE_BUY  tokens_out=")
    assert describe(engine.quote_sell(1000)).startswith("QUOTE_SELL net_out=")
    assert describe(engine.execute_buy(100)).startswith("BUY        tokens_out=")
    assert describe(engine.execute_sell(1000)).startswith("SELL       net_out=")
    with pytest.raises(TypeError):
        describe("BUY 100")
