import os
import sys
import threading
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from curvepad.engine import CurveEngine
from curvepad.errors import ConfigurationError
from curvepad.params import CurveParams
from curvepad.registry import CurveRegistry


def test_create_and_get():
    registry = CurveRegistry()
    engine = registry.create("PEPE2")
    other = registry.create("DOGE3", CurveParams(fee_rate="0.02"))
    assert registry.get("PEPE2") is engine
    assert registry.get("DOGE3").fee_rate == Decimal("0.02")
    assert "PEPE2" in registry
    assert "WIF" not in registry
    assert len(registry) == 2
    assert registry.token_ids() == ["PEPE2", "DOGE3"]
    assert other is not engine


def test_create_with_overrides():
    registry = CurveRegistry()
    engine = registry.create("MOON", reserve_ratio="0.5")
    assert engine.reserve_ratio == Decimal("0.5")


def test_duplicate_token_rejected():
    registry = CurveRegistry()
    registry.create("PEPE2")
    with pytest.raises(ConfigurationError):
        registry.create("PEPE2")


def test_unknown_token():
    registry = CurveRegistry()
    with pytest.raises(KeyError):
        registry.get("NOPE")
    with pytest.raises(KeyError):
        with registry.session("NOPE"):
            pass


def test_session_holds_token_lock():
    registry = CurveRegistry()
    registry.create("PEPE2")
    with registry.session("PEPE2") as engine:
        assert isinstance(engine, CurveEngine)
        assert registry._locks["PEPE2"].locked()
    assert not registry._locks["PEPE2"].locked()


def test_concurrent_sessions_serialize_trades():
    registry = CurveRegistry()
    registry.create("PEPE2")

    def trader():
        for _ in range(5):
            with registry.session("PEPE2") as engine:
                quote = engine.quote_buy(10)
                result = engine.execute_buy(10)
                assert result.tokens_out == quote.tokens_out

    threads = [threading.Thread(target=trader) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    sequential = CurveEngine()
    for _ in range(20):
        sequential.execute_buy(10)
    engine = registry.get("PEPE2")
    assert engine.pool_balance == Decimal("214")
    assert engine.current_supply == sequential.current_supply
