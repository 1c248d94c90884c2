import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from . import curve_math
from .errors import CurveDepleted, InsufficientBalance, InvalidAmount
from .fixedpoint import ZERO, FixedPoint, Number, display
from .milestones import (
    FirstBurnExecuted,
    ListingReady,
    Milestone,
    MilestoneEvent,
    MilestoneListener,
    MilestoneTracker,
    SecondBurnExecuted,
)
from .params import CurveParams

log = logging.getLogger(__name__)


@dataclass
class BuyQuote:
    tokens_out: Decimal
    fee: Decimal
    # Price before the trade; a buy quote never reports the post-trade price.
    price_before_trade: Decimal


@dataclass
class SellQuote:
    net_out: Decimal
    fee: Decimal
    price_after_trade: Decimal


@dataclass
class BuyResult:
    tokens_out: Decimal
    fee: Decimal
    price_after: Decimal
    current_supply: Decimal
    pool_balance: Decimal
    milestones: Tuple[MilestoneEvent, ...] = field(default_factory=tuple)


@dataclass
class SellResult:
    net_out: Decimal
    fee: Decimal
    price_after: Decimal
    current_supply: Decimal
    pool_balance: Decimal
    milestones: Tuple[MilestoneEvent, ...] = field(default_factory=tuple)


_EVENT_TYPES = {
    Milestone.LISTING: ListingReady,
    Milestone.FIRST_BURN: FirstBurnExecuted,
    Milestone.SECOND_BURN: SecondBurnExecuted,
}


class CurveEngine:
    """Pricing state and trade execution for one token's bonding curve.

    Quotes never mutate. Executions re-run the quote, validate completely,
    then apply the deltas and evaluate milestones. The engine is not
    thread-safe; serialize access per token (see ``CurveRegistry.session``).
    """

    def __init__(self, params: Optional[CurveParams] = None, **overrides: Any) -> None:
        if params is None:
            params = CurveParams(**overrides)
        elif overrides:
            raise TypeError("Pass either a CurveParams or keyword overrides, not both")
        self.params = params
        self.fp = FixedPoint(params.scale)
        self.initial_supply: Decimal = self.fp.truncate(params.initial_supply)
        self.reserve_ratio: Decimal = self.fp.truncate(params.reserve_ratio)
        self.initial_price: Decimal = self.fp.truncate(params.initial_price)
        self.fee_rate: Decimal = self.fp.truncate(params.fee_rate)
        self.current_supply: Decimal = self.fp.truncate(params.current_supply)
        self.pool_balance: Decimal = self.fp.mul(
            self.fp.mul(self.initial_supply, self.initial_price), self.reserve_ratio
        )
        self._milestones = MilestoneTracker(params.fired_milestones)
        self._listeners: List[MilestoneListener] = []

    # -- listeners -------------------------------------------------------

    def subscribe(self, listener: MilestoneListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: MilestoneListener) -> None:
        self._listeners.remove(listener)

    # -- derived reads ---------------------------------------------------

    def current_price(self) -> Decimal:
        return curve_math.price(self.fp, self.pool_balance, self.current_supply, self.reserve_ratio)

    def market_cap(self) -> Decimal:
        return self.fp.mul(self.current_supply, self.current_price())

    @property
    def fired_milestones(self) -> FrozenSet[Milestone]:
        return self._milestones.fired

    def snapshot(self) -> Dict[str, Any]:
        price = self.current_price()
        return {
            "initial_supply": display(self.initial_supply),
            "reserve_ratio": display(self.reserve_ratio),
            "initial_price": display(self.initial_price),
            "fee_rate": display(self.fee_rate),
            "current_supply": display(self.current_supply),
            "pool_balance": display(self.pool_balance),
            "current_price": display(price),
            "market_cap": display(self.fp.mul(self.current_supply, price)),
            "fired_milestones": [m.value for m in Milestone if m in self.fired_milestones],
        }

    # -- quotes ----------------------------------------------------------

    def _amount(self, amount: Number) -> Decimal:
        value = self.fp.coerce(amount)
        if value <= ZERO:
            raise InvalidAmount(f"Amount must be positive, got {amount!r}")
        return value

    def quote_buy(self, amount: Number) -> BuyQuote:
        amount_in = self._amount(amount)
        if self.current_supply == ZERO or self.pool_balance == ZERO:
            raise CurveDepleted("Curve has no supply or reserve to price a buy")
        fee = self.fp.mul(amount_in, self.fee_rate)
        target_pool = self.fp.add(self.pool_balance, self.fp.sub(amount_in, fee))
        new_supply = curve_math.supply_for_pool(
            self.fp, self.pool_balance, self.current_supply, self.reserve_ratio, target_pool
        )
        tokens_out = self.fp.sub(new_supply, self.current_supply)
        quote = BuyQuote(tokens_out=tokens_out, fee=fee, price_before_trade=self.current_price())
        log.debug(f"Quote buy {amount_in}: {tokens_out} tokens, fee {fee}")
        return quote

    def _sell_target(self, amount: Number) -> Tuple[Decimal, Decimal, Decimal]:
        tokens = self._amount(amount)
        if tokens > self.current_supply:
            raise InsufficientBalance(
                f"Cannot sell {tokens} tokens, only {self.current_supply} in circulation"
            )
        target_supply = self.fp.sub(self.current_supply, tokens)
        target_pool = curve_math.pool_for_supply(
            self.fp, self.pool_balance, self.current_supply, self.reserve_ratio, target_supply
        )
        return tokens, target_supply, target_pool

    def quote_sell(self, amount: Number) -> SellQuote:
        tokens, target_supply, target_pool = self._sell_target(amount)
        gross_out = self.fp.sub(self.pool_balance, target_pool)
        fee = self.fp.mul(gross_out, self.fee_rate)
        net_out = self.fp.sub(gross_out, fee)
        price_after = curve_math.price(self.fp, target_pool, target_supply, self.reserve_ratio)
        log.debug(f"Quote sell {tokens}: {net_out} out, fee {fee}")
        return SellQuote(net_out=net_out, fee=fee, price_after_trade=price_after)

    # -- execution -------------------------------------------------------

    def execute_buy(self, amount: Number) -> BuyResult:
        amount_in = self._amount(amount)
        quote = self.quote_buy(amount_in)
        pool = self.fp.add(self.pool_balance, self.fp.sub(amount_in, quote.fee))
        supply = self.fp.add(self.current_supply, quote.tokens_out)

        self.pool_balance = pool
        self.current_supply = supply
        log.info(f"Buy {amount_in}: {quote.tokens_out} tokens out, fee {quote.fee}")
        events = self._check_milestones()

        result = BuyResult(
            tokens_out=quote.tokens_out,
            fee=quote.fee,
            price_after=self.current_price(),
            current_supply=self.current_supply,
            pool_balance=self.pool_balance,
            milestones=tuple(events),
        )
        self._notify(events)
        return result

    def execute_sell(self, amount: Number) -> SellResult:
        tokens = self._amount(amount)
        quote = self.quote_sell(tokens)
        supply = self.fp.sub(self.current_supply, tokens)
        pool = self.fp.sub(self.pool_balance, self.fp.add(quote.net_out, quote.fee))

        self.current_supply = supply
        self.pool_balance = pool
        log.info(f"Sell {tokens}: {quote.net_out} out, fee {quote.fee}")
        events = self._check_milestones()

        result = SellResult(
            net_out=quote.net_out,
            fee=quote.fee,
            price_after=self.current_price(),
            current_supply=self.current_supply,
            pool_balance=self.pool_balance,
            milestones=tuple(events),
        )
        self._notify(events)
        return result

    # -- milestones ------------------------------------------------------

    def _check_milestones(self) -> List[MilestoneEvent]:
        cap = self.market_cap()
        events: List[MilestoneEvent] = []
        for milestone in self._milestones.due(cap, self.params.threshold):
            self._milestones.mark_fired(milestone)
            event_type = _EVENT_TYPES[milestone]
            if milestone is Milestone.LISTING:
                events.append(event_type(milestone=milestone, market_cap=cap))
                continue
            burned = self._burn(self.params.burn_fraction(milestone))
            events.append(event_type(
                milestone=milestone,
                market_cap=cap,
                amount=burned,
                pool_balance=self.pool_balance,
            ))
        return events

    def _burn(self, fraction: Decimal) -> Decimal:
        amount = self.fp.mul(self.pool_balance, fraction)
        self.pool_balance = self.fp.sub(self.pool_balance, amount)
        log.info(f"Burned {amount} from pool, {self.pool_balance} remains")
        return amount

    def _notify(self, events: List[MilestoneEvent]) -> None:
        for event in events:
            for listener in list(self._listeners):
                listener(event)
