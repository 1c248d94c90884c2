"""
Constant-power bonding curve formulas.

    price(supply)              = pool / (supply * rr)
    pool_for_supply(target)    = pool * (target / supply) ** rr
    supply_for_pool(target)    = supply * (target / pool) ** (1 / rr)

Pool and supply stay on the fixed-point scale. Buys round the new supply
down and sells round the remaining pool up, so rounding never pays a
trader more than the exact curve would. Price keeps significant digits
instead of the scale.
"""

from decimal import Decimal

from .fixedpoint import ONE, ZERO, FixedPoint


def price(fp: FixedPoint, pool: Decimal, supply: Decimal, reserve_ratio: Decimal) -> Decimal:
    # Kept to significant digits: price falls far below the fixed scale
    # while supply grows, and market cap is derived from it.
    denominator = fp.product(supply, reserve_ratio)
    if denominator == ZERO:
        return ZERO
    return fp.ratio(pool, denominator)


def pool_for_supply(fp: FixedPoint, pool: Decimal, supply: Decimal,
                    reserve_ratio: Decimal, target_supply: Decimal) -> Decimal:
    """Pool balance the curve holds once supply moves to ``target_supply``.

    Rounded up and capped at ``pool``: a seller never receives more than the
    exact curve pays out.
    """
    ratio = fp.div(target_supply, supply, round_up=True)
    target = fp.mul(pool, fp.power(ratio, reserve_ratio, round_up=True), round_up=True)
    return min(target, pool)


def supply_for_pool(fp: FixedPoint, pool: Decimal, supply: Decimal,
                    reserve_ratio: Decimal, target_pool: Decimal) -> Decimal:
    """Supply the curve reaches once the pool moves to ``target_pool``."""
    ratio = fp.div(target_pool, pool)
    return fp.mul(supply, fp.power(ratio, fp.div(ONE, reserve_ratio)))


def market_cap(fp: FixedPoint, pool: Decimal, supply: Decimal, reserve_ratio: Decimal) -> Decimal:
    return fp.mul(supply, price(fp, pool, supply, reserve_ratio))
