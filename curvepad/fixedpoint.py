from decimal import (
    Context,
    Decimal,
    DecimalException,
    InvalidOperation,
    ROUND_DOWN,
    ROUND_UP,
)
from typing import Union

from .errors import InvalidAmount

Number = Union[Decimal, int, float, str]

DEFAULT_SCALE = 36
MIN_SCALE = 18
PRECISION = 100

ZERO = Decimal(0)
ONE = Decimal(1)

_DOWN = Context(prec=PRECISION, rounding=ROUND_DOWN)
_UP = Context(prec=PRECISION, rounding=ROUND_UP)


class FixedPoint:
    """Decimal arithmetic at a fixed number of fractional digits.

    Results truncate toward zero unless ``round_up`` is set, which the sell
    path uses to keep rounding in the pool's favour.
    """

    def __init__(self, scale: int = DEFAULT_SCALE) -> None:
        self.scale = scale
        self.quantum = Decimal(1).scaleb(-scale)

    def truncate(self, value: Decimal) -> Decimal:
        return self._quantize(value, ROUND_DOWN)

    def ceil(self, value: Decimal) -> Decimal:
        return self._quantize(value, ROUND_UP)

    def _quantize(self, value: Decimal, rounding: str) -> Decimal:
        try:
            return value.quantize(self.quantum, rounding=rounding, context=_DOWN)
        except InvalidOperation as e:
            raise InvalidAmount(f"Value {value} exceeds working precision") from e

    def _apply(self, op: str, a: Decimal, b: Decimal, round_up: bool) -> Decimal:
        ctx = _UP if round_up else _DOWN
        try:
            result = getattr(ctx, op)(a, b)
        except DecimalException as e:
            raise InvalidAmount(f"Cannot {op} {a} and {b}") from e
        return self.ceil(result) if round_up else self.truncate(result)

    def mul(self, a: Decimal, b: Decimal, round_up: bool = False) -> Decimal:
        return self._apply("multiply", a, b, round_up)

    def div(self, a: Decimal, b: Decimal, round_up: bool = False) -> Decimal:
        return self._apply("divide", a, b, round_up)

    def add(self, a: Decimal, b: Decimal) -> Decimal:
        return self._apply("add", a, b, False)

    def sub(self, a: Decimal, b: Decimal) -> Decimal:
        return self._apply("subtract", a, b, False)

    def ratio(self, a: Decimal, b: Decimal) -> Decimal:
        """a / b truncated to PRECISION significant digits rather than to the scale."""
        try:
            return _DOWN.divide(a, b)
        except DecimalException as e:
            raise InvalidAmount(f"Cannot divide {a} by {b}") from e

    def product(self, a: Decimal, b: Decimal) -> Decimal:
        """a * b truncated to PRECISION significant digits rather than to the scale."""
        try:
            return _DOWN.multiply(a, b)
        except DecimalException as e:
            raise InvalidAmount(f"Cannot multiply {a} and {b}") from e

    def power(self, base: Decimal, exponent: Decimal, round_up: bool = False) -> Decimal:
        if base == ZERO:
            return ZERO
        if base == ONE:
            return ONE
        ctx = _UP if round_up else _DOWN
        try:
            if exponent == exponent.to_integral_value():
                result = ctx.power(base, int(exponent))
            else:
                result = ctx.power(base, exponent)
        except DecimalException as e:
            raise InvalidAmount(f"{base} ** {exponent} is not representable") from e
        return self.ceil(result) if round_up else self.truncate(result)

    def coerce(self, value: Number, name: str = "amount") -> Decimal:
        """Convert user input to a truncated Decimal, rejecting non-numbers."""
        return self.truncate(to_decimal(value, name))


def to_decimal(value: Number, name: str = "amount") -> Decimal:
    if isinstance(value, bool):
        raise InvalidAmount(f"Invalid {name}: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as e:
            raise InvalidAmount(f"Invalid {name}: {value!r}") from e
    else:
        raise InvalidAmount(f"Invalid {name}: {value!r}")
    if not result.is_finite():
        raise InvalidAmount(f"Invalid {name}: {value!r}")
    return result


def display(value: Decimal) -> str:
    """Plain notation without trailing zeros, e.g. 16.000 -> '16'."""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text
