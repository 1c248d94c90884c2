import json
from dataclasses import dataclass, field, fields
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Union

from .errors import ConfigurationError, InvalidAmount
from .fixedpoint import DEFAULT_SCALE, MIN_SCALE, ONE, ZERO, FixedPoint, Number, display, to_decimal
from .milestones import Milestone

_DECIMAL_FIELDS = (
    "initial_supply",
    "reserve_ratio",
    "initial_price",
    "fee_rate",
    "current_supply",
    "listing_threshold",
    "first_burn_threshold",
    "second_burn_threshold",
    "first_burn_fraction",
    "second_burn_fraction",
)


@dataclass
class CurveParams:
    """Launch parameters for a single token's curve.

    ``current_supply`` defaults to ``initial_supply``; set it to resume a curve
    that has already traded. ``fired_milestones`` lists milestones that must
    not fire again on a resumed curve.
    """

    initial_supply: Number = Decimal("800000000")
    reserve_ratio: Number = Decimal("0.2")
    initial_price: Number = Decimal("0.0000001")
    fee_rate: Number = Decimal("0.01")
    current_supply: Optional[Number] = None
    listing_threshold: Number = Decimal("69000")
    first_burn_threshold: Number = Decimal("100000")
    second_burn_threshold: Number = Decimal("1000000")
    first_burn_fraction: Number = Decimal("0.1")
    second_burn_fraction: Number = Decimal("0.05")
    fired_milestones: Iterable[Union[Milestone, str]] = field(default_factory=frozenset)
    scale: int = DEFAULT_SCALE

    def __post_init__(self) -> None:
        if isinstance(self.scale, bool) or not isinstance(self.scale, int) or self.scale < MIN_SCALE:
            raise ConfigurationError(f"scale must be an integer >= {MIN_SCALE}")
        if self.current_supply is None:
            self.current_supply = self.initial_supply
        # Ranges are checked on the values the engine will actually hold.
        fp = FixedPoint(self.scale)
        for name in _DECIMAL_FIELDS:
            try:
                setattr(self, name, fp.truncate(to_decimal(getattr(self, name), name)))
            except InvalidAmount as e:
                raise ConfigurationError(str(e)) from e
        self.fired_milestones = _milestone_set(self.fired_milestones)
        self._validate()

    def _validate(self) -> None:
        if self.initial_supply <= ZERO:
            raise ConfigurationError("initial_supply must be positive")
        if self.initial_price <= ZERO:
            raise ConfigurationError("initial_price must be positive")
        if not ZERO < self.reserve_ratio <= ONE:
            raise ConfigurationError("reserve_ratio must be in (0, 1]")
        if not ZERO <= self.fee_rate < ONE:
            raise ConfigurationError("fee_rate must be in [0, 1)")
        if self.current_supply < ZERO:
            raise ConfigurationError("current_supply must not be negative")
        thresholds = [
            self.listing_threshold,
            self.first_burn_threshold,
            self.second_burn_threshold,
        ]
        if any(t < ZERO for t in thresholds):
            raise ConfigurationError("milestone thresholds must not be negative")
        if thresholds != sorted(thresholds):
            raise ConfigurationError("milestone thresholds must be non-decreasing")
        for name in ("first_burn_fraction", "second_burn_fraction"):
            if not ZERO <= getattr(self, name) < ONE:
                raise ConfigurationError(f"{name} must be in [0, 1)")

    def threshold(self, milestone: Milestone) -> Decimal:
        return {
            Milestone.LISTING: self.listing_threshold,
            Milestone.FIRST_BURN: self.first_burn_threshold,
            Milestone.SECOND_BURN: self.second_burn_threshold,
        }[milestone]

    def burn_fraction(self, milestone: Milestone) -> Decimal:
        return {
            Milestone.LISTING: ZERO,
            Milestone.FIRST_BURN: self.first_burn_fraction,
            Milestone.SECOND_BURN: self.second_burn_fraction,
        }[milestone]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CurveParams":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown curve parameter(s): {', '.join(unknown)}")
        return cls(**dict(data))

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "CurveParams":
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"), parse_float=Decimal)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a JSON object")
        return cls.from_mapping(data)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {name: display(getattr(self, name)) for name in _DECIMAL_FIELDS}
        data["fired_milestones"] = sorted(m.value for m in self.fired_milestones)
        data["scale"] = self.scale
        return data


def _milestone_set(values: Iterable[Union[Milestone, str]]) -> FrozenSet[Milestone]:
    if isinstance(values, str):
        values = [values]
    result = set()
    for value in values:
        try:
            result.add(Milestone(value))
        except ValueError as e:
            raise ConfigurationError(f"Unknown milestone: {value!r}") from e
    return frozenset(result)
