"""
Liquidity milestones.

Each milestone is a one-way ``pending -> fired`` transition keyed by its
identity. Firing the listing milestone only emits ``ListingReady`` for the
external DEX integration; the burn milestones also remove a fraction of the
pool balance from the engine's ledger and report the burned amount.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Callable, FrozenSet, Iterable, List, Optional, Set

log = logging.getLogger(__name__)


class Milestone(Enum):
    """Milestones in evaluation order"""
    LISTING = "listing"
    FIRST_BURN = "first_burn"
    SECOND_BURN = "second_burn"


@dataclass(frozen=True)
class MilestoneEvent:
    milestone: Milestone
    market_cap: Decimal

    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class ListingReady(MilestoneEvent):
    pass


@dataclass(frozen=True)
class BurnExecuted(MilestoneEvent):
    amount: Decimal = Decimal(0)
    pool_balance: Decimal = Decimal(0)


@dataclass(frozen=True)
class FirstBurnExecuted(BurnExecuted):
    pass


@dataclass(frozen=True)
class SecondBurnExecuted(BurnExecuted):
    pass


MilestoneListener = Callable[[MilestoneEvent], None]


class MilestoneRecorder:
    """Listener that keeps every event it receives, in order."""

    def __init__(self) -> None:
        self.received: List[MilestoneEvent] = []

    def __call__(self, event: MilestoneEvent) -> None:
        self.received.append(event)

    def names(self) -> List[str]:
        return [event.name for event in self.received]


class MilestoneTracker:
    """Remembers which milestones have fired; never forgets one."""

    def __init__(self, fired: Optional[Iterable[Milestone]] = None) -> None:
        self._fired: Set[Milestone] = set(fired or ())

    @property
    def fired(self) -> FrozenSet[Milestone]:
        return frozenset(self._fired)

    def is_pending(self, milestone: Milestone) -> bool:
        return milestone not in self._fired

    def due(self, market_cap: Decimal, thresholds: Callable[[Milestone], Decimal]) -> List[Milestone]:
        """Pending milestones whose threshold ``market_cap`` has reached."""
        return [
            m for m in Milestone
            if self.is_pending(m) and market_cap >= thresholds(m)
        ]

    def mark_fired(self, milestone: Milestone) -> None:
        if milestone in self._fired:
            raise ValueError(f"Milestone {milestone.value} already fired")
        self._fired.add(milestone)
        log.info(f"Milestone {milestone.value} fired")
