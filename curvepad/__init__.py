from .engine import BuyQuote, BuyResult, CurveEngine, SellQuote, SellResult
from .errors import (
    ConfigurationError,
    CurveDepleted,
    CurveError,
    InsufficientBalance,
    InvalidAmount,
)
from .milestones import (
    FirstBurnExecuted,
    ListingReady,
    Milestone,
    MilestoneEvent,
    MilestoneRecorder,
    SecondBurnExecuted,
)
from .params import CurveParams
from .registry import CurveRegistry

__all__ = [
    "CurveEngine", "CurveParams", "CurveRegistry",
    "BuyQuote", "SellQuote", "BuyResult", "SellResult",
    "Milestone", "MilestoneEvent", "MilestoneRecorder",
    "ListingReady", "FirstBurnExecuted", "SecondBurnExecuted",
    "CurveError", "InvalidAmount", "InsufficientBalance",
    "ConfigurationError", "CurveDepleted",
]
