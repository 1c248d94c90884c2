class CurveError(ValueError):
    """Base class for every error raised by the curve engine."""


class InvalidAmount(CurveError):
    """Non-positive, non-numeric or unrepresentable trade amount."""


class InsufficientBalance(CurveError):
    """Sell amount exceeds the circulating supply."""


class ConfigurationError(CurveError):
    """Curve parameters outside their allowed ranges."""


class CurveDepleted(CurveError):
    """The curve has no supply or reserve left to price a buy against."""
