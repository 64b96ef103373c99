"""
Error taxonomy for the RAG and compliance engine.

All errors are input-shape problems detected synchronously; none of them
are transient, so callers should fix the input rather than retry.
"""


class OKRDashboardError(ValueError):
    """Base class for every error raised by the engine."""


class EmptyAggregationInput(OKRDashboardError):
    """Aggregation was requested over zero components."""


class DegenerateWeights(OKRDashboardError):
    """Every component weight is zero, so no weighted average exists."""


class InvalidScoreComponent(OKRDashboardError):
    """A component value is outside 0-100 or its weight is negative."""


class InvalidPeriodKey(OKRDashboardError):
    """A reporting-period key is missing or not of the form YYYY-MM."""
