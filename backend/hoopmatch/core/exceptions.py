"""Core exception classes for the hoop pattern matcher."""


class HoopMatcherError(Exception):
    """Base exception for hoop matcher operations."""

    pass


class CandleSeriesError(HoopMatcherError, ValueError):
    """Raised when a candle series violates the input contract."""

    pass


class HoopEditError(HoopMatcherError, ValueError):
    """Raised when an edit request cannot be applied to a pattern."""

    pass


class SearchCancelledError(HoopMatcherError):
    """Raised inside a search that was superseded before it finished."""

    pass
