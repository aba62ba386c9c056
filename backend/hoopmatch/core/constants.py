"""Application-wide constants.

Timeframe durations are used when projecting completions onto another
timeframe and when sizing the history a caller must load before a window.
"""

TIMEFRAME_MS: dict[str, int] = {
    "1m": 60_000,
    "5m": 300_000,
    "15m": 900_000,
    "30m": 1_800_000,
    "1h": 3_600_000,
    "4h": 14_400_000,
    "1d": 86_400_000,
    "1w": 604_800_000,
}
"""Bar duration in milliseconds per supported timeframe."""

DEFAULT_TIMEFRAME_MS = TIMEFRAME_MS["1h"]
"""Duration assumed for unknown or missing timeframes."""

WARMUP_PADDING_BARS = 20
"""Extra bars loaded ahead of a window on top of the longest pattern span."""
