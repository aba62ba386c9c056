"""Technical indicators used to smooth reference prices.

Available indicators:
- Simple Moving Average (SMA)
- Exponential Moving Average (EMA)
- Typical price (HLC3)
"""

from .technical import exponential_moving_average
from .technical import simple_moving_average
from .technical import typical_price

__all__ = [
    "exponential_moving_average",
    "simple_moving_average",
    "typical_price",
]
