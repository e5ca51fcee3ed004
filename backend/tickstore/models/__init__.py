# Base
from tickstore.models.base import TimestampMixin, IdMixin, IntradayBarMixin

# Market Data
from tickstore.models.intraday_bar import (
    INTERVALS,
    MODELS_BY_INTERVAL,
    Interval,
    IntradayBar1Hour,
    IntradayBar5Min,
    IntradayBar24Hour,
    get_intraday_model,
)

__all__ = [
    "TimestampMixin",
    "IdMixin",
    "IntradayBarMixin",
    "Interval",
    "INTERVALS",
    "MODELS_BY_INTERVAL",
    "IntradayBar5Min",
    "IntradayBar1Hour",
    "IntradayBar24Hour",
    "get_intraday_model",
]
