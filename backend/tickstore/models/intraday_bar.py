from typing import Dict, Literal, Type, get_args

from tickstore.core.database import Base
from tickstore.models.base import IdMixin, IntradayBarMixin, TimestampMixin

Interval = Literal["5min", "1hour", "24hour"]
INTERVALS: tuple[str, ...] = get_args(Interval)


class IntradayBar5Min(Base, IdMixin, IntradayBarMixin, TimestampMixin):
    """5-minute intraday bars."""
    __tablename__ = "intraday_5min"


class IntradayBar1Hour(Base, IdMixin, IntradayBarMixin, TimestampMixin):
    """Hourly intraday bars."""
    __tablename__ = "intraday_1hour"


class IntradayBar24Hour(Base, IdMixin, IntradayBarMixin, TimestampMixin):
    """24-hour intraday bars (one per trading day, as reported intraday)."""
    __tablename__ = "intraday_24hour"


MODELS_BY_INTERVAL: Dict[str, Type[Base]] = {
    "5min": IntradayBar5Min,
    "1hour": IntradayBar1Hour,
    "24hour": IntradayBar24Hour,
}


def get_intraday_model(interval: str) -> Type[Base]:
    """Destination table for an interval. Never inferred: unknown values raise."""
    model = MODELS_BY_INTERVAL.get(interval)
    if model is None:
        raise ValueError(
            f"Unknown interval: {interval!r} (expected one of {', '.join(INTERVALS)})"
        )
    return model
