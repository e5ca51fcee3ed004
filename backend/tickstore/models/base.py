from datetime import datetime, timezone
from sqlalchemy import TIMESTAMP, Column, DateTime, Float, Integer, String, UniqueConstraint
from sqlalchemy.orm import declarative_mixin, declared_attr


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@declarative_mixin
class TimestampMixin:
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


@declarative_mixin
class IdMixin:
    id = Column(Integer, primary_key=True, autoincrement=True)


@declarative_mixin
class IntradayBarMixin:
    """
    Columns shared by every intraday table.
    One row per (symbol, date); a later sync of the same span replaces it.
    """

    @declared_attr
    def __table_args__(cls):
        return (
            UniqueConstraint("symbol", "date", name=f"uq_{cls.__tablename__}_symbol_date"),
        )

    date = Column(TIMESTAMP(timezone=True), nullable=False, index=True)
    symbol = Column(String(20), nullable=False, index=True)
    exchange = Column(String(20))
    open = Column(Float)
    high = Column(Float)
    low = Column(Float)
    close = Column(Float)
    last = Column(Float)
    volume = Column(Float)
