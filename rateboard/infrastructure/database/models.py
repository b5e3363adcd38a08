# rateboard/infrastructure/database/models.py

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    Index,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.sql import func

from rateboard.infrastructure.database.session import Base


class TimestampedModel(Base):
    __abstract__ = True

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class CurrencyRateRecord(TimestampedModel):
    """One row per currency code. update_history holds the bounded snapshot list."""

    __tablename__ = "currency_rates"
    __table_args__ = (
        CheckConstraint("buy_rate > 0", name="ck_currency_rates_buy_positive"),
        CheckConstraint("sell_rate > buy_rate", name="ck_currency_rates_positive_spread"),
    )

    code = Column(String(16), nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    buy_rate = Column(Float, nullable=False)
    sell_rate = Column(Float, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    is_visible = Column(Boolean, nullable=False, default=True)
    last_updated_at = Column(DateTime(timezone=True), nullable=False)
    created_by = Column(String, nullable=True)
    update_history = Column(JSONB, nullable=False, default=list)


class ActivityLogRecord(TimestampedModel):
    """Append-only activity entry."""

    __tablename__ = "activity_logs"
    __table_args__ = (
        Index("ix_activity_logs_action_logged_at", "action", "logged_at"),
        Index("ix_activity_logs_actor_logged_at", "actor", "logged_at"),
    )

    entry_id = Column(String, nullable=False, unique=True)
    actor = Column(String, nullable=False)
    action = Column(String, nullable=False)
    resource = Column(String, nullable=False)
    status = Column(String, nullable=False)
    details = Column(JSONB, nullable=False, default=dict)
    error_message = Column(Text, nullable=True)
    correlation_id = Column(String, nullable=True)
    logged_at = Column(DateTime(timezone=True), nullable=False, index=True)
