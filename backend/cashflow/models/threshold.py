"""Threshold model: per-user spending limits with breach state."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cashflow.models.base import Base, TimestampMixin


class ThresholdType(str, Enum):
    """Informational only; breach checks never window by type."""
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class Threshold(Base, TimestampMixin):
    __tablename__ = "thresholds"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    category_id: Mapped[int | None] = mapped_column(ForeignKey("categories.id"), nullable=True)  # NULL = overall
    limit_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    threshold_type: Mapped[str] = mapped_column(String(10), default=ThresholdType.MONTHLY.value)
    alert_percentage: Mapped[int] = mapped_column(Integer, default=80)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_breached: Mapped[bool] = mapped_column(Boolean, default=False)
    last_alert_sent: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="thresholds")
    category = relationship("Category")

    __table_args__ = (
        UniqueConstraint("user_id", "category_id", name="uq_thresholds_user_category"),
        Index(
            "uq_thresholds_user_overall",
            "user_id",
            unique=True,
            postgresql_where=text("category_id IS NULL"),
            sqlite_where=text("category_id IS NULL"),
        ),
    )
