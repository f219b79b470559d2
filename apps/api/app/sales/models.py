from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class SalesUser(Base):
    __tablename__ = "sales_user"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    opportunities: Mapped[list[SalesOpportunity]] = relationship(
        "SalesOpportunity",
        back_populates="assigned_to",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_sales_user_role", "role"),
        CheckConstraint("role IN ('IC', 'Front Line Manager', 'Executive')", name="ck_sales_user_role"),
    )


class SalesOpportunity(Base):
    __tablename__ = "sales_opportunity"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    stage: Mapped[str] = mapped_column(String(32), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    close_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    assigned_to_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("sales_user.id", ondelete="NO ACTION"),
        nullable=False,
    )
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_activity_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    deal_probability: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    assigned_to: Mapped[SalesUser] = relationship("SalesUser", back_populates="opportunities")

    __table_args__ = (
        Index("ix_sales_opportunity_assigned_to", "assigned_to_id"),
        Index("ix_sales_opportunity_stage", "stage"),
        Index("ix_sales_opportunity_close_date", "close_date"),
        CheckConstraint("amount > 0", name="ck_sales_opportunity_amount_positive"),
        CheckConstraint(
            "deal_probability >= 0 AND deal_probability <= 100",
            name="ck_sales_opportunity_probability_range",
        ),
        CheckConstraint(
            "stage IN ('Prospecting', 'Qualification', 'Proposal', 'Negotiation', 'Closed Won', 'Closed Lost')",
            name="ck_sales_opportunity_stage",
        ),
    )
