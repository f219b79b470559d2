from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.context import correlation_scope
from app.sales.models import SalesUser
from app.sales.schemas import OpportunityCreate, UserCreate
from app.sales.service import OpportunityService, UserService


logger = logging.getLogger("app.sales.seed")

_DEMO_USERS = [
    ("Avery Chen", "avery.chen@example.com", "IC"),
    ("Jordan Patel", "jordan.patel@example.com", "IC"),
    ("Morgan Reyes", "morgan.reyes@example.com", "Front Line Manager"),
    ("Taylor Brooks", "taylor.brooks@example.com", "Executive"),
]

# (owner index, name, customer, stage, amount, probability, days until close)
_DEMO_OPPORTUNITIES = [
    (0, "Warehouse analytics rollout", "Northwind Traders", "Prospecting", "12000", 10, 45),
    (0, "Regional POS upgrade", "Contoso Retail", "Proposal", "48000", 60, 12),
    (0, "Support renewal", "Fabrikam", "Closed Won", "9500", 100, -3),
    (1, "Fleet telematics pilot", "Tailspin Toys", "Qualification", "22000", 25, 30),
    (1, "Data platform migration", "Wide World Importers", "Negotiation", "135000", 80, 20),
    (1, "Security audit", "Litware", "Closed Lost", "18000", 0, -10),
    (2, "Strategic partner deal", "Adventure Works", "Proposal", "250000", 40, 75),
]


class SalesSeedHelper:
    def __init__(self, users: UserService, opportunities: OpportunityService) -> None:
        self._users = users
        self._opportunities = opportunities

    def seed_demo_data(self, session: Session, *, now: datetime | None = None) -> bool:
        """Create demo users and opportunities; returns False when users already exist."""
        existing = session.scalar(select(func.count()).select_from(SalesUser)) or 0
        if existing:
            logger.info("sales.seed.skipped", extra={"status": "existing_data"})
            return False

        moment = now or datetime.now(timezone.utc)
        user_ids = [
            self._users.create_user(session, UserCreate(name=name, email=email, role=role)).id
            for name, email, role in _DEMO_USERS
        ]
        for owner, name, customer, stage, amount, probability, days in _DEMO_OPPORTUNITIES:
            self._opportunities.create_opportunity(
                session,
                OpportunityCreate(
                    name=name,
                    stage=stage,
                    amount=Decimal(amount),
                    close_date=moment + timedelta(days=days),
                    assigned_to_id=user_ids[owner],
                    customer_name=customer,
                    last_activity_date=moment - timedelta(days=2),
                    deal_probability=probability,
                ),
            )
        logger.info("sales.seed.completed", extra={"status": "seeded"})
        return True


sales_seed_helper = SalesSeedHelper(UserService(), OpportunityService())


def main() -> None:
    from app.core.database import SessionLocal
    from app.logging import configure_logging

    configure_logging()
    session = SessionLocal()
    try:
        with correlation_scope(f"seed-{uuid.uuid4()}"):
            sales_seed_helper.seed_demo_data(session)
    finally:
        session.close()


if __name__ == "__main__":
    main()
