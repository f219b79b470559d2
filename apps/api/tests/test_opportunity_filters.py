from __future__ import annotations

from collections.abc import Generator
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base
from app.sales.schemas import OpportunityCreate, OpportunityFilters, UserCreate
from app.sales.service import OpportunityService, UserService


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def seeded(db_session: Session) -> dict[str, str]:
    users = UserService()
    avery = users.create_user(db_session, UserCreate(name="Avery", email="avery@example.com", role="IC")).id
    jordan = users.create_user(db_session, UserCreate(name="Jordan", email="jordan@example.com", role="IC")).id

    service = OpportunityService()
    rows = {
        "small": (avery, "Prospecting", "5000", "Acme Corp", datetime(2026, 1, 15)),
        "medium": (avery, "Proposal", "15000", "Globex", datetime(2026, 2, 1)),
        "large": (jordan, "Proposal", "50000", "ACME Holdings", datetime(2026, 3, 31, 23, 0)),
        "won": (jordan, "Closed Won", "15000", "Initech", datetime(2026, 4, 10)),
    }
    ids: dict[str, str] = {"avery": avery, "jordan": jordan}
    for key, (owner, stage, amount, customer, close_date) in rows.items():
        ids[key] = service.create_opportunity(
            db_session,
            OpportunityCreate(
                name=key,
                stage=stage,
                amount=Decimal(amount),
                close_date=close_date,
                assigned_to_id=owner,
                customer_name=customer,
                last_activity_date=datetime(2026, 1, 1),
                deal_probability=40,
            ),
        ).id
    return ids


def _names(session: Session, **filters: object) -> set[str]:
    results = OpportunityService().list_opportunities(session, OpportunityFilters.model_validate(filters))
    return {item.name for item in results}


def test_filter_by_assignee_and_stage(db_session: Session, seeded: dict[str, str]) -> None:
    assert _names(db_session, assigned_to_id=seeded["avery"]) == {"small", "medium"}
    assert _names(db_session, stage="Proposal") == {"medium", "large"}
    assert _names(db_session, assigned_to_id=seeded["avery"], stage="Proposal") == {"medium"}


def test_customer_name_is_case_insensitive_substring(db_session: Session, seeded: dict[str, str]) -> None:
    assert _names(db_session, customer_name="acme") == {"small", "large"}
    assert _names(db_session, customer_name="HOLD") == {"large"}
    assert _names(db_session, customer_name="%") == set()


def test_amount_range_is_inclusive(db_session: Session, seeded: dict[str, str]) -> None:
    assert _names(db_session, min_amount=15000) == {"medium", "large", "won"}
    assert _names(db_session, max_amount=15000) == {"small", "medium", "won"}
    assert _names(db_session, min_amount=15000, max_amount=15000) == {"medium", "won"}
    assert _names(db_session, min_amount=60000) == set()


def test_close_date_range_is_inclusive(db_session: Session, seeded: dict[str, str]) -> None:
    assert _names(db_session, close_date_from="2026-02-01T00:00:00Z") == {"medium", "large", "won"}
    assert _names(db_session, close_date_to="2026-02-01T00:00:00Z") == {"small", "medium"}
    assert _names(
        db_session,
        close_date_from=datetime(2026, 2, 1, tzinfo=timezone.utc),
        close_date_to="2026-03-31T23:00:00+00:00",
    ) == {"medium", "large"}


def test_close_date_filter_converts_offsets_to_utc(db_session: Session, seeded: dict[str, str]) -> None:
    # 2026-04-01T01:00+02:00 is 2026-03-31T23:00Z
    assert _names(db_session, close_date_from="2026-04-01T01:00:00+02:00", stage="Proposal") == {"large"}


def test_all_filters_are_combined(db_session: Session, seeded: dict[str, str]) -> None:
    assert _names(
        db_session,
        assigned_to_id=seeded["jordan"],
        stage="Proposal",
        customer_name="acme",
        min_amount=10000,
        max_amount=60000,
        close_date_from="2026-03-01T00:00:00Z",
        close_date_to="2026-04-01T00:00:00Z",
    ) == {"large"}
    assert _names(db_session, assigned_to_id=seeded["jordan"], customer_name="globex") == set()


def test_empty_text_filters_are_ignored(db_session: Session, seeded: dict[str, str]) -> None:
    assert _names(db_session, assigned_to_id="", customer_name="") == {"small", "medium", "large", "won"}
