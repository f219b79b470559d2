from __future__ import annotations

from collections.abc import Generator
from datetime import datetime, timezone
from decimal import Decimal

import pydantic
import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base
from app.sales.errors import NotFoundError, ValidationError
from app.sales.models import SalesOpportunity, SalesUser
from app.sales.schemas import OpportunityCreate, OpportunityFilters, OpportunityPatch, UserCreate
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


def _user(session: Session, name: str = "Avery", role: str = "IC") -> str:
    return UserService().create_user(
        session,
        UserCreate(name=name, email=f"{name.lower()}@example.com", role=role),
    ).id


def _opportunity_dto(assigned_to_id: str, **overrides: object) -> OpportunityCreate:
    payload: dict[str, object] = {
        "name": "Analytics rollout",
        "stage": "Prospecting",
        "amount": Decimal("10000"),
        "close_date": datetime(2026, 12, 31, tzinfo=timezone.utc),
        "assigned_to_id": assigned_to_id,
        "customer_name": "Northwind Traders",
        "last_activity_date": datetime(2026, 10, 1, tzinfo=timezone.utc),
        "deal_probability": 50,
    }
    payload.update(overrides)
    return OpportunityCreate.model_validate(payload)


def test_create_user_generates_unique_ids(db_session: Session) -> None:
    service = UserService()
    dto = UserCreate(name="Avery", email="avery@example.com", role="IC")

    first = service.create_user(db_session, dto)
    second = service.create_user(db_session, dto)

    assert first.id and second.id
    assert first.id != second.id
    assert first.created_at.tzinfo is not None
    assert {user.id for user in service.list_users(db_session)} == {first.id, second.id}


def test_user_input_rejects_bad_email_and_role() -> None:
    with pytest.raises(pydantic.ValidationError):
        UserCreate(name="Avery", email="not-an-email", role="IC")
    with pytest.raises(pydantic.ValidationError):
        UserCreate(name="Avery", email="avery@example.com", role="Director")


def test_get_user_returns_none_for_missing_id(db_session: Session) -> None:
    user_id = _user(db_session)
    service = UserService()

    assert service.get_user(db_session, user_id) is not None
    assert service.get_user(db_session, "missing") is None
    assert service.get_user(db_session, "") is None


def test_create_opportunity_returns_numeric_amount(db_session: Session) -> None:
    user_id = _user(db_session)

    created = OpportunityService().create_opportunity(db_session, _opportunity_dto(user_id, amount=Decimal("1234.56")))

    assert created.id
    assert isinstance(created.amount, float)
    assert created.amount == pytest.approx(1234.56)
    assert created.assigned_to_id == user_id
    assert created.close_date == datetime(2026, 12, 31, tzinfo=timezone.utc)


def test_create_opportunity_unknown_user_persists_nothing(db_session: Session) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        OpportunityService().create_opportunity(db_session, _opportunity_dto("ghost"))

    assert exc_info.value.resource == "user"
    assert "ghost" in str(exc_info.value)
    assert db_session.scalar(select(func.count()).select_from(SalesOpportunity)) == 0


@pytest.mark.parametrize(
    "overrides",
    [
        {"amount": Decimal("0")},
        {"amount": Decimal("-5")},
        {"amount": Decimal("0.001")},
        {"amount": Decimal("12345678901.00")},
        {"deal_probability": 101},
        {"deal_probability": -1},
        {"stage": "Won"},
    ],
)
def test_opportunity_input_rejects_out_of_range_values(overrides: dict[str, object]) -> None:
    with pytest.raises(pydantic.ValidationError):
        _opportunity_dto("user-1", **overrides)


def test_update_only_overwrites_provided_fields(db_session: Session) -> None:
    user_id = _user(db_session)
    service = OpportunityService()
    created = service.create_opportunity(db_session, _opportunity_dto(user_id))

    updated = service.update_opportunity(
        db_session,
        created.id,
        OpportunityPatch(stage="Negotiation", amount=Decimal("20000")),
    )

    assert updated.stage == "Negotiation"
    assert updated.amount == 20000
    unchanged = {"name", "close_date", "assigned_to_id", "customer_name", "last_activity_date", "deal_probability", "created_at"}
    assert updated.model_dump(include=unchanged) == created.model_dump(include=unchanged)


def test_update_allows_reopening_closed_deal(db_session: Session) -> None:
    user_id = _user(db_session)
    service = OpportunityService()
    created = service.create_opportunity(db_session, _opportunity_dto(user_id, stage="Closed Lost"))

    reopened = service.update_opportunity(db_session, created.id, OpportunityPatch(stage="Prospecting"))

    assert reopened.stage == "Prospecting"


def test_update_missing_opportunity_raises_not_found(db_session: Session) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        OpportunityService().update_opportunity(db_session, "missing", OpportunityPatch(name="x"))
    assert exc_info.value.resource == "opportunity"


def test_update_reassignment_requires_existing_user(db_session: Session) -> None:
    owner = _user(db_session, "Avery")
    other = _user(db_session, "Jordan")
    service = OpportunityService()
    created = service.create_opportunity(db_session, _opportunity_dto(owner))

    with pytest.raises(NotFoundError) as exc_info:
        service.update_opportunity(db_session, created.id, OpportunityPatch(assigned_to_id="ghost", name="renamed"))
    assert exc_info.value.resource == "user"

    db_session.expire_all()
    current = service.list_opportunities(db_session)[0]
    assert current.assigned_to_id == owner
    assert current.name == "Analytics rollout"

    moved = service.update_opportunity(db_session, created.id, OpportunityPatch(assigned_to_id=other))
    assert moved.assigned_to_id == other


def test_update_rejects_explicit_null(db_session: Session) -> None:
    user_id = _user(db_session)
    service = OpportunityService()
    created = service.create_opportunity(db_session, _opportunity_dto(user_id))

    with pytest.raises(ValidationError):
        service.update_opportunity(db_session, created.id, OpportunityPatch(name=None))


def test_empty_patch_returns_current_record(db_session: Session) -> None:
    user_id = _user(db_session)
    service = OpportunityService()
    created = service.create_opportunity(db_session, _opportunity_dto(user_id))

    assert service.update_opportunity(db_session, created.id, OpportunityPatch()) == created


def test_delete_reports_whether_a_record_was_removed(db_session: Session) -> None:
    user_id = _user(db_session)
    service = OpportunityService()
    created = service.create_opportunity(db_session, _opportunity_dto(user_id))

    assert service.delete_opportunity(db_session, created.id) is True
    assert service.delete_opportunity(db_session, created.id) is False
    assert service.delete_opportunity(db_session, "") is False
    assert service.list_opportunities(db_session) == []


def test_list_without_filters_returns_everything(db_session: Session) -> None:
    user_id = _user(db_session)
    service = OpportunityService()
    ids = {service.create_opportunity(db_session, _opportunity_dto(user_id, name=f"Deal {i}")).id for i in range(3)}

    assert {item.id for item in service.list_opportunities(db_session)} == ids
    assert {item.id for item in service.list_opportunities(db_session, OpportunityFilters())} == ids


@pytest.mark.parametrize(
    "overrides",
    [{"amount": Decimal("0")}, {"deal_probability": 120}, {"stage": "Won"}],
)
def test_opportunity_table_enforces_check_constraints(db_session: Session, overrides: dict[str, object]) -> None:
    user_id = _user(db_session)
    values: dict[str, object] = {
        "name": "Raw insert",
        "stage": "Prospecting",
        "amount": Decimal("10"),
        "close_date": datetime(2026, 12, 31, tzinfo=timezone.utc),
        "assigned_to_id": user_id,
        "customer_name": "Northwind Traders",
        "last_activity_date": datetime(2026, 10, 1, tzinfo=timezone.utc),
        "deal_probability": 50,
        **overrides,
    }

    db_session.add(SalesOpportunity(**values))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

    assert db_session.scalar(select(func.count()).select_from(SalesOpportunity)) == 0


def test_user_table_enforces_role_constraint(db_session: Session) -> None:
    db_session.add(SalesUser(name="Riley", email="riley@example.com", role="Director"))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()
