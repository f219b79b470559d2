from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import Select, delete, select
from sqlalchemy.orm import Session

from app.metrics import observe_opportunity_write
from app.sales.errors import NotFoundError, ValidationError
from app.sales.filters import apply_opportunity_filters
from app.sales.models import SalesOpportunity, SalesUser
from app.sales.schemas import (
    OpportunityCreate,
    OpportunityFilters,
    OpportunityPatch,
    OpportunityRead,
    UserCreate,
    UserRead,
)


logger = logging.getLogger("app.sales")


def _commit(session: Session) -> None:
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise


@dataclass(slots=True)
class UserService:
    def create_user(self, session: Session, dto: UserCreate) -> UserRead:
        user = SalesUser(name=dto.name, email=str(dto.email), role=dto.role)
        session.add(user)
        _commit(session)
        session.refresh(user)

        logger.info("sales.user.created", extra={"user_id": user.id})
        return UserRead.model_validate(user)

    def list_users(self, session: Session) -> list[UserRead]:
        rows = session.scalars(select(SalesUser).order_by(SalesUser.created_at.asc(), SalesUser.id.asc())).all()
        return [UserRead.model_validate(row) for row in rows]

    def get_user(self, session: Session, user_id: str) -> UserRead | None:
        user = session.get(SalesUser, user_id)
        if user is None:
            return None
        return UserRead.model_validate(user)


@dataclass(slots=True)
class OpportunityService:
    def _require_user(self, session: Session, user_id: str) -> SalesUser:
        user = session.get(SalesUser, user_id)
        if user is None:
            logger.warning("sales.opportunity.assignee_missing", extra={"user_id": user_id})
            raise NotFoundError("user", user_id)
        return user

    def create_opportunity(self, session: Session, dto: OpportunityCreate) -> OpportunityRead:
        self._require_user(session, dto.assigned_to_id)

        opportunity = SalesOpportunity(**dto.model_dump(mode="python"))
        session.add(opportunity)
        _commit(session)
        session.refresh(opportunity)

        observe_opportunity_write("create")
        logger.info(
            "sales.opportunity.created",
            extra={"opportunity_id": opportunity.id, "user_id": opportunity.assigned_to_id},
        )
        return OpportunityRead.model_validate(opportunity)

    def list_opportunities(self, session: Session, filters: OpportunityFilters | None = None) -> list[OpportunityRead]:
        stmt: Select[tuple[SalesOpportunity]] = select(SalesOpportunity)
        stmt = apply_opportunity_filters(stmt, filters)
        rows = session.scalars(stmt.order_by(SalesOpportunity.created_at.desc(), SalesOpportunity.id.asc())).all()
        return [OpportunityRead.model_validate(row) for row in rows]

    def update_opportunity(
        self,
        session: Session,
        opportunity_id: str,
        patch: OpportunityPatch,
    ) -> OpportunityRead:
        opportunity = session.get(SalesOpportunity, opportunity_id)
        if opportunity is None:
            logger.warning("sales.opportunity.missing", extra={"opportunity_id": opportunity_id})
            raise NotFoundError("opportunity", opportunity_id)

        values = patch.model_dump(mode="python", include=patch.model_fields_set)
        null_fields = sorted(name for name, value in values.items() if value is None)
        if null_fields:
            logger.warning(
                "sales.opportunity.null_patch",
                extra={"opportunity_id": opportunity_id, "error": ", ".join(null_fields)},
            )
            raise ValidationError(f"fields cannot be null: {', '.join(null_fields)}")

        if not values:
            return OpportunityRead.model_validate(opportunity)

        if "assigned_to_id" in values:
            self._require_user(session, values["assigned_to_id"])

        for field_name, value in values.items():
            setattr(opportunity, field_name, value)

        _commit(session)
        session.refresh(opportunity)

        observe_opportunity_write("update")
        logger.info(
            "sales.opportunity.updated",
            extra={"opportunity_id": opportunity.id, "fields": sorted(values)},
        )
        return OpportunityRead.model_validate(opportunity)

    def delete_opportunity(self, session: Session, opportunity_id: str) -> bool:
        result = session.execute(delete(SalesOpportunity).where(SalesOpportunity.id == opportunity_id))
        _commit(session)

        deleted = (result.rowcount or 0) > 0
        if deleted:
            observe_opportunity_write("delete")
        logger.info("sales.opportunity.deleted", extra={"opportunity_id": opportunity_id, "status": deleted})
        return deleted


user_service = UserService()
opportunity_service = OpportunityService()
