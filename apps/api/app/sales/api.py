from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.sales.dashboard import dashboard_service
from app.sales.schemas import (
    DashboardMetrics,
    IdInput,
    OpportunityCreate,
    OpportunityFilters,
    OpportunityRead,
    OpportunityStage,
    OpportunityUpdate,
    Persona,
    PipelineStageData,
    UserCreate,
    UserRead,
)
from app.sales.service import opportunity_service, user_service


users_router = APIRouter(prefix="/api", tags=["users"])
opportunities_router = APIRouter(prefix="/api", tags=["opportunities"])
dashboard_router = APIRouter(prefix="/api", tags=["dashboard"])


@users_router.post("/createUser", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)) -> UserRead:
    return user_service.create_user(db, payload)


@users_router.get("/getUsers", response_model=list[UserRead])
def get_users(db: Session = Depends(get_db)) -> list[UserRead]:
    return user_service.list_users(db)


@users_router.get("/getUserById", response_model=UserRead | None)
def get_user_by_id(id: str = Query(), db: Session = Depends(get_db)) -> UserRead | None:
    return user_service.get_user(db, id)


@opportunities_router.post(
    "/createSalesOpportunity",
    response_model=OpportunityRead,
    status_code=status.HTTP_201_CREATED,
)
def create_sales_opportunity(payload: OpportunityCreate, db: Session = Depends(get_db)) -> OpportunityRead:
    return opportunity_service.create_opportunity(db, payload)


@opportunities_router.get("/getSalesOpportunities", response_model=list[OpportunityRead])
def get_sales_opportunities(
    assigned_to_id: str | None = Query(default=None),
    stage: OpportunityStage | None = Query(default=None),
    customer_name: str | None = Query(default=None),
    min_amount: Decimal | None = Query(default=None),
    max_amount: Decimal | None = Query(default=None),
    close_date_from: datetime | None = Query(default=None),
    close_date_to: datetime | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[OpportunityRead]:
    filters = OpportunityFilters(
        assigned_to_id=assigned_to_id,
        stage=stage,
        customer_name=customer_name,
        min_amount=min_amount,
        max_amount=max_amount,
        close_date_from=close_date_from,
        close_date_to=close_date_to,
    )
    return opportunity_service.list_opportunities(db, filters)


@opportunities_router.post("/updateSalesOpportunity", response_model=OpportunityRead)
def update_sales_opportunity(payload: OpportunityUpdate, db: Session = Depends(get_db)) -> OpportunityRead:
    return opportunity_service.update_opportunity(db, payload.id, payload.to_patch())


@opportunities_router.post("/deleteSalesOpportunity", response_model=bool)
def delete_sales_opportunity(payload: IdInput, db: Session = Depends(get_db)) -> bool:
    return opportunity_service.delete_opportunity(db, payload.id)


@dashboard_router.get("/getDashboardMetrics", response_model=DashboardMetrics)
def get_dashboard_metrics(
    user_id: str = Query(alias="userId"),
    persona: Persona = Query(),
    db: Session = Depends(get_db),
) -> DashboardMetrics:
    return dashboard_service.get_dashboard_metrics(db, user_id=user_id, persona=persona)


@dashboard_router.get("/getPipelineStageData", response_model=list[PipelineStageData])
def get_pipeline_stage_data(
    user_id: str = Query(alias="userId"),
    persona: Persona = Query(),
    db: Session = Depends(get_db),
) -> list[PipelineStageData]:
    return dashboard_service.get_pipeline_stage_data(db, user_id=user_id, persona=persona)
