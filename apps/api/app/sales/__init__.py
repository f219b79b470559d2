from app.sales.api import dashboard_router, opportunities_router, users_router
from app.sales.dashboard import DashboardService, dashboard_service
from app.sales.errors import NotFoundError, SalesError, ValidationError
from app.sales.models import SalesOpportunity, SalesUser
from app.sales.schemas import (
    DashboardMetrics,
    OpportunityCreate,
    OpportunityFilters,
    OpportunityPatch,
    OpportunityRead,
    OpportunityUpdate,
    PipelineStageData,
    UserCreate,
    UserRead,
)
from app.sales.service import OpportunityService, UserService, opportunity_service, user_service

__all__ = [
    "users_router",
    "opportunities_router",
    "dashboard_router",
    "SalesUser",
    "SalesOpportunity",
    "UserCreate",
    "UserRead",
    "OpportunityCreate",
    "OpportunityPatch",
    "OpportunityUpdate",
    "OpportunityRead",
    "OpportunityFilters",
    "DashboardMetrics",
    "PipelineStageData",
    "SalesError",
    "ValidationError",
    "NotFoundError",
    "UserService",
    "OpportunityService",
    "DashboardService",
    "user_service",
    "opportunity_service",
    "dashboard_service",
]
