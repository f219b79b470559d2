from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Literal, get_args

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field


UserRole = Literal["IC", "Front Line Manager", "Executive"]
OpportunityStage = Literal[
    "Prospecting",
    "Qualification",
    "Proposal",
    "Negotiation",
    "Closed Won",
    "Closed Lost",
]
Persona = Literal["IC", "Manager", "Executive"]

USER_ROLES: tuple[str, ...] = get_args(UserRole)
OPPORTUNITY_STAGES: tuple[str, ...] = get_args(OpportunityStage)
PERSONAS: tuple[str, ...] = get_args(Persona)
CLOSED_STAGES: frozenset[str] = frozenset({"Closed Won", "Closed Lost"})


def as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class UserCreate(BaseModel):
    name: str
    email: EmailStr
    role: UserRole


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: UserRole
    created_at: UtcDatetime


class OpportunityCreate(BaseModel):
    name: str
    stage: OpportunityStage
    amount: Decimal = Field(gt=Decimal("0"), max_digits=12, decimal_places=2)
    close_date: UtcDatetime
    assigned_to_id: str
    customer_name: str
    last_activity_date: UtcDatetime
    deal_probability: int = Field(ge=0, le=100)


class OpportunityPatch(BaseModel):
    """Fields of an opportunity that may be overwritten by an update.

    Only members present in ``model_fields_set`` are applied.
    """

    name: str | None = None
    stage: OpportunityStage | None = None
    amount: Decimal | None = Field(default=None, gt=Decimal("0"), max_digits=12, decimal_places=2)
    close_date: UtcDatetime | None = None
    assigned_to_id: str | None = None
    customer_name: str | None = None
    last_activity_date: UtcDatetime | None = None
    deal_probability: int | None = Field(default=None, ge=0, le=100)


class OpportunityUpdate(OpportunityPatch):
    id: str

    def to_patch(self) -> OpportunityPatch:
        fields = self.model_fields_set - {"id"}
        return OpportunityPatch.model_validate(self.model_dump(include=fields))


class OpportunityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    stage: OpportunityStage
    amount: float
    close_date: UtcDatetime
    assigned_to_id: str
    customer_name: str
    last_activity_date: UtcDatetime
    deal_probability: int
    created_at: UtcDatetime


class OpportunityFilters(BaseModel):
    assigned_to_id: str | None = None
    stage: OpportunityStage | None = None
    customer_name: str | None = None
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    close_date_from: UtcDatetime | None = None
    close_date_to: UtcDatetime | None = None


class IdInput(BaseModel):
    id: str


class DashboardMetrics(BaseModel):
    pipeline_value: float
    opportunities_won: int
    activities_completed: int
    win_rate: float = Field(ge=0, le=100)
    open_opportunities: int
    closed_won_this_month: int
    forecasted_revenue: float
    upcoming_activities: int


class PipelineStageData(BaseModel):
    stage: OpportunityStage
    count: int
    value: float


class HealthcheckRead(BaseModel):
    status: str
    timestamp: datetime
