from __future__ import annotations

from typing import Any

from sqlalchemy import ColumnElement, Select, and_, func

from app.sales.models import SalesOpportunity
from app.sales.schemas import OpportunityFilters


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_opportunity_conditions(filters: OpportunityFilters | None) -> list[ColumnElement[bool]]:
    if filters is None:
        return []

    conditions: list[ColumnElement[bool]] = []
    if filters.assigned_to_id:
        conditions.append(SalesOpportunity.assigned_to_id == filters.assigned_to_id)
    if filters.stage:
        conditions.append(SalesOpportunity.stage == filters.stage)
    if filters.customer_name:
        pattern = f"%{_escape_like(filters.customer_name.lower())}%"
        conditions.append(func.lower(SalesOpportunity.customer_name).like(pattern, escape="\\"))
    if filters.min_amount is not None:
        conditions.append(SalesOpportunity.amount >= filters.min_amount)
    if filters.max_amount is not None:
        conditions.append(SalesOpportunity.amount <= filters.max_amount)
    if filters.close_date_from is not None:
        conditions.append(SalesOpportunity.close_date >= filters.close_date_from)
    if filters.close_date_to is not None:
        conditions.append(SalesOpportunity.close_date <= filters.close_date_to)
    return conditions


def apply_opportunity_filters(stmt: Select[Any], filters: OpportunityFilters | None) -> Select[Any]:
    conditions = build_opportunity_conditions(filters)
    if not conditions:
        return stmt
    return stmt.where(and_(*conditions))
