from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from opentelemetry import trace
from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.metrics import observe_dashboard_query
from app.sales.aggregation import compute_dashboard_metrics, summarize_stages
from app.sales.models import SalesOpportunity, SalesUser
from app.sales.personas import VisibilityRule, resolve_visibility
from app.sales.schemas import DashboardMetrics, PipelineStageData


logger = logging.getLogger("app.sales.dashboard")
tracer = trace.get_tracer("app.sales.dashboard")


@dataclass(slots=True)
class DashboardService:
    def visibility(self, session: Session, user_id: str, persona: str) -> VisibilityRule:
        users = session.scalars(select(SalesUser).where(SalesUser.role == "IC")).all() if persona == "Manager" else []
        return resolve_visibility(persona, user_id, users)

    def get_dashboard_metrics(
        self,
        session: Session,
        *,
        user_id: str,
        persona: str,
        now: datetime | None = None,
    ) -> DashboardMetrics:
        with tracer.start_as_current_span("sales.dashboard.metrics") as span:
            span.set_attribute("persona", persona)
            rule = self.visibility(session, user_id, persona)

            stmt: Select[tuple[SalesOpportunity]] = rule.apply(select(SalesOpportunity))
            opportunities = session.scalars(stmt).all()
            span.set_attribute("opportunity_count", len(opportunities))

            metrics = compute_dashboard_metrics(
                opportunities,
                now=now or datetime.now(timezone.utc),
                upcoming_window=timedelta(days=get_settings().upcoming_window_days),
            )

        observe_dashboard_query("metrics", persona)
        logger.debug("sales.dashboard.metrics", extra={"user_id": user_id, "persona": persona})
        return metrics

    def get_pipeline_stage_data(self, session: Session, *, user_id: str, persona: str) -> list[PipelineStageData]:
        with tracer.start_as_current_span("sales.dashboard.pipeline_stages") as span:
            span.set_attribute("persona", persona)
            rule = self.visibility(session, user_id, persona)

            stmt = rule.apply(
                select(
                    SalesOpportunity.stage,
                    func.count(SalesOpportunity.id),
                    func.sum(SalesOpportunity.amount),
                )
            )
            rows = session.execute(stmt.group_by(SalesOpportunity.stage).order_by(SalesOpportunity.stage.asc())).all()
            stages = summarize_stages((stage, count, total) for stage, count, total in rows)
            span.set_attribute("opportunity_count", sum(item.count for item in stages))

        observe_dashboard_query("pipeline_stages", persona)
        return stages


dashboard_service = DashboardService()
