from __future__ import annotations

import calendar
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from app.sales.schemas import CLOSED_STAGES, DashboardMetrics, PipelineStageData, as_utc


_HUNDRED = Decimal("100")
_CENTS = Decimal("0.01")


class _OpportunityLike(Protocol):
    stage: str
    amount: Decimal
    deal_probability: int
    close_date: datetime
    created_at: datetime


@dataclass(frozen=True, slots=True)
class MonthWindow:
    start: datetime
    end: datetime

    @classmethod
    def containing(cls, moment: datetime) -> MonthWindow:
        moment = as_utc(moment)
        last_day = calendar.monthrange(moment.year, moment.month)[1]
        start = moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        end = moment.replace(day=last_day, hour=23, minute=59, second=59, microsecond=999999)
        return cls(start=start, end=end)

    def __contains__(self, value: datetime) -> bool:
        return self.start <= as_utc(value) <= self.end


def is_open(stage: str) -> bool:
    return stage not in CLOSED_STAGES


def _to_decimal(value: Decimal | float | int) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def compute_win_rate(won: int, lost: int) -> Decimal:
    closed = won + lost
    if closed == 0:
        return Decimal("0")
    return (Decimal(won) / Decimal(closed) * _HUNDRED).quantize(_CENTS, rounding=ROUND_HALF_UP)


def compute_dashboard_metrics(
    opportunities: Iterable[_OpportunityLike],
    *,
    now: datetime,
    upcoming_window: timedelta = timedelta(days=30),
) -> DashboardMetrics:
    now = as_utc(now)
    month = MonthWindow.containing(now)
    upcoming_until = now + upcoming_window

    pipeline_value = Decimal("0")
    forecasted_revenue = Decimal("0")
    open_count = 0
    won_count = 0
    lost_count = 0
    won_this_month = 0
    upcoming = 0

    for opportunity in opportunities:
        amount = _to_decimal(opportunity.amount)
        if opportunity.stage == "Closed Won":
            won_count += 1
            if opportunity.created_at in month:
                won_this_month += 1
        elif opportunity.stage == "Closed Lost":
            lost_count += 1
        else:
            open_count += 1
            pipeline_value += amount
            forecasted_revenue += amount * Decimal(opportunity.deal_probability) / _HUNDRED
            if now <= as_utc(opportunity.close_date) <= upcoming_until:
                upcoming += 1

    return DashboardMetrics(
        pipeline_value=float(pipeline_value),
        opportunities_won=won_count,
        # No activity log backs this figure.
        activities_completed=0,
        win_rate=float(compute_win_rate(won_count, lost_count)),
        open_opportunities=open_count,
        closed_won_this_month=won_this_month,
        forecasted_revenue=float(forecasted_revenue),
        upcoming_activities=upcoming,
    )


def summarize_stages(rows: Iterable[tuple[str, int, Decimal | float | int | None]]) -> list[PipelineStageData]:
    """Turn ``(stage, count, total)`` rows into response items ordered by stage name."""
    items: Sequence[tuple[str, int, Decimal | float | int | None]] = sorted(rows, key=lambda row: row[0])
    return [
        PipelineStageData(stage=stage, count=int(count), value=float(_to_decimal(total or 0)))
        for stage, count, total in items
        if count
    ]
