"""Persona visibility rules for the sales dashboard.

A persona selects which opportunities feed the dashboard views. The rule is a
flat conditional over the persona tag and the stored user roles; there is no
reporting-line model, so the ``Manager`` persona sees every opportunity
assigned to an ``IC`` user regardless of who is asking.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy import Select, false

from app.sales.errors import ValidationError
from app.sales.models import SalesOpportunity


class _HasIdAndRole(Protocol):
    id: str
    role: str


@dataclass(frozen=True, slots=True)
class VisibilityRule:
    persona: str
    # None means unrestricted.
    assignee_ids: frozenset[str] | None

    @property
    def is_unrestricted(self) -> bool:
        return self.assignee_ids is None

    def apply(self, stmt: Select[Any]) -> Select[Any]:
        if self.assignee_ids is None:
            return stmt
        if not self.assignee_ids:
            return stmt.where(false())
        return stmt.where(SalesOpportunity.assigned_to_id.in_(sorted(self.assignee_ids)))


def resolve_visibility(persona: str, user_id: str, users: Iterable[_HasIdAndRole]) -> VisibilityRule:
    if persona == "IC":
        return VisibilityRule(persona=persona, assignee_ids=frozenset({user_id}))
    if persona == "Manager":
        return VisibilityRule(
            persona=persona,
            assignee_ids=frozenset(user.id for user in users if user.role == "IC"),
        )
    if persona == "Executive":
        return VisibilityRule(persona=persona, assignee_ids=None)
    raise ValidationError(f"unknown persona '{persona}'")
