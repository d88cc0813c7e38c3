from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import Session, with_loader_criteria


@event.listens_for(Session, "do_orm_execute")
def _apply_record_scoping(execute_state) -> None:
    """
    Transparent record scoping for list endpoints.

    When the route config asks for it, a non-admin caller only sees objective
    and evaluation rows of themselves and their coachees, and only their own
    notifications. Query code stays unchanged:
        db.scalars(select(AnnualObjective)).all()
    """

    if not execute_state.is_select:
        return

    authz = execute_state.session.info.get("authz")
    if authz is None or not authz.scope_records or authz.is_admin:
        return

    # Local import to avoid cycles.
    from annual_review.models.notifications import Notification
    from annual_review.models.objectives import AnnualCoachEvaluation, AnnualEvaluation, AnnualObjective

    visible = sorted(authz.visible_employee_ids)
    user_id = authz.user_id

    execute_state.statement = execute_state.statement.options(
        with_loader_criteria(AnnualObjective, AnnualObjective.employee_id.in_(visible), include_aliases=True),
        with_loader_criteria(AnnualEvaluation, AnnualEvaluation.employee_id.in_(visible), include_aliases=True),
        with_loader_criteria(
            AnnualCoachEvaluation, AnnualCoachEvaluation.employee_id.in_(visible), include_aliases=True
        ),
        with_loader_criteria(Notification, Notification.recipient_id == user_id, include_aliases=True),
    )
