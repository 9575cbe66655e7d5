from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Tuple

from django.db import transaction

from apps.core.audit import record_action
from apps.core.auth import ROLE_TEAM, Principal
from apps.core.exceptions import NotFound, persistence_guard
from apps.core.metrics import evaluations_saved_total, milestone_transitions_total
from apps.teams import services as store
from apps.teams.models import Milestones, Team

from . import milestones as machine
from .milestones import MilestoneStatus, Transition

logger = logging.getLogger(__name__)

AUDIT_TARGET = "team"


def _lock_team(team_id) -> None:
    # Serialises audited writes per team so each entry chains off the latest hash
    if not list(Team.objects.select_for_update().filter(id=team_id).values_list("id", flat=True)):
        raise NotFound("team not found")


def _apply(
    team_id,
    kind: str,
    step: Callable[[str, MilestoneStatus], Transition],
    principal: Optional[Principal] = None,
    ip: Optional[str] = None,
) -> Tuple[Team, Transition]:
    kind = machine.normalize_kind(kind)
    with persistence_guard(f"milestone {kind}"):
        with transaction.atomic():
            _lock_team(team_id)
            try:
                record = Milestones.objects.select_for_update().get(team_id=team_id)
            except Milestones.DoesNotExist:
                raise NotFound("team not found")
            transition = step(kind, record.status_of(kind))
            if transition.changed:
                record.set_status(kind, transition.after)
                record.save(update_fields=[Milestones.status_field(kind), "updated_at"])
                if principal is not None and principal.role != ROLE_TEAM:
                    record_action(
                        principal,
                        f"milestone.{transition.event}",
                        AUDIT_TARGET,
                        team_id,
                        data={"milestone": kind, "from": transition.before.value, "to": transition.after.value},
                        ip=ip,
                    )

    if transition.changed:
        milestone_transitions_total.labels(milestone=kind, event=transition.event).inc()
        logger.info(
            "team %s %s: %s -> %s (%s)", team_id, kind, transition.before.value, transition.after.value, transition.event
        )
    else:
        logger.info("team %s %s: %s ignored, already %s", team_id, kind, transition.event, transition.before.value)
    # Always hand back the stored record, never the assumed outcome
    return store.get_team_by_id(team_id), transition


def request_milestone_approval(team_id, kind: str, principal: Optional[Principal] = None) -> Tuple[Team, Transition]:
    return _apply(team_id, kind, machine.request_approval, principal)


def review_milestone(
    team_id, kind: str, approve: bool, principal: Optional[Principal] = None, ip: Optional[str] = None
) -> Tuple[Team, Transition]:
    step = machine.approve if approve else machine.reject
    return _apply(team_id, kind, step, principal, ip)


def set_milestone_complete(
    team_id, kind: str, complete: bool, principal: Optional[Principal] = None, ip: Optional[str] = None
) -> Tuple[Team, Transition]:
    def step(k, status):
        return machine.force_complete(k, status, complete)

    return _apply(team_id, kind, step, principal, ip)


def save_evaluation(
    team_id, criteria: Dict[str, Any], principal: Optional[Principal] = None, ip: Optional[str] = None
) -> Team:
    if not criteria:
        return store.get_team_by_id(team_id)
    with persistence_guard("save_evaluation"):
        with transaction.atomic():
            _lock_team(team_id)
            evaluation = store.update_evaluation(team_id, **criteria)
            if principal is not None:
                record_action(
                    principal,
                    "evaluation.update",
                    AUDIT_TARGET,
                    team_id,
                    data={"criteria": {name: getattr(evaluation, name) for name in criteria}, "total_score": evaluation.total_score},
                    ip=ip,
                )
    evaluations_saved_total.inc()
    logger.info("team %s evaluation saved, total_score=%s", team_id, evaluation.total_score)
    return store.get_team_by_id(team_id)
