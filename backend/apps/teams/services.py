"""
Team record store.

Every write runs in a transaction and returns the refreshed record; database
errors surface as PersistenceFailure and leave the stored state unchanged.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from django.db import models, transaction
from django.db.models import Max

from apps.core.exceptions import NotFound, ValidationFailure, persistence_guard
from apps.core.metrics import teams_created_total
from apps.judging.milestones import KINDS, LEGACY_FLAGS, MilestoneStatus, apply_flags
from apps.judging.scoring import CRITERIA, clamp_criterion

from .credentials import get_verifier
from .models import (
    Evaluation,
    Milestones,
    Participant,
    ProgressUpdates,
    Team,
    TeamNumberSequence,
    ToolUsage,
)

logger = logging.getLogger(__name__)

SATELLITES = ("milestones", "tool_usage", "progress_updates", "evaluation")
TEAM_FIELDS = ("name", "problem_statement", "theme")
TOOL_USAGE_FIELDS = ("coding_tools", "llm_used")
PROGRESS_FIELDS = ("screen_recording_url", "submission_url")


def team_queryset():
    """Teams joined with every satellite record and their participants."""
    return Team.objects.select_related(*SATELLITES).prefetch_related("participants")


def _clean_participant(data: Dict[str, Any]) -> Dict[str, str]:
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationFailure("participant name is required")
    return {
        "name": name,
        "background": (data.get("background") or "").strip(),
        "role": (data.get("role") or "").strip(),
    }


def _next_team_number() -> int:
    # Caller holds the transaction; the sequence row lock serialises concurrent registrations
    seq, _ = TeamNumberSequence.objects.select_for_update().get_or_create(singleton=True)
    highest = Team.objects.aggregate(highest=Max("team_number"))["highest"] or 0
    seq.last_value = max(seq.last_value, highest) + 1
    seq.save(update_fields=["last_value"])
    return seq.last_value


def create_team(
    name: str,
    password: str,
    problem_statement: str = "",
    theme: str = "",
    participants: Optional[Iterable[Dict[str, Any]]] = None,
) -> Team:
    """
    Register a team with its participants and four default satellite records
    (milestones, tool usage, progress updates, evaluation) in one transaction.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationFailure("team name is required")
    if not password:
        raise ValidationFailure("password is required")
    members = [_clean_participant(p) for p in (participants or [])]

    with persistence_guard("create_team"):
        with transaction.atomic():
            team = Team.objects.create(
                team_number=_next_team_number(),
                name=name,
                password=get_verifier().encode(password),
                problem_statement=(problem_statement or "").strip(),
                theme=(theme or "").strip(),
            )
            Participant.objects.bulk_create([Participant(team=team, **m) for m in members])
            Milestones.objects.create(team=team)
            ToolUsage.objects.create(team=team)
            ProgressUpdates.objects.create(team=team)
            Evaluation.objects.create(team=team)

    teams_created_total.inc()
    logger.info("team #%s '%s' registered with %d participants", team.team_number, team.name, len(members))
    return get_team_by_id(team.id)


def get_team_by_credentials(team_number, password: str) -> Optional[Team]:
    """The team when number and password match, otherwise None (no hint about which was wrong)."""
    try:
        number = int(team_number)
    except (TypeError, ValueError):
        return None
    with persistence_guard("get_team_by_credentials"):
        team = Team.objects.filter(team_number=number).only("id", "password").first()
    if team is None or not get_verifier().verify(password or "", team.password):
        return None
    return get_team_by_id(team.id)


def get_team_by_id(team_id) -> Team:
    with persistence_guard("get_team_by_id"):
        try:
            return team_queryset().get(id=team_id)
        except (Team.DoesNotExist, ValueError, TypeError):
            raise NotFound("team not found")


def get_all_teams() -> List[Team]:
    with persistence_guard("get_all_teams"):
        return list(team_queryset().order_by("team_number"))


def _check_fields(fields: Dict[str, Any], allowed: Iterable[str]) -> None:
    unknown = set(fields) - set(allowed)
    if unknown:
        raise ValidationFailure(f"unknown fields: {', '.join(sorted(unknown))}")


def _update_record(model: type[models.Model], team_id, values: Dict[str, Any]):
    with persistence_guard(f"update {model._meta.model_name}"):
        with transaction.atomic():
            try:
                record = model.objects.select_for_update().get(team_id=team_id)
            except model.DoesNotExist:
                raise NotFound("team not found")
            if values:
                for field, value in values.items():
                    setattr(record, field, value)
                record.save(update_fields=list(values) + ["updated_at"])
    return record


def update_team(team_id, **fields) -> Team:
    _check_fields(fields, TEAM_FIELDS)
    values = {k: (v or "").strip() for k, v in fields.items()}
    if "name" in values and not values["name"]:
        raise ValidationFailure("team name is required")
    with persistence_guard("update_team"):
        with transaction.atomic():
            try:
                team = Team.objects.select_for_update().get(id=team_id)
            except Team.DoesNotExist:
                raise NotFound("team not found")
            if values:
                for field, value in values.items():
                    setattr(team, field, value)
                team.save(update_fields=list(values) + ["updated_at"])
    return get_team_by_id(team_id)


def add_participant(team_id, name: str, background: str = "", role: str = "") -> Participant:
    member = _clean_participant({"name": name, "background": background, "role": role})
    with persistence_guard("add_participant"):
        if not Team.objects.filter(id=team_id).exists():
            raise NotFound("team not found")
        return Participant.objects.create(team_id=team_id, **member)


def update_milestones(team_id, **fields) -> Milestones:
    """
    Partial milestone update. Accepts `<kind>_status` values or the legacy
    flags (brainstorming_complete, prd_pending, ...); flags are merged into
    the current status, with complete taking precedence over pending.
    """
    status_fields = {Milestones.status_field(kind): kind for kind in KINDS}
    flag_fields = {}
    for kind, (complete_name, pending_name) in LEGACY_FLAGS.items():
        flag_fields[complete_name] = (kind, "complete")
        flag_fields[pending_name] = (kind, "pending")
    _check_fields(fields, list(status_fields) + list(flag_fields))

    with persistence_guard("update_milestones"):
        with transaction.atomic():
            try:
                record = Milestones.objects.select_for_update().get(team_id=team_id)
            except Milestones.DoesNotExist:
                raise NotFound("team not found")

            overlay: Dict[str, Dict[str, bool]] = {}
            for field, value in fields.items():
                if field in status_fields:
                    try:
                        record.set_status(status_fields[field], MilestoneStatus(value))
                    except ValueError:
                        raise ValidationFailure(f"invalid status '{value}' for {field}")
                else:
                    kind, flag = flag_fields[field]
                    overlay.setdefault(kind, {})[flag] = bool(value)
            for kind, flags in overlay.items():
                record.set_status(kind, apply_flags(record.status_of(kind), **flags))

            touched = {status_fields[f] for f in fields if f in status_fields} | set(overlay)
            if touched:
                record.save(update_fields=[Milestones.status_field(k) for k in sorted(touched)] + ["updated_at"])
    return record


def update_tool_usage(team_id, **fields) -> ToolUsage:
    _check_fields(fields, TOOL_USAGE_FIELDS)
    values = {}
    if "coding_tools" in fields:
        tools = fields["coding_tools"] or []
        if isinstance(tools, str):
            tools = tools.split(",")
        values["coding_tools"] = [str(t).strip() for t in tools if str(t).strip()]
    if "llm_used" in fields:
        values["llm_used"] = (fields["llm_used"] or "").strip()
    return _update_record(ToolUsage, team_id, values)


def update_progress_updates(team_id, **fields) -> ProgressUpdates:
    _check_fields(fields, PROGRESS_FIELDS)
    values = {k: (v or "").strip() for k, v in fields.items()}
    return _update_record(ProgressUpdates, team_id, values)


def update_evaluation(team_id, **criteria) -> Evaluation:
    """Clamp each given criterion into [1, 5]; Evaluation.save() recomputes total_score."""
    _check_fields(criteria, CRITERIA)
    values = {}
    for name, value in criteria.items():
        try:
            values[name] = clamp_criterion(value)
        except (TypeError, ValueError):
            raise ValidationFailure(f"{name} must be an integer")
    return _update_record(Evaluation, team_id, values)
