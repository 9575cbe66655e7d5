"""
Milestone review state machine.

Each milestone (brainstorming, prd, build) holds one status:

    not_started --request--> pending --approve--> approved
                                     --reject---> not_started

Admins may also force a milestone complete or incomplete, skipping review.
Requesting approval while pending or approved changes nothing; approving or
rejecting anything that is not pending raises InvalidTransition.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from django.db import models

from apps.core.exceptions import InvalidTransition, ValidationFailure

BRAINSTORMING = "brainstorming"
PRD = "prd"
BUILD = "build"
KINDS = (BRAINSTORMING, PRD, BUILD)

EVENT_REQUEST = "request"
EVENT_APPROVE = "approve"
EVENT_REJECT = "reject"
EVENT_FORCE_COMPLETE = "force_complete"
EVENT_FORCE_INCOMPLETE = "force_incomplete"

# kind -> (complete flag, pending flag) as exposed by the API
LEGACY_FLAGS = {
    BRAINSTORMING: ("brainstorming_complete", "brainstorming_pending"),
    PRD: ("prd_generated", "prd_pending"),
    BUILD: ("build_complete", "build_pending"),
}

LABELS = {BRAINSTORMING: "Brainstorming", PRD: "PRD Generated", BUILD: "Build Complete"}


class MilestoneStatus(models.TextChoices):
    NOT_STARTED = "not_started", "Not started"
    PENDING = "pending", "Pending review"
    APPROVED = "approved", "Approved"


@dataclass(frozen=True)
class Transition:
    kind: str
    event: str
    before: MilestoneStatus
    after: MilestoneStatus

    @property
    def changed(self) -> bool:
        return self.before != self.after


def normalize_kind(kind: str) -> str:
    """Accept the milestone name or one of its legacy flag names."""
    value = (kind or "").strip().lower()
    if value in KINDS:
        return value
    for name, flags in LEGACY_FLAGS.items():
        if value in flags:
            return name
    raise ValidationFailure(f"unknown milestone '{kind}'. valid: {', '.join(KINDS)}")


def flags_for(status: MilestoneStatus) -> Tuple[bool, bool]:
    """(complete, pending) for a status."""
    return status == MilestoneStatus.APPROVED, status == MilestoneStatus.PENDING


def status_from_flags(complete: bool, pending: bool) -> MilestoneStatus:
    # complete wins, so the old complete+pending combination collapses to approved
    if complete:
        return MilestoneStatus.APPROVED
    if pending:
        return MilestoneStatus.PENDING
    return MilestoneStatus.NOT_STARTED


def apply_flags(status: MilestoneStatus, complete: Optional[bool] = None, pending: Optional[bool] = None) -> MilestoneStatus:
    """Overlay a partial legacy-flag update on the current status."""
    cur_complete, cur_pending = flags_for(status)
    if complete is not None:
        cur_complete = bool(complete)
        if cur_complete:
            cur_pending = False
    if pending is not None:
        cur_pending = bool(pending)
    return status_from_flags(cur_complete, cur_pending)


def request_approval(kind: str, status: MilestoneStatus) -> Transition:
    after = MilestoneStatus.PENDING if status == MilestoneStatus.NOT_STARTED else status
    return Transition(kind, EVENT_REQUEST, status, after)


def approve(kind: str, status: MilestoneStatus) -> Transition:
    if status != MilestoneStatus.PENDING:
        raise InvalidTransition(f"{kind} is {status.label.lower()}, only pending milestones can be approved")
    return Transition(kind, EVENT_APPROVE, status, MilestoneStatus.APPROVED)


def reject(kind: str, status: MilestoneStatus) -> Transition:
    if status != MilestoneStatus.PENDING:
        raise InvalidTransition(f"{kind} is {status.label.lower()}, only pending milestones can be rejected")
    return Transition(kind, EVENT_REJECT, status, MilestoneStatus.NOT_STARTED)


def force_complete(kind: str, status: MilestoneStatus, complete: bool) -> Transition:
    if complete:
        return Transition(kind, EVENT_FORCE_COMPLETE, status, MilestoneStatus.APPROVED)
    # Turning "complete" off only affects approved milestones; a pending request stays pending
    after = MilestoneStatus.NOT_STARTED if status == MilestoneStatus.APPROVED else status
    return Transition(kind, EVENT_FORCE_INCOMPLETE, status, after)
