from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from rest_framework_simplejwt.tokens import AccessToken

ROLE_TEAM = "team"
ROLE_MENTOR = "mentor"
ROLE_ADMIN = "admin"
ROLES = (ROLE_TEAM, ROLE_MENTOR, ROLE_ADMIN)

# Team self-service
VIEW_OWN_TEAM = "view_own_team"
EDIT_OWN_TEAM = "edit_own_team"
EDIT_TOOL_USAGE = "edit_tool_usage"
EDIT_PROGRESS_UPDATES = "edit_progress_updates"
REQUEST_MILESTONE = "request_milestone"
# Reviewers
VIEW_ALL_TEAMS = "view_all_teams"
SCORE_EVALUATION = "score_evaluation"
REVIEW_MILESTONE = "review_milestone"
SET_MILESTONE = "set_milestone"
VIEW_PENDING = "view_pending"
VIEW_AUDIT_LOG = "view_audit_log"
MANAGE_RATE_LIMITS = "manage_rate_limits"

ROLE_CAPABILITIES = {
    ROLE_TEAM: frozenset(
        {VIEW_OWN_TEAM, EDIT_OWN_TEAM, EDIT_TOOL_USAGE, EDIT_PROGRESS_UPDATES, REQUEST_MILESTONE}
    ),
    ROLE_MENTOR: frozenset({VIEW_ALL_TEAMS, SCORE_EVALUATION}),
    ROLE_ADMIN: frozenset(
        {
            VIEW_ALL_TEAMS,
            SCORE_EVALUATION,
            REVIEW_MILESTONE,
            SET_MILESTONE,
            VIEW_PENDING,
            VIEW_AUDIT_LOG,
            MANAGE_RATE_LIMITS,
        }
    ),
}

# Actions a team principal may only perform on its own team
TEAM_SCOPED = ROLE_CAPABILITIES[ROLE_TEAM]


@dataclass(frozen=True)
class Principal:
    """The authenticated caller: a team (by id), a mentor or an admin."""

    role: str
    team_id: Optional[int] = None
    user_id: Optional[int] = None

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_anonymous(self) -> bool:
        return False

    @property
    def pk(self) -> str:
        # Identity used by DRF throttles for authenticated callers
        return f"{self.role}:{self.team_id if self.team_id is not None else self.user_id}"


def resolve_principal(user) -> Optional[Principal]:
    """
    Map request.user onto a Principal.
    Token-authenticated requests already carry one; Django accounts map by
    staff flag (admin) or mentor group membership.
    """
    if isinstance(user, Principal):
        return user
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    if user.is_staff or user.is_superuser:
        return Principal(role=ROLE_ADMIN, user_id=user.pk)
    if user.groups.filter(name=settings.MENTOR_GROUP_NAME).exists():
        return Principal(role=ROLE_MENTOR, user_id=user.pk)
    return None


def is_authorized(principal: Optional[Principal], action: str, team_id: Optional[int] = None) -> bool:
    if principal is None or not action:
        return False
    allowed = ROLE_CAPABILITIES.get(principal.role, frozenset())
    if action not in allowed:
        return False
    if principal.role == ROLE_TEAM and action in TEAM_SCOPED:
        return principal.team_id is not None and (team_id is None or team_id == principal.team_id)
    return True


def check_admin_pin(pin) -> bool:
    expected = settings.HACKATHON_ADMIN_PIN or ""
    if not expected or pin is None:
        return False
    return hmac.compare_digest(str(pin).strip().encode("utf-8"), expected.encode("utf-8"))


def issue_token(principal: Principal) -> str:
    token = AccessToken()
    token["role"] = principal.role
    if principal.team_id is not None:
        token["team_id"] = principal.team_id
    if principal.user_id is not None:
        token["user_id"] = principal.user_id
    return str(token)
