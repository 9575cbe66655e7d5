from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Tuple

from apps.core.exceptions import ValidationFailure

from .milestones import KINDS, MilestoneStatus
from .scoring import milestone_progress

SORT_TOTAL = "total"
SORT_ELO = "elo"
SORT_PROGRESS = "progress"

BADGES = {1: "gold", 2: "silver", 3: "bronze"}


def team_total_score(team: Any) -> int:
    evaluation = getattr(team, "evaluation", None)
    if evaluation is None:
        return 0
    return evaluation.total_score or 0


def team_elo(team: Any) -> int:
    return getattr(team, "elo_score", None) or 0


def team_progress(team: Any) -> int:
    return milestone_progress(getattr(team, "milestones", None))


SORT_KEYS: Dict[str, Callable[[Any], int]] = {
    SORT_TOTAL: team_total_score,
    SORT_ELO: team_elo,
    SORT_PROGRESS: team_progress,
}


@dataclass(frozen=True)
class RankedTeam:
    rank: int
    badge: str
    team: Any
    total_score: int
    elo_score: int
    progress: int


def rank_badge(rank: int) -> str:
    return BADGES.get(rank, f"#{rank}")


def rank_teams(teams: Iterable[Any], sort_by: str = SORT_TOTAL) -> List[RankedTeam]:
    """
    Order teams by the chosen key, highest first. sorted() is stable, so teams
    with equal keys keep their input order (team_number order from the store).
    """
    try:
        key = SORT_KEYS[sort_by]
    except KeyError:
        raise ValidationFailure(f"invalid sort '{sort_by}'. valid: {', '.join(SORT_KEYS)}")

    ordered = sorted(teams, key=key, reverse=True)
    return [
        RankedTeam(
            rank=position,
            badge=rank_badge(position),
            team=team,
            total_score=team_total_score(team),
            elo_score=team_elo(team),
            progress=team_progress(team),
        )
        for position, team in enumerate(ordered, start=1)
    ]


def pending_approvals(teams: Iterable[Any]) -> List[Tuple[Any, str]]:
    results = []
    for team in teams:
        milestones = getattr(team, "milestones", None)
        if milestones is None:
            continue
        for kind in KINDS:
            if milestones.status_of(kind) == MilestoneStatus.PENDING:
                results.append((team, kind))
    return results


def count_pending_approvals(teams: Iterable[Any]) -> int:
    return len(pending_approvals(teams))
