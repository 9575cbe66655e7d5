from __future__ import annotations

import math
from typing import Any

CRITERIA = ("novelty", "fastest_to_build", "feature_count", "clarity", "impact_reach")
MIN_CRITERION = 1
MAX_CRITERION = 5

MILESTONE_FLAGS = ("brainstorming_complete", "prd_generated", "build_complete")


def _read(source: Any, name: str):
    if isinstance(source, dict):
        return source.get(name)
    return getattr(source, name, None)


def compute_total_score(criteria: Any) -> int:
    """
    Sum of the five evaluation criteria. No clamping happens here; a missing
    criterion counts as 0. Accepts a mapping or any object with the attributes.
    """
    return sum(int(_read(criteria, name) or 0) for name in CRITERIA)


def clamp_criterion(value) -> int:
    return max(MIN_CRITERION, min(MAX_CRITERION, int(value)))


def compute_progress(brainstorming_complete: bool, prd_generated: bool, build_complete: bool) -> int:
    """Share of approved milestones as a whole percentage, rounded half up: 0, 33, 67 or 100."""
    flags = (brainstorming_complete, prd_generated, build_complete)
    completed = sum(1 for flag in flags if flag)
    return int(math.floor(completed / len(flags) * 100 + 0.5))


def milestone_progress(milestones: Any) -> int:
    if milestones is None:
        return 0
    return compute_progress(*(bool(_read(milestones, name)) for name in MILESTONE_FLAGS))
