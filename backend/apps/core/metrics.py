from __future__ import annotations

from prometheus_client import Counter

# Logins
logins_total = Counter(
    "hackathon_logins_total",
    "Login attempts",
    labelnames=("role", "outcome"),
)

# Team records
teams_created_total = Counter(
    "hackathon_teams_created_total",
    "Teams registered",
)

# Review workflow
milestone_transitions_total = Counter(
    "hackathon_milestone_transitions_total",
    "Milestone state changes",
    labelnames=("milestone", "event"),
)
evaluations_saved_total = Counter(
    "hackathon_evaluations_saved_total",
    "Evaluation score updates",
)
