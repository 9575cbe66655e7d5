from __future__ import annotations

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from apps.judging.milestones import KINDS, LEGACY_FLAGS, MilestoneStatus, flags_for
from apps.judging.scoring import CRITERIA, MAX_CRITERION, MIN_CRITERION, compute_total_score


def default_elo() -> int:
    return settings.TEAM_DEFAULT_ELO


class TeamNumberSequence(models.Model):
    """Singleton counter for team numbers; numbers are never handed out twice."""

    singleton = models.BooleanField(default=True, unique=True)
    last_value = models.PositiveIntegerField(default=0)

    def __str__(self) -> str:
        return f"Team number sequence (last={self.last_value})"


class Team(models.Model):
    team_number = models.PositiveIntegerField(unique=True)
    name = models.CharField(max_length=120)
    password = models.CharField(max_length=256)
    problem_statement = models.TextField(blank=True, default="")
    theme = models.CharField(max_length=120, blank=True, default="")
    elo_score = models.IntegerField(default=default_elo)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["team_number"]

    def __str__(self) -> str:
        return f"#{self.team_number} {self.name}"


class Participant(models.Model):
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="participants")
    name = models.CharField(max_length=120)
    background = models.CharField(max_length=200, blank=True, default="")
    role = models.CharField(max_length=120, blank=True, default="")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return f"{self.name} ({self.team_id})"


class Milestones(models.Model):
    team = models.OneToOneField(Team, on_delete=models.CASCADE, related_name="milestones")
    brainstorming_status = models.CharField(
        max_length=16, choices=MilestoneStatus.choices, default=MilestoneStatus.NOT_STARTED
    )
    prd_status = models.CharField(max_length=16, choices=MilestoneStatus.choices, default=MilestoneStatus.NOT_STARTED)
    build_status = models.CharField(max_length=16, choices=MilestoneStatus.choices, default=MilestoneStatus.NOT_STARTED)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "milestones"

    def __str__(self) -> str:
        return f"Milestones for team {self.team_id}"

    @staticmethod
    def status_field(kind: str) -> str:
        return f"{kind}_status"

    def status_of(self, kind: str) -> MilestoneStatus:
        return MilestoneStatus(getattr(self, self.status_field(kind)))

    def set_status(self, kind: str, status: MilestoneStatus) -> None:
        setattr(self, self.status_field(kind), MilestoneStatus(status))

    def flags(self) -> dict:
        """Legacy boolean view: brainstorming_complete, brainstorming_pending, prd_generated, ..."""
        result = {}
        for kind in KINDS:
            complete_name, pending_name = LEGACY_FLAGS[kind]
            result[complete_name], result[pending_name] = flags_for(self.status_of(kind))
        return result

    @property
    def brainstorming_complete(self) -> bool:
        return self.status_of("brainstorming") == MilestoneStatus.APPROVED

    @property
    def brainstorming_pending(self) -> bool:
        return self.status_of("brainstorming") == MilestoneStatus.PENDING

    @property
    def prd_generated(self) -> bool:
        return self.status_of("prd") == MilestoneStatus.APPROVED

    @property
    def prd_pending(self) -> bool:
        return self.status_of("prd") == MilestoneStatus.PENDING

    @property
    def build_complete(self) -> bool:
        return self.status_of("build") == MilestoneStatus.APPROVED

    @property
    def build_pending(self) -> bool:
        return self.status_of("build") == MilestoneStatus.PENDING


class ToolUsage(models.Model):
    team = models.OneToOneField(Team, on_delete=models.CASCADE, related_name="tool_usage")
    coding_tools = models.JSONField(default=list, blank=True)
    llm_used = models.CharField(max_length=200, blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Tools for team {self.team_id}"


class ProgressUpdates(models.Model):
    team = models.OneToOneField(Team, on_delete=models.CASCADE, related_name="progress_updates")
    screen_recording_url = models.CharField(max_length=500, blank=True, default="")
    submission_url = models.CharField(max_length=500, blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "progress updates"

    def __str__(self) -> str:
        return f"Progress links for team {self.team_id}"


_criterion_validators = [MinValueValidator(MIN_CRITERION), MaxValueValidator(MAX_CRITERION)]


class Evaluation(models.Model):
    team = models.OneToOneField(Team, on_delete=models.CASCADE, related_name="evaluation")
    novelty = models.PositiveSmallIntegerField(default=MIN_CRITERION, validators=_criterion_validators)
    fastest_to_build = models.PositiveSmallIntegerField(default=MIN_CRITERION, validators=_criterion_validators)
    feature_count = models.PositiveSmallIntegerField(default=MIN_CRITERION, validators=_criterion_validators)
    clarity = models.PositiveSmallIntegerField(default=MIN_CRITERION, validators=_criterion_validators)
    impact_reach = models.PositiveSmallIntegerField(default=MIN_CRITERION, validators=_criterion_validators)
    total_score = models.PositiveSmallIntegerField(default=MIN_CRITERION * len(CRITERIA), editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Evaluation for team {self.team_id}: {self.total_score}"

    def save(self, *args, **kwargs):
        # The stored total is always recomputed from the criteria
        self.total_score = compute_total_score(self)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "total_score" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["total_score"]
        super().save(*args, **kwargs)
