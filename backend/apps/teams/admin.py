from django.contrib import admin
from .models import Team, Participant, Milestones, ToolUsage, ProgressUpdates, Evaluation


class ParticipantInline(admin.TabularInline):
    model = Participant
    extra = 0


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ("team_number", "name", "theme", "elo_score", "created_at")
    list_filter = ("theme",)
    search_fields = ("name", "team_number")
    exclude = ("password",)
    inlines = [ParticipantInline]


@admin.register(Milestones)
class MilestonesAdmin(admin.ModelAdmin):
    list_display = ("team", "brainstorming_status", "prd_status", "build_status", "updated_at")
    list_filter = ("brainstorming_status", "prd_status", "build_status")
    search_fields = ("team__name",)


@admin.register(ToolUsage)
class ToolUsageAdmin(admin.ModelAdmin):
    list_display = ("team", "llm_used", "updated_at")
    search_fields = ("team__name", "llm_used")


@admin.register(ProgressUpdates)
class ProgressUpdatesAdmin(admin.ModelAdmin):
    list_display = ("team", "screen_recording_url", "submission_url", "updated_at")
    search_fields = ("team__name",)


@admin.register(Evaluation)
class EvaluationAdmin(admin.ModelAdmin):
    list_display = ("team", "novelty", "fastest_to_build", "feature_count", "clarity", "impact_reach", "total_score")
    readonly_fields = ("total_score",)
    search_fields = ("team__name",)
