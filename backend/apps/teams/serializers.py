from __future__ import annotations

from rest_framework import serializers

from apps.judging.scoring import milestone_progress

from .models import Evaluation, Milestones, Participant, ProgressUpdates, Team, ToolUsage


class ParticipantSerializer(serializers.ModelSerializer):
    class Meta:
        model = Participant
        fields = ["id", "name", "background", "role", "created_at"]
        read_only_fields = ["id", "created_at"]


class MilestonesSerializer(serializers.ModelSerializer):
    brainstorming_complete = serializers.BooleanField(read_only=True)
    brainstorming_pending = serializers.BooleanField(read_only=True)
    prd_generated = serializers.BooleanField(read_only=True)
    prd_pending = serializers.BooleanField(read_only=True)
    build_complete = serializers.BooleanField(read_only=True)
    build_pending = serializers.BooleanField(read_only=True)
    progress = serializers.SerializerMethodField()

    class Meta:
        model = Milestones
        fields = [
            "brainstorming_status",
            "prd_status",
            "build_status",
            "brainstorming_complete",
            "brainstorming_pending",
            "prd_generated",
            "prd_pending",
            "build_complete",
            "build_pending",
            "progress",
            "updated_at",
        ]

    def get_progress(self, obj):
        return milestone_progress(obj)


class ToolUsageSerializer(serializers.ModelSerializer):
    coding_tools = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)

    class Meta:
        model = ToolUsage
        fields = ["coding_tools", "llm_used", "updated_at"]
        read_only_fields = ["updated_at"]
        extra_kwargs = {"llm_used": {"required": False}}


class ProgressUpdatesSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProgressUpdates
        fields = ["screen_recording_url", "submission_url", "updated_at"]
        read_only_fields = ["updated_at"]
        extra_kwargs = {
            "screen_recording_url": {"required": False},
            "submission_url": {"required": False},
        }


class EvaluationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Evaluation
        fields = ["novelty", "fastest_to_build", "feature_count", "clarity", "impact_reach", "total_score", "updated_at"]
        read_only_fields = fields


class TeamSerializer(serializers.ModelSerializer):
    participants = ParticipantSerializer(many=True, read_only=True)
    milestones = MilestonesSerializer(read_only=True)
    tool_usage = ToolUsageSerializer(read_only=True)
    progress_updates = ProgressUpdatesSerializer(read_only=True)
    evaluation = EvaluationSerializer(read_only=True)
    progress = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = [
            "id",
            "team_number",
            "name",
            "problem_statement",
            "theme",
            "elo_score",
            "progress",
            "participants",
            "milestones",
            "tool_usage",
            "progress_updates",
            "evaluation",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_progress(self, obj):
        return milestone_progress(getattr(obj, "milestones", None))


class ParticipantInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120, allow_blank=True)
    background = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")
    role = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")


class TeamCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120, allow_blank=True)
    password = serializers.CharField(max_length=128, write_only=True, trim_whitespace=False)
    problem_statement = serializers.CharField(required=False, allow_blank=True, default="")
    theme = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
    participants = ParticipantInputSerializer(many=True, required=False)


class TeamUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120, required=False, allow_blank=True)
    problem_statement = serializers.CharField(required=False, allow_blank=True)
    theme = serializers.CharField(max_length=120, required=False, allow_blank=True)


class TeamLoginSerializer(serializers.Serializer):
    team_number = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)
