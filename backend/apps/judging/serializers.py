from __future__ import annotations

from rest_framework import serializers

from apps.core.models import AuditLog

from .milestones import MilestoneStatus


class MilestoneReviewSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=["approve", "reject"])


class MilestoneSetSerializer(serializers.Serializer):
    complete = serializers.BooleanField()


class EvaluationCriteriaSerializer(serializers.Serializer):
    novelty = serializers.IntegerField(required=False)
    fastest_to_build = serializers.IntegerField(required=False)
    feature_count = serializers.IntegerField(required=False)
    clarity = serializers.IntegerField(required=False)
    impact_reach = serializers.IntegerField(required=False)


class TransitionSerializer(serializers.Serializer):
    milestone = serializers.CharField(source="kind")
    event = serializers.CharField()
    before = serializers.ChoiceField(choices=MilestoneStatus.choices)
    after = serializers.ChoiceField(choices=MilestoneStatus.choices)
    changed = serializers.BooleanField()


class AuditLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = AuditLog
        fields = ["id", "timestamp", "actor_role", "actor_user", "action", "data", "prev_hash", "hash"]
