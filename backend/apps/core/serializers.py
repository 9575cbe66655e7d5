from __future__ import annotations

from rest_framework import serializers

from .auth import ROLES
from .models import RateLimitConfig
from .throttles import PerIPRateThrottle


class AdminLoginSerializer(serializers.Serializer):
    pin = serializers.CharField(trim_whitespace=True)


class PrincipalSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=ROLES)
    team_id = serializers.IntegerField(allow_null=True)
    user_id = serializers.IntegerField(allow_null=True)


class RateLimitConfigSerializer(serializers.ModelSerializer):
    class Meta:
        model = RateLimitConfig
        fields = ["scope", "user_rate", "ip_rate", "updated_at"]
        read_only_fields = ["updated_at"]
        # Upserts go through update_or_create, so the unique check is skipped here
        extra_kwargs = {"scope": {"validators": []}}

    def _check_rate(self, value: str) -> str:
        value = (value or "").strip()
        if value == "":
            return value
        try:
            PerIPRateThrottle().parse_rate(value)
        except (IndexError, KeyError, ValueError):
            raise serializers.ValidationError("expected a rate like '10/min'")
        return value

    def validate_user_rate(self, value):
        return self._check_rate(value)

    def validate_ip_rate(self, value):
        return self._check_rate(value)
