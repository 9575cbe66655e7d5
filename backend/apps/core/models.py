from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone


class AuditLog(models.Model):
    """
    Append-only record of reviewer actions (milestone reviews, evaluation saves).
    Rows for the same target form a hash chain through prev_hash.
    """

    actor_user = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL)
    actor_role = models.CharField(max_length=16, blank=True, default="")
    action = models.CharField(max_length=200)
    target_type = models.CharField(max_length=120)
    target_id = models.CharField(max_length=120)
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)
    ip = models.GenericIPAddressField(null=True, blank=True)
    data = models.JSONField(default=dict, blank=True)
    prev_hash = models.CharField(max_length=128, blank=True, default="")
    hash = models.CharField(max_length=128)

    class Meta:
        indexes = [models.Index(fields=["target_type", "target_id"], name="core_audit_target_idx")]

    def __str__(self) -> str:
        return f"{self.timestamp} {self.action} {self.target_type}:{self.target_id}"


class RateLimitConfig(models.Model):
    """
    Optional DB-backed throttling configuration.
    If a row exists for a given scope, the throttle rates override REST_FRAMEWORK.DEFAULT_THROTTLE_RATES.
    - scope: the DRF throttle scope value (e.g., 'team-login', 'admin-login')
    - user_rate: e.g., '10/min' (empty string disables the override)
    - ip_rate: e.g., '30/min' (empty string disables the override)
    """

    scope = models.CharField(max_length=64, unique=True)
    user_rate = models.CharField(max_length=32, blank=True, default="")
    ip_rate = models.CharField(max_length=32, blank=True, default="")
    updated_at = models.DateTimeField(default=timezone.now)

    def __str__(self) -> str:
        return f"{self.scope}: user={self.user_rate or '-'} ip={self.ip_rate or '-'}"
