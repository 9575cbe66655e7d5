from django.contrib import admin
from .models import AuditLog, RateLimitConfig


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "actor_role", "actor_user", "action", "target_type", "target_id")
    list_filter = ("actor_role", "target_type")
    search_fields = ("action", "target_type", "target_id")


@admin.register(RateLimitConfig)
class RateLimitConfigAdmin(admin.ModelAdmin):
    list_display = ("scope", "user_rate", "ip_rate", "updated_at")
    search_fields = ("scope",)
