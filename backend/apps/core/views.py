from __future__ import annotations

import logging
from typing import Any, Dict

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.settings import api_settings
from rest_framework.views import APIView

from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from .auth import MANAGE_RATE_LIMITS, ROLE_ADMIN, Principal, check_admin_pin, issue_token, resolve_principal
from .exceptions import Forbidden, Unauthorized, ValidationFailure
from .metrics import logins_total
from .models import RateLimitConfig
from .permissions import HasCapability
from .serializers import AdminLoginSerializer, PrincipalSerializer, RateLimitConfigSerializer


logger = logging.getLogger(__name__)


class AdminLoginView(APIView):
    """Exchange the configured admin PIN for an admin access token."""

    permission_classes = [permissions.AllowAny]
    throttle_scope = "admin-login"

    def post(self, request):
        serializer = AdminLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if not check_admin_pin(serializer.validated_data["pin"]):
            logins_total.labels(role=ROLE_ADMIN, outcome="failure").inc()
            logger.warning("admin PIN login rejected from %s", request.META.get("REMOTE_ADDR"))
            raise Unauthorized()
        principal = Principal(role=ROLE_ADMIN)
        logins_total.labels(role=ROLE_ADMIN, outcome="success").inc()
        logger.info("admin PIN login from %s", request.META.get("REMOTE_ADDR"))
        return Response({"token": issue_token(principal), "principal": PrincipalSerializer(principal).data})


class WhoAmIView(APIView):
    def get(self, request):
        principal = resolve_principal(request.user)
        if principal is None:
            raise Forbidden("account has no hackathon role")
        return Response(PrincipalSerializer(principal).data)


class RateLimitsView(APIView):
    """
    Ops view over throttle defaults, DB overrides and the effective rate per scope.
    POST upserts an override row; DELETE removes one (?scope=...).
    """

    permission_classes = [HasCapability]
    required_capability = MANAGE_RATE_LIMITS

    def _payload(self) -> Dict[str, Any]:
        defaults: Dict[str, str] = dict(api_settings.DEFAULT_THROTTLE_RATES or {})
        rows = {row.scope: row for row in RateLimitConfig.objects.order_by("scope")}
        scopes = {key[:-3] if key.endswith("-ip") else key for key in defaults} | set(rows)

        effective = {}
        for scope in sorted(scopes):
            row = rows.get(scope)
            effective[scope] = {
                "user_rate": (row and row.user_rate) or defaults.get(scope),
                "ip_rate": (row and row.ip_rate) or defaults.get(f"{scope}-ip"),
            }
        return {
            "defaults": defaults,
            "db_overrides": RateLimitConfigSerializer(rows.values(), many=True).data,
            "effective": effective,
        }

    @staticmethod
    def _drop_cached(scope: str):
        cache.delete_many([f"ratelimit:{scope}:user", f"ratelimit:{scope}:ip"])

    def get(self, request):
        return Response(self._payload())

    def post(self, request):
        serializer = RateLimitConfigSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        RateLimitConfig.objects.update_or_create(
            scope=data["scope"],
            defaults={
                "user_rate": data.get("user_rate", ""),
                "ip_rate": data.get("ip_rate", ""),
                "updated_at": timezone.now(),
            },
        )
        self._drop_cached(data["scope"])
        logger.info("rate limit override for %s set by %s", data["scope"], resolve_principal(request.user).pk)
        return Response(self._payload())

    def delete(self, request):
        scope = (request.query_params.get("scope") or "").strip()
        if not scope:
            raise ValidationFailure("scope required")
        RateLimitConfig.objects.filter(scope=scope).delete()
        self._drop_cached(scope)
        return Response(self._payload())


class HealthzView(APIView):
    permission_classes = [permissions.AllowAny]
    throttle_classes = []

    def get(self, request):
        return Response({"status": "ok"})


class ReadinessView(APIView):
    permission_classes = [permissions.AllowAny]
    throttle_classes = []

    def get(self, request):
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
        except DatabaseError:
            logger.exception("readiness check: database unavailable")
            return Response({"status": "unavailable"}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response({"status": "ready"})


class MetricsView(APIView):
    permission_classes = [permissions.AllowAny]
    throttle_classes = []

    def get(self, request):
        # Expose Prometheus metrics
        data = generate_latest()
        return HttpResponse(data, content_type=CONTENT_TYPE_LATEST)
