from __future__ import annotations

from django.core.cache import cache
from rest_framework.throttling import SimpleRateThrottle, ScopedRateThrottle

from .models import RateLimitConfig


def _get_db_rate(scope: str, suffix: str | None) -> str | None:
    """
    Retrieve a DB-configured rate for a given scope.
    suffix: None for the caller bucket, "ip" for per-IP.
    Returns a DRF rate string like "10/min" or None if not configured.
    """
    cache_key = f"ratelimit:{scope}:{suffix or 'user'}"
    cached = cache.get(cache_key)
    if cached is not None:
        return cached or None  # empty string -> None
    try:
        cfg = RateLimitConfig.objects.only("user_rate", "ip_rate").get(scope=scope)
    except RateLimitConfig.DoesNotExist:
        cache.set(cache_key, "", 60)
        return None
    rate = cfg.ip_rate if suffix == "ip" else cfg.user_rate
    cache.set(cache_key, rate or "", 60)
    return rate or None


class DynamicScopedRateThrottle(ScopedRateThrottle):
    """
    Scoped throttle that can read its rate from DB (RateLimitConfig) or fall back to settings.
    """

    def get_rate(self):
        scope = getattr(self, "scope", None)
        if not scope:
            return None
        db_rate = _get_db_rate(scope, None)
        if db_rate:
            return db_rate
        return super().get_rate()


class PerIPRateThrottle(SimpleRateThrottle):
    """
    A per-IP bucket for views with a throttle_scope.

    The rate comes from RateLimitConfig.ip_rate for the scope, else from
    DEFAULT_THROTTLE_RATES["<scope>-ip"]; with neither, the view is not limited by IP.
    """

    def __init__(self):
        # Rate depends on the view, resolved in allow_request
        pass

    def allow_request(self, request, view):
        base_scope = getattr(view, "throttle_scope", None)
        if not base_scope:
            return True
        self.scope = f"{base_scope}-ip"
        self.rate = self.get_rate()
        if not self.rate:
            return True
        self.num_requests, self.duration = self.parse_rate(self.rate)
        return super().allow_request(request, view)

    def get_cache_key(self, request, view):
        ident = self.get_ident(request)
        if ident is None:
            return None
        return self.cache_format % {"scope": self.scope, "ident": ident}

    def get_rate(self):
        base_scope = self.scope[:-3] if self.scope.endswith("-ip") else self.scope
        db_rate = _get_db_rate(base_scope, "ip")
        if db_rate:
            return db_rate
        return self.THROTTLE_RATES.get(self.scope)
