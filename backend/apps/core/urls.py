from django.urls import path

from .views import (
    AdminLoginView,
    WhoAmIView,
    RateLimitsView,
    HealthzView,
    ReadinessView,
    MetricsView,
)

urlpatterns = [
    path("auth/admin/login", AdminLoginView.as_view()),
    path("auth/me", WhoAmIView.as_view()),
    path("ops/rate-limits", RateLimitsView.as_view()),
    # Observability
    path("healthz", HealthzView.as_view()),
    path("readiness", ReadinessView.as_view()),
    path("metrics", MetricsView.as_view()),
]
