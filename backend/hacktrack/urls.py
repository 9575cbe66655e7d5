from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("apps.core.urls")),
    path("api/", include("apps.teams.urls")),
    path("api/", include("apps.judging.urls")),
    path("api/schema", SpectacularAPIView.as_view(), name="schema"),
]
