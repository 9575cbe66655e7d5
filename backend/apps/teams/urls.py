from django.urls import path

from .views import (
    TeamRegisterView,
    TeamLoginView,
    MyTeamView,
    ParticipantsView,
    ToolUsageView,
    ProgressUpdatesView,
)

urlpatterns = [
    path("auth/team/login", TeamLoginView.as_view()),
    path("teams", TeamRegisterView.as_view()),
    path("teams/me", MyTeamView.as_view()),
    path("teams/me/participants", ParticipantsView.as_view()),
    path("teams/me/tools", ToolUsageView.as_view()),
    path("teams/me/progress", ProgressUpdatesView.as_view()),
]
