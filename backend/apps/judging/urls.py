from django.urls import path

from .views import (
    MilestoneRequestView,
    AdminTeamListView,
    AdminTeamDetailView,
    PendingApprovalsView,
    MilestoneReviewView,
    MilestoneSetView,
    EvaluationUpdateView,
    EvaluationPreviewView,
    TeamAuditLogView,
    LeaderboardView,
)

urlpatterns = [
    path("teams/me/milestones/<str:kind>/request", MilestoneRequestView.as_view()),
    path("leaderboard", LeaderboardView.as_view()),
    path("evaluations/preview", EvaluationPreviewView.as_view()),
    # Reviewers
    path("admin/teams", AdminTeamListView.as_view()),
    path("admin/teams/<int:id>", AdminTeamDetailView.as_view()),
    path("admin/teams/<int:id>/milestones/<str:kind>", MilestoneSetView.as_view()),
    path("admin/teams/<int:id>/milestones/<str:kind>/review", MilestoneReviewView.as_view()),
    path("admin/teams/<int:id>/evaluation", EvaluationUpdateView.as_view()),
    path("admin/teams/<int:id>/audit", TeamAuditLogView.as_view()),
    path("admin/pending", PendingApprovalsView.as_view()),
]
