from __future__ import annotations

from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import permissions
from rest_framework.generics import ListAPIView, RetrieveAPIView
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core import audit
from apps.core.auth import (
    REQUEST_MILESTONE,
    REVIEW_MILESTONE,
    SCORE_EVALUATION,
    SET_MILESTONE,
    VIEW_ALL_TEAMS,
    VIEW_AUDIT_LOG,
    VIEW_PENDING,
    resolve_principal,
)
from apps.core.permissions import HasCapability
from apps.teams import services as store
from apps.teams.serializers import TeamSerializer

from . import services
from .leaderboard import SORT_TOTAL, pending_approvals, rank_teams
from .milestones import LABELS
from .scoring import compute_total_score
from .serializers import (
    AuditLogSerializer,
    EvaluationCriteriaSerializer,
    MilestoneReviewSerializer,
    MilestoneSetSerializer,
    TransitionSerializer,
)


def _transition_payload(team, transition):
    return {"team": TeamSerializer(team).data, "transition": TransitionSerializer(transition).data}


class MilestoneRequestView(APIView):
    permission_classes = [HasCapability]
    required_capability = REQUEST_MILESTONE

    def post(self, request, kind: str):
        principal = resolve_principal(request.user)
        team, transition = services.request_milestone_approval(principal.team_id, kind, principal)
        return Response(_transition_payload(team, transition))


# --- Reviewer (admin / mentor) endpoints ---

class AdminTeamListView(ListAPIView):
    serializer_class = TeamSerializer
    permission_classes = [HasCapability]
    required_capability = VIEW_ALL_TEAMS
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["theme"]

    def get_queryset(self):
        return store.team_queryset().order_by("team_number")


class AdminTeamDetailView(RetrieveAPIView):
    serializer_class = TeamSerializer
    permission_classes = [HasCapability]
    required_capability = VIEW_ALL_TEAMS

    def get_object(self):
        return store.get_team_by_id(self.kwargs["id"])


class PendingApprovalsView(APIView):
    permission_classes = [HasCapability]
    required_capability = VIEW_PENDING

    def get(self, request):
        rows = pending_approvals(store.get_all_teams())
        results = [
            {
                "team_id": team.id,
                "team_number": team.team_number,
                "team_name": team.name,
                "milestone": kind,
                "label": LABELS[kind],
            }
            for team, kind in rows
        ]
        return Response({"count": len(results), "results": results})


class MilestoneReviewView(APIView):
    permission_classes = [HasCapability]
    required_capability = REVIEW_MILESTONE

    def post(self, request, id: int, kind: str):
        serializer = MilestoneReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team, transition = services.review_milestone(
            id,
            kind,
            approve=serializer.validated_data["action"] == "approve",
            principal=resolve_principal(request.user),
            ip=request.META.get("REMOTE_ADDR"),
        )
        return Response(_transition_payload(team, transition))


class MilestoneSetView(APIView):
    """Force a milestone complete or incomplete without the review step."""

    permission_classes = [HasCapability]
    required_capability = SET_MILESTONE

    def put(self, request, id: int, kind: str):
        serializer = MilestoneSetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team, transition = services.set_milestone_complete(
            id,
            kind,
            serializer.validated_data["complete"],
            principal=resolve_principal(request.user),
            ip=request.META.get("REMOTE_ADDR"),
        )
        return Response(_transition_payload(team, transition))


class EvaluationUpdateView(APIView):
    permission_classes = [HasCapability]
    required_capability = SCORE_EVALUATION

    def patch(self, request, id: int):
        serializer = EvaluationCriteriaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team = services.save_evaluation(
            id,
            serializer.validated_data,
            principal=resolve_principal(request.user),
            ip=request.META.get("REMOTE_ADDR"),
        )
        return Response(TeamSerializer(team).data)


class EvaluationPreviewView(APIView):
    """
    Live total for criteria that have not been saved yet. The stored total is
    recomputed on save and may differ until the update is confirmed.
    """

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = EvaluationCriteriaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response({"total_score": compute_total_score(serializer.validated_data), "preview": True})


class TeamAuditLogView(APIView):
    permission_classes = [HasCapability]
    required_capability = VIEW_AUDIT_LOG

    def get(self, request, id: int):
        store.get_team_by_id(id)
        rows = audit.entries_for(services.AUDIT_TARGET, id)
        return Response(
            {
                "results": AuditLogSerializer(rows, many=True).data,
                "chain_valid": audit.verify_chain(services.AUDIT_TARGET, id),
            }
        )


class LeaderboardView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        sort_by = request.query_params.get("sort", SORT_TOTAL)
        ranked = rank_teams(store.get_all_teams(), sort_by)
        results = [
            {
                "rank": row.rank,
                "badge": row.badge,
                "team_id": row.team.id,
                "team_number": row.team.team_number,
                "team_name": row.team.name,
                "theme": row.team.theme,
                "total_score": row.total_score,
                "elo_score": row.elo_score,
                "progress": row.progress,
            }
            for row in ranked
        ]
        return Response({"as_of": timezone.now(), "sort": sort_by, "results": results})
