from __future__ import annotations

import logging

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.auth import (
    EDIT_OWN_TEAM,
    EDIT_PROGRESS_UPDATES,
    EDIT_TOOL_USAGE,
    ROLE_TEAM,
    VIEW_OWN_TEAM,
    Principal,
    issue_token,
    resolve_principal,
)
from apps.core.exceptions import Unauthorized
from apps.core.metrics import logins_total
from apps.core.permissions import HasCapability

from . import services
from .serializers import (
    ParticipantInputSerializer,
    ParticipantSerializer,
    ProgressUpdatesSerializer,
    TeamCreateSerializer,
    TeamLoginSerializer,
    TeamSerializer,
    TeamUpdateSerializer,
    ToolUsageSerializer,
)

logger = logging.getLogger(__name__)


def _session_payload(team):
    token = issue_token(Principal(role=ROLE_TEAM, team_id=team.id))
    return {"token": token, "team": TeamSerializer(team).data}


class OwnTeamMixin:
    """Views acting on the calling team's own records."""

    permission_classes = [HasCapability]

    def own_team_id(self) -> int:
        return resolve_principal(self.request.user).team_id


class TeamRegisterView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = TeamCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        team = services.create_team(
            name=data["name"],
            password=data["password"],
            problem_statement=data.get("problem_statement", ""),
            theme=data.get("theme", ""),
            participants=data.get("participants", []),
        )
        return Response(_session_payload(team), status=status.HTTP_201_CREATED)


class TeamLoginView(APIView):
    permission_classes = [permissions.AllowAny]
    throttle_scope = "team-login"

    def post(self, request):
        serializer = TeamLoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"detail": "team_number and password required"}, status=status.HTTP_400_BAD_REQUEST)
        team = services.get_team_by_credentials(
            serializer.validated_data["team_number"], serializer.validated_data["password"]
        )
        if team is None:
            logins_total.labels(role=ROLE_TEAM, outcome="failure").inc()
            logger.warning("team login failed for team_number=%s", serializer.validated_data["team_number"])
            raise Unauthorized()
        logins_total.labels(role=ROLE_TEAM, outcome="success").inc()
        return Response(_session_payload(team))


class MyTeamView(OwnTeamMixin, APIView):
    required_capabilities = {"GET": VIEW_OWN_TEAM, "PATCH": EDIT_OWN_TEAM}

    def get(self, request):
        team = services.get_team_by_id(self.own_team_id())
        return Response(TeamSerializer(team).data)

    def patch(self, request):
        serializer = TeamUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        team = services.update_team(self.own_team_id(), **serializer.validated_data)
        return Response(TeamSerializer(team).data)


class ParticipantsView(OwnTeamMixin, APIView):
    required_capability = EDIT_OWN_TEAM

    def post(self, request):
        serializer = ParticipantInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        participant = services.add_participant(self.own_team_id(), **serializer.validated_data)
        return Response(ParticipantSerializer(participant).data, status=status.HTTP_201_CREATED)


class ToolUsageView(OwnTeamMixin, APIView):
    required_capability = EDIT_TOOL_USAGE

    def patch(self, request):
        serializer = ToolUsageSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        services.update_tool_usage(self.own_team_id(), **serializer.validated_data)
        team = services.get_team_by_id(self.own_team_id())
        return Response(TeamSerializer(team).data)


class ProgressUpdatesView(OwnTeamMixin, APIView):
    required_capability = EDIT_PROGRESS_UPDATES

    def patch(self, request):
        serializer = ProgressUpdatesSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        services.update_progress_updates(self.own_team_id(), **serializer.validated_data)
        team = services.get_team_by_id(self.own_team_id())
        return Response(TeamSerializer(team).data)
