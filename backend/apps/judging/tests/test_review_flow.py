from __future__ import annotations

from unittest import mock

from django.core.cache import cache
from django.db import DatabaseError
from django.test import TestCase
from rest_framework.test import APIClient

from apps.core.auth import ROLE_ADMIN, ROLE_MENTOR, ROLE_TEAM, Principal, issue_token
from apps.core.exceptions import PersistenceFailure
from apps.core.models import AuditLog
from apps.judging import services as judging
from apps.teams import services
from apps.teams.models import Milestones, Team


def client_for(principal: Principal) -> APIClient:
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(principal)}")
    return client


class ReviewFlowTests(TestCase):
    def setUp(self):
        cache.clear()
        self.team = services.create_team(name="Eco-Warriors", password="pw")
        self.team_client = client_for(Principal(role=ROLE_TEAM, team_id=self.team.id))
        self.admin_client = client_for(Principal(role=ROLE_ADMIN))
        self.review_url = f"/api/admin/teams/{self.team.id}/milestones/brainstorming/review"

    def request_brainstorming(self):
        return self.team_client.post("/api/teams/me/milestones/brainstorming/request")

    def test_request_reject_request_approve(self):
        r = self.request_brainstorming()
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["team"]["milestones"]["brainstorming_status"], "pending")
        self.assertTrue(r.data["team"]["milestones"]["brainstorming_pending"])
        self.assertEqual(r.data["transition"]["after"], "pending")

        r = self.admin_client.post(self.review_url, {"action": "reject"}, format="json")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["team"]["milestones"]["brainstorming_status"], "not_started")

        self.request_brainstorming()
        r = self.admin_client.post(self.review_url, {"action": "approve"}, format="json")
        self.assertEqual(r.status_code, 200)
        milestones = r.data["team"]["milestones"]
        self.assertEqual(milestones["brainstorming_status"], "approved")
        self.assertTrue(milestones["brainstorming_complete"])
        self.assertFalse(milestones["brainstorming_pending"])
        self.assertEqual(r.data["team"]["progress"], 33)

    def test_re_request_is_noop(self):
        self.request_brainstorming()
        r = self.request_brainstorming()
        self.assertEqual(r.status_code, 200)
        self.assertFalse(r.data["transition"]["changed"])
        self.assertEqual(r.data["team"]["milestones"]["brainstorming_status"], "pending")

    def test_review_without_pending_conflicts(self):
        r = self.admin_client.post(self.review_url, {"action": "approve"}, format="json")
        self.assertEqual(r.status_code, 409)
        r = self.admin_client.post(self.review_url, {"action": "reject"}, format="json")
        self.assertEqual(r.status_code, 409)

    def test_invalid_review_action(self):
        self.request_brainstorming()
        r = self.admin_client.post(self.review_url, {"action": "maybe"}, format="json")
        self.assertEqual(r.status_code, 400)

    def test_unknown_milestone(self):
        r = self.team_client.post("/api/teams/me/milestones/launch/request")
        self.assertEqual(r.status_code, 400)

    def test_team_cannot_review(self):
        self.request_brainstorming()
        r = self.team_client.post(self.review_url, {"action": "approve"}, format="json")
        self.assertEqual(r.status_code, 403)

    def test_mentor_cannot_review(self):
        self.request_brainstorming()
        mentor = client_for(Principal(role=ROLE_MENTOR))
        r = mentor.post(self.review_url, {"action": "approve"}, format="json")
        self.assertEqual(r.status_code, 403)

    def test_admin_cannot_request_on_behalf(self):
        r = self.admin_client.post("/api/teams/me/milestones/brainstorming/request")
        self.assertEqual(r.status_code, 403)

    def test_missing_team(self):
        r = self.admin_client.post("/api/admin/teams/9999/milestones/prd/review", {"action": "approve"}, format="json")
        self.assertEqual(r.status_code, 404)


class DirectToggleTests(TestCase):
    def setUp(self):
        cache.clear()
        self.team = services.create_team(name="FinFlow", password="pw")
        self.admin_client = client_for(Principal(role=ROLE_ADMIN))
        self.url = f"/api/admin/teams/{self.team.id}/milestones/build"

    def test_force_complete_and_back(self):
        r = self.admin_client.put(self.url, {"complete": True}, format="json")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["team"]["milestones"]["build_status"], "approved")
        r = self.admin_client.put(self.url, {"complete": False}, format="json")
        self.assertEqual(r.data["team"]["milestones"]["build_status"], "not_started")

    def test_force_complete_clears_pending(self):
        services.update_milestones(self.team.id, build_status="pending")
        r = self.admin_client.put(self.url, {"complete": True}, format="json")
        milestones = r.data["team"]["milestones"]
        self.assertTrue(milestones["build_complete"])
        self.assertFalse(milestones["build_pending"])

    def test_legacy_flag_name_in_path(self):
        r = self.admin_client.put(f"/api/admin/teams/{self.team.id}/milestones/prd_generated", {"complete": True}, format="json")
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.data["team"]["milestones"]["prd_generated"])

    def test_complete_required(self):
        r = self.admin_client.put(self.url, {}, format="json")
        self.assertEqual(r.status_code, 400)


class PendingAndAuditTests(TestCase):
    def setUp(self):
        cache.clear()
        self.a = services.create_team(name="Eco-Warriors", password="pw")
        self.b = services.create_team(name="HealthBridge", password="pw")
        services.update_milestones(self.a.id, prd_status="pending")
        services.update_milestones(self.b.id, brainstorming_pending=True, build_pending=True)
        self.admin_client = client_for(Principal(role=ROLE_ADMIN))

    def test_pending_list(self):
        r = self.admin_client.get("/api/admin/pending")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["count"], 3)
        pairs = [(row["team_name"], row["milestone"]) for row in r.data["results"]]
        self.assertEqual(
            pairs, [("Eco-Warriors", "prd"), ("HealthBridge", "brainstorming"), ("HealthBridge", "build")]
        )

    def test_pending_requires_admin(self):
        mentor = client_for(Principal(role=ROLE_MENTOR))
        self.assertEqual(mentor.get("/api/admin/pending").status_code, 403)

    def test_audit_trail_records_reviews(self):
        url = f"/api/admin/teams/{self.b.id}/milestones"
        self.admin_client.post(f"{url}/brainstorming/review", {"action": "approve"}, format="json")
        self.admin_client.post(f"{url}/build/review", {"action": "reject"}, format="json")
        self.admin_client.put(f"{url}/prd", {"complete": True}, format="json")

        r = self.admin_client.get(f"/api/admin/teams/{self.b.id}/audit")
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.data["chain_valid"])
        actions = [row["action"] for row in r.data["results"]]
        self.assertEqual(actions, ["milestone.approve", "milestone.reject", "milestone.force_complete"])
        self.assertEqual(r.data["results"][0]["prev_hash"], "")
        self.assertEqual(r.data["results"][1]["prev_hash"], r.data["results"][0]["hash"])

    def test_tampering_breaks_chain(self):
        self.admin_client.post(
            f"/api/admin/teams/{self.b.id}/milestones/build/review", {"action": "approve"}, format="json"
        )
        AuditLog.objects.filter(target_id=str(self.b.id)).update(action="milestone.reject")
        r = self.admin_client.get(f"/api/admin/teams/{self.b.id}/audit")
        self.assertFalse(r.data["chain_valid"])

    def test_team_requests_are_not_audited(self):
        team_client = client_for(Principal(role=ROLE_TEAM, team_id=self.a.id))
        team_client.post("/api/teams/me/milestones/build/request")
        self.assertFalse(AuditLog.objects.filter(target_id=str(self.a.id)).exists())


class TransitionFailureTests(TestCase):
    def setUp(self):
        cache.clear()
        self.team = services.create_team(name="Eco-Warriors", password="pw")
        services.update_milestones(self.team.id, prd_status="pending")
        self.admin_client = client_for(Principal(role=ROLE_ADMIN))
        self.url = f"/api/admin/teams/{self.team.id}/milestones/prd/review"

    def assert_unchanged(self):
        self.assertEqual(services.get_team_by_id(self.team.id).milestones.prd_status, "pending")
        self.assertFalse(AuditLog.objects.exists())

    def test_failed_save_returns_503(self):
        with mock.patch.object(Milestones, "save", side_effect=DatabaseError("disk full")):
            r = self.admin_client.post(self.url, {"action": "approve"}, format="json")
        self.assertEqual(r.status_code, 503)
        self.assert_unchanged()

    def test_failed_audit_rolls_back_status(self):
        with mock.patch("apps.judging.services.record_action", side_effect=DatabaseError("disk full")):
            with self.assertRaises(PersistenceFailure):
                judging.review_milestone(self.team.id, "prd", approve=True, principal=Principal(role=ROLE_ADMIN))
        self.assert_unchanged()

    def test_team_row_locked_before_audit(self):
        with mock.patch.object(Team.objects, "select_for_update", wraps=Team.objects.select_for_update) as lock:
            judging.review_milestone(self.team.id, "prd", approve=False, principal=Principal(role=ROLE_ADMIN))
        lock.assert_called_once_with()
        self.assertEqual(services.get_team_by_id(self.team.id).milestones.prd_status, "not_started")
