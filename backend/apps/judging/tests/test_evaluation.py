from __future__ import annotations

from django.core.cache import cache
from django.test import TestCase
from rest_framework.test import APIClient

from apps.core.audit import verify_chain
from apps.core.auth import ROLE_ADMIN, ROLE_MENTOR, ROLE_TEAM, Principal, issue_token
from apps.core.models import AuditLog
from apps.teams import services
from apps.teams.models import Evaluation


def client_for(principal: Principal) -> APIClient:
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_token(principal)}")
    return client


SAMPLE_SCORES = {"novelty": 4, "fastest_to_build": 3, "feature_count": 2, "clarity": 5, "impact_reach": 4}


class EvaluationApiTests(TestCase):
    def setUp(self):
        cache.clear()
        self.team = services.create_team(name="HealthBridge", password="pw")
        self.url = f"/api/admin/teams/{self.team.id}/evaluation"
        self.mentor = client_for(Principal(role=ROLE_MENTOR))

    def test_mentor_scores_team(self):
        r = self.mentor.patch(self.url, SAMPLE_SCORES, format="json")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["evaluation"]["total_score"], 18)
        self.assertEqual(Evaluation.objects.get(team=self.team).total_score, 18)

    def test_admin_scores_team(self):
        admin = client_for(Principal(role=ROLE_ADMIN))
        r = admin.patch(self.url, {"clarity": 5}, format="json")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["evaluation"]["clarity"], 5)
        self.assertEqual(r.data["evaluation"]["total_score"], 9)

    def test_out_of_range_values_are_clamped(self):
        r = self.mentor.patch(self.url, {"novelty": 9, "clarity": 0}, format="json")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["evaluation"]["novelty"], 5)
        self.assertEqual(r.data["evaluation"]["clarity"], 1)
        self.assertEqual(r.data["evaluation"]["total_score"], 9)

    def test_non_integer_rejected(self):
        r = self.mentor.patch(self.url, {"novelty": "great"}, format="json")
        self.assertEqual(r.status_code, 400)

    def test_team_cannot_score_itself(self):
        team_client = client_for(Principal(role=ROLE_TEAM, team_id=self.team.id))
        r = team_client.patch(self.url, SAMPLE_SCORES, format="json")
        self.assertEqual(r.status_code, 403)

    def test_anonymous_rejected(self):
        r = APIClient().patch(self.url, SAMPLE_SCORES, format="json")
        self.assertEqual(r.status_code, 401)

    def test_score_update_is_audited(self):
        self.mentor.patch(self.url, SAMPLE_SCORES, format="json")
        entry = AuditLog.objects.get(target_id=str(self.team.id))
        self.assertEqual(entry.action, "evaluation.update")
        self.assertEqual(entry.actor_role, ROLE_MENTOR)
        self.assertEqual(entry.data["total_score"], 18)

    def test_total_score_not_writable(self):
        r = self.mentor.patch(self.url, {"total_score": 25}, format="json")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["evaluation"]["total_score"], 5)

    def test_empty_update_writes_nothing(self):
        r = self.mentor.patch(self.url, {}, format="json")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data["evaluation"]["total_score"], 5)
        self.assertFalse(AuditLog.objects.filter(target_id=str(self.team.id)).exists())

    def test_consecutive_scores_keep_chain_valid(self):
        self.mentor.patch(self.url, {"novelty": 2}, format="json")
        self.mentor.patch(self.url, {"clarity": 4}, format="json")
        self.assertEqual(AuditLog.objects.filter(target_id=str(self.team.id)).count(), 2)
        self.assertTrue(verify_chain("team", self.team.id))


class StoredTotalTests(TestCase):
    def test_save_recomputes_total(self):
        team = services.create_team(name="FinFlow", password="pw")
        evaluation = Evaluation.objects.get(team=team)
        evaluation.novelty = 5
        evaluation.total_score = 0
        evaluation.save(update_fields=["novelty"])
        evaluation.refresh_from_db()
        self.assertEqual(evaluation.total_score, 9)


class PreviewTests(TestCase):
    def test_preview_matches_saved_total(self):
        r = APIClient().post("/api/evaluations/preview", SAMPLE_SCORES, format="json")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data, {"total_score": 18, "preview": True})

    def test_preview_does_not_clamp(self):
        r = APIClient().post("/api/evaluations/preview", {"novelty": 7}, format="json")
        self.assertEqual(r.data["total_score"], 7)
