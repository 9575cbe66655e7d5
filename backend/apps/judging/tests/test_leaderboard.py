from __future__ import annotations

from types import SimpleNamespace

from django.core.cache import cache
from django.test import SimpleTestCase, TestCase
from rest_framework.test import APIClient

from apps.core.exceptions import ValidationFailure
from apps.judging.leaderboard import SORT_ELO, SORT_PROGRESS, SORT_TOTAL, rank_badge, rank_teams
from apps.teams import services
from apps.teams.models import Team


def fake_team(name, total=5, elo=1200, approved=0):
    flags = [i < approved for i in range(3)]
    return SimpleNamespace(
        name=name,
        elo_score=elo,
        evaluation=SimpleNamespace(total_score=total),
        milestones=SimpleNamespace(brainstorming_complete=flags[0], prd_generated=flags[1], build_complete=flags[2]),
    )


class RankTeamsTests(SimpleTestCase):
    def test_sort_by_total(self):
        teams = [fake_team("a", total=18), fake_team("b", total=25), fake_team("c", total=9)]
        ranked = rank_teams(teams, SORT_TOTAL)
        self.assertEqual([r.total_score for r in ranked], [25, 18, 9])
        self.assertEqual([r.rank for r in ranked], [1, 2, 3])

    def test_sort_by_elo_ignores_total(self):
        teams = [
            fake_team("a", total=18, elo=1100),
            fake_team("b", total=25, elo=1000),
            fake_team("c", total=9, elo=1500),
        ]
        ranked = rank_teams(teams, SORT_ELO)
        self.assertEqual([r.team.name for r in ranked], ["c", "a", "b"])

    def test_sort_by_progress(self):
        teams = [fake_team("a", approved=1), fake_team("b", approved=3), fake_team("c", approved=0)]
        ranked = rank_teams(teams, SORT_PROGRESS)
        self.assertEqual([r.progress for r in ranked], [100, 33, 0])

    def test_ties_keep_input_order(self):
        teams = [fake_team(name, total=12) for name in "abcd"]
        ranked = rank_teams(teams, SORT_TOTAL)
        self.assertEqual([r.team.name for r in ranked], ["a", "b", "c", "d"])
        # rank is the position, so ties still get distinct ranks
        self.assertEqual([r.rank for r in ranked], [1, 2, 3, 4])

    def test_badges(self):
        self.assertEqual([rank_badge(i) for i in range(1, 6)], ["gold", "silver", "bronze", "#4", "#5"])

    def test_team_without_evaluation_counts_as_zero(self):
        bare = SimpleNamespace(name="bare", elo_score=None)
        ranked = rank_teams([bare, fake_team("a", total=5)], SORT_TOTAL)
        self.assertEqual(ranked[0].team.name, "a")
        self.assertEqual((ranked[1].total_score, ranked[1].elo_score, ranked[1].progress), (0, 0, 0))

    def test_unknown_sort_key(self):
        with self.assertRaises(ValidationFailure):
            rank_teams([], "name")


class LeaderboardApiTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        scores = [
            ("Eco-Warriors", {"novelty": 4, "fastest_to_build": 3, "feature_count": 2, "clarity": 5, "impact_reach": 4}, 1200),
            ("HealthBridge", dict.fromkeys(["novelty", "fastest_to_build", "feature_count", "clarity", "impact_reach"], 5), 1100),
            ("FinFlow", {"novelty": 1, "fastest_to_build": 1, "feature_count": 1, "clarity": 1, "impact_reach": 5}, 1450),
        ]
        for name, criteria, elo in scores:
            team = services.create_team(name=name, password="pw")
            services.update_evaluation(team.id, **criteria)
            Team.objects.filter(id=team.id).update(elo_score=elo)

    def test_public_and_sorted_by_total(self):
        r = self.client.get("/api/leaderboard")
        self.assertEqual(r.status_code, 200)
        rows = r.data["results"]
        self.assertEqual([row["total_score"] for row in rows], [25, 18, 9])
        self.assertEqual([row["badge"] for row in rows], ["gold", "silver", "bronze"])
        self.assertIn("as_of", r.data)
        self.assertNotIn("password", rows[0])

    def test_sorted_by_elo(self):
        r = self.client.get("/api/leaderboard", {"sort": "elo"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual([row["team_name"] for row in r.data["results"]], ["FinFlow", "Eco-Warriors", "HealthBridge"])

    def test_invalid_sort(self):
        r = self.client.get("/api/leaderboard", {"sort": "random"})
        self.assertEqual(r.status_code, 400)
