from __future__ import annotations

import itertools
from types import SimpleNamespace

from django.test import SimpleTestCase

from apps.judging.scoring import (
    CRITERIA,
    clamp_criterion,
    compute_progress,
    compute_total_score,
    milestone_progress,
)


class TotalScoreTests(SimpleTestCase):
    def test_every_valid_combination_sums_into_range(self):
        for values in itertools.product(range(1, 6), repeat=5):
            total = compute_total_score(dict(zip(CRITERIA, values)))
            self.assertEqual(total, sum(values))
            self.assertGreaterEqual(total, 5)
            self.assertLessEqual(total, 25)

    def test_known_values(self):
        scores = {"novelty": 4, "fastest_to_build": 3, "feature_count": 2, "clarity": 5, "impact_reach": 4}
        self.assertEqual(compute_total_score(scores), 18)
        self.assertEqual(compute_total_score(SimpleNamespace(**scores)), 18)

    def test_missing_criteria_count_as_zero(self):
        self.assertEqual(compute_total_score({"novelty": 5}), 5)
        self.assertEqual(compute_total_score({}), 0)

    def test_no_clamping_when_summing(self):
        self.assertEqual(compute_total_score(dict.fromkeys(CRITERIA, 7)), 35)

    def test_clamp_criterion(self):
        self.assertEqual(clamp_criterion(0), 1)
        self.assertEqual(clamp_criterion(-3), 1)
        self.assertEqual(clamp_criterion(3), 3)
        self.assertEqual(clamp_criterion(9), 5)
        self.assertEqual(clamp_criterion("4"), 4)


class ProgressTests(SimpleTestCase):
    def test_progress_values(self):
        self.assertEqual(compute_progress(False, False, False), 0)
        self.assertEqual(compute_progress(True, False, False), 33)
        self.assertEqual(compute_progress(False, True, True), 67)
        self.assertEqual(compute_progress(True, True, True), 100)

    def test_progress_only_depends_on_count(self):
        for flags in itertools.product([False, True], repeat=3):
            expected = {0: 0, 1: 33, 2: 67, 3: 100}[sum(flags)]
            self.assertEqual(compute_progress(*flags), expected)

    def test_milestone_progress_reads_record(self):
        record = SimpleNamespace(brainstorming_complete=True, prd_generated=True, build_complete=False)
        self.assertEqual(milestone_progress(record), 67)
        self.assertEqual(milestone_progress(None), 0)
