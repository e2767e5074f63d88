"""
Tests unitaires du ProgressionCalculator (progressions dérivées et score d’engagement).
"""

from datetime import datetime, timedelta, timezone

import pytest

from alternance.services.progression import MissionCompletion, ProgressionCalculator
from alternance.services.risk_types import MissionProgress

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


class TestProgression:

    @pytest.fixture
    def calculator(self):
        return ProgressionCalculator()

    def test_company_progression_empty(self, calculator):
        assert calculator.compute_company_progression([]) == 0.0

    def test_company_progression_mean(self, calculator):
        missions = [MissionProgress(completion_rate_pct=80.0), MissionProgress(completion_rate_pct=40.0)]
        assert calculator.compute_company_progression(missions) == 60.0

    def test_overall_progression_weighting(self, calculator):
        assert calculator.compute_overall_progression(50.0, 100.0) == 70.0
        assert calculator.compute_overall_progression(33.333, 10.0) == 24.0

    @pytest.mark.parametrize(
        "overall,expected",
        [
            (95.0, "excellent"),
            (90.0, "excellent"),
            (80.0, "satisfactory"),
            (60.0, "average"),
            (30.0, "needs_improvement"),
            (10.0, "critical"),
        ],
    )
    def test_progression_status(self, calculator, overall, expected):
        assert calculator.progression_status(overall) == expected

    def test_mission_completion_summary(self, calculator):
        missions = [
            MissionProgress(completion_rate_pct=90.0),
            MissionProgress(completion_rate_pct=80.0),
            MissionProgress(completion_rate_pct=34.0),
            MissionProgress(completion_rate_pct=0.0),
        ]
        summary = calculator.mission_completion(missions)

        assert summary.total_missions == 4
        assert summary.completed_missions == 2
        assert summary.in_progress_missions == 1
        assert summary.not_started_missions == 1
        assert summary.average_completion_rate == 51.0

    def test_mission_completion_without_mission(self, calculator):
        assert calculator.mission_completion([]) == MissionCompletion()


class TestEngagementScore:
    """Score 0..100 : activité récente + assiduité + complétion + connexions"""

    @pytest.fixture
    def calculator(self):
        return ProgressionCalculator()

    def test_fully_engaged_student(self, calculator):
        score = calculator.compute_engagement_score(
            last_activity=NOW,
            attendance_rate=100.0,
            completion_pct=100.0,
            login_count=100,
            started_at=NOW - timedelta(days=100),
            now=NOW,
        )
        assert score == 100

    def test_partial_engagement(self, calculator):
        score = calculator.compute_engagement_score(
            last_activity=NOW - timedelta(days=5),  # 15
            attendance_rate=80.0,  # 20
            completion_pct=50.0,  # 12
            login_count=30,  # 0.3/jour -> 10
            started_at=NOW - timedelta(days=100),
            now=NOW,
        )
        assert score == 57

    def test_no_activity_data(self, calculator):
        score = calculator.compute_engagement_score(
            last_activity=None,
            attendance_rate=0.0,
            completion_pct=0.0,
            login_count=0,
            started_at=None,
            now=NOW,
        )
        assert score == 0

    def test_naive_datetimes_are_treated_as_utc(self, calculator):
        naive_now = NOW.replace(tzinfo=None)
        score = calculator.compute_engagement_score(
            last_activity=naive_now - timedelta(days=1),  # 25
            attendance_rate=0.0,
            completion_pct=0.0,
            login_count=0,
            started_at=naive_now - timedelta(days=10),
            now=NOW,
        )
        assert score == 25

    def test_old_activity_scores_nothing(self, calculator):
        score = calculator.compute_engagement_score(
            last_activity=NOW - timedelta(days=30),
            attendance_rate=40.0,  # 10
            completion_pct=0.0,
            login_count=0,
            started_at=NOW - timedelta(days=30),
            now=NOW,
        )
        assert score == 10

    def test_future_activity_counts_as_gap(self, calculator):
        score = calculator.compute_engagement_score(
            last_activity=NOW + timedelta(days=5),  # décalage d’horloge : 5 jours -> 15
            attendance_rate=0.0,
            completion_pct=0.0,
            login_count=0,
            started_at=None,
            now=NOW,
        )
        assert score == 15
