"""
Tests unitaires du RiskScorer : niveau, score, catégorie et fréquence de suivi.
"""

import pytest

from alternance.services.risk_scorer import RiskScorer, category_weight, severity_weight
from alternance.services.risk_types import (
    FactorCategory,
    MonitoringFrequency,
    RiskCategory,
    RiskFactor,
    RiskFactorCode,
    Severity,
)


def factor(severity=Severity.HIGH, category=FactorCategory.ACADEMIC, code=RiskFactorCode.LOW_OVERALL_PROGRESSION):
    return RiskFactor(category=category, factor=code, severity=severity, value=0.0, description="")


class TestRiskLevel:
    """Niveau 1..5 à partir de la moyenne des poids de sévérité"""

    @pytest.fixture
    def scorer(self):
        return RiskScorer()

    def test_no_factor_is_level_one(self, scorer):
        assert scorer.compute_risk_level([]) == 1

    @pytest.mark.parametrize(
        "severities,expected",
        [
            ([Severity.LOW], 1),
            ([Severity.LOW] * 4 + [Severity.MEDIUM], 1),  # moyenne 1.2 (borne incluse)
            ([Severity.LOW, Severity.MEDIUM], 2),  # 1.5
            ([Severity.MEDIUM], 3),  # 2.0
            ([Severity.MEDIUM, Severity.HIGH], 4),  # 2.5
            ([Severity.HIGH], 5),  # 3.0
        ],
    )
    def test_thresholds(self, scorer, severities, expected):
        assert scorer.compute_risk_level([factor(severity=s) for s in severities]) == expected

    def test_level_is_monotonic_in_average_weight(self, scorer):
        lists = [
            [Severity.LOW],
            [Severity.LOW, Severity.LOW, Severity.MEDIUM],
            [Severity.LOW, Severity.MEDIUM],
            [Severity.MEDIUM],
            [Severity.MEDIUM, Severity.MEDIUM, Severity.HIGH],
            [Severity.MEDIUM, Severity.HIGH],
            [Severity.HIGH],
        ]
        levels = [scorer.compute_risk_level([factor(severity=s) for s in sev]) for sev in lists]
        assert levels == sorted(levels)

    def test_unknown_severity_weighs_as_low(self, scorer):
        assert scorer.compute_risk_level([factor(severity="extreme")]) == 1
        assert severity_weight("extreme") == 1
        assert severity_weight("high") == 3


class TestRiskScore:
    """Score 0..100 : poids catégorie x multiplicateur sévérité"""

    @pytest.fixture
    def scorer(self):
        return RiskScorer()

    def test_no_factor_scores_zero(self, scorer):
        assert scorer.compute_risk_score([]) == 0

    def test_single_factor(self, scorer):
        assert scorer.compute_risk_score([factor()]) == 90  # academic 30 x high 3

    def test_score_is_clamped_at_100(self, scorer):
        factors = [
            factor(category=FactorCategory.ACADEMIC, severity=Severity.HIGH),
            factor(category=FactorCategory.BEHAVIORAL, severity=Severity.HIGH),
        ]
        assert scorer.compute_risk_score(factors) == 100

    def test_unknown_category_and_severity_use_defaults(self, scorer):
        assert scorer.compute_risk_score([factor(category="legal", severity="extreme")]) == 10
        assert category_weight("legal") == 10
        assert category_weight(FactorCategory.ENGAGEMENT) == 15

    def test_score_within_bounds(self, scorer):
        for severity in Severity:
            for category in FactorCategory:
                score = scorer.compute_risk_score([factor(category=category, severity=severity)] * 3)
                assert 0 <= score <= 100


class TestLabels:
    """Catégorie et fréquence de suivi dérivées du niveau"""

    @pytest.fixture
    def scorer(self):
        return RiskScorer()

    @pytest.mark.parametrize(
        "level,expected",
        [
            (1, RiskCategory.LOW),
            (2, RiskCategory.LOW),
            (3, RiskCategory.MODERATE),
            (4, RiskCategory.HIGH),
            (5, RiskCategory.CRITICAL),
        ],
    )
    def test_category_mapping(self, scorer, level, expected):
        assert scorer.risk_category(level) == expected

    def test_category_clamps_out_of_range_levels(self, scorer):
        assert scorer.risk_category(0) == RiskCategory.LOW
        assert scorer.risk_category(9) == RiskCategory.CRITICAL

    @pytest.mark.parametrize(
        "level,expected",
        [
            (5, MonitoringFrequency.DAILY),
            (4, MonitoringFrequency.TWICE_WEEKLY),
            (3, MonitoringFrequency.WEEKLY),
            (2, MonitoringFrequency.BI_WEEKLY),
            (1, MonitoringFrequency.MONTHLY),
        ],
    )
    def test_monitoring_frequency(self, scorer, level, expected):
        assert scorer.monitoring_frequency(level) == expected

    def test_monitoring_frequency_clamps_out_of_range_levels(self, scorer):
        assert scorer.monitoring_frequency(9) == MonitoringFrequency.DAILY
        assert scorer.monitoring_frequency(0) == MonitoringFrequency.MONTHLY

    def test_category_and_frequency_agree_for_out_of_range_levels(self, scorer):
        assert scorer.risk_category(9) == RiskCategory.CRITICAL
        assert scorer.monitoring_frequency(9) == MonitoringFrequency.DAILY
