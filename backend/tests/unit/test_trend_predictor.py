"""
Tests unitaires du TrendPredictor (régression linéaire sur l’historique des niveaux).
"""

import pytest

from alternance.services.risk_types import (
    InsufficientData,
    PredictionConfidence,
    RiskPrediction,
    TrendDirection,
)
from alternance.services.trend_predictor import TrendPredictor, linear_slope


class TestLinearSlope:

    def test_too_few_points(self):
        assert linear_slope([]) == 0.0
        assert linear_slope([3]) == 0.0

    def test_slope(self):
        assert linear_slope([2, 4, 6]) == pytest.approx(2.0)
        assert linear_slope([4, 4, 4, 4]) == pytest.approx(0.0)
        assert linear_slope([5, 3]) == pytest.approx(-2.0)

    @pytest.mark.parametrize("history", [[2, 2], [4, 4, 4, 4], [3, 3, 3, 3, 3]])
    def test_flat_slope_is_exactly_zero(self, history):
        assert linear_slope(history) == 0.0


class TestTrendPredictor:

    @pytest.fixture
    def predictor(self):
        return TrendPredictor()

    @pytest.mark.parametrize("history", [[], [3]])
    def test_insufficient_history(self, predictor, history):
        result = predictor.predict(history)

        assert isinstance(result, InsufficientData)
        assert result.prediction_available is False
        assert result.reason == "Historique insuffisant"
        assert result.history_size == len(history)

    def test_strictly_increasing_history(self, predictor):
        result = predictor.predict([1, 2, 3, 4, 5], weeks_ahead=4)

        assert isinstance(result, RiskPrediction)
        assert result.trend == TrendDirection.INCREASING
        assert result.slope == pytest.approx(1.0)
        assert result.current_risk == 5
        assert result.predicted_risk == 5.0
        assert result.confidence == PredictionConfidence.HIGH
        assert result.intervention_window_weeks == 1
        assert result.recommended_actions == [
            "Surveillance renforcée immédiate",
            "Entretien préventif programmé",
            "Préparation plan d'intervention",
            "Coordination avec tuteur entreprise",
        ]

    def test_decreasing_history(self, predictor):
        result = predictor.predict([5, 4, 3], weeks_ahead=4)

        assert result.trend == TrendDirection.DECREASING
        assert result.predicted_risk == 2.0
        assert result.confidence == PredictionConfidence.MEDIUM
        assert result.intervention_window_weeks == 4
        assert result.recommended_actions == []

    def test_stable_history(self, predictor):
        result = predictor.predict([2, 2])

        assert result.trend == TrendDirection.STABLE
        assert result.predicted_risk == 2.0
        assert result.confidence == PredictionConfidence.LOW

    @pytest.mark.parametrize("history", [[4, 4, 4, 4], [3, 3, 3, 3, 3]])
    def test_flat_history_is_stable(self, predictor, history):
        result = predictor.predict(history)

        assert result.trend == TrendDirection.STABLE
        assert result.slope == 0.0
        assert result.predicted_risk == float(history[-1])

    def test_prediction_is_clamped_to_one(self, predictor):
        result = predictor.predict([5, 1], weeks_ahead=4)
        assert result.predicted_risk == 1.0

    def test_horizon_scales_extrapolation(self, predictor):
        result = predictor.predict([1, 2], weeks_ahead=8)

        assert result.predicted_risk == 4.0
        assert result.weeks_ahead == 8
        assert result.intervention_window_weeks == 1
        assert len(result.recommended_actions) == 4

    def test_moderate_prediction_window(self, predictor):
        result = predictor.predict([3, 3, 3])

        assert result.predicted_risk == 3.0
        assert result.intervention_window_weeks == 2
        assert result.recommended_actions == []
