from __future__ import annotations

from typing import List, Sequence

import numpy as np

from alternance.services.risk_types import (
    InsufficientData,
    PredictionConfidence,
    RiskPrediction,
    TrendDirection,
)

"""
Trend Predictor.

Rôle (fonctionnel) :
- À partir des derniers niveaux de risque (ordre chronologique croissant), calcule la pente
  d’une régression linéaire (np.polyfit, x = 1..n) et extrapole le niveau futur :
    predicted = clamp(current + pente * semaines / 4, 1, 5)
- Dérive la confiance (nombre de points), la fenêtre d’intervention (semaines) et des
  actions préventives.

Notes :
- Moins de 2 points : InsufficientData (résultat normal pour un nouvel apprenant).
"""

MIN_HISTORY = 2
HIGH_CONFIDENCE_POINTS = 5
MEDIUM_CONFIDENCE_POINTS = 3
RISING_SLOPE_THRESHOLD = 0.5
PREVENTIVE_RISK_THRESHOLD = 3.5
SLOPE_PRECISION = 9


def linear_slope(values: Sequence[float]) -> float:
    """Pente OLS de values contre x = 1..n (np.polyfit degré 1), arrondie à 1e-9."""
    n = len(values)
    if n < MIN_HISTORY:
        return 0.0

    x = np.arange(1, n + 1, dtype=float)
    slope, _intercept = np.polyfit(x, np.array(values, dtype=float), 1)
    # Bruit flottant de polyfit sur un historique plat (~1e-16)
    return round(float(slope), SLOPE_PRECISION)


class TrendPredictor:
    def predict(self, history: Sequence[int], weeks_ahead: int = 4) -> RiskPrediction | InsufficientData:
        if len(history) < MIN_HISTORY:
            return InsufficientData(reason="Historique insuffisant", history_size=len(history))

        slope = linear_slope([float(level) for level in history])
        current = int(history[-1])
        predicted = min(5.0, max(1.0, current + slope * weeks_ahead / 4))

        return RiskPrediction(
            current_risk=current,
            predicted_risk=round(predicted, 1),
            weeks_ahead=weeks_ahead,
            slope=slope,
            trend=self.trend_direction(slope),
            confidence=self.confidence(len(history)),
            intervention_window_weeks=self.intervention_window(predicted),
            recommended_actions=self.preventive_actions(predicted, slope),
        )

    def trend_direction(self, slope: float) -> TrendDirection:
        if slope > 0:
            return TrendDirection.INCREASING
        if slope < 0:
            return TrendDirection.DECREASING
        return TrendDirection.STABLE

    def confidence(self, points: int) -> PredictionConfidence:
        if points >= HIGH_CONFIDENCE_POINTS:
            return PredictionConfidence.HIGH
        if points >= MEDIUM_CONFIDENCE_POINTS:
            return PredictionConfidence.MEDIUM
        return PredictionConfidence.LOW

    def intervention_window(self, predicted_risk: float) -> int:
        if predicted_risk >= 4:
            return 1
        if predicted_risk >= 3:
            return 2
        return 4

    def preventive_actions(self, predicted_risk: float, slope: float) -> List[str]:
        actions: List[str] = []
        if slope > RISING_SLOPE_THRESHOLD:
            actions.append("Surveillance renforcée immédiate")
            actions.append("Entretien préventif programmé")
        if predicted_risk >= PREVENTIVE_RISK_THRESHOLD:
            actions.append("Préparation plan d'intervention")
            actions.append("Coordination avec tuteur entreprise")
        return actions
