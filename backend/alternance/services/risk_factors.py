from __future__ import annotations

from typing import List

from alternance.services.risk_types import (
    EarlyWarningIndicator,
    EngagementSnapshot,
    FactorCategory,
    ProgressSnapshot,
    RiskFactor,
    RiskFactorCode,
    Severity,
)

"""
Risk Factor Analyzer.

Rôle (fonctionnel) :
- Applique une table de règles déterministes sur (ProgressSnapshot, EngagementSnapshot).
- Chaque règle est indépendante et produit au plus UN facteur (agrégé pour difficultés/besoins).
- Ordre de sortie = ordre des règles :
  1) progression globale < 30            -> academic / high
  2) écart centre/entreprise > 20        -> academic / medium
  3) difficulté de sévérité >= 4         -> behavioral / high (value = nombre)
  4) accompagnement d’urgence >= 4       -> support / high (value = nombre)
  5) engagement < 60                     -> engagement / medium
  6) contrat + missions, < 50% à >= 80%  -> professional / medium

Early warnings (signaux faibles, sans effet sur le niveau de risque) :
- progression globale < 40, plus de 5 objectifs en attente, engagement < 70.
"""

LOW_PROGRESSION_THRESHOLD = 30.0
PROGRESSION_GAP_THRESHOLD = 20.0
SEVERE_DIFFICULTY_LEVEL = 4
URGENT_SUPPORT_LEVEL = 4
LOW_ENGAGEMENT_THRESHOLD = 60.0
MISSION_COMPLETED_RATE = 80.0
LOW_MISSION_COMPLETION_THRESHOLD = 50.0

WARNING_PROGRESSION_THRESHOLD = 40.0
WARNING_PENDING_OBJECTIVES = 5
WARNING_ENGAGEMENT_THRESHOLD = 70.0


def _pct(value: float) -> str:
    # 25.0 -> "25", 33.33 -> "33.33"
    return f"{value:g}"


class RiskFactorAnalyzer:
    def analyze(self, progress: ProgressSnapshot, engagement: EngagementSnapshot) -> List[RiskFactor]:
        factors: List[RiskFactor] = []

        overall = float(progress.overall_progression_pct)
        if overall < LOW_PROGRESSION_THRESHOLD:
            factors.append(
                RiskFactor(
                    category=FactorCategory.ACADEMIC,
                    factor=RiskFactorCode.LOW_OVERALL_PROGRESSION,
                    severity=Severity.HIGH,
                    value=overall,
                    description=f"Progression globale faible ({_pct(overall)}%)",
                )
            )

        center = float(progress.center_progression_pct)
        company = float(progress.company_progression_pct)
        gap = abs(center - company)
        if gap > PROGRESSION_GAP_THRESHOLD:
            factors.append(
                RiskFactor(
                    category=FactorCategory.ACADEMIC,
                    factor=RiskFactorCode.PROGRESSION_GAP,
                    severity=Severity.MEDIUM,
                    value=gap,
                    description=f"Écart important entre centre ({_pct(center)}%) et entreprise ({_pct(company)}%)",
                )
            )

        severe = [d for d in progress.difficulties if d.severity >= SEVERE_DIFFICULTY_LEVEL]
        if severe:
            factors.append(
                RiskFactor(
                    category=FactorCategory.BEHAVIORAL,
                    factor=RiskFactorCode.SEVERE_DIFFICULTIES,
                    severity=Severity.HIGH,
                    value=float(len(severe)),
                    description=f"Difficultés importantes identifiées ({len(severe)})",
                )
            )

        urgent = [s for s in progress.support_needed if s.urgency >= URGENT_SUPPORT_LEVEL]
        if urgent:
            factors.append(
                RiskFactor(
                    category=FactorCategory.SUPPORT,
                    factor=RiskFactorCode.URGENT_SUPPORT_NEEDED,
                    severity=Severity.HIGH,
                    value=float(len(urgent)),
                    description=f"Accompagnement urgent nécessaire ({len(urgent)})",
                )
            )

        engagement_score = float(engagement.engagement_score_pct)
        if engagement_score < LOW_ENGAGEMENT_THRESHOLD:
            factors.append(
                RiskFactor(
                    category=FactorCategory.ENGAGEMENT,
                    factor=RiskFactorCode.LOW_ENGAGEMENT,
                    severity=Severity.MEDIUM,
                    value=engagement_score,
                    description=f"Score d'engagement faible ({_pct(engagement_score)}%)",
                )
            )

        # Pas de mission assignée = pas de signal (évite un faux positif en début de contrat)
        missions = engagement.mission_progress
        if engagement.has_alternance_contract and missions:
            completed = [m for m in missions if float(m.completion_rate_pct) >= MISSION_COMPLETED_RATE]
            completion_rate = len(completed) / len(missions) * 100
            if completion_rate < LOW_MISSION_COMPLETION_THRESHOLD:
                factors.append(
                    RiskFactor(
                        category=FactorCategory.PROFESSIONAL,
                        factor=RiskFactorCode.LOW_MISSION_COMPLETION,
                        severity=Severity.MEDIUM,
                        value=round(completion_rate, 2),
                        description=f"Taux de complétion des missions faible ({_pct(round(completion_rate, 2))}%)",
                    )
                )

        return factors


class EarlyWarningDetector:
    def detect(self, progress: ProgressSnapshot, engagement: EngagementSnapshot) -> List[EarlyWarningIndicator]:
        indicators: List[EarlyWarningIndicator] = []

        overall = float(progress.overall_progression_pct)
        if overall < WARNING_PROGRESSION_THRESHOLD:
            indicators.append(
                EarlyWarningIndicator(
                    type="academic",
                    indicator="Progression globale en deçà des attentes",
                    value=overall,
                    threshold=WARNING_PROGRESSION_THRESHOLD,
                )
            )

        pending = len(progress.pending_objectives)
        if pending > WARNING_PENDING_OBJECTIVES:
            indicators.append(
                EarlyWarningIndicator(
                    type="academic",
                    indicator="Accumulation d'objectifs en attente",
                    value=float(pending),
                    threshold=float(WARNING_PENDING_OBJECTIVES),
                )
            )

        engagement_score = float(engagement.engagement_score_pct)
        if engagement_score < WARNING_ENGAGEMENT_THRESHOLD:
            indicators.append(
                EarlyWarningIndicator(
                    type="behavioral",
                    indicator="Score d'engagement en baisse",
                    value=engagement_score,
                    threshold=WARNING_ENGAGEMENT_THRESHOLD,
                )
            )

        return indicators
