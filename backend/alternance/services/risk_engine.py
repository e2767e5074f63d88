from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from alternance.services.interventions import InterventionPlanner
from alternance.services.risk_factors import EarlyWarningDetector, RiskFactorAnalyzer
from alternance.services.risk_scorer import RiskScorer
from alternance.services.risk_types import (
    EngagementSnapshot,
    MonitoringFrequency,
    ProgressSnapshot,
    RiskAssessmentResult,
    RiskCategory,
)

"""
Risk Engine.

Rôle (fonctionnel) :
- Compose le pipeline pur (sans DB, sans I/O) :
  snapshots -> facteurs -> niveau + score -> interventions (+ signaux faibles)
- Fournit le résultat par défaut quand les données de progression sont absentes.

Notes :
- Composants injectables (tests / variantes de règles).
- Aucun état partagé : une même instance peut évaluer plusieurs apprenants en parallèle.
"""

INSUFFICIENT_DATA_NOTE = "Données insuffisantes pour une évaluation complète"


class RiskEngine:
    def __init__(
        self,
        analyzer: RiskFactorAnalyzer | None = None,
        scorer: RiskScorer | None = None,
        planner: InterventionPlanner | None = None,
        early_warnings: EarlyWarningDetector | None = None,
    ) -> None:
        self.analyzer = analyzer or RiskFactorAnalyzer()
        self.scorer = scorer or RiskScorer()
        self.planner = planner or InterventionPlanner()
        self.early_warnings = early_warnings or EarlyWarningDetector()

    def assess(
        self,
        progress: ProgressSnapshot,
        engagement: EngagementSnapshot,
        assessment_date: Optional[datetime] = None,
    ) -> RiskAssessmentResult:
        factors = self.analyzer.analyze(progress, engagement)
        level = self.scorer.compute_risk_level(factors)

        return RiskAssessmentResult(
            risk_level=level,
            risk_category=self.scorer.risk_category(level),
            risk_score=self.scorer.compute_risk_score(factors),
            risk_factors=factors,
            interventions=self.planner.plan(level, factors),
            monitoring_frequency=self.scorer.monitoring_frequency(level),
            assessment_date=assessment_date or datetime.now(timezone.utc),
            early_warning_indicators=self.early_warnings.detect(progress, engagement),
        )

    def default_assessment(self, assessment_date: Optional[datetime] = None) -> RiskAssessmentResult:
        """Risque faible "par défaut" : données de progression ou d’engagement manquantes."""
        return RiskAssessmentResult(
            risk_level=1,
            risk_category=RiskCategory.LOW,
            risk_score=0,
            risk_factors=[],
            interventions=[],
            monitoring_frequency=MonitoringFrequency.MONTHLY,
            assessment_date=assessment_date or datetime.now(timezone.utc),
            early_warning_indicators=[],
            note=INSUFFICIENT_DATA_NOTE,
        )
