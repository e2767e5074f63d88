from __future__ import annotations

import uuid
from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from alternance.services.risk_types import (
    InsufficientData,
    RiskAssessmentResult,
    RiskPrediction,
)

"""
Schemas Risk (Pydantic).

Rôle (fonctionnel) :
- Définit le contrat HTTP autour du moteur de risque :
  - évaluation d’un apprenant (facteurs, score, interventions, signaux faibles)
  - liste des apprenants à risque
  - rapport de période (distribution, facteurs fréquents, planning de suivi)
  - évolution du risque et prédiction de tendance
  - progression centre / entreprise / globale et bilan des missions
- Fournit les convertisseurs "résultat moteur (dataclasses) -> payload".

Notes :
- Les enums sont exposées par leur valeur (ex : "moderate", "twice_weekly").
- Les champs category/severity/factor restent des str : un facteur relu en base peut porter
  une valeur inconnue du moteur actuel.
"""


class StudentRef(BaseModel):
    """Bloc "student" commun à toutes les réponses."""
    id: uuid.UUID
    name: str
    email: str
    url: str


class RiskFactorOut(BaseModel):
    category: str
    factor: str
    severity: str
    value: float
    description: str


class InterventionOut(BaseModel):
    type: str
    priority: str
    title: str
    description: str
    timeline: str
    responsible: str


class EarlyWarningOut(BaseModel):
    type: str
    indicator: str
    value: float
    threshold: float
    status: str


class RiskAssessmentOut(BaseModel):
    student: StudentRef
    risk_level: int = Field(ge=1, le=5)
    risk_category: str
    risk_score: int = Field(ge=0, le=100)
    risk_factors: List[RiskFactorOut]
    interventions: List[InterventionOut]
    monitoring_frequency: str
    assessment_date: datetime
    early_warning_indicators: List[EarlyWarningOut]
    note: Optional[str] = None
    period: Optional[date] = None


class AssessmentCreate(BaseModel):
    """Payload d’écriture : période évaluée (aujourd’hui par défaut)."""
    period: Optional[date] = None

    model_config = ConfigDict(extra="forbid")


class AtRiskListResponse(BaseModel):
    minimum_level: int
    total: int
    data: List[RiskAssessmentOut]


class RiskPredictionOut(BaseModel):
    student: StudentRef
    prediction_available: bool
    reason: Optional[str] = None
    current_risk: Optional[int] = None
    predicted_risk: Optional[float] = None
    weeks_ahead: Optional[int] = None
    slope: Optional[float] = None
    trend: Optional[str] = None
    confidence_level: Optional[str] = None
    early_intervention_window: Optional[int] = None
    recommended_actions: List[str] = Field(default_factory=list)


class ReportPeriod(BaseModel):
    start: date
    end: date


class RiskDistribution(BaseModel):
    low: int = 0
    moderate: int = 0
    high: int = 0
    critical: int = 0


class CommonRiskFactor(BaseModel):
    factor: str
    count: int


class GlobalIntervention(BaseModel):
    type: str
    title: str
    description: str
    priority: str


class MonitoringScheduleItem(BaseModel):
    student_id: uuid.UUID
    student_name: str
    frequency: str
    next_check: date
    responsible: str


class RiskReportOut(BaseModel):
    report_period: ReportPeriod
    total_students: int
    risk_distribution: RiskDistribution
    students_needing_immediate_attention: List[RiskAssessmentOut]
    common_risk_factors: List[CommonRiskFactor]
    intervention_recommendations: List[GlobalIntervention]
    monitoring_schedule: List[MonitoringScheduleItem]

    model_config = ConfigDict(extra="forbid")


class EvolutionPoint(BaseModel):
    date: date
    risk_level: int
    risk_category: str
    risk_factors: List[RiskFactorOut]
    interventions_applied: List[InterventionOut]


class TrendAnalysis(BaseModel):
    trend: str
    change_magnitude: Optional[int] = None
    timespan_days: Optional[int] = None


class EffectivenessItem(BaseModel):
    period: date
    intervention_count: int
    risk_change: int
    effective: bool


class RiskEvolutionOut(BaseModel):
    student: StudentRef
    monitoring_period: ReportPeriod
    risk_evolution: List[EvolutionPoint]
    trend_analysis: TrendAnalysis
    effectiveness_assessment: List[EffectivenessItem]


class MissionCompletionOut(BaseModel):
    total_missions: int = 0
    completed_missions: int = 0
    in_progress_missions: int = 0
    not_started_missions: int = 0
    average_completion_rate: float = 0.0


class ProgressionOut(BaseModel):
    """Progression centre / entreprise / globale d’un apprenant en alternance."""
    student: StudentRef
    progression_available: bool
    reason: Optional[str] = None
    center_progression: Optional[float] = None
    company_progression: Optional[float] = None
    overall_progression: Optional[float] = None
    progression_status: Optional[str] = None
    engagement_score: Optional[float] = None
    last_assessment_date: Optional[date] = None
    mission_completion: MissionCompletionOut = Field(default_factory=MissionCompletionOut)


# -----------------------------
# Convertisseurs moteur -> API
# -----------------------------
def assessment_payload(
    student: Dict[str, Any], result: RiskAssessmentResult, period: Optional[date] = None
) -> RiskAssessmentOut:
    return RiskAssessmentOut(
        student=StudentRef(**student),
        risk_level=result.risk_level,
        risk_category=result.risk_category.value,
        risk_score=result.risk_score,
        risk_factors=[RiskFactorOut(**f.to_dict()) for f in result.risk_factors],
        interventions=[InterventionOut(**i.to_dict()) for i in result.interventions],
        monitoring_frequency=result.monitoring_frequency.value,
        assessment_date=result.assessment_date,
        early_warning_indicators=[EarlyWarningOut(**asdict(w)) for w in result.early_warning_indicators],
        note=result.note,
        period=period,
    )


def prediction_payload(student: Dict[str, Any], prediction: RiskPrediction | InsufficientData) -> RiskPredictionOut:
    if isinstance(prediction, InsufficientData):
        return RiskPredictionOut(
            student=StudentRef(**student),
            prediction_available=False,
            reason=prediction.reason,
        )

    return RiskPredictionOut(
        student=StudentRef(**student),
        prediction_available=True,
        current_risk=prediction.current_risk,
        predicted_risk=prediction.predicted_risk,
        weeks_ahead=prediction.weeks_ahead,
        slope=round(prediction.slope, 3),
        trend=prediction.trend.value,
        confidence_level=prediction.confidence.value,
        early_intervention_window=prediction.intervention_window_weeks,
        recommended_actions=list(prediction.recommended_actions),
    )
