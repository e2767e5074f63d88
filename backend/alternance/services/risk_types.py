from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

"""
Risk Types.

Rôle (fonctionnel) :
- Types du moteur de risque (entrées, facteurs, résultats), indépendants de la DB et de l’API.
- Les énumérations remplacent les dictionnaires indexés par chaînes : chaque table de poids
  ou de libellés est indexée par un membre d’enum.

Entrées :
- ProgressSnapshot : progression + difficultés + besoins + objectifs d’une évaluation.
- EngagementSnapshot : score d’engagement + missions + présence d’un contrat.

Sorties :
- RiskFactor, Intervention, EarlyWarningIndicator
- RiskAssessmentResult (évaluation complète)
- RiskPrediction / InsufficientData (prédiction de tendance)
"""

E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: Type[E], value: Any) -> Optional[E]:
    """Convertit une valeur brute (enum ou str stockée en JSON) vers l’enum, ou None si inconnue."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


class FactorCategory(str, Enum):
    ACADEMIC = "academic"
    BEHAVIORAL = "behavioral"
    PROFESSIONAL = "professional"
    ENGAGEMENT = "engagement"
    SUPPORT = "support"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskFactorCode(str, Enum):
    """Identifiants stables des facteurs de risque."""
    LOW_OVERALL_PROGRESSION = "low_overall_progression"
    PROGRESSION_GAP = "progression_gap"
    SEVERE_DIFFICULTIES = "severe_difficulties"
    URGENT_SUPPORT_NEEDED = "urgent_support_needed"
    LOW_ENGAGEMENT = "low_engagement"
    LOW_MISSION_COMPLETION = "low_mission_completion"


class RiskCategory(str, Enum):
    """Libellé dérivé du niveau de risque (1..5)."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class MonitoringFrequency(str, Enum):
    DAILY = "daily"
    TWICE_WEEKLY = "twice_weekly"
    WEEKLY = "weekly"
    BI_WEEKLY = "bi_weekly"
    MONTHLY = "monthly"


class InterventionPriority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class PredictionConfidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# -----------------------------
# Entrées
# -----------------------------
@dataclass(frozen=True)
class Difficulty:
    area: str
    description: str
    severity: int  # 1..5


@dataclass(frozen=True)
class SupportNeed:
    type: str
    description: str
    urgency: int  # 1..5


@dataclass(frozen=True)
class PendingObjective:
    category: str
    objective: str
    target_date: Optional[date] = None
    priority: int = 3  # 1..5


@dataclass(frozen=True)
class MissionProgress:
    completion_rate_pct: float
    mission: Optional[str] = None


@dataclass(frozen=True)
class ProgressSnapshot:
    """Photo de la progression d’un apprenant à une période donnée (lecture seule)."""
    center_progression_pct: float
    company_progression_pct: float
    overall_progression_pct: float
    period: date
    difficulties: List[Difficulty] = field(default_factory=list)
    support_needed: List[SupportNeed] = field(default_factory=list)
    pending_objectives: List[PendingObjective] = field(default_factory=list)


@dataclass(frozen=True)
class EngagementSnapshot:
    engagement_score_pct: float
    has_alternance_contract: bool
    mission_progress: List[MissionProgress] = field(default_factory=list)


# -----------------------------
# Sorties
# -----------------------------
@dataclass(frozen=True)
class RiskFactor:
    """
    Facteur de risque détecté.

    category / severity sont normalement des enums ; des valeurs brutes (str) relues
    depuis la base restent acceptées et sont pondérées par défaut au scoring.
    """
    category: FactorCategory | str
    factor: RiskFactorCode | str
    severity: Severity | str
    value: float
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": _raw(self.category),
            "factor": _raw(self.factor),
            "severity": _raw(self.severity),
            "value": self.value,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RiskFactor":
        """Relit un facteur stocké en JSONB (valeurs inconnues conservées telles quelles)."""
        category = data.get("category", "")
        factor = data.get("factor", "")
        severity = data.get("severity", "")
        return cls(
            category=coerce_enum(FactorCategory, category) or category,
            factor=coerce_enum(RiskFactorCode, factor) or factor,
            severity=coerce_enum(Severity, severity) or severity,
            value=float(data.get("value") or 0.0),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class Intervention:
    type: str
    priority: InterventionPriority
    title: str
    description: str
    timeline: str
    responsible: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "priority": self.priority.value,
            "title": self.title,
            "description": self.description,
            "timeline": self.timeline,
            "responsible": self.responsible,
        }


@dataclass(frozen=True)
class EarlyWarningIndicator:
    type: str
    indicator: str
    value: float
    threshold: float
    status: str = "warning"


@dataclass(frozen=True)
class RiskAssessmentResult:
    risk_level: int
    risk_category: RiskCategory
    risk_score: int
    risk_factors: List[RiskFactor]
    interventions: List[Intervention]
    monitoring_frequency: MonitoringFrequency
    assessment_date: datetime
    early_warning_indicators: List[EarlyWarningIndicator] = field(default_factory=list)
    note: Optional[str] = None


@dataclass(frozen=True)
class RiskPrediction:
    current_risk: int
    predicted_risk: float
    weeks_ahead: int
    slope: float
    trend: TrendDirection
    confidence: PredictionConfidence
    intervention_window_weeks: int
    recommended_actions: List[str] = field(default_factory=list)
    prediction_available: bool = True


@dataclass(frozen=True)
class InsufficientData:
    """Résultat normal (pas une erreur) quand l’historique est trop court pour prédire."""
    reason: str = "Historique insuffisant"
    history_size: int = 0
    prediction_available: bool = False


def _raw(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value
