from __future__ import annotations

from typing import Dict, Sequence

from alternance.services.risk_types import (
    FactorCategory,
    MonitoringFrequency,
    RiskCategory,
    RiskFactor,
    Severity,
    coerce_enum,
)

"""
Risk Scorer.

Rôle (fonctionnel) :
- Réduit une liste de facteurs à :
  - un niveau de risque 1..5 (moyenne des poids de sévérité, par paliers)
  - un score 0..100 (somme pondérée catégorie x sévérité, plafonnée)
- Fournit les correspondances dérivées du niveau : catégorie (low … critical)
  et fréquence de suivi (monthly … daily).

Notes :
- Niveau et score sont indépendants (deux formules distinctes).
- Valeurs inconnues (sévérité / catégorie relues depuis la base) : poids par défaut,
  pas d’exception (moteur consultatif, pas système de référence).
"""

SEVERITY_WEIGHTS: Dict[Severity, int] = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
}
DEFAULT_SEVERITY_WEIGHT = 1

CATEGORY_WEIGHTS: Dict[FactorCategory, int] = {
    FactorCategory.ACADEMIC: 30,
    FactorCategory.BEHAVIORAL: 25,
    FactorCategory.PROFESSIONAL: 20,
    FactorCategory.ENGAGEMENT: 15,
    FactorCategory.SUPPORT: 10,
}
DEFAULT_CATEGORY_WEIGHT = 10

MAX_RISK_SCORE = 100

# Paliers (bornes supérieures incluses) : moyenne des poids -> niveau
LEVEL_THRESHOLDS = (
    (1.2, 1),
    (1.7, 2),
    (2.3, 3),
    (2.8, 4),
)
MAX_RISK_LEVEL = 5

RISK_CATEGORIES: Dict[int, RiskCategory] = {
    1: RiskCategory.LOW,
    2: RiskCategory.LOW,
    3: RiskCategory.MODERATE,
    4: RiskCategory.HIGH,
    5: RiskCategory.CRITICAL,
}

MONITORING_FREQUENCIES: Dict[int, MonitoringFrequency] = {
    5: MonitoringFrequency.DAILY,
    4: MonitoringFrequency.TWICE_WEEKLY,
    3: MonitoringFrequency.WEEKLY,
    2: MonitoringFrequency.BI_WEEKLY,
    1: MonitoringFrequency.MONTHLY,
}


def severity_weight(severity) -> int:
    sev = coerce_enum(Severity, severity)
    return SEVERITY_WEIGHTS.get(sev, DEFAULT_SEVERITY_WEIGHT) if sev else DEFAULT_SEVERITY_WEIGHT


def category_weight(category) -> int:
    cat = coerce_enum(FactorCategory, category)
    return CATEGORY_WEIGHTS.get(cat, DEFAULT_CATEGORY_WEIGHT) if cat else DEFAULT_CATEGORY_WEIGHT


class RiskScorer:
    def compute_risk_level(self, factors: Sequence[RiskFactor]) -> int:
        """Aucun facteur -> 1 ; sinon palier sur la moyenne des poids de sévérité."""
        if not factors:
            return 1

        average_weight = sum(severity_weight(f.severity) for f in factors) / len(factors)

        for upper_bound, level in LEVEL_THRESHOLDS:
            if average_weight <= upper_bound:
                return level
        return MAX_RISK_LEVEL

    def compute_risk_score(self, factors: Sequence[RiskFactor]) -> int:
        """Somme poids_catégorie x multiplicateur_sévérité, plafonnée à 100."""
        score = sum(category_weight(f.category) * severity_weight(f.severity) for f in factors)
        return min(MAX_RISK_SCORE, score)

    def risk_category(self, risk_level: int) -> RiskCategory:
        return RISK_CATEGORIES.get(_clamp_level(risk_level), RiskCategory.LOW)

    def monitoring_frequency(self, risk_level: int) -> MonitoringFrequency:
        return MONITORING_FREQUENCIES.get(_clamp_level(risk_level), MonitoringFrequency.MONTHLY)


def _clamp_level(risk_level: int) -> int:
    return max(1, min(MAX_RISK_LEVEL, int(risk_level)))
