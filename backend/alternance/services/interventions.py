from __future__ import annotations

from typing import Dict, List, Sequence

from alternance.services.risk_types import (
    Intervention,
    InterventionPriority,
    RiskFactor,
    RiskFactorCode,
    coerce_enum,
)

"""
Intervention Planner.

Rôle (fonctionnel) :
- Transforme (niveau de risque, facteurs) en liste ordonnée d’interventions recommandées :
  1) une intervention "socle" selon le niveau (la bande la plus critique l’emporte)
  2) une intervention spécifique par facteur connu (catalogue indexé par RiskFactorCode)
  3) un accompagnement général si rien n’a été produit et que le niveau est >= 3

Notes :
- Pas de déduplication : un facteur répété produit une intervention répétée.
- Les facteurs sans entrée au catalogue (urgent_support_needed, low_mission_completion,
  identifiants inconnus) n’ajoutent rien.
"""

EMERGENCY_LEVEL = 5
REINFORCED_LEVEL = 4
MONITORING_LEVEL = 3

# Bandes socle, testées de la plus critique à la moins critique
BASELINE_BANDS = (
    (
        EMERGENCY_LEVEL,
        Intervention(
            type="immediate",
            priority=InterventionPriority.CRITICAL,
            title="Intervention d'urgence",
            description="Convocation immédiate pour entretien de situation",
            timeline="48 heures",
            responsible="Responsable pédagogique + Tuteur entreprise",
        ),
    ),
    (
        REINFORCED_LEVEL,
        Intervention(
            type="urgent",
            priority=InterventionPriority.HIGH,
            title="Plan d'accompagnement renforcé",
            description="Mise en place d'un suivi hebdomadaire personnalisé",
            timeline="1 semaine",
            responsible="Formateur référent",
        ),
    ),
    (
        MONITORING_LEVEL,
        Intervention(
            type="preventive",
            priority=InterventionPriority.MEDIUM,
            title="Surveillance accrue",
            description="Augmentation de la fréquence des points de suivi",
            timeline="2 semaines",
            responsible="Équipe pédagogique",
        ),
    ),
)

FACTOR_INTERVENTIONS: Dict[RiskFactorCode, Intervention] = {
    RiskFactorCode.LOW_OVERALL_PROGRESSION: Intervention(
        type="academic_support",
        priority=InterventionPriority.HIGH,
        title="Soutien pédagogique intensif",
        description="Cours de rattrapage et tutorat personnalisé",
        timeline="1 mois",
        responsible="Équipe pédagogique",
    ),
    RiskFactorCode.PROGRESSION_GAP: Intervention(
        type="coordination",
        priority=InterventionPriority.MEDIUM,
        title="Harmonisation centre-entreprise",
        description="Réunion tripartite pour aligner les attentes",
        timeline="2 semaines",
        responsible="Coordinateur alternance",
    ),
    RiskFactorCode.SEVERE_DIFFICULTIES: Intervention(
        type="psychological_support",
        priority=InterventionPriority.HIGH,
        title="Accompagnement spécialisé",
        description="Orientation vers un conseiller spécialisé",
        timeline="1 semaine",
        responsible="Service social",
    ),
    RiskFactorCode.LOW_ENGAGEMENT: Intervention(
        type="motivation",
        priority=InterventionPriority.MEDIUM,
        title="Remotivation",
        description="Entretien de motivation et redéfinition des objectifs",
        timeline="10 jours",
        responsible="Formateur référent",
    ),
}

GENERAL_SUPPORT = Intervention(
    type="general_support",
    priority=InterventionPriority.MEDIUM,
    title="Accompagnement général",
    description="Entretien de situation, évaluation des besoins et plan d'accompagnement personnalisé",
    timeline="2 semaines",
    responsible="Équipe pédagogique",
)


class InterventionPlanner:
    def baseline(self, risk_level: int) -> List[Intervention]:
        for min_level, intervention in BASELINE_BANDS:
            if risk_level >= min_level:
                return [intervention]
        return []

    def for_factors(self, factors: Sequence[RiskFactor]) -> List[Intervention]:
        out: List[Intervention] = []
        for factor in factors:
            code = coerce_enum(RiskFactorCode, factor.factor)
            if code is not None and code in FACTOR_INTERVENTIONS:
                out.append(FACTOR_INTERVENTIONS[code])
        return out

    def with_fallback(self, risk_level: int, interventions: List[Intervention]) -> List[Intervention]:
        """Ajoute l’accompagnement général si la liste est vide et le niveau >= 3."""
        if not interventions and risk_level >= MONITORING_LEVEL:
            return [GENERAL_SUPPORT]
        return interventions

    def plan(self, risk_level: int, factors: Sequence[RiskFactor]) -> List[Intervention]:
        interventions = self.baseline(risk_level) + self.for_factors(factors)
        return self.with_fallback(risk_level, interventions)
