from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from alternance.services.risk_types import MissionProgress

"""
Progression Calculator.

Rôle (fonctionnel) :
- Calcule les pourcentages de progression dérivés à partir des données brutes :
  - progression entreprise = moyenne simple des taux de complétion des missions
  - progression globale (repli) = 60% centre + 40% entreprise
  - statut de progression (excellent … critical)
  - bilan des missions entreprise (terminées >= 80%, en cours, non démarrées)
- Calcule le score d’engagement (0..100) à partir des signaux d’activité.

Notes :
- Aucune dépendance DB : les valeurs sont fournies par ProgressDataProvider.
- Une liste vide donne 0.0 (état "pas encore de mission"), jamais une erreur.
"""

CENTER_WEIGHT = 0.6
COMPANY_WEIGHT = 0.4
MISSION_COMPLETED_RATE = 80.0


@dataclass(frozen=True)
class MissionCompletion:
    total_missions: int = 0
    completed_missions: int = 0
    in_progress_missions: int = 0
    not_started_missions: int = 0
    average_completion_rate: float = 0.0


class ProgressionCalculator:
    def compute_company_progression(self, mission_progress: Sequence[MissionProgress]) -> float:
        """Moyenne non pondérée des taux de complétion (0.0 si aucune mission)."""
        if not mission_progress:
            return 0.0
        total = sum(float(m.completion_rate_pct) for m in mission_progress)
        return total / len(mission_progress)

    def compute_overall_progression(self, center_pct: float, company_pct: float) -> float:
        """
        Progression globale pondérée (centre 60%, entreprise 40%).

        Utilisée uniquement quand l’évaluation ne porte pas de valeur stockée.
        """
        overall = float(center_pct) * CENTER_WEIGHT + float(company_pct) * COMPANY_WEIGHT
        return round(overall, 2)

    def progression_status(self, overall_pct: float) -> str:
        if overall_pct >= 90:
            return "excellent"
        if overall_pct >= 75:
            return "satisfactory"
        if overall_pct >= 50:
            return "average"
        if overall_pct >= 25:
            return "needs_improvement"
        return "critical"

    def mission_completion(self, mission_progress: Sequence[MissionProgress]) -> MissionCompletion:
        rates = [float(m.completion_rate_pct) for m in mission_progress]
        if not rates:
            return MissionCompletion()
        return MissionCompletion(
            total_missions=len(rates),
            completed_missions=sum(1 for r in rates if r >= MISSION_COMPLETED_RATE),
            in_progress_missions=sum(1 for r in rates if 0 < r < MISSION_COMPLETED_RATE),
            not_started_missions=sum(1 for r in rates if r <= 0),
            average_completion_rate=round(sum(rates) / len(rates), 1),
        )

    def compute_engagement_score(
        self,
        *,
        last_activity: Optional[datetime],
        attendance_rate: float,
        completion_pct: float,
        login_count: int,
        started_at: Optional[datetime],
        now: Optional[datetime] = None,
    ) -> int:
        """
        Score d’engagement 0..100 :
        - activité récente : 0..30
        - assiduité : 0..25
        - complétion : 0..25
        - fréquence de connexion : 0..20
        """
        now = _aware(now or datetime.now(timezone.utc))
        score = 0

        if last_activity is not None:
            # Écart absolu : une date future (décalage d’horloge) compte comme un écart
            days_idle = abs(now - _aware(last_activity)).days
            if days_idle <= 0:
                score += 30
            elif days_idle <= 2:
                score += 25
            elif days_idle <= 7:
                score += 15
            elif days_idle <= 14:
                score += 5

        score += int(float(attendance_rate) * 0.25)
        score += int(float(completion_pct) * 0.25)

        if started_at is not None:
            days_since_start = max(1, (now - _aware(started_at)).days)
            logins_per_day = int(login_count) / days_since_start
            if logins_per_day >= 1:
                score += 20
            elif logins_per_day >= 0.5:
                score += 15
            elif logins_per_day >= 0.2:
                score += 10

        return max(0, min(100, score))


def _aware(dt: datetime) -> datetime:
    # Dates naïves considérées en UTC
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)
