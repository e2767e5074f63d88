from __future__ import annotations

import calendar
import logging
import uuid
from collections import Counter
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from alternance.core.settings import settings
from alternance.models.progress_assessment import ProgressAssessment
from alternance.schemas.risk import (
    CommonRiskFactor,
    EffectivenessItem,
    EvolutionPoint,
    GlobalIntervention,
    MissionCompletionOut,
    InterventionOut,
    MonitoringScheduleItem,
    ProgressionOut,
    ReportPeriod,
    RiskDistribution,
    RiskEvolutionOut,
    RiskFactorOut,
    RiskReportOut,
    StudentRef,
    TrendAnalysis,
    assessment_payload,
)
from alternance.services.progress_data import ProgressDataProvider
from alternance.services.progression import ProgressionCalculator
from alternance.services.risk_engine import RiskEngine
from alternance.services.risk_types import (
    InsufficientData,
    MonitoringFrequency,
    RiskAssessmentResult,
    RiskFactor,
    RiskPrediction,
)
from alternance.services.trend_predictor import TrendPredictor

"""
Risk Assessment Service.

Rôle (fonctionnel) :
- Orchestre le moteur de risque autour de la base :
  - évaluation d’un apprenant (lecture seule)
  - évaluation + persistance sur (apprenant, période) (UPSERT)
  - liste des apprenants à risque
  - rapport de période (distribution, facteurs fréquents, planning de suivi)
  - évolution du risque (tendance + efficacité des interventions)
  - prédiction de tendance à partir des niveaux stockés
  - progression centre / entreprise / globale (statut, bilan des missions)

Notes :
- Les données manquantes ne lèvent pas d’erreur : résultat "par défaut" (niveau 1).
- L’URL publique (APP_URL) est injectée au constructeur, jamais lue à l’appel.
- Les collaborateurs (provider, moteur, prédicteur) sont injectables pour les tests.
"""

log = logging.getLogger("alternance.risk")

IMMEDIATE_ATTENTION_LEVEL = 4
SCHEDULE_LEVEL = 3
SYSTEMIC_TRAINING_THRESHOLD = 5
COMMON_FACTORS_LIMIT = 5

NEXT_CHECK_DAYS: Dict[MonitoringFrequency, int] = {
    MonitoringFrequency.DAILY: 1,
    MonitoringFrequency.TWICE_WEEKLY: 3,
    MonitoringFrequency.WEEKLY: 7,
    MonitoringFrequency.BI_WEEKLY: 14,
}

RESPONSIBLE_BY_LEVEL: Dict[int, str] = {
    5: "Directeur pédagogique",
    4: "Responsable formation",
    3: "Formateur référent",
}
DEFAULT_RESPONSIBLE = "Équipe pédagogique"
NO_CONTRACT_REASON = "Aucun contrat d'alternance"

SYSTEMIC_TRAINING = GlobalIntervention(
    type="systemic",
    title="Formation équipe pédagogique",
    description="Formation sur la détection précoce des signaux de décrochage",
    priority="high",
)


class StudentIdentity(Protocol):
    """Ce dont le service a besoin d’un apprenant (modèle ORM ou objet de test)."""
    id: uuid.UUID
    email: str

    @property
    def full_name(self) -> str: ...


@dataclass(frozen=True)
class StudentRiskAssessment:
    student: Dict[str, Any]
    result: RiskAssessmentResult
    period: Optional[date] = None
    engagement_score: Optional[float] = None


@dataclass(frozen=True)
class StudentRiskPrediction:
    student: Dict[str, Any]
    prediction: RiskPrediction | InsufficientData


def add_months(d: date, months: int) -> date:
    """Ajoute des mois calendaires (jour ramené au dernier jour du mois si besoin)."""
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def next_check_date(frequency: MonitoringFrequency, today: date) -> date:
    if frequency == MonitoringFrequency.MONTHLY:
        return add_months(today, 1)
    return today + timedelta(days=NEXT_CHECK_DAYS.get(frequency, 7))


def responsible_for(risk_level: int) -> str:
    return RESPONSIBLE_BY_LEVEL.get(risk_level, DEFAULT_RESPONSIBLE)


ASSESSMENT_INPUT_FIELDS = (
    "center_progression",
    "company_progression",
    "overall_progression",
    "difficulties",
    "support_needed",
    "pending_objectives",
)


def copy_assessment_inputs(source: Any, target: Any) -> None:
    """Recopie progressions et listes qualitatives d’une évaluation vers une autre."""
    for name in ASSESSMENT_INPUT_FIELDS:
        value = getattr(source, name, None)
        setattr(target, name, list(value) if isinstance(value, list) else value)


def _stored_interventions(items: Sequence[Any] | None) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for item in items or []:
        if not isinstance(item, dict):
            continue
        out.append(
            {
                "type": str(item.get("type") or ""),
                "priority": str(item.get("priority") or ""),
                "title": str(item.get("title") or ""),
                "description": str(item.get("description") or ""),
                "timeline": str(item.get("timeline") or ""),
                "responsible": str(item.get("responsible") or ""),
            }
        )
    return out


class RiskAssessmentService:
    def __init__(
        self,
        provider: ProgressDataProvider | None = None,
        engine: RiskEngine | None = None,
        predictor: TrendPredictor | None = None,
        calculator: ProgressionCalculator | None = None,
        *,
        app_url: str = settings.APP_URL,
        history_size: int = settings.PREDICTION_HISTORY_SIZE,
    ) -> None:
        self.provider = provider or ProgressDataProvider()
        self.engine = engine or RiskEngine()
        self.predictor = predictor or TrendPredictor()
        self.calculator = calculator or ProgressionCalculator()
        self.app_url = app_url.rstrip("/")
        self.history_size = history_size

    def student_block(self, student: StudentIdentity) -> Dict[str, Any]:
        return {
            "id": student.id,
            "name": student.full_name,
            "email": student.email,
            "url": f"{self.app_url}/students/{student.id}",
        }

    async def assess_student(self, db: AsyncSession, student: StudentIdentity) -> StudentRiskAssessment:
        """Évalue le risque courant (lecture seule, rien n’est écrit)."""
        progress, engagement = await self.provider.load_snapshots(db, student)

        if progress is None or engagement is None:
            result = self.engine.default_assessment()
        else:
            result = self.engine.assess(progress, engagement)

        log.info(
            "risk_assessed",
            extra={
                "student_id": str(student.id),
                "risk_level": result.risk_level,
                "risk_score": result.risk_score,
                "factors_count": len(result.risk_factors),
            },
        )
        return StudentRiskAssessment(
            student=self.student_block(student),
            result=result,
            period=progress.period if progress is not None else None,
            engagement_score=engagement.engagement_score_pct if engagement is not None else None,
        )

    async def assess_and_persist(
        self, db: AsyncSession, student: StudentIdentity, period: Optional[date] = None
    ) -> StudentRiskAssessment:
        """
        Évalue puis enregistre le résultat sur la ligne (apprenant, période).

        UPSERT : la contrainte unique (student_id, period) garantit une seule ligne ;
        une évaluation existante est mise à jour, sinon une nouvelle est créée.
        """
        period = period or date.today()
        assessed = await self.assess_student(db, student)
        result = assessed.result

        factors = [f.to_dict() for f in result.risk_factors]
        interventions = [i.to_dict() for i in result.interventions]

        existing = await self.provider.find_assessment(db, student.id, period)
        now = datetime.now(timezone.utc)

        if existing:
            existing.risk_level = result.risk_level
            existing.risk_score = result.risk_score
            existing.risk_factors = factors
            existing.interventions = interventions
            existing.updated_at = now
            row = existing
        else:
            row = ProgressAssessment(
                student_id=student.id,
                period=period,
                risk_level=result.risk_level,
                risk_score=result.risk_score,
                risk_factors=factors,
                interventions=interventions,
                created_at=now,
                updated_at=now,
            )
            # Nouvelle ligne : mêmes données d’entrée que l’évaluation lue
            source = await self.provider.latest_assessment(db, student.id)
            if source is not None:
                copy_assessment_inputs(source, row)
            db.add(row)

        # Dernier score d’engagement recopié sur la progression brute
        if assessed.engagement_score is not None:
            progress_row = await self.provider.student_progress(db, student.id)
            if progress_row is not None:
                progress_row.engagement_score = int(round(assessed.engagement_score))
                progress_row.updated_at = now

        await db.commit()
        await db.refresh(row)

        log.info(
            "risk_assessment_persisted",
            extra={
                "student_id": str(student.id),
                "period": str(period),
                "risk_level": result.risk_level,
                "risk_score": result.risk_score,
            },
        )
        return StudentRiskAssessment(
            student=assessed.student,
            result=result,
            period=period,
            engagement_score=assessed.engagement_score,
        )

    async def students_at_risk(
        self, db: AsyncSession, minimum_level: int = settings.RISK_ATTENTION_LEVEL
    ) -> List[StudentRiskAssessment]:
        """
        Candidats = dernière évaluation stockée au-dessus du seuil, puis réévaluation live :
        un apprenant redescendu sous le seuil est écarté.
        """
        candidates = await self.provider.students_with_stored_risk(db, minimum_level)

        at_risk: List[StudentRiskAssessment] = []
        for student in candidates:
            assessed = await self.assess_student(db, student)
            if assessed.result.risk_level >= minimum_level:
                at_risk.append(assessed)

        at_risk.sort(key=lambda a: a.result.risk_level, reverse=True)
        return at_risk

    async def risk_report(
        self, db: AsyncSession, start: date, end: date, *, today: Optional[date] = None
    ) -> RiskReportOut:
        today = today or date.today()
        students = await self.provider.students_with_contract(db)

        assessed = [await self.assess_student(db, s) for s in students]

        distribution = RiskDistribution()
        for a in assessed:
            category = a.result.risk_category.value
            setattr(distribution, category, getattr(distribution, category) + 1)

        immediate = [a for a in assessed if a.result.risk_level >= IMMEDIATE_ATTENTION_LEVEL]

        factor_counts: Counter = Counter()
        for a in assessed:
            factor_counts.update(f.to_dict()["factor"] for f in a.result.risk_factors)

        global_interventions: List[GlobalIntervention] = []
        if len(immediate) > SYSTEMIC_TRAINING_THRESHOLD:
            global_interventions.append(SYSTEMIC_TRAINING)

        schedule = [
            MonitoringScheduleItem(
                student_id=a.student["id"],
                student_name=a.student["name"],
                frequency=a.result.monitoring_frequency.value,
                next_check=next_check_date(a.result.monitoring_frequency, today),
                responsible=responsible_for(a.result.risk_level),
            )
            for a in assessed
            if a.result.risk_level >= SCHEDULE_LEVEL
        ]

        log.info(
            "risk_report_generated",
            extra={"students_count": len(students), "period": f"{start}..{end}"},
        )

        return RiskReportOut(
            report_period=ReportPeriod(start=start, end=end),
            total_students=len(students),
            risk_distribution=distribution,
            students_needing_immediate_attention=[
                assessment_payload(a.student, a.result, a.period) for a in immediate
            ],
            common_risk_factors=[
                CommonRiskFactor(factor=factor, count=count)
                for factor, count in factor_counts.most_common(COMMON_FACTORS_LIMIT)
            ],
            intervention_recommendations=global_interventions,
            monitoring_schedule=schedule,
        )

    async def risk_evolution(
        self, db: AsyncSession, student: StudentIdentity, start: date, end: date
    ) -> RiskEvolutionOut:
        rows = await self.provider.assessments_between(db, student.id, start, end)
        scorer = self.engine.scorer

        points = [
            EvolutionPoint(
                date=row.period,
                risk_level=int(row.risk_level),
                risk_category=scorer.risk_category(int(row.risk_level)).value,
                risk_factors=[
                    RiskFactorOut(**RiskFactor.from_dict(f).to_dict())
                    for f in (row.risk_factors or [])
                    if isinstance(f, dict)
                ],
                interventions_applied=[InterventionOut(**i) for i in _stored_interventions(row.interventions)],
            )
            for row in rows
        ]

        return RiskEvolutionOut(
            student=StudentRef(**self.student_block(student)),
            monitoring_period=ReportPeriod(start=start, end=end),
            risk_evolution=points,
            trend_analysis=self._trend_analysis(points),
            effectiveness_assessment=self._effectiveness(points),
        )

    def _trend_analysis(self, points: Sequence[EvolutionPoint]) -> TrendAnalysis:
        if len(points) < 2:
            return TrendAnalysis(trend="insufficient_data")

        first, last = points[0], points[-1]
        change = last.risk_level - first.risk_level
        if change > 0:
            trend = "increasing"
        elif change < 0:
            trend = "decreasing"
        else:
            trend = "stable"

        return TrendAnalysis(
            trend=trend,
            change_magnitude=abs(change),
            timespan_days=abs((last.date - first.date).days),
        )

    def _effectiveness(self, points: Sequence[EvolutionPoint]) -> List[EffectivenessItem]:
        """Pour chaque paire consécutive : l’intervention précédente a-t-elle fait baisser le risque ?"""
        out: List[EffectivenessItem] = []
        for previous, current in zip(points, points[1:]):
            if not previous.interventions_applied:
                continue
            change = current.risk_level - previous.risk_level
            out.append(
                EffectivenessItem(
                    period=current.date,
                    intervention_count=len(previous.interventions_applied),
                    risk_change=change,
                    effective=change <= 0,
                )
            )
        return out

    async def predict_future_risk(
        self, db: AsyncSession, student: StudentIdentity, weeks_ahead: int = 4
    ) -> StudentRiskPrediction:
        history = await self.provider.recent_risk_levels(db, student.id, limit=self.history_size)
        return StudentRiskPrediction(
            student=self.student_block(student),
            prediction=self.predictor.predict(history, weeks_ahead=weeks_ahead),
        )

    async def student_progression(self, db: AsyncSession, student: StudentIdentity) -> ProgressionOut:
        """
        Progression centre / entreprise / globale + statut et bilan des missions.

        Sans contrat d’alternance : progression_available = False (pas d’erreur).
        Sans évaluation : seuls l’engagement et le bilan des missions sont renseignés.
        """
        progress, engagement = await self.provider.load_snapshots(db, student)
        ref = StudentRef(**self.student_block(student))

        if engagement is None or not engagement.has_alternance_contract:
            return ProgressionOut(student=ref, progression_available=False, reason=NO_CONTRACT_REASON)

        completion = self.calculator.mission_completion(engagement.mission_progress)
        out = ProgressionOut(
            student=ref,
            progression_available=True,
            engagement_score=engagement.engagement_score_pct,
            mission_completion=MissionCompletionOut(**asdict(completion)),
        )
        if progress is not None:
            out.center_progression = round(progress.center_progression_pct, 2)
            out.company_progression = round(progress.company_progression_pct, 2)
            out.overall_progression = round(progress.overall_progression_pct, 2)
            out.progression_status = self.calculator.progression_status(progress.overall_progression_pct)
            out.last_assessment_date = progress.period

        log.info(
            "progression_computed",
            extra={
                "student_id": str(student.id),
                "period": str(progress.period) if progress is not None else None,
            },
        )
        return out
