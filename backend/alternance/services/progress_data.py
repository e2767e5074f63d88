from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Tuple

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from alternance.models.progress_assessment import ProgressAssessment
from alternance.models.student import Student
from alternance.models.student_progress import StudentProgress
from alternance.services.progression import ProgressionCalculator
from alternance.services.risk_types import (
    Difficulty,
    EngagementSnapshot,
    MissionProgress,
    PendingObjective,
    ProgressSnapshot,
    SupportNeed,
)

"""
Progress Data Provider.

Rôle (fonctionnel) :
- Lit en base les données nécessaires au moteur de risque et les convertit en snapshots :
  - ProgressSnapshot : dernière évaluation (ProgressAssessment) de l’apprenant
  - EngagementSnapshot : progression brute (StudentProgress) + score d’engagement calculé
- Fournit l’historique des niveaux de risque (prédiction) et les évaluations sur une période
  (évolution, rapports).

Règles de construction :
- Progression centre absente -> completion_percentage de StudentProgress.
- Progression entreprise absente -> moyenne des missions, ou progression centre sans mission.
- Progression globale absente -> 60% centre + 40% entreprise (valeur stockée prioritaire).
- JSON incomplet toléré : clés manquantes -> valeurs neutres (sévérité/urgence 0, priorité 3).
"""

log = logging.getLogger("alternance.progress_data")


def _as_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_int(value: Any, default: int = 0) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_date(value: Any) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def parse_difficulties(items: Iterable[dict] | None) -> List[Difficulty]:
    return [
        Difficulty(
            area=str(d.get("area") or "general"),
            description=str(d.get("description") or ""),
            severity=_as_int(d.get("severity")),
        )
        for d in (items or [])
        if isinstance(d, dict)
    ]


def parse_support_needed(items: Iterable[dict] | None) -> List[SupportNeed]:
    return [
        SupportNeed(
            type=str(s.get("type") or "general"),
            description=str(s.get("description") or ""),
            urgency=_as_int(s.get("urgency")),
        )
        for s in (items or [])
        if isinstance(s, dict)
    ]


def parse_pending_objectives(items: Iterable[dict] | None) -> List[PendingObjective]:
    return [
        PendingObjective(
            category=str(o.get("category") or "general"),
            objective=str(o.get("objective") or ""),
            target_date=_as_date(o.get("target_date")),
            priority=_as_int(o.get("priority"), 3),
        )
        for o in (items or [])
        if isinstance(o, dict)
    ]


def parse_missions(items: Iterable[dict] | None) -> List[MissionProgress]:
    return [
        MissionProgress(
            completion_rate_pct=_as_float(m.get("completion_rate")),
            mission=m.get("mission"),
        )
        for m in (items or [])
        if isinstance(m, dict)
    ]


class ProgressDataProvider:
    """
    Accès DB (async) pour le moteur de risque.

    Toutes les méthodes sont en lecture seule : la persistance d’une évaluation
    reste à la charge de RiskAssessmentService.
    """

    def __init__(self, calculator: ProgressionCalculator | None = None) -> None:
        self.calculator = calculator or ProgressionCalculator()

    async def get_student(self, db: AsyncSession, student_id: uuid.UUID) -> Optional[Student]:
        return (await db.execute(select(Student).where(Student.id == student_id))).scalars().first()

    async def latest_assessment(self, db: AsyncSession, student_id: uuid.UUID) -> Optional[ProgressAssessment]:
        """Dernière évaluation portant des données d’entrée (une ligne "résultat seul" est ignorée)."""
        has_inputs = or_(
            ProgressAssessment.center_progression.is_not(None),
            ProgressAssessment.company_progression.is_not(None),
            ProgressAssessment.overall_progression.is_not(None),
            ProgressAssessment.difficulties.is_not(None),
            ProgressAssessment.support_needed.is_not(None),
            ProgressAssessment.pending_objectives.is_not(None),
        )
        stmt = (
            select(ProgressAssessment)
            .where(ProgressAssessment.student_id == student_id)
            .where(has_inputs)
            .order_by(ProgressAssessment.period.desc())
            .limit(1)
        )
        return (await db.execute(stmt)).scalars().first()

    async def student_progress(self, db: AsyncSession, student_id: uuid.UUID) -> Optional[StudentProgress]:
        stmt = select(StudentProgress).where(StudentProgress.student_id == student_id)
        return (await db.execute(stmt)).scalars().first()

    async def find_assessment(
        self, db: AsyncSession, student_id: uuid.UUID, period: date
    ) -> Optional[ProgressAssessment]:
        stmt = select(ProgressAssessment).where(
            ProgressAssessment.student_id == student_id,
            ProgressAssessment.period == period,
        )
        return (await db.execute(stmt)).scalars().first()

    async def load_snapshots(
        self, db: AsyncSession, student: Student
    ) -> Tuple[Optional[ProgressSnapshot], Optional[EngagementSnapshot]]:
        """Retourne (progress, engagement) ; l’un ou l’autre vaut None si la donnée manque."""
        assessment = await self.latest_assessment(db, student.id)
        progress_row = await self.student_progress(db, student.id)

        if assessment is None or progress_row is None:
            log.warning(
                "risk_data_missing",
                extra={
                    "student_id": str(student.id),
                    "period": str(assessment.period) if assessment else None,
                },
            )

        engagement = self.build_engagement(progress_row) if progress_row is not None else None
        progress = self.build_progress(assessment, progress_row) if assessment is not None else None
        return progress, engagement

    def build_engagement(self, row: StudentProgress, now: Optional[datetime] = None) -> EngagementSnapshot:
        score = self.calculator.compute_engagement_score(
            last_activity=row.last_activity,
            attendance_rate=_as_float(row.attendance_rate),
            completion_pct=_as_float(row.completion_percentage),
            login_count=_as_int(row.login_count),
            started_at=row.started_at,
            now=now,
        )
        return EngagementSnapshot(
            engagement_score_pct=float(score),
            has_alternance_contract=row.has_alternance_contract,
            mission_progress=parse_missions(row.mission_progress),
        )

    def build_progress(
        self, assessment: ProgressAssessment, row: Optional[StudentProgress] = None
    ) -> ProgressSnapshot:
        missions = parse_missions(row.mission_progress) if row is not None else []

        if assessment.center_progression is not None:
            center = _as_float(assessment.center_progression)
        else:
            center = _as_float(row.completion_percentage) if row is not None else 0.0

        if assessment.company_progression is not None:
            company = _as_float(assessment.company_progression)
        elif missions:
            company = self.calculator.compute_company_progression(missions)
        else:
            # Aucune mission : alignée sur le centre (pas d’écart centre/entreprise fictif)
            company = center

        if assessment.overall_progression is not None:
            overall = _as_float(assessment.overall_progression)
        else:
            overall = self.calculator.compute_overall_progression(center, company)

        return ProgressSnapshot(
            center_progression_pct=center,
            company_progression_pct=company,
            overall_progression_pct=overall,
            period=assessment.period,
            difficulties=parse_difficulties(assessment.difficulties),
            support_needed=parse_support_needed(assessment.support_needed),
            pending_objectives=parse_pending_objectives(assessment.pending_objectives),
        )

    async def recent_risk_levels(self, db: AsyncSession, student_id: uuid.UUID, limit: int = 5) -> List[int]:
        """Derniers niveaux de risque stockés, ordre chronologique croissant."""
        stmt = (
            select(ProgressAssessment.risk_level)
            .where(ProgressAssessment.student_id == student_id)
            .order_by(ProgressAssessment.period.desc())
            .limit(limit)
        )
        levels = (await db.execute(stmt)).scalars().all()
        return [int(level) for level in reversed(levels)]

    async def assessments_between(
        self, db: AsyncSession, student_id: uuid.UUID, start: date, end: date
    ) -> List[ProgressAssessment]:
        stmt = (
            select(ProgressAssessment)
            .where(ProgressAssessment.student_id == student_id)
            .where(ProgressAssessment.period >= start)
            .where(ProgressAssessment.period <= end)
            .order_by(ProgressAssessment.period.asc())
        )
        return list((await db.execute(stmt)).scalars().all())

    async def students_with_contract(self, db: AsyncSession) -> List[Student]:
        stmt = (
            select(Student)
            .join(StudentProgress, StudentProgress.student_id == Student.id)
            .where(StudentProgress.alternance_contract_number.is_not(None))
            .order_by(Student.last_name.asc(), Student.first_name.asc())
        )
        return list((await db.execute(stmt)).scalars().unique().all())

    async def students_with_stored_risk(self, db: AsyncSession, minimum_level: int) -> List[Student]:
        """Apprenants dont la dernière évaluation stockée a un niveau >= minimum_level."""
        latest = (
            select(
                ProgressAssessment.student_id.label("student_id"),
                func.max(ProgressAssessment.period).label("period"),
            )
            .group_by(ProgressAssessment.student_id)
            .subquery()
        )
        stmt = (
            select(Student)
            .join(ProgressAssessment, ProgressAssessment.student_id == Student.id)
            .join(
                latest,
                and_(
                    latest.c.student_id == ProgressAssessment.student_id,
                    latest.c.period == ProgressAssessment.period,
                ),
            )
            .where(ProgressAssessment.risk_level >= minimum_level)
        )
        return list((await db.execute(stmt)).scalars().unique().all())
