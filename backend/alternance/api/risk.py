from __future__ import annotations

import uuid
from datetime import date, timedelta
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from alternance.api.deps import ApiKeyDep, get_risk_service
from alternance.core.errors import invalid_period, student_not_found
from alternance.core.settings import settings
from alternance.db.session import get_db
from alternance.models.student import Student
from alternance.schemas.risk import (
    AssessmentCreate,
    AtRiskListResponse,
    ProgressionOut,
    RiskAssessmentOut,
    RiskEvolutionOut,
    RiskPredictionOut,
    RiskReportOut,
    assessment_payload,
    prediction_payload,
)
from alternance.services.risk_assessment_service import RiskAssessmentService

"""
API Risk.

Rôle (fonctionnel) :
- Expose le moteur de risque des apprenants en alternance :
  - évaluation courante d’un apprenant (lecture seule)
  - évaluation + enregistrement sur une période (protégé par clé API)
  - prédiction de tendance et évolution sur une période
  - progression centre / entreprise / globale (statut, bilan des missions)
  - liste des apprenants à risque et rapport de période

Erreurs :
- apprenant inconnu -> 404 STUDENT_NOT_FOUND
- start > end -> 422 INVALID_PERIOD
"""

router = APIRouter(tags=["risk"])

REPORT_DEFAULT_DAYS = 30
EVOLUTION_DEFAULT_DAYS = 90


async def _get_student(db: AsyncSession, svc: RiskAssessmentService, student_id: uuid.UUID) -> Student:
    student = await svc.provider.get_student(db, student_id)
    if not student:
        raise student_not_found(student_id)
    return student


def _period(start: Optional[date], end: Optional[date], default_days: int) -> Tuple[date, date]:
    """Bornes inclusives ; fin = aujourd’hui et début = fin - N jours par défaut."""
    end = end or date.today()
    start = start or end - timedelta(days=default_days)
    if start > end:
        raise invalid_period(start, end)
    return start, end


@router.get("/students/{student_id}/risk", response_model=RiskAssessmentOut)
async def get_student_risk(
    student_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    svc: RiskAssessmentService = Depends(get_risk_service),
):
    student = await _get_student(db, svc, student_id)
    assessed = await svc.assess_student(db, student)
    return assessment_payload(assessed.student, assessed.result, assessed.period)


@router.post(
    "/students/{student_id}/risk-assessments",
    response_model=RiskAssessmentOut,
    status_code=201,
    dependencies=[ApiKeyDep],
)
async def create_risk_assessment(
    student_id: uuid.UUID,
    payload: Optional[AssessmentCreate] = None,
    db: AsyncSession = Depends(get_db),
    svc: RiskAssessmentService = Depends(get_risk_service),
):
    student = await _get_student(db, svc, student_id)
    period = payload.period if payload else None
    assessed = await svc.assess_and_persist(db, student, period)
    return assessment_payload(assessed.student, assessed.result, assessed.period)


@router.get("/students/{student_id}/risk/prediction", response_model=RiskPredictionOut)
async def get_risk_prediction(
    student_id: uuid.UUID,
    weeks_ahead: int = Query(4, ge=1, le=52),
    db: AsyncSession = Depends(get_db),
    svc: RiskAssessmentService = Depends(get_risk_service),
):
    student = await _get_student(db, svc, student_id)
    predicted = await svc.predict_future_risk(db, student, weeks_ahead=weeks_ahead)
    return prediction_payload(predicted.student, predicted.prediction)


@router.get("/students/{student_id}/risk/evolution", response_model=RiskEvolutionOut)
async def get_risk_evolution(
    student_id: uuid.UUID,
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    svc: RiskAssessmentService = Depends(get_risk_service),
):
    start, end = _period(start, end, EVOLUTION_DEFAULT_DAYS)
    student = await _get_student(db, svc, student_id)
    return await svc.risk_evolution(db, student, start, end)


@router.get("/students/{student_id}/progression", response_model=ProgressionOut)
async def get_student_progression(
    student_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    svc: RiskAssessmentService = Depends(get_risk_service),
):
    student = await _get_student(db, svc, student_id)
    return await svc.student_progression(db, student)


@router.get("/risk/students", response_model=AtRiskListResponse)
async def list_students_at_risk(
    minimum_level: int = Query(settings.RISK_ATTENTION_LEVEL, ge=1, le=5),
    db: AsyncSession = Depends(get_db),
    svc: RiskAssessmentService = Depends(get_risk_service),
):
    at_risk = await svc.students_at_risk(db, minimum_level=minimum_level)
    return AtRiskListResponse(
        minimum_level=minimum_level,
        total=len(at_risk),
        data=[assessment_payload(a.student, a.result, a.period) for a in at_risk],
    )


@router.get("/risk/report", response_model=RiskReportOut)
async def get_risk_report(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
    svc: RiskAssessmentService = Depends(get_risk_service),
):
    start, end = _period(start, end, REPORT_DEFAULT_DAYS)
    return await svc.risk_report(db, start, end)
