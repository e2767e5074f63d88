"""
Tests API (FastAPI TestClient) : routes risque, erreurs standardisées, clé API.

La session DB et le service sont remplacés via app.dependency_overrides.
"""

import uuid
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from alternance.api.deps import get_risk_service
from alternance.core.settings import settings
from alternance.db.session import get_db
from alternance.main import app
from alternance.schemas.risk import (
    MissionCompletionOut,
    ProgressionOut,
    ReportPeriod,
    RiskDistribution,
    RiskReportOut,
    StudentRef,
)
from alternance.services.risk_assessment_service import StudentRiskAssessment, StudentRiskPrediction
from alternance.services.risk_engine import RiskEngine
from alternance.services.risk_types import InsufficientData
from alternance.services.trend_predictor import TrendPredictor

ASSESSED_AT = datetime(2026, 10, 1, 9, 30, tzinfo=timezone.utc)


def student_block(student):
    return {
        "id": student.id,
        "name": student.full_name,
        "email": student.email,
        "url": f"http://test/students/{student.id}",
    }


@pytest.fixture
def critical_result(make_progress, make_engagement):
    progress = make_progress(overall_progression_pct=25.0, center_progression_pct=30.0, company_progression_pct=20.0)
    return RiskEngine().assess(progress, make_engagement(engagement_score_pct=80.0), assessment_date=ASSESSED_AT)


@pytest.fixture
def mock_service(student):
    svc = MagicMock()
    svc.provider.get_student = AsyncMock(return_value=student)
    svc.assess_student = AsyncMock()
    svc.assess_and_persist = AsyncMock()
    svc.predict_future_risk = AsyncMock()
    svc.risk_evolution = AsyncMock()
    svc.students_at_risk = AsyncMock(return_value=[])
    svc.risk_report = AsyncMock()
    return svc


@pytest.fixture
def client(mock_service):
    async def override_db():
        yield MagicMock()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_risk_service] = lambda: mock_service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.headers["X-Request-Id"]

    def test_request_id_is_propagated(self, client):
        response = client.get("/health", headers={"X-Request-Id": "req-123"})
        assert response.headers["X-Request-Id"] == "req-123"


class TestStudentRisk:

    def test_current_risk(self, client, mock_service, student, critical_result):
        mock_service.assess_student.return_value = StudentRiskAssessment(
            student=student_block(student), result=critical_result, period=date(2026, 9, 30)
        )

        response = client.get(f"/students/{student.id}/risk")

        assert response.status_code == 200
        body = response.json()
        assert body["student"]["id"] == str(student.id)
        assert body["risk_level"] == 5
        assert body["risk_category"] == "critical"
        assert body["risk_score"] == 90
        assert body["monitoring_frequency"] == "daily"
        assert body["risk_factors"][0]["factor"] == "low_overall_progression"
        assert body["risk_factors"][0]["description"] == "Progression globale faible (25%)"
        assert body["interventions"][0]["title"] == "Intervention d'urgence"
        assert body["period"] == "2026-09-30"

    def test_unknown_student(self, client, mock_service):
        mock_service.provider.get_student.return_value = None
        student_id = uuid.uuid4()

        response = client.get(f"/students/{student_id}/risk")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "STUDENT_NOT_FOUND"
        assert error["details"] == {"student_id": str(student_id)}
        assert error["request_id"] == response.headers["X-Request-Id"]
        mock_service.assess_student.assert_not_awaited()

    def test_invalid_student_id(self, client):
        response = client.get("/students/not-a-uuid/risk")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_default_result_carries_note(self, client, mock_service, student):
        mock_service.assess_student.return_value = StudentRiskAssessment(
            student=student_block(student), result=RiskEngine().default_assessment(ASSESSED_AT)
        )

        body = client.get(f"/students/{student.id}/risk").json()

        assert body["risk_level"] == 1
        assert body["note"] == "Données insuffisantes pour une évaluation complète"
        assert body["period"] is None


class TestPersistAssessment:

    def test_write_with_period(self, client, mock_service, student, critical_result, monkeypatch):
        monkeypatch.setattr(settings, "API_KEY", "")
        mock_service.assess_and_persist.return_value = StudentRiskAssessment(
            student=student_block(student), result=critical_result, period=date(2026, 10, 1)
        )

        response = client.post(f"/students/{student.id}/risk-assessments", json={"period": "2026-10-01"})

        assert response.status_code == 201
        assert response.json()["period"] == "2026-10-01"
        args = mock_service.assess_and_persist.await_args.args
        assert args[1] is student
        assert args[2] == date(2026, 10, 1)

    def test_api_key_required(self, client, mock_service, student, monkeypatch):
        monkeypatch.setattr(settings, "API_KEY", "secret")

        response = client.post(f"/students/{student.id}/risk-assessments", json={})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"
        mock_service.assess_and_persist.assert_not_awaited()

    def test_api_key_accepted(self, client, mock_service, student, critical_result, monkeypatch):
        monkeypatch.setattr(settings, "API_KEY", "secret")
        mock_service.assess_and_persist.return_value = StudentRiskAssessment(
            student=student_block(student), result=critical_result, period=date.today()
        )

        response = client.post(
            f"/students/{student.id}/risk-assessments",
            json={},
            headers={"X-API-Key": "secret"},
        )

        assert response.status_code == 201
        assert mock_service.assess_and_persist.await_args.args[2] is None

    def test_unknown_fields_are_rejected(self, client, student, monkeypatch):
        monkeypatch.setattr(settings, "API_KEY", "")

        response = client.post(f"/students/{student.id}/risk-assessments", json={"risk_level": 1})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestPrediction:

    def test_prediction(self, client, mock_service, student):
        mock_service.predict_future_risk.return_value = StudentRiskPrediction(
            student=student_block(student), prediction=TrendPredictor().predict([1, 2, 3, 4, 5], weeks_ahead=4)
        )

        response = client.get(f"/students/{student.id}/risk/prediction?weeks_ahead=4")

        assert response.status_code == 200
        body = response.json()
        assert body["prediction_available"] is True
        assert body["trend"] == "increasing"
        assert body["predicted_risk"] == 5.0
        assert body["confidence_level"] == "high"
        assert body["early_intervention_window"] == 1

    def test_insufficient_history(self, client, mock_service, student):
        mock_service.predict_future_risk.return_value = StudentRiskPrediction(
            student=student_block(student), prediction=InsufficientData(history_size=1)
        )

        body = client.get(f"/students/{student.id}/risk/prediction").json()

        assert body["prediction_available"] is False
        assert body["reason"] == "Historique insuffisant"
        assert body["predicted_risk"] is None

    def test_weeks_ahead_bounds(self, client, student):
        response = client.get(f"/students/{student.id}/risk/prediction?weeks_ahead=0")
        assert response.status_code == 422


class TestPeriodValidation:

    def test_evolution_start_after_end(self, client, mock_service, student):
        response = client.get(f"/students/{student.id}/risk/evolution?start=2026-10-01&end=2026-09-01")

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "INVALID_PERIOD"
        assert error["details"] == {"start": "2026-10-01", "end": "2026-09-01"}
        mock_service.risk_evolution.assert_not_awaited()

    def test_report_start_after_end(self, client):
        response = client.get("/risk/report?start=2026-10-01&end=2026-09-01")
        assert response.json()["error"]["code"] == "INVALID_PERIOD"


class TestRiskListings:

    def test_students_at_risk(self, client, mock_service, student, critical_result):
        mock_service.students_at_risk.return_value = [
            StudentRiskAssessment(student=student_block(student), result=critical_result)
        ]

        response = client.get("/risk/students?minimum_level=4")

        assert response.status_code == 200
        body = response.json()
        assert body["minimum_level"] == 4
        assert body["total"] == 1
        assert body["data"][0]["risk_category"] == "critical"
        assert mock_service.students_at_risk.await_args.kwargs == {"minimum_level": 4}

    def test_students_at_risk_default_level(self, client, mock_service):
        body = client.get("/risk/students").json()

        assert body["minimum_level"] == settings.RISK_ATTENTION_LEVEL
        assert body["data"] == []

    def test_minimum_level_out_of_range(self, client):
        response = client.get("/risk/students?minimum_level=9")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_report(self, client, mock_service):
        mock_service.risk_report.return_value = RiskReportOut(
            report_period=ReportPeriod(start=date(2026, 9, 1), end=date(2026, 9, 30)),
            total_students=0,
            risk_distribution=RiskDistribution(),
            students_needing_immediate_attention=[],
            common_risk_factors=[],
            intervention_recommendations=[],
            monitoring_schedule=[],
        )

        response = client.get("/risk/report?start=2026-09-01&end=2026-09-30")

        assert response.status_code == 200
        body = response.json()
        assert body["report_period"] == {"start": "2026-09-01", "end": "2026-09-30"}
        assert body["risk_distribution"] == {"low": 0, "moderate": 0, "high": 0, "critical": 0}
        args = mock_service.risk_report.await_args.args
        assert args[1:] == (date(2026, 9, 1), date(2026, 9, 30))


class TestProgression:

    def test_progression(self, client, mock_service, student):
        mock_service.student_progression = AsyncMock(
            return_value=ProgressionOut(
                student=StudentRef(**student_block(student)),
                progression_available=True,
                center_progression=85.0,
                company_progression=65.0,
                overall_progression=77.0,
                progression_status="satisfactory",
                engagement_score=85.0,
                last_assessment_date=date(2026, 9, 30),
                mission_completion=MissionCompletionOut(
                    total_missions=2, completed_missions=1, in_progress_missions=1, average_completion_rate=65.0
                ),
            )
        )

        response = client.get(f"/students/{student.id}/progression")

        assert response.status_code == 200
        body = response.json()
        assert body["progression_status"] == "satisfactory"
        assert body["overall_progression"] == 77.0
        assert body["last_assessment_date"] == "2026-09-30"
        assert body["mission_completion"]["completed_missions"] == 1

    def test_progression_unknown_student(self, client, mock_service):
        mock_service.provider.get_student.return_value = None
        mock_service.student_progression = AsyncMock()

        response = client.get(f"/students/{uuid.uuid4()}/progression")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "STUDENT_NOT_FOUND"
        mock_service.student_progression.assert_not_awaited()
