"""
Configuration et fixtures partagées pour les tests du moteur de risque.
"""

import uuid
from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from alternance.services.progress_data import ProgressDataProvider
from alternance.services.risk_types import (
    EngagementSnapshot,
    MissionProgress,
    ProgressSnapshot,
)


@pytest.fixture
def make_progress():
    """Fabrique de ProgressSnapshot (valeurs "apprenant sans risque" par défaut)."""
    def _make(**overrides):
        values = dict(
            center_progression_pct=70.0,
            company_progression_pct=70.0,
            overall_progression_pct=70.0,
            period=date(2026, 9, 30),
            difficulties=[],
            support_needed=[],
            pending_objectives=[],
        )
        values.update(overrides)
        return ProgressSnapshot(**values)
    return _make


@pytest.fixture
def make_engagement():
    """Fabrique d’EngagementSnapshot (engagé, sans contrat par défaut)."""
    def _make(**overrides):
        values = dict(
            engagement_score_pct=85.0,
            has_alternance_contract=False,
            mission_progress=[],
        )
        values.update(overrides)
        return EngagementSnapshot(**values)
    return _make


@pytest.fixture
def make_student():
    def _make(first_name="Camille", last_name="Martin", email=None):
        return SimpleNamespace(
            id=uuid.uuid4(),
            full_name=f"{first_name} {last_name}",
            email=email or f"{first_name.lower()}.{last_name.lower()}@demo-alternance.fr",
        )
    return _make


@pytest.fixture
def student(make_student):
    return make_student()


@pytest.fixture
def missions():
    return [MissionProgress(completion_rate_pct=90.0, mission="Développement API")]


@pytest.fixture
def mock_provider():
    """ProgressDataProvider dont toutes les lectures DB sont mockées."""
    provider = MagicMock(spec=ProgressDataProvider)
    provider.get_student = AsyncMock(return_value=None)
    provider.load_snapshots = AsyncMock(return_value=(None, None))
    provider.find_assessment = AsyncMock(return_value=None)
    provider.latest_assessment = AsyncMock(return_value=None)
    provider.student_progress = AsyncMock(return_value=None)
    provider.recent_risk_levels = AsyncMock(return_value=[])
    provider.assessments_between = AsyncMock(return_value=[])
    provider.students_with_contract = AsyncMock(return_value=[])
    provider.students_with_stored_risk = AsyncMock(return_value=[])
    return provider


@pytest.fixture
def mock_db():
    """AsyncSession mockée : add synchrone, commit/refresh/execute asynchrones."""
    db = MagicMock()
    db.add = MagicMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.flush = AsyncMock()
    db.execute = AsyncMock()
    return db
