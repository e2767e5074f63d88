from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Numeric, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from alternance.db.base import Base

"""
Model ProgressAssessment.

Rôle (fonctionnel) :
- Évaluation périodique d’un apprenant (bilan de progression) :
  - progression centre / entreprise / globale (0..100)
  - difficultés, besoins d’accompagnement, objectifs en attente (JSONB)
- Porte aussi le résultat du moteur de risque au moment de l’évaluation :
  risk_level (1..5), risk_score (0..100), risk_factors et interventions (JSONB).

Contraintes :
- 1 évaluation par apprenant et par période (UPSERT côté service).

Index :
- (student_id, period) : historique d’un apprenant (prédiction, évolution).
- (period, risk_level) : listes "à risque" et rapports par période.
"""


class ProgressAssessment(Base):
    __tablename__ = "progress_assessments"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Date de référence de l’évaluation
    period: Mapped[date] = mapped_column(Date, nullable=False)

    # Progressions (None = non renseignée)
    center_progression: Mapped[float | None] = mapped_column(Numeric(5, 2), nullable=True)
    company_progression: Mapped[float | None] = mapped_column(Numeric(5, 2), nullable=True)
    overall_progression: Mapped[float | None] = mapped_column(Numeric(5, 2), nullable=True)

    # Données qualitatives (listes JSON)
    difficulties: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    support_needed: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    pending_objectives: Mapped[list | None] = mapped_column(JSONB, nullable=True)

    # Résultat du moteur de risque
    risk_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    risk_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    risk_factors: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    interventions: Mapped[list | None] = mapped_column(JSONB, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    student = relationship("Student", back_populates="assessments", lazy="joined")

    __table_args__ = (
        UniqueConstraint("student_id", "period", name="uq_progress_assessments_student_period"),
        Index("ix_progress_assessments_student_period", "student_id", "period"),
        Index("ix_progress_assessments_period_risk", "period", "risk_level"),
    )
