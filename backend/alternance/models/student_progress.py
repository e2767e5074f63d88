from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from alternance.db.base import Base

"""
Model StudentProgress.

Rôle (fonctionnel) :
- Stocke la progression "brute" d’un apprenant, alimentée par la plateforme de formation :
  - complétion du parcours centre (completion_percentage)
  - assiduité (attendance_rate) et activité (last_activity, login_count, started_at)
  - progression des missions en entreprise (mission_progress, JSONB)
- Sert de source à l’EngagementSnapshot consommé par le moteur de risque.

Contraintes :
- 1 apprenant -> 1 ligne de progression (unique=True sur student_id).
- alternance_contract_number vide = pas de contrat d’alternance (règle "missions" inactive).

Format mission_progress :
- [{"mission": "Refonte du site", "completion_rate": 85.0}, ...]
"""


class StudentProgress(Base):
    __tablename__ = "student_progress"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    # Pourcentages 0..100
    completion_percentage: Mapped[float] = mapped_column(Numeric(5, 2), nullable=False, default=0)
    attendance_rate: Mapped[float] = mapped_column(Numeric(5, 2), nullable=False, default=0)

    # Signaux d’activité (score d’engagement)
    login_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_activity: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Dernier score d’engagement calculé (0..100), recalculé à chaque évaluation
    engagement_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Missions en entreprise (liste JSON)
    mission_progress: Mapped[list | None] = mapped_column(JSONB, nullable=True)

    # Référence du contrat d’alternance (None = pas de contrat)
    alternance_contract_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    student = relationship("Student", back_populates="progress", lazy="joined")

    @property
    def has_alternance_contract(self) -> bool:
        return bool(self.alternance_contract_number)
