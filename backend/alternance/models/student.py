from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from alternance.db.base import Base

"""
Model Student.

Rôle (fonctionnel) :
- Représente un apprenant (alternant) suivi par le centre de formation.
- Sert de pivot : la progression brute (StudentProgress) et les évaluations périodiques
  (ProgressAssessment) se rattachent à l’apprenant.

Identité :
- Expose `full_name` et `email` : l’objet satisfait le protocole StudentIdentity utilisé
  par le service de risque pour construire le bloc "student" des réponses.
"""


class Student(Base):
    __tablename__ = "students"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    # 0..1 progression brute, 0..N évaluations périodiques
    progress = relationship("StudentProgress", back_populates="student", uselist=False)
    assessments = relationship("ProgressAssessment", back_populates="student")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
