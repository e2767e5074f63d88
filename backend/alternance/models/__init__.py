"""
alternance.models

Package ORM (SQLAlchemy) : entités persistées en base.

Rôle (fonctionnel) :
- Centralise les modèles (Student, StudentProgress, ProgressAssessment).
- Expose explicitement l’API publique du package via __all__.
"""

from alternance.models.student import Student
from alternance.models.student_progress import StudentProgress
from alternance.models.progress_assessment import ProgressAssessment

__all__ = ["Student", "StudentProgress", "ProgressAssessment"]
