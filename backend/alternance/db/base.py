from sqlalchemy.orm import DeclarativeBase

"""
DB Base.

Rôle (fonctionnel) :
- Classe Base SQLAlchemy commune aux modèles ORM (Student, StudentProgress, ProgressAssessment).
- Sa metadata sert aux migrations Alembic et au seed de démo.
"""


class Base(DeclarativeBase):
    pass
