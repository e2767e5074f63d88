"""Création des tables apprenants, progression et évaluations.

Rôle (fonctionnel) :
- students : identité de l’apprenant (nom, email unique)
- student_progress : progression brute 1:1 (complétion, présence, activité, missions, contrat)
- progress_assessments : évaluations périodiques + résultat du moteur de risque
  (1 ligne par apprenant et par période)

Revision ID: 5d2e8f41c7a3
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# Identifiants Alembic
revision: str = "5d2e8f41c7a3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Application des changements de schéma."""
    op.create_table(
        "students",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("email", name="uq_students_email"),
    )

    op.create_table(
        "student_progress",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "student_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("students.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("completion_percentage", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("attendance_rate", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("login_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_activity", sa.DateTime(timezone=True), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("engagement_score", sa.Integer(), nullable=True),
        sa.Column("mission_progress", postgresql.JSONB(), nullable=True),
        sa.Column("alternance_contract_number", sa.String(length=50), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_student_progress_student_id", "student_progress", ["student_id"], unique=True)

    op.create_table(
        "progress_assessments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "student_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("students.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("period", sa.Date(), nullable=False),
        sa.Column("center_progression", sa.Numeric(5, 2), nullable=True),
        sa.Column("company_progression", sa.Numeric(5, 2), nullable=True),
        sa.Column("overall_progression", sa.Numeric(5, 2), nullable=True),
        sa.Column("difficulties", postgresql.JSONB(), nullable=True),
        sa.Column("support_needed", postgresql.JSONB(), nullable=True),
        sa.Column("pending_objectives", postgresql.JSONB(), nullable=True),
        sa.Column("risk_level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("risk_score", sa.Integer(), nullable=True),
        sa.Column("risk_factors", postgresql.JSONB(), nullable=True),
        sa.Column("interventions", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("student_id", "period", name="uq_progress_assessments_student_period"),
    )
    op.create_index("ix_progress_assessments_student_id", "progress_assessments", ["student_id"], unique=False)
    op.create_index(
        "ix_progress_assessments_student_period", "progress_assessments", ["student_id", "period"], unique=False
    )
    op.create_index("ix_progress_assessments_period_risk", "progress_assessments", ["period", "risk_level"], unique=False)


def downgrade() -> None:
    """Retour arrière des changements de schéma."""
    op.drop_index("ix_progress_assessments_period_risk", table_name="progress_assessments")
    op.drop_index("ix_progress_assessments_student_period", table_name="progress_assessments")
    op.drop_index("ix_progress_assessments_student_id", table_name="progress_assessments")
    op.drop_table("progress_assessments")
    op.drop_index("ix_student_progress_student_id", table_name="student_progress")
    op.drop_table("student_progress")
    op.drop_table("students")
