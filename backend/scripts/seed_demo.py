# backend/scripts/seed_demo.py
from __future__ import annotations

import argparse
import random
import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from uuid import uuid4

from sqlalchemy import create_engine, delete
from sqlalchemy.orm import sessionmaker

# Permet de lancer le script depuis backend/ sans souci d'import
BACKEND_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_DIR))

from alternance.core.settings import settings
from alternance.models.progress_assessment import ProgressAssessment
from alternance.models.student import Student
from alternance.models.student_progress import StudentProgress


# ---- Données réalistes (alternance FR) ----
FIRST_NAMES = [
    "Camille", "Lucas", "Inès", "Hugo", "Léa", "Nathan", "Chloé", "Yanis",
    "Manon", "Théo", "Sarah", "Enzo", "Jade", "Mathis", "Lina", "Rayan",
]
LAST_NAMES = [
    "Martin", "Bernard", "Dubois", "Thomas", "Robert", "Richard", "Petit", "Durand",
    "Leroy", "Moreau", "Simon", "Laurent", "Lefebvre", "Michel", "Garcia", "Haddad",
]

MISSIONS = [
    "Support utilisateurs", "Développement API", "Tests et recette", "Documentation technique",
    "Veille technologique", "Maintenance parc", "Analyse de données", "Intégration front",
]

DIFFICULTY_AREAS = [
    ("technique", "Difficultés sur les fondamentaux du module"),
    ("organisation", "Gestion du temps entre centre et entreprise"),
    ("personnel", "Situation personnelle compliquée"),
    ("communication", "Échanges difficiles avec le tuteur"),
]

SUPPORT_TYPES = [
    ("tutorat", "Besoin de séances de rattrapage"),
    ("social", "Orientation vers le service social"),
    ("materiel", "Équipement informatique insuffisant"),
]

OBJECTIVES = [
    ("academic", "Valider le bloc de compétences 1"),
    ("academic", "Rendre le dossier projet"),
    ("professional", "Finaliser la mission en cours"),
    ("professional", "Préparer la soutenance entreprise"),
]


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def profile_for(student_index: int) -> float:
    """Profil 0..1 (0 = apprenant en difficulté, 1 = très à l’aise)."""
    return random.betavariate(2.5, 1.8) if student_index % 5 else random.betavariate(1.2, 3.0)


def random_missions(profile: float) -> list[dict]:
    count = random.randint(1, 4)
    return [
        {
            "mission": name,
            "completion_rate": round(max(0.0, min(100.0, random.gauss(profile * 100, 15))), 1),
        }
        for name in random.sample(MISSIONS, count)
    ]


def random_difficulties(profile: float) -> list[dict]:
    if random.random() < profile:
        return []
    return [
        {"area": area, "description": desc, "severity": random.randint(2, 5)}
        for area, desc in random.sample(DIFFICULTY_AREAS, random.randint(1, 3))
    ]


def random_support(profile: float) -> list[dict]:
    if random.random() < profile:
        return []
    return [
        {"type": kind, "description": desc, "urgency": random.randint(2, 5)}
        for kind, desc in random.sample(SUPPORT_TYPES, random.randint(1, 2))
    ]


def random_objectives(period: date) -> list[dict]:
    return [
        {
            "category": category,
            "objective": objective,
            "target_date": (period + timedelta(days=random.randint(7, 60))).isoformat(),
            "priority": random.randint(1, 5),
        }
        for category, objective in random.sample(OBJECTIVES, random.randint(0, len(OBJECTIVES)))
    ]


def seed(reset: bool, n: int, periods: int, contract_rate: float) -> None:
    engine = create_engine(settings.DATABASE_URL_SYNC, future=True)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    with SessionLocal() as db:
        if reset:
            # ordre inverse des FK
            db.execute(delete(ProgressAssessment))
            db.execute(delete(StudentProgress))
            db.execute(delete(Student))
            db.commit()
            print("✅ Reset done (all demo data deleted).")

        today = date.today()
        assessments_count = 0

        for i in range(n):
            profile = profile_for(i)
            first_name = random.choice(FIRST_NAMES)
            last_name = random.choice(LAST_NAMES)

            student = Student(
                id=uuid4(),
                first_name=first_name,
                last_name=last_name,
                email=f"{first_name}.{last_name}.{i}@demo-alternance.fr".lower(),
                created_at=now_utc(),
            )
            db.add(student)
            db.flush()  # récupère student.id

            started_at = now_utc() - timedelta(days=random.randint(30, 400))
            missions = random_missions(profile)

            db.add(
                StudentProgress(
                    id=uuid4(),
                    student_id=student.id,
                    completion_percentage=round(max(0.0, min(100.0, random.gauss(profile * 100, 12))), 2),
                    attendance_rate=round(max(0.0, min(100.0, random.gauss(60 + profile * 40, 10))), 2),
                    login_count=int(max(0, random.gauss(profile * 120, 20))),
                    last_activity=now_utc() - timedelta(days=int(random.expovariate(0.5 + profile * 2))),
                    started_at=started_at,
                    mission_progress=missions,
                    alternance_contract_number=(
                        f"CTR-{today.year}-{i:05d}" if random.random() < contract_rate else None
                    ),
                    updated_at=now_utc(),
                )
            )

            # Historique mensuel : la trajectoire dérive légèrement d’une période à l’autre
            drift = random.uniform(-0.08, 0.08)
            for k in range(periods, 0, -1):
                period = today - timedelta(days=30 * k)
                p = max(0.0, min(1.0, profile - drift * k))
                center = round(max(0.0, min(100.0, random.gauss(p * 100, 10))), 2)
                company = round(max(0.0, min(100.0, random.gauss(p * 100, 12))), 2)
                risk_level = max(1, min(5, int(round(5 - p * 4 + random.uniform(-0.5, 0.5)))))

                db.add(
                    ProgressAssessment(
                        id=uuid4(),
                        student_id=student.id,
                        period=period,
                        center_progression=center,
                        company_progression=company,
                        overall_progression=round(center * 0.6 + company * 0.4, 2),
                        difficulties=random_difficulties(p),
                        support_needed=random_support(p),
                        pending_objectives=random_objectives(period),
                        risk_level=risk_level,
                        risk_factors=[],
                        interventions=[],
                        created_at=now_utc(),
                        updated_at=now_utc(),
                    )
                )
                assessments_count += 1

            # commit par batch (plus rapide)
            if (i + 1) % 50 == 0:
                db.commit()
                print(f"… {i+1}/{n} apprenants insérés")

        db.commit()

        print("✅ Seed terminé.")
        print(f"   - Apprenants ajoutés: {n}")
        print(f"   - Évaluations créées: {assessments_count}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset", action="store_true", help="Supprime les données demo avant de reseed")
    parser.add_argument("--n", type=int, default=120, help="Nombre d’apprenants à générer")
    parser.add_argument("--periods", type=int, default=6, help="Nombre d’évaluations mensuelles par apprenant")
    parser.add_argument("--contract-rate", type=float, default=0.85, help="Part des apprenants sous contrat (0..1)")
    parser.add_argument("--seed", type=int, default=42, help="Seed RNG pour reproductibilité")
    args = parser.parse_args()

    random.seed(args.seed)
    seed(reset=args.reset, n=args.n, periods=args.periods, contract_rate=args.contract_rate)


if __name__ == "__main__":
    main()
