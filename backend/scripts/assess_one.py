import sys
import asyncio

# Windows: compat event loop (évite certains soucis avec drivers async PostgreSQL)
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from sqlalchemy import select

from alternance.db.session import AsyncSessionLocal
from alternance.models.student import Student
from alternance.services.risk_assessment_service import RiskAssessmentService

"""
Script CLI: assess_one

Rôle (fonctionnel) :
- Récupère l’apprenant le plus récemment créé (ou celui dont l’email est passé en argument).
- Exécute l’évaluation de risque via RiskAssessmentService.
- Persiste le résultat sur la période du jour et affiche un résumé (niveau, score, facteurs, interventions).

Usage typique :
- Debug local / vérification rapide du moteur sans passer par l’API.
- Validation que DB + modèles + moteur fonctionnent de bout en bout.

Notes :
- Le fix Windows ajuste la policy asyncio pour éviter des incompatibilités
  connues avec certains drivers PostgreSQL async.
"""


async def main(email: str | None = None):
    async with AsyncSessionLocal() as db:
        stmt = select(Student)
        stmt = stmt.where(Student.email == email) if email else stmt.order_by(Student.created_at.desc())
        student = (await db.execute(stmt)).scalars().first()

        if not student:
            print("Aucun apprenant en base.")
            return

        svc = RiskAssessmentService()
        res = await svc.assess_and_persist(db, student)
        result = res.result

        print("Student:", student.full_name, student.id)
        print("Risk:", result.risk_level, result.risk_category.value, f"score={result.risk_score}")
        print("Factors:", [f.description for f in result.risk_factors])
        print("Interventions:", [i.title for i in result.interventions])
        if result.note:
            print("Note:", result.note)


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
