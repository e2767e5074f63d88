from __future__ import annotations

from fastapi import Depends, Request

from alternance.core.security import require_api_key
from alternance.services.risk_assessment_service import RiskAssessmentService

"""
Dépendances API.

Rôle (fonctionnel) :
- Centralise les dépendances réutilisables sur les routes :
  - protection des routes d’écriture via clé API (header)
  - fabrique du service de risque (surchargée dans les tests)
"""


async def require_write_auth(request: Request) -> None:
    await require_api_key(request)


# Dépendance prête à l’emploi pour protéger un endpoint d’écriture
ApiKeyDep = Depends(require_write_auth)


def get_risk_service() -> RiskAssessmentService:
    return RiskAssessmentService()
