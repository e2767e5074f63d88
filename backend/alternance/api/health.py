from fastapi import APIRouter

from alternance.core.settings import settings

"""
API Health.

Rôle (fonctionnel) :
- Endpoint simple pour vérifier que l’API répond.
- Expose quelques infos utiles en démo (env, seuil "à risque" par défaut).
"""

router = APIRouter()


@router.get("/health")
def health():
    return {
        "status": "ok",
        "env": settings.ENV,
        "risk_attention_level": settings.RISK_ATTENTION_LEVEL,
    }
