from fastapi import APIRouter

from .health import router as health_router

from alternance.api.risk import router as risk_router
from alternance.api.status import router as status_router

"""
Router principal de l’API.

Rôle (fonctionnel) :
- Regroupe les routeurs par domaine (health, statut système, risque apprenants).
- Sert de point d’entrée unique pour l’inclusion dans l’application FastAPI.
"""

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(status_router)
api_router.include_router(risk_router)
