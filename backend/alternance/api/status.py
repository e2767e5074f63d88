from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from alternance.db.session import get_db
from alternance.core.settings import settings

"""
API System Status.

Rôle (fonctionnel) :
- Expose un endpoint de statut “healthcheck” pour la plateforme.
- Vérifie la disponibilité de la base (requête simple).
- Fournit une information de fraîcheur via la date de la dernière évaluation (progress_assessments).
"""

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/status")
async def system_status(db: AsyncSession = Depends(get_db)):
    # 1) DB check (requête minimale)
    db_ok = True
    try:
        await db.execute(text("SELECT 1"))
    except Exception:
        db_ok = False

    # 2) Last update (dernière évaluation enregistrée)
    last_update = None
    try:
        r = await db.execute(text("SELECT MAX(updated_at) AS last_update FROM progress_assessments"))
        row = r.mappings().first()
        last_update = row["last_update"].isoformat() if row and row["last_update"] else None
    except Exception:
        last_update = None

    # Réponse (format constant) pour monitoring / UI
    return {
        "ok": db_ok,
        "db": {"ok": db_ok},
        "risk_attention_level": settings.RISK_ATTENTION_LEVEL,
        "last_update": last_update,
        "ts": datetime.now(timezone.utc).isoformat(),
    }
