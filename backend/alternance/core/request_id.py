from __future__ import annotations

import uuid
from contextvars import ContextVar

"""
Core Request ID.

Rôle (fonctionnel) :
- Conserve l’identifiant de requête courant dans un ContextVar (sûr en async).
- Utilisé par le middleware HTTP, le filtre de logs et les handlers d’erreurs,
  pour qu’une évaluation de risque puisse être retrouvée dans les logs à partir de la réponse.
"""

REQUEST_ID_HEADER = "X-Request-Id"

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)


def set_request_id(rid: str | None) -> None:
    _request_id.set(rid)


def get_request_id() -> str | None:
    return _request_id.get()


def ensure_request_id(incoming: str | None = None) -> str:
    """
    Garantit un request_id pour le contexte courant.

    - Valeur entrante (header X-Request-Id) nettoyée et réutilisée si non vide.
    - Sinon UUID4 généré.
    """
    rid = (incoming or "").strip()[:64] or str(uuid.uuid4())
    set_request_id(rid)
    return rid
