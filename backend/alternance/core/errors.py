from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException

"""
Core Errors.

Rôle (fonctionnel) :
- Standardise le format des erreurs renvoyées par l’API (payload homogène).
- Fournit une exception applicative (AppHTTPException) pour lever des erreurs métier de façon cohérente.
- Regroupe les erreurs métier récurrentes (apprenant introuvable, période invalide).

Convention de réponse (exemple) :
{
  "error": {
    "code": "STUDENT_NOT_FOUND",
    "message": "Apprenant introuvable",
    "status": 404,
    "request_id": "...",
    "timestamp": "...",
    "details": {...}
  }
}
"""


def now_iso() -> str:
    """Timestamp ISO-8601 en UTC (utilisé dans toutes les erreurs)."""
    return datetime.now(timezone.utc).isoformat()


def error_payload(
    *,
    code: str,
    message: str,
    status: int,
    request_id: str,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    """Construit un payload d’erreur homogène pour l’API."""
    payload: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "status": status,
            "request_id": request_id,
            "timestamp": now_iso(),
        }
    }
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppHTTPException(HTTPException):
    """
    Exception applicative standardisée.

    Usage :
    - Lever une erreur “métier” avec un code stable et un message explicite.
    - Laisser la couche API/middlewares produire une réponse cohérente.

    Exemple :
        raise AppHTTPException(404, "STUDENT_NOT_FOUND", "Apprenant introuvable")
    """

    def __init__(self, status_code: int, code: str, message: str, details: Any = None):
        super().__init__(status_code=status_code, detail={"code": code, "message": message, "details": details})
        self.code = code
        self.message = message


def student_not_found(student_id: Any) -> AppHTTPException:
    return AppHTTPException(404, "STUDENT_NOT_FOUND", "Apprenant introuvable", details={"student_id": str(student_id)})


def invalid_period(start: Any, end: Any) -> AppHTTPException:
    return AppHTTPException(
        422,
        "INVALID_PERIOD",
        "La date de début doit précéder la date de fin",
        details={"start": str(start), "end": str(end)},
    )
