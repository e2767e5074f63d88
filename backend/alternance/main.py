from __future__ import annotations

import time
import uuid
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from alternance.api.router import api_router
from alternance.core.settings import settings
from alternance.core.logging import setup_logging
from alternance.core.errors import error_payload, AppHTTPException
from alternance.core.request_id import REQUEST_ID_HEADER, set_request_id, get_request_id, ensure_request_id

"""
Application FastAPI (entrypoint).

Rôle (fonctionnel) :
- Configure l’application (settings, CORS, middlewares, routers).
- Centralise l’observabilité :
  - request_id propagé (X-Request-Id)
  - logs structurés JSON (timing, status, client_ip)
  - seuil de “slow request”
- Uniformise les erreurs côté client (format error_payload).

Ce fichier ne contient pas de logique métier :
- Le moteur de risque et son orchestration sont dans alternance.services
- Les routes sont dans alternance.api
- Les composants transverses sont dans alternance.core
"""


class UTF8JSONResponse(JSONResponse):
    """Réponse JSON avec charset UTF-8 explicite (libellés français des facteurs et interventions)."""
    media_type = "application/json; charset=utf-8"


# --- Logging (niveau depuis .env si dispo) ---
setup_logging(settings.LOG_LEVEL)

# logger principal projet
log = logging.getLogger("alternance")

# logger dédié observabilité HTTP (séparé du métier)
http_log = logging.getLogger("alternance.http")

# seuil slow request (ms)
SLOW_MS = int(settings.SLOW_REQUEST_MS)


def _split_origins(value: str) -> list[str]:
    """Parse une liste d’origines CORS depuis une string 'a,b,c'."""
    if not value:
        return []
    return [o.strip() for o in value.split(",") if o.strip()]


def _rid(request: Request) -> str:
    return getattr(request.state, "request_id", None) or get_request_id() or str(uuid.uuid4())


app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    default_response_class=UTF8JSONResponse,
)

# --- CORS ---
origins = _split_origins(settings.CORS_ORIGINS)

# Origines par défaut en dev (Vite + React legacy)
default_dev_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or default_dev_origins,
    allow_credentials=False,  # pas de cookies (API stateless)
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "X-API-Key",
        REQUEST_ID_HEADER,
    ],
)

# --- Routers ---
app.include_router(api_router)


# --- Middleware observabilité : request_id + timing + logs structurés ---
@app.middleware("http")
async def request_observability(request: Request, call_next):
    # Prend le header s’il existe, sinon génère un UUID
    rid = ensure_request_id(request.headers.get(REQUEST_ID_HEADER))
    request.state.request_id = rid

    start = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        duration_ms = int((time.perf_counter() - start) * 1000)

        # Toujours renvoyer le request id au client
        if response is not None:
            response.headers[REQUEST_ID_HEADER] = rid

        # Slow request => WARNING, sinon INFO
        level = logging.WARNING if duration_ms >= SLOW_MS else logging.INFO
        http_log.log(
            level,
            "request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": getattr(response, "status_code", None),
                "duration_ms": duration_ms,
                "client_ip": request.client.host if request.client else None,
            },
        )

        # Reset contextvar (propre en cas de réutilisation event loop / worker)
        set_request_id(None)


# --- Error handlers : format standard, pas de stacktrace côté client ---
@app.exception_handler(AppHTTPException)
async def app_http_exception_handler(request: Request, exc: AppHTTPException):
    """Erreurs applicatives (AppHTTPException) -> payload standard."""
    detail = exc.detail if isinstance(exc.detail, dict) else {}

    code = str(detail.get("code", "HTTP_ERROR"))
    message = str(detail.get("message", "Erreur HTTP"))
    details = detail.get("details", None)

    return UTF8JSONResponse(
        status_code=exc.status_code,
        content=error_payload(code=code, message=message, status=exc.status_code, request_id=_rid(request), details=details),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Erreurs HTTP natives (404, 405, etc.) -> payload standard."""
    if isinstance(exc.detail, dict):
        code = str(exc.detail.get("code", "HTTP_ERROR"))
        message = str(exc.detail.get("message", "Erreur HTTP"))
        details = exc.detail.get("details", None)
    else:
        code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
        message = str(exc.detail)
        details = None

    return UTF8JSONResponse(
        status_code=exc.status_code,
        content=error_payload(code=code, message=message, status=exc.status_code, request_id=_rid(request), details=details),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Erreurs de validation Pydantic -> 422 + details=exc.errors()."""
    return UTF8JSONResponse(
        status_code=422,
        content=error_payload(
            code="VALIDATION_ERROR",
            message="Requête invalide",
            status=422,
            request_id=_rid(request),
            details=jsonable_encoder(exc.errors()),
        ),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Fallback : toute exception non gérée -> 500 + log serveur."""
    log.exception("Unhandled error: %s", exc)

    return UTF8JSONResponse(
        status_code=500,
        content=error_payload(
            code="INTERNAL_ERROR",
            message="Erreur interne du serveur",
            status=500,
            request_id=_rid(request),
        ),
    )
