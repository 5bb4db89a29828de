"""
Middlewares transverses de l'application.
- register_basic_middlewares: CORS pour le front du site.
- register_preflight_middleware: répond 204 à tout OPTIONS avec les en-têtes CORS.
Notes:
- L'ordre d'ajout est important: le middleware de preflight est ajouté en dernier
  pour s'exécuter en premier dans la pile.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from livre_backend.config import CORS_ORIGINS

ALLOWED_METHODS = ["POST", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type"]

def _allowed_origin(request: Request) -> str:
    origin = request.headers.get("origin") or ""
    if "*" in CORS_ORIGINS:
        return "*"
    if origin in CORS_ORIGINS:
        return origin
    return CORS_ORIGINS[0] if CORS_ORIGINS else ""

def register_basic_middlewares(app: FastAPI) -> None:
    """
    CORSMiddleware: autorise les origines définies (SITE_URL / CORS_ORIGINS) sur POST.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
    )

def register_preflight_middleware(app: FastAPI) -> None:
    """
    Preflight simplifié: tout OPTIONS reçoit 204 + en-têtes CORS, sans passer par le routing
    (sinon FastAPI renverrait 405 sur les routes POST-only).
    """
    @app.middleware("http")
    async def preflight(request: Request, call_next):
        if request.method != "OPTIONS":
            return await call_next(request)
        return Response(
            status_code=204,
            headers={
                "Access-Control-Allow-Origin": _allowed_origin(request),
                "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
                "Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS),
            },
        )
