"""
Factory d'application pour les entrypoints (ex: livre_backend.asgi).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from fastapi import FastAPI

from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_preflight_middleware
from .exception_handlers import register_exception_handlers
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - CORS puis preflight (ajouté en dernier, exécuté en premier)
      - gestionnaires d'exceptions
      - routers shipping, payments et health
    """
    app = FastAPI(title="Livre backend", lifespan=lifespan)
    register_basic_middlewares(app)
    register_preflight_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
