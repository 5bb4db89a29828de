"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (ex: gunicorn + uvicorn workers) importe `livre_backend.asgi:app`.
- Toute la configuration FastAPI est centralisée dans app_setup.create_app.
"""

from livre_backend.app_setup import create_app

app = create_app()
