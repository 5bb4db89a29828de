"""
Gestionnaires d'exceptions.
- ShippingError (et sous-classes): {"detail": message} avec le status_code porté par la classe
  (400 pour les ValidationError, 500 sinon).
- HTTPException (405, 429, ...): handler FastAPI par défaut.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from livre_backend.shipping.errors import ShippingError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ShippingError)
    async def shipping_error_handler(request: Request, exc: ShippingError):
        status = getattr(exc, "status_code", 500)
        if status >= 500:
            logger.error("%s %s failed: %s: %s", request.method, request.url.path, type(exc).__name__, exc)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content={"detail": str(exc)})
