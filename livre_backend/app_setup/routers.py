"""
Registre central des routers.
- Shipping: /quote-options, /quote-price
- Payments: /create-checkout, /webhook
- Health: /health, /health/fulfillment
"""
from fastapi import FastAPI

from livre_backend.shipping import views as shipping_views
from livre_backend.payments import views as payments_views
from livre_backend.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(shipping_views.router)
    app.include_router(payments_views.router)
    # Health & monitoring
    app.include_router(health_router)
