from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from livre_backend.payments.repository import FulfillmentLedger, get_fulfillment_ledger
from livre_backend.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/fulfillment")
def health_fulfillment(
    request: Request,
    limit: int = 20,
    ledger: FulfillmentLedger = Depends(get_fulfillment_ledger),
):
    """
    État du registre d'expédition pour le suivi opérateur:
    disponibilité Redis, nombre de dead letters et les plus récentes.
    """
    info = ledger.health()
    info["latest"] = ledger.dead_letters(limit=min(max(limit, 1), 100)) if info.get("ready") else []
    info["rate_limit"] = rate_limit_health_info(request)
    return JSONResponse(info, status_code=200 if info.get("ready") else 503)
