"""Rates API router: public reads, admin reads, batch update, currency management."""

from typing import Annotated, Optional, Union

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from rateboard.api.dependencies import (
    enforce_capability,
    get_actor,
    get_audit_logger,
    get_rate_service,
    get_rbac,
    require_capability,
)
from rateboard.application.rate_service import RateService
from rateboard.domain.models.activity import ActivityAction
from rateboard.domain.schemas.currency import (
    ActiveStateRequest,
    AdminRateView,
    AdminRatesResponse,
    CurrencyCreateRequest,
    CurrencyResponse,
    CurrencyStats,
    HistoryView,
    RatesBatchRequest,
    RatesResponse,
    RatesUpdateResponse,
    RateView,
    SearchResponse,
    VisibilityRequest,
)
from rateboard.governance.audit_logger import AuditLogger
from rateboard.security.rbac import Actor, Capability, RBACService

router = APIRouter()


def _sees_hidden(actor: Actor, rbac: RBACService) -> bool:
    return rbac.authorize(actor, Capability.VIEW_ADMIN_RATES)


# Static paths are declared before /{code} so they are not captured as currency codes.


@router.get("", response_model=RatesResponse)
async def get_rates(
    rate_service: Annotated[RateService, Depends(get_rate_service)],
):
    """Public canonical map: active and visible currencies."""
    return RatesResponse(currencies=await rate_service.get_visible_rates())


@router.get("/admin", response_model=AdminRatesResponse)
async def get_admin_rates(
    actor: Annotated[Actor, Depends(require_capability(Capability.VIEW_ADMIN_RATES))],
    rate_service: Annotated[RateService, Depends(get_rate_service)],
):
    """Admin canonical map: every active currency, hidden ones included."""
    return AdminRatesResponse(currencies=await rate_service.get_all_rates())


@router.get("/stats", response_model=CurrencyStats)
async def get_stats(
    actor: Annotated[Actor, Depends(get_actor)],
    rbac: Annotated[RBACService, Depends(get_rbac)],
    rate_service: Annotated[RateService, Depends(get_rate_service)],
):
    return await rate_service.get_stats(include_hidden=_sees_hidden(actor, rbac))


@router.get("/search", response_model=SearchResponse)
async def search_rates(
    actor: Annotated[Actor, Depends(require_capability(Capability.VIEW_ADMIN_RATES))],
    rate_service: Annotated[RateService, Depends(get_rate_service)],
    q: Optional[str] = None,
    is_active: Optional[bool] = None,
    min_buy_rate: Optional[float] = None,
    max_buy_rate: Optional[float] = None,
    min_spread: Optional[float] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
):
    results = await rate_service.search(
        q,
        is_active=is_active,
        min_buy_rate=min_buy_rate,
        max_buy_rate=max_buy_rate,
        min_spread=min_spread,
        limit=limit,
    )
    return SearchResponse(results=results)


@router.post("", response_model=RatesUpdateResponse)
async def update_rates(
    body: RatesBatchRequest,
    actor: Annotated[
        Actor,
        Depends(require_capability(Capability.WRITE_RATES, ActivityAction.RATE_UPDATE)),
    ],
    rate_service: Annotated[RateService, Depends(get_rate_service)],
):
    """Batch update. All-or-nothing validation; on success returns the public canonical map."""
    currencies = await rate_service.update_rates(body.to_batch(), actor.actor_id)
    return RatesUpdateResponse(
        currencies=currencies,
        message="Currency rates updated successfully",
    )


@router.post("/currencies", response_model=CurrencyResponse, status_code=201)
async def create_currency(
    body: CurrencyCreateRequest,
    actor: Annotated[
        Actor,
        Depends(require_capability(Capability.MANAGE_CURRENCIES, ActivityAction.RATE_CREATE)),
    ],
    rate_service: Annotated[RateService, Depends(get_rate_service)],
):
    currency = await rate_service.create_currency(
        code=body.code,
        name=body.name,
        buy_rate=body.buy_rate,
        sell_rate=body.sell_rate,
        actor=actor.actor_id,
        is_visible=body.is_visible,
    )
    return CurrencyResponse(currency=currency, message="Currency created successfully")


@router.get("/{code}", response_model=Union[AdminRateView, RateView])
async def get_rate(
    code: str,
    actor: Annotated[Actor, Depends(get_actor)],
    rbac: Annotated[RBACService, Depends(get_rbac)],
    rate_service: Annotated[RateService, Depends(get_rate_service)],
):
    rate = await rate_service.get_rate(code, include_hidden=_sees_hidden(actor, rbac))
    if rate is None:
        return JSONResponse(status_code=404, content={"detail": "Currency not found"})
    return rate


@router.get("/{code}/history", response_model=HistoryView)
async def get_history(
    code: str,
    actor: Annotated[Actor, Depends(get_actor)],
    rbac: Annotated[RBACService, Depends(get_rbac)],
    rate_service: Annotated[RateService, Depends(get_rate_service)],
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
):
    return await rate_service.get_history(
        code, limit=limit, include_hidden=_sees_hidden(actor, rbac)
    )


@router.delete("/{code}", response_model=CurrencyResponse)
async def delete_currency(
    code: str,
    actor: Annotated[
        Actor,
        Depends(require_capability(Capability.MANAGE_CURRENCIES, ActivityAction.RATE_DELETE)),
    ],
    rate_service: Annotated[RateService, Depends(get_rate_service)],
):
    """Soft delete: the record stays, is_active becomes false."""
    currency = await rate_service.delete_currency(code, actor.actor_id)
    return CurrencyResponse(currency=currency, message="Currency deleted successfully")


@router.patch("/{code}/visibility", response_model=CurrencyResponse)
async def set_visibility(
    code: str,
    body: VisibilityRequest,
    actor: Annotated[
        Actor,
        Depends(
            require_capability(Capability.MANAGE_CURRENCIES, ActivityAction.VISIBILITY_TOGGLE)
        ),
    ],
    rate_service: Annotated[RateService, Depends(get_rate_service)],
):
    currency = await rate_service.set_visibility(code, body.is_visible, actor.actor_id)
    state = "visible" if body.is_visible else "hidden"
    return CurrencyResponse(currency=currency, message=f"Currency is now {state}")


@router.patch("/{code}/active", response_model=CurrencyResponse)
async def set_active(
    code: str,
    body: ActiveStateRequest,
    actor: Annotated[Actor, Depends(get_actor)],
    rbac: Annotated[RBACService, Depends(get_rbac)],
    audit_logger: Annotated[AuditLogger, Depends(get_audit_logger)],
    rate_service: Annotated[RateService, Depends(get_rate_service)],
):
    # The attempted action depends on the body, so the guard runs here.
    enforce_capability(
        actor,
        Capability.MANAGE_CURRENCIES,
        rbac,
        audit_logger,
        ActivityAction.RATE_RESTORE if body.is_active else ActivityAction.RATE_DELETE,
    )
    currency = await rate_service.set_active(code, body.is_active, actor.actor_id)
    state = "restored" if body.is_active else "deleted"
    return CurrencyResponse(currency=currency, message=f"Currency {state} successfully")
