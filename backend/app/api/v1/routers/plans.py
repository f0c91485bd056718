# app/api/v1/routers/plans.py
from typing import List

from fastapi import APIRouter, Depends

from app.api.v1.deps import get_current_user_id, get_payment_gateway
from app.schemas.plan import (
    PaymentIntentIn,
    PaymentIntentOut,
    PlanOut,
    UpgradePlanIn,
    UpgradePlanOut,
    UserPlanInfoOut,
)
from app.services import plans as service
from app.services.payments import PaymentGateway

router = APIRouter(tags=["plans"])

@router.get("/public/plans", response_model=List[PlanOut])
async def list_plans():
    """Active plans, cheapest first."""
    return [service.plan_to_dict(p) for p in await service.list_active_plans()]

@router.get("/protected/my-plan", response_model=UserPlanInfoOut)
async def my_plan(user_id: int = Depends(get_current_user_id)):
    """
    The caller's plan with current product/collection counts and whether
    another product or collection may be created.
    """
    return await service.get_user_plan_info(user_id)

@router.post("/protected/upgrade-plan", response_model=UpgradePlanOut)
async def upgrade_plan(body: UpgradePlanIn, user_id: int = Depends(get_current_user_id)):
    """
    Switch the caller to another active plan.

    Raises:
        404: plan missing or inactive
    """
    plan = await service.upgrade_plan(user_id, body.plan_id)
    return {"message": "Plan updated successfully", "plan": service.plan_to_dict(plan)}

@router.post("/protected/create-payment-intent", response_model=PaymentIntentOut)
async def create_payment_intent(
    body: PaymentIntentIn,
    user_id: int = Depends(get_current_user_id),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Create a payment intent at the payment processor and return its client
    secret.

    Raises:
        502: the processor rejected the request
        503: no processor configured
    """
    client_secret = await gateway.create_payment_intent(body.amount, body.currency)
    return {"clientSecret": client_secret}
