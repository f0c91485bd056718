"""
Plan Service

Public plan listing, the caller's usage against their plan, and plan changes.
"""
import logging

from app.core.errors import NotFoundError
from app.models.plan import Plan
from app.models.user import User
from app.services.quota import ResourceKind, count_owned, is_within_limit, resolve_plan

logger = logging.getLogger("uvicorn.error")


def plan_to_dict(p: Plan) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "display_name": p.display_name,
        "description": p.description,
        "price": p.price,
        "max_products": p.max_products,
        "max_collections": p.max_collections,
        "features": list(p.features or []),
        "is_active": p.is_active,
    }


async def list_active_plans() -> list[Plan]:
    return await Plan.filter(is_active=True).order_by("price", "id")


async def get_user_plan_info(user_id: int) -> dict:
    plan = await resolve_plan(user_id)
    product_count = await count_owned(user_id, ResourceKind.PRODUCT)
    collection_count = await count_owned(user_id, ResourceKind.COLLECTION)
    return {
        "plan": plan_to_dict(plan),
        "product_count": product_count,
        "collection_count": collection_count,
        "can_create_product": is_within_limit(plan.max_products, product_count),
        "can_create_collection": is_within_limit(plan.max_collections, collection_count),
    }


async def upgrade_plan(user_id: int, plan_id: int) -> Plan:
    """
    Assign an active plan to the user.

    Existing products and collections are kept even if the new plan's
    ceilings are lower; only further creation is blocked.
    """
    plan = await Plan.get_or_none(id=plan_id, is_active=True)
    if plan is None:
        raise NotFoundError("Plan not found")
    affected = await User.filter(id=user_id).update(plan_id=plan.id)
    if affected == 0:
        raise NotFoundError("User not found")
    logger.info("[plans] user=%s switched to plan=%s", user_id, plan.name)
    return plan
