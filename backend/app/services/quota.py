"""
Quota Engine

Decides whether a user may create another product or collection under their
plan. Plan ceilings of -1 mean unlimited.

The check and the later insert are not serialized: two concurrent creations
near the ceiling can both pass. That relaxed guarantee is accepted here.
"""
import logging
from dataclasses import dataclass
from enum import Enum

from tortoise.exceptions import BaseORMException

from app.core.bootstrap import FREE_PLAN_NAME
from app.core.errors import InternalError, QuotaExceededError
from app.models.collection import Collection
from app.models.plan import Plan, UNLIMITED
from app.models.product import Product
from app.models.user import User

logger = logging.getLogger("uvicorn.error")


class ResourceKind(str, Enum):
    PRODUCT = "product"
    COLLECTION = "collection"


@dataclass
class QuotaDecision:
    """Outcome of a quota check"""
    allowed: bool
    plan: Plan
    current_count: int
    kind: ResourceKind

    @property
    def limit(self) -> int:
        return _limit_for(self.plan, self.kind)


def _limit_for(plan: Plan, kind: ResourceKind) -> int:
    return plan.max_products if kind is ResourceKind.PRODUCT else plan.max_collections


def is_within_limit(limit: int, current_count: int) -> bool:
    return limit == UNLIMITED or current_count < limit


async def resolve_plan(user_id: int) -> Plan:
    """
    Plan assigned to the user, or the free tier when none is set.

    Raises:
    - InternalError: the free tier is missing from the plans table
    """
    user = await User.get_or_none(id=user_id).prefetch_related("plan")
    if user is not None and user.plan is not None:
        return user.plan
    plan = await Plan.get_or_none(name=FREE_PLAN_NAME)
    if plan is None:
        raise InternalError("Plan catalog is not initialized")
    return plan


async def count_owned(user_id: int, kind: ResourceKind) -> int:
    if kind is ResourceKind.PRODUCT:
        return await Product.filter(owner_id=user_id).count()
    return await Collection.filter(owner_id=user_id).count()


async def check_limit(user_id: int, kind: ResourceKind) -> QuotaDecision:
    """
    Compute whether `user_id` may create one more resource of `kind`.

    Store failures raise InternalError, which is never to be read as a denial.
    """
    try:
        plan = await resolve_plan(user_id)
        current = await count_owned(user_id, kind)
    except BaseORMException as e:
        logger.exception("[quota] could not verify plan limits for user=%s", user_id)
        raise InternalError("Could not verify plan limits") from e
    return QuotaDecision(
        allowed=is_within_limit(_limit_for(plan, kind), current),
        plan=plan,
        current_count=current,
        kind=kind,
    )


async def enforce_limit(user_id: int, kind: ResourceKind) -> QuotaDecision:
    """check_limit, raising QuotaExceededError (403) when the ceiling is reached"""
    decision = await check_limit(user_id, kind)
    if not decision.allowed:
        logger.info("[quota] %s limit reached for user=%s plan=%s (%d/%d)",
                    kind.value, user_id, decision.plan.name, decision.current_count, decision.limit)
        raise QuotaExceededError(
            f"{kind.value.capitalize()} limit reached",
            limit=decision.limit,
            current_count=decision.current_count,
            plan_name=decision.plan.display_name,
            upgrade_required=True,
        )
    return decision
