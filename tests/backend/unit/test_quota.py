"""
Unit tests for services.quota module.
Tests plan resolution, counting and limit decisions against a real database.
"""
import uuid
from unittest.mock import AsyncMock, patch

import pytest
from tortoise.exceptions import OperationalError

from app.core.bootstrap import DEFAULT_PLANS, ensure_default_plans
from app.core.errors import InternalError, QuotaExceededError
from app.models import Collection, Plan, Product, User
from app.services.quota import ResourceKind, check_limit, enforce_limit, is_within_limit


pytestmark = pytest.mark.asyncio


async def make_user(plan: Plan | None = None) -> User:
    suffix = uuid.uuid4().hex[:8]
    return await User.create(
        username=f"store{suffix}",
        email=f"{suffix}@example.com",
        number=f"11{uuid.uuid4().int % 10**9:09d}",
        password_hash="x",
        plan=plan,
    )


@pytest.mark.parametrize(
    "limit, count, expected",
    [(2, 0, True), (2, 1, True), (2, 2, False), (2, 5, False), (-1, 10_000, True), (0, 0, False)],
)
async def test_is_within_limit(limit, count, expected):
    assert is_within_limit(limit, count) is expected


async def test_user_without_plan_gets_free_tier(db):
    user = await make_user()
    decision = await check_limit(user.id, ResourceKind.COLLECTION)
    assert decision.allowed is True
    assert decision.plan.name == "free"
    assert decision.limit == 2
    assert decision.current_count == 0


async def test_collection_limit_reached(db):
    user = await make_user()
    await Collection.create(owner_id=user.id, name="A")
    await Collection.create(owner_id=user.id, name="B")

    decision = await check_limit(user.id, ResourceKind.COLLECTION)
    assert decision.allowed is False
    assert decision.current_count == 2

    with pytest.raises(QuotaExceededError) as exc:
        await enforce_limit(user.id, ResourceKind.COLLECTION)
    detail = exc.value.to_detail()
    assert detail["code"] == "QUOTA_EXCEEDED"
    assert detail["limit"] == 2
    assert detail["current_count"] == 2
    assert detail["plan_name"] == "Grátis"
    assert detail["upgrade_required"] is True


async def test_counts_are_per_owner(db):
    user = await make_user()
    other = await make_user()
    for i in range(3):
        await Product.create(owner_id=other.id, name=f"P{i}", price=1)

    decision = await check_limit(user.id, ResourceKind.PRODUCT)
    assert decision.current_count == 0
    assert decision.allowed is True


async def test_unlimited_plan_always_allows(db):
    enterprise = await Plan.get(name="enterprise")
    user = await make_user(enterprise)
    for i in range(12):
        await Product.create(owner_id=user.id, name=f"P{i}", price=1)

    decision = await enforce_limit(user.id, ResourceKind.PRODUCT)
    assert decision.allowed is True
    assert decision.limit == -1


async def test_removed_plan_falls_back_to_free(db):
    plus = await Plan.get(name="plus")
    user = await make_user(plus)
    # Catalog without "plus": the row is deleted and the user's FK nulled
    result = await ensure_default_plans([p for p in DEFAULT_PLANS if p["name"] != "plus"])
    # Only plan rows are counted, not the users whose plan was nulled
    assert result == {"created": 0, "updated": len(DEFAULT_PLANS) - 1, "removed": 1}
    assert await Plan.all().count() == len(DEFAULT_PLANS) - 1
    assert (await User.get(id=user.id)).plan_id is None

    decision = await check_limit(user.id, ResourceKind.COLLECTION)
    assert decision.plan.name == "free"


async def test_bootstrap_refreshes_existing_plans(db):
    await Plan.filter(name="basic").update(max_products=1, is_active=False)
    result = await ensure_default_plans()
    assert result == {"created": 0, "updated": len(DEFAULT_PLANS), "removed": 0}
    basic = await Plan.get(name="basic")
    assert basic.max_products == 30
    assert basic.is_active is True


async def test_store_failure_is_internal_error_not_denial(db):
    user = await make_user()
    failing_count = AsyncMock(side_effect=OperationalError("database is locked"))
    with patch("app.services.quota.count_owned", failing_count):
        with pytest.raises(InternalError) as exc:
            await check_limit(user.id, ResourceKind.COLLECTION)
    assert not isinstance(exc.value, QuotaExceededError)
    assert exc.value.status_code == 500
    assert exc.value.message == "Could not verify plan limits"
