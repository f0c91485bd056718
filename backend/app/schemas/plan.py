# app/schemas/plan.py
"""
Pydantic schemas for plan listing, usage and upgrades.
"""
from typing import List

from pydantic import BaseModel, Field

class PlanOut(BaseModel):
    id: int
    name: str
    display_name: str
    description: str
    price: float
    max_products: int  # -1 means unlimited
    max_collections: int  # -1 means unlimited
    features: List[str]
    is_active: bool

class UserPlanInfoOut(BaseModel):
    """The caller's plan together with current usage"""
    plan: PlanOut
    product_count: int
    collection_count: int
    can_create_product: bool
    can_create_collection: bool

class UpgradePlanIn(BaseModel):
    plan_id: int

class UpgradePlanOut(BaseModel):
    message: str
    plan: PlanOut

class PaymentIntentIn(BaseModel):
    amount: int = Field(gt=0)  # Smallest currency unit (e.g. cents)
    currency: str = Field(min_length=3, max_length=3)

class PaymentIntentOut(BaseModel):
    clientSecret: str
