# app/models/plan.py
from tortoise import fields, models

UNLIMITED = -1

class Plan(models.Model):
    """
    Subscription tier.

    The rows are not user data: the catalog in app.core.bootstrap is
    reconciled into this table on every startup.
    - max_products / max_collections: ceilings, UNLIMITED (-1) for no limit
    - features: list of marketing bullet strings
    """
    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=32, unique=True)
    display_name = fields.CharField(max_length=64)
    description = fields.CharField(max_length=255)
    price = fields.DecimalField(max_digits=10, decimal_places=2, default=0)
    max_products = fields.IntField(default=10)
    max_collections = fields.IntField(default=5)
    features = fields.JSONField(default=list)
    is_active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "plans"
