# app/models/collection.py
"""
Database model for collections ("showcases").
A named grouping of one owner's products that can be exposed publicly
through an opaque share token.
"""
from tortoise import fields, models

class Collection(models.Model):
    """
    Collection database model.

    Relationships:
    - Belongs to a User (owner)
    - Has many Products (related_name="products" in Product model)

    share_token is null until the owner shares the collection; once set it
    never changes.
    """
    id = fields.IntField(pk=True)
    owner = fields.ForeignKeyField("models.User", related_name="collections", on_delete=fields.CASCADE)
    name = fields.CharField(max_length=120)
    description = fields.TextField(default="")
    share_token = fields.CharField(max_length=64, unique=True, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "collections"
