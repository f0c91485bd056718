# app/models/user.py
"""
Database model for users.
Represents a store owner account: login identity, contact number, hashed
password and the subscription plan that bounds how much they can create.
"""
from tortoise import fields, models

class User(models.Model):
    """
    User database model.

    Relationships:
    - Belongs to a Plan (nullable; null means the free tier)
    - Has many Collections (related_name="collections")
    - Has many Products (related_name="products")

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Username, email and number are each unique across all users
    """
    id = fields.IntField(pk=True)
    username = fields.CharField(max_length=50, unique=True, index=True)  # Store name shown to buyers
    email = fields.CharField(max_length=254, unique=True, index=True)  # Login identifier, stored lowercased
    number = fields.CharField(max_length=16, unique=True)  # Phone number, digits only
    password_hash = fields.CharField(max_length=255)
    plan = fields.ForeignKeyField(
        "models.Plan",
        related_name="users",
        null=True,
        on_delete=fields.SET_NULL,
    )  # Removing a plan from the catalog drops its users back to the free tier
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"
