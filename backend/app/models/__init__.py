# app/models/__init__.py
"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User: User account and authentication model
- Plan: Subscription tier with quota ceilings
- Collection: Owned showcase of products, optionally shared by token
- Product: Catalog item (optionally inside a Collection)
- ProductImage: Ordered image attached to a Product
"""
from .user import User
from .plan import Plan
from .collection import Collection
from .product import Product, ProductImage
