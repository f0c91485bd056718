# app/schemas/catalog.py
"""
Pydantic schemas for collections, products and public catalogs.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

class CollectionCreateIn(BaseModel):
    """Request model for creating a collection"""
    name: str = Field(min_length=1, max_length=120)
    description: str = Field(default="", max_length=1000)

class CollectionUpdateIn(BaseModel):
    """
    Request model for a partial collection update.
    Only fields present in the body are written; an empty body is rejected.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=1000)

class PublicCollectionOut(BaseModel):
    """Collection as exposed by the public owner listing (no share token)"""
    id: int
    owner_id: int
    name: str
    description: str
    created_at: datetime
    updated_at: datetime

class CollectionOut(PublicCollectionOut):
    """Collection as seen by its owner"""
    share_token: Optional[str] = None  # Null until the collection is shared

class ProductImageOut(BaseModel):
    id: int
    product_id: int
    image_url: str
    position: int  # Lowest position is the cover image
    created_at: datetime

class ProductOut(BaseModel):
    id: int
    owner_id: int
    collection_id: Optional[int] = None
    name: str
    description: str
    price: float
    image_url: Optional[str] = None  # Cover image URL
    images: List[ProductImageOut] = []
    created_at: datetime
    updated_at: datetime

class ShareOut(BaseModel):
    share_token: str

class PublicCatalogOut(BaseModel):
    """Shared collection with all of its products, newest first"""
    collection: CollectionOut
    products: List[ProductOut]
