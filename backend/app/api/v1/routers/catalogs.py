# app/api/v1/routers/catalogs.py
from fastapi import APIRouter

from app.schemas.catalog import PublicCatalogOut
from app.services.collections import collection_to_dict
from app.services.products import product_to_dict
from app.services.sharing import resolve_public_catalog

router = APIRouter(prefix="/public/catalogs", tags=["catalogs"])

@router.get("/{token}", response_model=PublicCatalogOut)
async def get_public_catalog(token: str):
    """
    Anonymous read access to a shared collection.

    Returns the collection and all of its products (newest first) for a
    valid share token. Unknown or malformed tokens are a 404.
    """
    collection, products = await resolve_public_catalog(token)
    return {
        "collection": collection_to_dict(collection),
        "products": [product_to_dict(p) for p in products],
    }
