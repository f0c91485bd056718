# app/api/v1/routers/collections.py
from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from app.api.v1.deps import get_current_user_id, get_image_storage, parse_id
from app.schemas.catalog import (
    CollectionCreateIn,
    CollectionOut,
    CollectionUpdateIn,
    PublicCollectionOut,
    ShareOut,
)
from app.services import collections as service
from app.services.sharing import share_collection
from app.services.storage import ImageStorage

router = APIRouter(tags=["collections"])

# ===== Protected =====
@router.post("/protected/collections", response_model=CollectionOut, status_code=status.HTTP_201_CREATED)
async def create_collection(body: CollectionCreateIn, user_id: int = Depends(get_current_user_id)):
    """
    Create a collection for the authenticated user.

    Raises:
        400: invalid body
        403: QUOTA_EXCEEDED with limit, current_count and plan_name
    """
    c = await service.create_collection(user_id, body.name, body.description)
    return service.collection_to_dict(c)

@router.get("/protected/collections", response_model=List[CollectionOut])
async def list_my_collections(user_id: int = Depends(get_current_user_id)):
    """The authenticated user's collections, newest first."""
    rows = await service.list_my_collections(user_id)
    return [service.collection_to_dict(c) for c in rows]

@router.put("/protected/collections/{collection_id}", response_model=CollectionOut)
async def update_collection(
    collection_id: int,
    body: CollectionUpdateIn,
    user_id: int = Depends(get_current_user_id),
):
    """
    Partially update a collection.

    Raises:
        400: no field present in the body
        404: collection missing or not owned by the caller
    """
    c = await service.update_collection(user_id, collection_id, body.model_dump(exclude_unset=True))
    return service.collection_to_dict(c)

@router.delete(
    "/protected/collections/{collection_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_collection(
    collection_id: int,
    user_id: int = Depends(get_current_user_id),
    storage: ImageStorage = Depends(get_image_storage),
):
    """
    Delete a collection and every product of the caller inside it.

    Raises:
        404: collection missing or not owned by the caller (nothing deleted)
    """
    image_urls = await service.delete_collection(user_id, collection_id)
    storage.delete_many(image_urls)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/protected/collections/{collection_id}/share", response_model=ShareOut)
async def share(collection_id: int, user_id: int = Depends(get_current_user_id)):
    """
    Return the collection's share token, creating it on the first call.
    Repeated calls return the same token.
    """
    token = await share_collection(user_id, collection_id)
    return {"share_token": token}

# ===== Public =====
@router.get("/public/collections", response_model=List[PublicCollectionOut])
async def list_public_collections(owner_id: str | None = Query(default=None)):
    """
    All collections of `owner_id`, newest first. No authentication.

    Raises:
        400: owner_id missing or not numeric
    """
    rows = await service.list_collections_by_owner(parse_id(owner_id, "owner_id", required=True))
    return [service.collection_to_dict(c, include_token=False) for c in rows]
