# app/api/v1/routers/products.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status

from app.api.v1.deps import get_current_user_id, get_image_storage, parse_id
from app.schemas.catalog import ProductOut
from app.services import products as service
from app.services.storage import ImageStorage

router = APIRouter(tags=["products"])

def _pick_uploads(images: Optional[List[UploadFile]], image: Optional[UploadFile]) -> list[UploadFile]:
    """`images` (many) wins over `image` (single); empty file parts are skipped."""
    many = [f for f in (images or []) if f is not None and f.filename]
    if many:
        return many
    if image is not None and image.filename:
        return [image]
    return []

def _parse_image_ids(raw_ids: List[str]) -> list[int]:
    # Non-numeric ids are ignored rather than rejected
    return [int(v) for v in raw_ids if v and v.strip().isascii() and v.strip().isdigit()]

# ===== Protected =====
@router.post("/protected/products", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def create_product(
    name: str = Form(..., min_length=1, max_length=120),
    price: float = Form(..., ge=0),
    description: str = Form(default="", max_length=5000),
    collection_id: Optional[str] = Form(default=None),
    images: Optional[List[UploadFile]] = File(default=None),
    image: Optional[UploadFile] = File(default=None),
    user_id: int = Depends(get_current_user_id),
    storage: ImageStorage = Depends(get_image_storage),
):
    """
    Create a product (multipart form).

    Images may be sent as several `images` parts or one `image` part. The
    first stored image becomes the cover (`image_url`).

    Raises:
        400: invalid form, foreign/missing collection_id, rejected image
        403: QUOTA_EXCEEDED with limit, current_count and plan_name
    """
    p = await service.create_product(
        owner_id=user_id,
        name=name,
        description=description,
        price=price,
        storage=storage,
        collection_id=parse_id(collection_id, "collection_id"),
        uploads=_pick_uploads(images, image),
    )
    return service.product_to_dict(p)

@router.get("/protected/products", response_model=List[ProductOut])
async def list_my_products(user_id: int = Depends(get_current_user_id)):
    """The authenticated user's products, newest first."""
    rows = await service.list_my_products(user_id)
    return [service.product_to_dict(p) for p in rows]

@router.put("/protected/products/{product_id}", response_model=ProductOut)
async def update_product(
    product_id: int,
    name: Optional[str] = Form(default=None, min_length=1, max_length=120),
    price: Optional[float] = Form(default=None, ge=0),
    description: Optional[str] = Form(default=None, max_length=5000),
    collection_id: Optional[str] = Form(default=None),
    delete_image_ids: List[str] = Form(default=[]),
    images: Optional[List[UploadFile]] = File(default=None),
    image: Optional[UploadFile] = File(default=None),
    user_id: int = Depends(get_current_user_id),
    storage: ImageStorage = Depends(get_image_storage),
):
    """
    Partially update a product (multipart form).

    Only fields present in the form change. `delete_image_ids` removes images
    of this product, new `images`/`image` parts are appended after the last
    position, and the cover image is recomputed afterwards.

    Raises:
        400: nothing to update, foreign collection_id, rejected image
        404: product missing or not owned by the caller
    """
    changes = {
        "name": name,
        "description": description,
        "price": price,
        "collection_id": parse_id(collection_id, "collection_id"),
    }
    p = await service.update_product(
        owner_id=user_id,
        product_id=product_id,
        changes=changes,
        storage=storage,
        uploads=_pick_uploads(images, image),
        delete_image_ids=_parse_image_ids(delete_image_ids),
    )
    return service.product_to_dict(p)

@router.delete(
    "/protected/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_product(
    product_id: int,
    user_id: int = Depends(get_current_user_id),
    storage: ImageStorage = Depends(get_image_storage),
):
    """
    Delete a product and its images.

    Raises:
        404: product missing or not owned by the caller
    """
    image_urls = await service.delete_product(user_id, product_id)
    storage.delete_many(image_urls)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# ===== Public =====
@router.get("/public/products", response_model=List[ProductOut])
async def list_public_products(
    owner_id: Optional[str] = Query(default=None),
    collection_id: Optional[str] = Query(default=None),
):
    """
    Products of every store, newest first, optionally filtered by owner
    and/or collection.

    Raises:
        400: a filter that is not numeric
    """
    rows = await service.list_products(
        owner_id=parse_id(owner_id, "owner_id"),
        collection_id=parse_id(collection_id, "collection_id"),
    )
    return [service.product_to_dict(p) for p in rows]
