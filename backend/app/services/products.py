"""
Product Service

Lifecycle of products and their images. Like collections, every mutation is
scoped to id AND owner_id and a foreign product is reported as not found.

Image positions only ever grow: new images continue after the current highest
position, and the lowest remaining position is the cover mirrored into
Product.image_url.
"""
import logging
from typing import Iterable, Optional

from fastapi import UploadFile
from tortoise import timezone
from tortoise.transactions import in_transaction

from app.core.errors import NotFoundError, ValidationError
from app.models.collection import Collection
from app.models.product import Product, ProductImage
from app.services.quota import ResourceKind, enforce_limit
from app.services.storage import ImageStorage

logger = logging.getLogger("uvicorn.error")

NEWEST_FIRST = ("-created_at", "-id")
UPDATABLE_FIELDS = ("name", "description", "price", "collection_id")


def image_to_dict(img: ProductImage) -> dict:
    return {
        "id": img.id,
        "product_id": img.product_id,
        "image_url": img.image_url,
        "position": img.position,
        "created_at": img.created_at,
    }


def product_to_dict(p: Product) -> dict:
    """Serialize a product; its `images` relation must already be fetched."""
    images = sorted(p.images, key=lambda i: (i.position, i.id))
    return {
        "id": p.id,
        "owner_id": p.owner_id,
        "collection_id": p.collection_id,
        "name": p.name,
        "description": p.description,
        "price": p.price,
        "image_url": p.image_url,
        "images": [image_to_dict(i) for i in images],
        "created_at": p.created_at,
        "updated_at": p.updated_at,
    }


async def _ensure_collection_owned(owner_id: int, collection_id: int) -> None:
    # A foreign or missing collection is a bad association, not a missing product
    if not await Collection.filter(id=collection_id, owner_id=owner_id).exists():
        raise ValidationError("Invalid collection_id")


async def _store_uploads(uploads: Iterable[UploadFile], storage: ImageStorage) -> list[str]:
    """Save every upload; if one is rejected, the ones already written are removed."""
    urls: list[str] = []
    try:
        for upload in uploads:
            urls.append(await storage.save(upload))
    except Exception:
        storage.delete_many(urls)
        raise
    return urls


async def get_owned_product(owner_id: int, product_id: int) -> Product:
    p = await Product.get_or_none(id=product_id, owner_id=owner_id).prefetch_related("images")
    if p is None:
        raise NotFoundError("Product not found")
    return p


async def create_product(
    owner_id: int,
    name: str,
    description: str,
    price,
    storage: ImageStorage,
    collection_id: Optional[int] = None,
    uploads: Iterable[UploadFile] = (),
) -> Product:
    """
    Create a product after the plan quota check.

    Raises:
    - QuotaExceededError: the plan's product ceiling is reached
    - ValidationError: collection not owned by the caller, or a rejected image
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required")
    await enforce_limit(owner_id, ResourceKind.PRODUCT)
    if collection_id is not None:
        await _ensure_collection_owned(owner_id, collection_id)

    urls = await _store_uploads(uploads, storage)
    try:
        async with in_transaction() as conn:
            product = await Product.create(
                owner_id=owner_id,
                collection_id=collection_id,
                name=name,
                description=description or "",
                price=price,
                image_url=urls[0] if urls else None,
                using_db=conn,
            )
            for position, url in enumerate(urls):
                await ProductImage.create(product_id=product.id, image_url=url, position=position, using_db=conn)
    except Exception:
        storage.delete_many(urls)
        raise

    await product.fetch_related("images")
    return product


async def list_products(owner_id: Optional[int] = None, collection_id: Optional[int] = None) -> list[Product]:
    """Public listing, each filter independently optional"""
    qs = Product.all()
    if owner_id is not None:
        qs = qs.filter(owner_id=owner_id)
    if collection_id is not None:
        qs = qs.filter(collection_id=collection_id)
    return await qs.order_by(*NEWEST_FIRST).prefetch_related("images")


async def list_my_products(owner_id: int) -> list[Product]:
    return await list_products(owner_id=owner_id)


async def update_product(
    owner_id: int,
    product_id: int,
    changes: dict,
    storage: ImageStorage,
    uploads: Iterable[UploadFile] = (),
    delete_image_ids: Iterable[int] = (),
) -> Product:
    """
    Partial update of a product and its images.

    Ownership and the collection association are checked before anything is
    written; all row changes then happen in one transaction. The cover image
    is recomputed after image deletions and additions even when no other
    field changed.

    Raises:
    - ValidationError: nothing to update, foreign collection, rejected image
    - NotFoundError: product missing or owned by someone else
    """
    changes = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS and v is not None}
    uploads = list(uploads)
    delete_image_ids = list(delete_image_ids)
    if not changes and not uploads and not delete_image_ids:
        raise ValidationError("No fields to update")
    if "name" in changes:
        changes["name"] = changes["name"].strip()
        if not changes["name"]:
            raise ValidationError("Name is required")

    product = await get_owned_product(owner_id, product_id)
    if "collection_id" in changes:
        await _ensure_collection_owned(owner_id, changes["collection_id"])

    new_urls = await _store_uploads(uploads, storage)
    removed_urls: list[str] = []
    try:
        async with in_transaction() as conn:
            if delete_image_ids:
                # Scoped by product too, so ids of other products' images are ignored
                doomed = ProductImage.filter(id__in=delete_image_ids, product_id=product.id).using_db(conn)
                removed_urls = list(await doomed.values_list("image_url", flat=True))
                await doomed.delete()

            last = await ProductImage.filter(product_id=product.id).using_db(conn).order_by("-position").first()
            next_position = last.position + 1 if last else 0
            for offset, url in enumerate(new_urls):
                await ProductImage.create(
                    product_id=product.id, image_url=url, position=next_position + offset, using_db=conn
                )

            cover = await ProductImage.filter(product_id=product.id).using_db(conn).order_by("position", "id").first()
            changes["image_url"] = cover.image_url if cover else None

            affected = await Product.filter(id=product.id, owner_id=owner_id).using_db(conn).update(
                updated_at=timezone.now(), **changes
            )
            if affected == 0:
                raise NotFoundError("Product not found")
    except Exception:
        storage.delete_many(new_urls)
        raise

    storage.delete_many(removed_urls)
    return await get_owned_product(owner_id, product_id)


async def delete_product(owner_id: int, product_id: int) -> list[str]:
    """
    Delete a product's images and then the product itself, in one transaction.

    Returns the deleted image URLs so stored files can be removed after commit.
    """
    async with in_transaction() as conn:
        product = await Product.filter(id=product_id, owner_id=owner_id).using_db(conn).first()
        if product is None:
            raise NotFoundError("Product not found")
        image_urls = await ProductImage.filter(product_id=product.id).using_db(conn).values_list("image_url", flat=True)
        await ProductImage.filter(product_id=product.id).using_db(conn).delete()
        await Product.filter(id=product.id, owner_id=owner_id).using_db(conn).delete()
    return list(image_urls)
