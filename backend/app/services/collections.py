"""
Collection Service

Lifecycle of collections ("showcases"). Every mutation is scoped to
id AND owner_id, so a collection that exists under another owner is reported
exactly like one that does not exist.
"""
import logging

from tortoise import timezone
from tortoise.transactions import in_transaction

from app.core.errors import NotFoundError, ValidationError
from app.models.collection import Collection
from app.models.product import Product, ProductImage
from app.services.quota import ResourceKind, enforce_limit

logger = logging.getLogger("uvicorn.error")

NEWEST_FIRST = ("-created_at", "-id")


def collection_to_dict(c: Collection, include_token: bool = True) -> dict:
    data = {
        "id": c.id,
        "owner_id": c.owner_id,
        "name": c.name,
        "description": c.description,
        "created_at": c.created_at,
        "updated_at": c.updated_at,
    }
    if include_token:
        data["share_token"] = c.share_token
    return data


async def create_collection(owner_id: int, name: str, description: str = "") -> Collection:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required")
    await enforce_limit(owner_id, ResourceKind.COLLECTION)
    return await Collection.create(owner_id=owner_id, name=name, description=description or "")


async def list_my_collections(owner_id: int) -> list[Collection]:
    return await Collection.filter(owner_id=owner_id).order_by(*NEWEST_FIRST)


async def list_collections_by_owner(owner_id: int) -> list[Collection]:
    """
    Public listing: every collection of `owner_id`, no authentication.

    Nothing marks a collection as private, so all of them are returned.
    """
    return await Collection.filter(owner_id=owner_id).order_by(*NEWEST_FIRST)


async def get_owned_collection(owner_id: int, collection_id: int) -> Collection:
    c = await Collection.get_or_none(id=collection_id, owner_id=owner_id)
    if c is None:
        raise NotFoundError("Collection not found")
    return c


async def update_collection(owner_id: int, collection_id: int, changes: dict) -> Collection:
    """
    Partial update: only keys present in `changes` are written.

    Raises:
    - ValidationError: nothing to update
    - NotFoundError: no row matched id AND owner_id
    """
    changes = {k: v for k, v in changes.items() if k in ("name", "description") and v is not None}
    if not changes:
        raise ValidationError("No fields to update")
    if "name" in changes:
        changes["name"] = changes["name"].strip()
        if not changes["name"]:
            raise ValidationError("Name is required")

    affected = await Collection.filter(id=collection_id, owner_id=owner_id).update(
        updated_at=timezone.now(), **changes
    )
    if affected == 0:
        raise NotFoundError("Collection not found")
    return await get_owned_collection(owner_id, collection_id)


async def delete_collection(owner_id: int, collection_id: int) -> list[str]:
    """
    Delete a collection together with the owner's products inside it.

    Runs in one transaction: either the collection and its products are all
    gone, or nothing changed. Returns the image URLs of the deleted products
    so the caller can remove the stored files once the commit succeeded.
    """
    async with in_transaction() as conn:
        c = await Collection.filter(id=collection_id, owner_id=owner_id).using_db(conn).first()
        if c is None:
            raise NotFoundError("Collection not found")

        product_ids = await (
            Product.filter(owner_id=owner_id, collection_id=collection_id)
            .using_db(conn)
            .values_list("id", flat=True)
        )
        image_urls: list[str] = []
        if product_ids:
            image_urls = await (
                ProductImage.filter(product_id__in=product_ids)
                .using_db(conn)
                .values_list("image_url", flat=True)
            )
            await ProductImage.filter(product_id__in=product_ids).using_db(conn).delete()
            await Product.filter(id__in=product_ids, owner_id=owner_id).using_db(conn).delete()

        await Collection.filter(id=collection_id, owner_id=owner_id).using_db(conn).delete()

    logger.info("[collections] deleted collection=%s owner=%s with %d products",
                collection_id, owner_id, len(product_ids))
    return list(image_urls)
