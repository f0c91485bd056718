"""
Share Token Service

A share token is an opaque random string that grants anonymous, read-only
access to one collection and its products. Tokens never expire and are set at
most once per collection.
"""
import logging
import secrets

from tortoise.exceptions import IntegrityError

from app.core.errors import InternalError, NotFoundError
from app.models.collection import Collection
from app.models.product import Product
from app.services.collections import get_owned_collection

logger = logging.getLogger("uvicorn.error")

TOKEN_BYTES = 24  # 192 bits, 32 URL-safe characters
MAX_TOKEN_LENGTH = 64
MINT_ATTEMPTS = 3


def generate_share_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


async def share_collection(owner_id: int, collection_id: int) -> str:
    """
    Return the collection's share token, minting it on first use.

    The write only matches while share_token is still null, so two concurrent
    first shares end up returning the same token.

    Raises:
    - NotFoundError: collection missing or owned by someone else
    """
    c = await get_owned_collection(owner_id, collection_id)
    if c.share_token:
        return c.share_token

    for _ in range(MINT_ATTEMPTS):
        token = generate_share_token()
        try:
            await Collection.filter(id=c.id, owner_id=owner_id, share_token__isnull=True).update(share_token=token)
        except IntegrityError:
            # Collided with another collection's token; draw again
            continue
        c = await get_owned_collection(owner_id, collection_id)
        if c.share_token:
            if c.share_token == token:
                logger.info("[share] minted token for collection=%s owner=%s", c.id, owner_id)
            return c.share_token

    raise InternalError("Could not generate share token")


async def resolve_public_catalog(token: str) -> tuple[Collection, list[Product]]:
    """
    Look up a shared collection by token and return it with its products,
    newest first.

    Raises:
    - NotFoundError: empty, malformed or unknown token
    """
    if not token or len(token) > MAX_TOKEN_LENGTH:
        raise NotFoundError("Catalog not found")

    c = await Collection.get_or_none(share_token=token)
    if c is None:
        raise NotFoundError("Catalog not found")

    products = await (
        Product.filter(owner_id=c.owner_id, collection_id=c.id)
        .order_by("-created_at", "-id")
        .prefetch_related("images")
    )
    return c, list(products)
