import pytest

from conftest import PNG_BYTES


pytestmark = pytest.mark.asyncio


async def make_shared_collection(client, headers, name="Lookbook"):
    collection = (await client.post("/protected/collections", json={"name": name}, headers=headers)).json()
    resp = await client.post(f"/protected/collections/{collection['id']}/share", headers=headers)
    assert resp.status_code == 200
    return collection, resp.json()["share_token"]


async def test_share_twice_returns_same_token(client, register_and_login):
    _, headers = await register_and_login()
    collection, token = await make_shared_collection(client, headers)

    again = await client.post(f"/protected/collections/{collection['id']}/share", headers=headers)
    assert again.json()["share_token"] == token

    # The owner now sees the token on the collection
    listing = (await client.get("/protected/collections", headers=headers)).json()
    assert listing[0]["share_token"] == token


async def test_tokens_differ_between_collections(client, register_and_login):
    _, headers = await register_and_login()
    _, first = await make_shared_collection(client, headers, "One")
    _, second = await make_shared_collection(client, headers, "Two")
    assert first != second


async def test_share_foreign_collection_is_not_found(client, register_and_login):
    _, owner = await register_and_login()
    _, intruder = await register_and_login()
    collection = (await client.post("/protected/collections", json={"name": "Mine"}, headers=owner)).json()

    resp = await client.post(f"/protected/collections/{collection['id']}/share", headers=intruder)
    assert resp.status_code == 404

    missing = await client.post("/protected/collections/999999/share", headers=owner)
    assert missing.status_code == 404


async def test_public_catalog_lists_collection_products(client, register_and_login):
    _, headers = await register_and_login()
    collection, token = await make_shared_collection(client, headers)

    first = await client.post(
        "/protected/products",
        data={"name": "Ring", "price": "120", "collection_id": str(collection["id"])},
        files=[("images", ("ring.png", PNG_BYTES, "image/png"))],
        headers=headers,
    )
    second = await client.post(
        "/protected/products",
        data={"name": "Necklace", "price": "300", "collection_id": str(collection["id"])},
        headers=headers,
    )
    await client.post("/protected/products", data={"name": "Unlisted", "price": "1"}, headers=headers)

    # No Authorization header: the token alone grants access
    resp = await client.get(f"/public/catalogs/{token}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["collection"]["id"] == collection["id"]
    assert [p["id"] for p in body["products"]] == [second.json()["id"], first.json()["id"]]
    assert len(body["products"][1]["images"]) == 1


async def test_catalog_of_empty_collection(client, register_and_login):
    _, headers = await register_and_login()
    _, token = await make_shared_collection(client, headers)

    resp = await client.get(f"/public/catalogs/{token}")
    assert resp.status_code == 200
    assert resp.json()["products"] == []


@pytest.mark.parametrize("token", ["unknown-token", "x" * 65, "%20"])
async def test_unknown_catalog_token_is_not_found(client, register_and_login, token):
    _, headers = await register_and_login()
    await make_shared_collection(client, headers)

    resp = await client.get(f"/public/catalogs/{token}")
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "NOT_FOUND"
