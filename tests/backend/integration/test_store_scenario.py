import pytest

from conftest import PNG_BYTES


pytestmark = pytest.mark.asyncio


async def test_store_owner_end_to_end(client, register_and_login):
    registration = {
        "username": "uniqueName1",
        "email": "a@x.com",
        "password": "pass123456",
        "number": "11999999999",
    }
    resp = await client.post("/public/register", json=registration)
    assert resp.status_code == 201
    user_id = resp.json()["user"]["id"]

    dup = await client.post(
        "/public/register",
        json={**registration, "username": "otherName", "number": "11988888888"},
    )
    assert dup.status_code == 400

    wrong = await client.post("/public/login", json={"email": "a@x.com", "password": "nope123456"})
    assert wrong.status_code == 401

    login = await client.post("/public/login", json={"email": "a@x.com", "password": "pass123456"})
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    first = await client.post("/protected/collections", json={"name": "Rings"}, headers=headers)
    second = await client.post("/protected/collections", json={"name": "Necklaces"}, headers=headers)
    assert first.status_code == 201
    assert second.status_code == 201

    # Any caller can list a store's collections by owner id
    public = await client.get("/public/collections", params={"owner_id": user_id})
    assert public.status_code == 200
    assert {c["id"] for c in public.json()} == {first.json()["id"], second.json()["id"]}

    _, other_headers = await register_and_login()
    foreign = (await client.post("/protected/collections", json={"name": "Theirs"}, headers=other_headers)).json()
    misplaced = await client.post(
        "/protected/products",
        data={"name": "Ring", "price": "10", "collection_id": str(foreign["id"])},
        headers=headers,
    )
    assert misplaced.status_code == 400

    in_first = await client.post(
        "/protected/products",
        data={"name": "Gold ring", "price": "199.9", "collection_id": str(first.json()["id"])},
        files=[("images", ("ring.png", PNG_BYTES, "image/png"))],
        headers=headers,
    )
    in_second = await client.post(
        "/protected/products",
        data={"name": "Pearl necklace", "price": "299.9", "collection_id": str(second.json()["id"])},
        headers=headers,
    )
    assert in_first.status_code == 201
    assert in_second.status_code == 201

    deleted = await client.delete(f"/protected/collections/{first.json()['id']}", headers=headers)
    assert deleted.status_code == 204

    products = (await client.get("/protected/products", headers=headers)).json()
    assert [p["id"] for p in products] == [in_second.json()["id"]]

    # The other store's collection was not touched
    theirs = (await client.get("/protected/collections", headers=other_headers)).json()
    assert [c["id"] for c in theirs] == [foreign["id"]]
