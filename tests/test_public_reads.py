"""
tests.test_public_reads

Public cached reads, maintenance mode, the current-user profile and dev tokens.
"""

from __future__ import annotations

import json

from conftest import create_post, create_product


async def test_list_posts_paginates_newest_first(client, users, cache) -> None:
    ids = []
    for title in ("first", "second", "third"):
        r = await create_post(client, users.auth(users.admin), title=title)
        ids.append(r.json()["postId"])

    r = await client.get("/v1/posts", params={"page": 1, "limit": 2})
    assert r.status_code == 200
    page = r.json()
    assert [p["id"] for p in page["posts"]] == [ids[2], ids[1]]
    assert page["currentPage"] == 1
    assert page["hasNextPage"] is True
    assert page["previousPage"] is None
    assert "posts:list:page=1:limit=2" in cache.store

    r = await client.get("/v1/posts", params={"page": 2, "limit": 2})
    page = r.json()
    assert [p["id"] for p in page["posts"]] == [ids[0]]
    assert page["hasNextPage"] is False
    assert page["previousPage"] == 1


async def test_list_posts_serves_cached_value(client, cache) -> None:
    cached = {"posts": [], "currentPage": 1, "hasNextPage": False, "previousPage": None}
    cache.store["posts:list:page=1:limit=5"] = json.dumps(cached)

    r = await client.get("/v1/posts")

    assert r.json() == cached


async def test_list_posts_rejects_bad_page(client) -> None:
    r = await client.get("/v1/posts", params={"page": 0})

    assert r.status_code == 400
    assert r.json()["error"] == "Error_Invalid"


async def test_post_detail(client, users, cache) -> None:
    post_id = (await create_post(client, users.auth(users.admin))).json()["postId"]

    r = await client.get(f"/v1/posts/{post_id}")

    assert r.status_code == 200
    post = r.json()["post"]
    assert post["id"] == post_id
    assert post["title"] == "Launch day"
    assert post["body"] == "<p>Long body</p>"
    assert post["author"] == "Ada Admin"
    assert post["category"] == "news"
    assert post["type"] == "blog"
    assert sorted(post["tags"]) == ["launch", "product"]
    assert "updatedAt" in post
    assert f"posts:detail:{post_id}" in cache.store


async def test_post_detail_missing(client) -> None:
    r = await client.get("/v1/posts/12345")

    assert r.status_code == 404
    assert r.json() == {"message": "This data does not exist.", "error": "Error_Invalid"}


async def test_list_products_by_cursor(client, users, cache) -> None:
    ids = []
    for name in ("a", "b", "c"):
        r = await create_product(client, users.auth(users.admin), name=name)
        ids.append(r.json()["productId"])

    r = await client.get("/v1/products", params={"limit": 2})
    page = r.json()
    assert [p["id"] for p in page["products"]] == ids[:2]
    assert page["hasNextPage"] is True
    assert page["nextCursor"] == ids[1]
    assert "products:list:cursor=:limit=2" in cache.store

    r = await client.get("/v1/products", params={"cursor": page["nextCursor"], "limit": 2})
    page = r.json()
    assert [p["id"] for p in page["products"]] == ids[2:]
    assert page["hasNextPage"] is False
    assert page["nextCursor"] is None
    assert f"products:list:cursor={ids[1]}:limit=2" in cache.store


async def test_product_detail(client, users, cache) -> None:
    product_id = (await create_product(client, users.auth(users.admin), images=2)).json()[
        "productId"
    ]

    r = await client.get(f"/v1/products/{product_id}")

    assert r.status_code == 200
    product = r.json()["product"]
    assert product["name"] == "Desk lamp"
    assert product["price"] == "12.50"
    assert product["status"] == "ACTIVE"
    assert len(product["images"]) == 2
    assert f"products:detail:{product_id}" in cache.store

    r = await client.get("/v1/products/999")
    assert r.status_code == 404


async def test_maintenance_mode_blocks_public_reads(client, users, settings) -> None:
    headers = users.auth(users.admin)

    r = await client.patch("/v1/admin/maintenance", json={"mode": True}, headers=headers)
    assert r.status_code == 200
    assert r.json() == {"message": "Successfully set maintenance mode to true."}

    r = await client.get("/v1/posts")
    assert r.status_code == 503
    assert r.json() == {
        "message": "The server is currently under maintenance. Please try again later.",
        "error": "Error_Maintenance",
    }

    # Whitelisted client addresses still get through.
    settings.maintenance_whitelist = ["127.0.0.1"]
    r = await client.get("/v1/posts")
    assert r.status_code == 200
    settings.maintenance_whitelist = []

    r = await client.patch("/v1/admin/maintenance", json={"mode": False}, headers=headers)
    assert r.json() == {"message": "Successfully set maintenance mode to false."}
    r = await client.get("/v1/products")
    assert r.status_code == 200


async def test_maintenance_requires_admin(client, users) -> None:
    r = await client.patch(
        "/v1/admin/maintenance", json={"mode": True}, headers=users.auth(users.member)
    )

    assert r.status_code == 403


async def test_users_me(client, users) -> None:
    r = await client.get("/v1/users/me", headers=users.auth(users.member))

    assert r.status_code == 200
    user = r.json()["user"]
    assert user["id"] == users.member.id
    assert user["phone"] == "0933333333"
    assert user["fullName"] == "Cy"
    assert user["role"] == "USER"

    r = await client.get("/v1/users/me")
    assert r.status_code == 401


async def test_dev_token_authenticates_existing_user(client, users) -> None:
    r = await client.post("/v1/dev/token", json={"userId": users.admin.id})
    assert r.status_code == 200
    token = r.json()["access_token"]

    r = await client.get("/v1/users/me", headers={"Authorization": f"Bearer {token}"})
    assert r.json()["user"]["role"] == "ADMIN"

    r = await client.post("/v1/dev/token", json={"userId": 9999})
    assert r.status_code == 404


async def test_out_of_range_ids_are_rejected(client) -> None:
    for url, params in (
        (f"/v1/posts/{2**63}", None),
        (f"/v1/products/{10**30}", None),
        ("/v1/products", {"cursor": 2**70}),
        ("/v1/posts", {"page": 2**62}),
    ):
        r = await client.get(url, params=params)
        assert r.status_code == 400, url
        assert r.json()["error"] == "Error_Invalid"

    r = await client.post("/v1/dev/token", json={"userId": 2**63})
    assert r.status_code == 400
