"""
tests.test_admin_products

Admin product endpoints: multi-image uploads, replacement and cleanup.
"""

from __future__ import annotations

from decimal import Decimal

from commerce_cms.db.models import Product
from commerce_cms.db.repositories.products import ProductRepo
from conftest import PRODUCT_FIELDS, create_product, png_bytes, stored_images


async def _product(app, product_id: int) -> Product | None:
    async with app.state.sessionmaker() as session:
        return await ProductRepo(session).get(product_id)


async def test_create_product(client, users, app, settings, image_queue, cache_queue) -> None:
    r = await create_product(client, users.auth(users.admin), images=2)

    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Successfully created new product."

    product = await _product(app, body["productId"])
    assert product.name == "Desk lamp"
    assert product.description == "<p>Warm light</p>"
    assert product.price == Decimal("12.50")
    assert product.discount == Decimal("0.00")
    assert product.inventory == 7
    assert [t.name for t in product.tags] == ["lamp"]
    paths = sorted(i.path for i in product.images)
    assert stored_images(settings) == paths

    assert [j.name for j in image_queue.jobs] == ["optimize-image", "optimize-image"]
    assert {(j.payload["width"], j.payload["height"]) for j in image_queue.jobs} == {(1080, 1080)}
    assert sorted(j.payload["file_name"] for j in image_queue.jobs) == [
        p.split(".")[0] + ".webp" for p in paths
    ]

    [invalidate] = cache_queue.jobs
    assert invalidate.name == "invalidate-product-cache"
    assert invalidate.payload == {"pattern": "products:*"}


async def test_create_product_requires_an_image(client, users) -> None:
    r = await create_product(client, users.auth(users.admin), images=0)

    assert r.status_code == 400
    assert r.json() == {"message": "Invalid image.", "error": "Error_Invalid"}


async def test_create_product_image_limit(client, users, settings) -> None:
    r = await create_product(client, users.auth(users.admin), images=5)

    assert r.status_code == 400
    assert r.json()["message"] == "You can upload up to 4 images."
    assert stored_images(settings) == []


async def test_create_product_invalid_price_removes_uploads(client, users, settings) -> None:
    r = await create_product(client, users.auth(users.admin), images=2, price="0")

    assert r.status_code == 400
    assert r.json() == {"message": "Price is invalid", "error": "Error_Invalid"}
    assert stored_images(settings) == []


async def test_update_product_without_images_keeps_them(client, users, app, image_queue) -> None:
    product_id = (await create_product(client, users.auth(users.admin))).json()["productId"]
    before = [i.path for i in (await _product(app, product_id)).images]
    image_queue.jobs.clear()

    data = {**PRODUCT_FIELDS, "productId": str(product_id), "price": "20", "inventory": "0"}
    r = await client.patch("/v1/admin/products", data=data, headers=users.auth(users.admin))

    assert r.status_code == 200
    assert r.json() == {"message": "Successfully updated product.", "productId": product_id}
    product = await _product(app, product_id)
    assert product.price == Decimal("20.00")
    assert product.inventory == 0
    assert [i.path for i in product.images] == before
    assert image_queue.jobs == []


async def test_update_product_replaces_images(client, users, app, settings) -> None:
    product_id = (await create_product(client, users.auth(users.admin), images=2)).json()[
        "productId"
    ]
    old = [i.path for i in (await _product(app, product_id)).images]
    for path in old:
        (settings.optimized_dir / (path.split(".")[0] + ".webp")).write_bytes(b"webp")

    data = {**PRODUCT_FIELDS, "productId": str(product_id)}
    files = [("images", ("new.png", png_bytes(color="green"), "image/png"))]
    r = await client.patch(
        "/v1/admin/products", data=data, files=files, headers=users.auth(users.admin)
    )

    assert r.status_code == 200
    new = [i.path for i in (await _product(app, product_id)).images]
    assert len(new) == 1
    assert not set(new) & set(old)
    assert stored_images(settings) == new
    assert list(settings.optimized_dir.iterdir()) == []


async def test_update_missing_product(client, users, settings) -> None:
    data = {**PRODUCT_FIELDS, "productId": "77"}
    files = [("images", ("new.png", png_bytes(), "image/png"))]
    r = await client.patch(
        "/v1/admin/products", data=data, files=files, headers=users.auth(users.admin)
    )

    assert r.status_code == 404
    assert r.json()["message"] == "This data does not exist."
    assert stored_images(settings) == []


async def test_update_product_requires_id(client, users) -> None:
    r = await client.patch(
        "/v1/admin/products", data=PRODUCT_FIELDS, headers=users.auth(users.admin)
    )

    assert r.status_code == 400
    assert r.json()["message"] == "Product Id is required"


async def test_delete_product(client, users, app, settings, cache_queue) -> None:
    product_id = (await create_product(client, users.auth(users.admin), images=2)).json()[
        "productId"
    ]
    cache_queue.jobs.clear()

    r = await client.request(
        "DELETE",
        "/v1/admin/products",
        json={"productId": product_id},
        headers=users.auth(users.admin),
    )

    assert r.status_code == 200
    assert r.json() == {"message": "Product deleted successfully.", "productId": product_id}
    assert await _product(app, product_id) is None
    assert stored_images(settings) == []
    assert [j.name for j in cache_queue.jobs] == ["invalidate-product-cache"]


async def test_delete_missing_product(client, users) -> None:
    r = await client.request(
        "DELETE", "/v1/admin/products", json={"productId": 5}, headers=users.auth(users.admin)
    )

    assert r.status_code == 404


async def test_product_routes_require_admin(client, users) -> None:
    r = await create_product(client, users.auth(users.member))

    assert r.status_code == 403
    assert r.json()["error"] == "Error_Unauthorized"


async def test_create_product_price_out_of_range(client, users, settings) -> None:
    r = await create_product(client, users.auth(users.admin), images=1, price="1e30")

    assert r.status_code == 400
    assert r.json() == {"message": "Price is invalid", "error": "Error_Invalid"}
    assert stored_images(settings) == []
