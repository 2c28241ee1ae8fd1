import os

from conftest import PNG_BYTES


def test_create_product_with_image(client, create_product, settings):
    res = create_product()
    assert res.status_code == 201, res.text
    body = res.json()
    assert body["id"]
    assert body["name"] == "Mug"
    assert body["price"] == 9.99
    assert body["stock"] == 5
    assert body["imageUrl"].startswith("/uploads/")
    assert body["imageUrl"].endswith("mug.png")

    stored = os.path.join(settings.UPLOAD_DIR, body["imageUrl"].rsplit("/", 1)[1])
    assert os.path.getsize(stored) == len(PNG_BYTES)

    # image is served back from the static mount
    img = client.get(body["imageUrl"])
    assert img.status_code == 200
    assert img.content == PNG_BYTES


def test_create_then_get_returns_same_record(client, create_product):
    created = create_product(name="Teapot", description="Blue", price="20", category="pots").json()
    res = client.get(f"/products/{created['id']}")
    assert res.status_code == 200
    assert res.json() == created
    assert created["name"] == "Teapot"
    assert created["price"] == 20.0


def test_create_requires_image(client, create_product):
    res = create_product(filename=None)
    assert res.status_code == 400
    assert res.json()["error"] == "UploadRequired"
    assert client.get("/products").json()["total"] == 0


def test_create_rejects_bad_extension(create_product):
    res = create_product(filename="notes.txt", content_type="text/plain")
    assert res.status_code == 400
    assert res.json()["error"] == "UploadRejected"


def test_create_rejects_large_image(create_product, settings):
    res = create_product(content=b"\x00" * (settings.MAX_UPLOAD_BYTES + 1))
    assert res.status_code == 400
    assert res.json()["error"] == "UploadRejected"


def test_create_validation_names_field(create_product, settings):
    res = create_product(price="-1")
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "ValidationError"
    assert body["detail"].startswith("price")
    # nothing written when validation fails
    assert os.listdir(settings.UPLOAD_DIR) == []


def test_create_missing_required_field(client, admin_headers):
    res = client.post(
        "/products",
        data={"name": "Mug", "price": "1", "category": "mugs"},
        files={"image": ("mug.png", PNG_BYTES, "image/png")},
        headers=admin_headers,
    )
    assert res.status_code == 400
    assert res.json()["detail"].startswith("description")


def test_create_rejects_malformed_image_url(create_product):
    res = create_product(imageUrl="not a url")
    assert res.status_code == 400
    assert res.json()["detail"].startswith("imageUrl")


def test_create_requires_token(client):
    res = client.post("/products", data={"name": "Mug"})
    assert res.status_code == 401
    assert res.json()["error"] == "Unauthenticated"


def test_create_forbidden_for_user_role(client, user_headers):
    res = client.post(
        "/products",
        data={"name": "Mug", "description": "d", "price": "1", "category": "mugs"},
        files={"image": ("mug.png", PNG_BYTES, "image/png")},
        headers=user_headers,
    )
    assert res.status_code == 403
    assert res.json()["error"] == "Forbidden"


def test_get_missing_product(client):
    res = client.get("/products/999")
    assert res.status_code == 404
    assert res.json()["error"] == "NotFound"


def test_get_accepts_optional_token(client, create_product, user_headers):
    pid = create_product().json()["id"]
    assert client.get(f"/products/{pid}", headers=user_headers).status_code == 200
    bad = client.get(f"/products/{pid}", headers={"Authorization": "Bearer nope"})
    assert bad.status_code == 400
    assert bad.json()["error"] == "InvalidToken"


def test_partial_update_preserves_other_fields(client, create_product, admin_headers):
    created = create_product().json()
    res = client.put(f"/products/{created['id']}", data={"price": "5"}, headers=admin_headers)
    assert res.status_code == 200, res.text
    assert res.json()["price"] == 5.0

    fetched = client.get(f"/products/{created['id']}").json()
    for field in ("name", "description", "category", "stock", "imageUrl"):
        assert fetched[field] == created[field]
    assert fetched["price"] == 5.0


def test_update_replaces_image_when_sent(client, create_product, admin_headers):
    created = create_product().json()
    res = client.put(
        f"/products/{created['id']}",
        files={"image": ("new.webp", b"RIFF0000WEBP", "image/webp")},
        headers=admin_headers,
    )
    assert res.status_code == 200, res.text
    assert res.json()["imageUrl"] != created["imageUrl"]
    assert res.json()["imageUrl"].endswith("new.webp")
    assert res.json()["name"] == created["name"]


def test_update_missing_product(client, admin_headers):
    res = client.put("/products/404", data={"price": "5"}, headers=admin_headers)
    assert res.status_code == 404


def test_update_invalid_stock(client, create_product, admin_headers):
    pid = create_product().json()["id"]
    res = client.put(f"/products/{pid}", data={"stock": "-3"}, headers=admin_headers)
    assert res.status_code == 400
    assert res.json()["detail"].startswith("stock")


def test_update_forbidden_for_user(client, create_product, user_headers):
    pid = create_product().json()["id"]
    res = client.put(f"/products/{pid}", data={"price": "1"}, headers=user_headers)
    assert res.status_code == 403


def test_delete_returns_snapshot_then_not_found(client, create_product, admin_headers):
    created = create_product().json()
    res = client.delete(f"/products/{created['id']}", headers=admin_headers)
    assert res.status_code == 200
    assert res.json() == {"message": "Product deleted", "product": created}

    again = client.delete(f"/products/{created['id']}", headers=admin_headers)
    assert again.status_code == 404
    assert client.get(f"/products/{created['id']}").status_code == 404


def test_delete_requires_admin(client, create_product, user_headers):
    pid = create_product().json()["id"]
    assert client.delete(f"/products/{pid}").status_code == 401
    assert client.delete(f"/products/{pid}", headers=user_headers).status_code == 403


def test_end_to_end_register_login_create_and_filter(client, register):
    assert register("a@x.com", password="p1", role="admin").status_code == 201
    token = client.post("/auth/login", json={"email": "a@x.com", "password": "p1"}).json()["token"]
    headers = {"Authorization": f"Bearer {token}"}

    res = client.post(
        "/products",
        data={"name": "Mug", "description": "d", "price": "9.99", "category": "mugs", "stock": "5"},
        files={"image": ("mug.png", PNG_BYTES, "image/png")},
        headers=headers,
    )
    assert res.status_code == 201
    product = res.json()
    assert product["imageUrl"]

    listing = client.get("/products", params={"category": "mugs"}).json()
    assert listing == {"total": 1, "products": [product]}


def test_update_accepts_stored_image_path(client, create_product, admin_headers):
    created = create_product().json()
    res = client.put(
        f"/products/{created['id']}",
        data={"imageUrl": created["imageUrl"], "name": "Mug 2"},
        headers=admin_headers,
    )
    assert res.status_code == 200, res.text
    assert res.json()["imageUrl"] == created["imageUrl"]
    assert res.json()["name"] == "Mug 2"


def test_update_accepts_absolute_image_url(client, create_product, admin_headers):
    pid = create_product().json()["id"]
    res = client.put(
        f"/products/{pid}", data={"imageUrl": "https://cdn.example.com/mug.png"}, headers=admin_headers
    )
    assert res.status_code == 200
    assert res.json()["imageUrl"] == "https://cdn.example.com/mug.png"


def test_update_rejects_relative_path_without_slash(client, create_product, admin_headers):
    pid = create_product().json()["id"]
    res = client.put(f"/products/{pid}", data={"imageUrl": "uploads/mug.png"}, headers=admin_headers)
    assert res.status_code == 400
    assert res.json()["detail"].startswith("imageUrl")


def test_public_reads_ignore_non_bearer_authorization(client, create_product):
    pid = create_product().json()["id"]
    basic = {"Authorization": "Basic dXNlcjpwdw=="}
    listing = client.get("/products", headers=basic)
    assert listing.status_code == 200
    assert listing.json()["total"] == 1
    assert client.get(f"/products/{pid}", headers=basic).status_code == 200


def test_out_of_range_product_id(client, admin_headers):
    huge = 10**20
    res = client.get(f"/products/{huge}")
    assert res.status_code == 400
    assert res.json()["error"] == "ValidationError"
    assert res.json()["detail"].startswith("product_id")
    assert client.get("/products/0").status_code == 400
    assert client.put(f"/products/{huge}", data={"price": "1"}, headers=admin_headers).status_code == 400
    assert client.delete(f"/products/{huge}", headers=admin_headers).status_code == 400
    assert client.get(f"/products/{2**63 - 1}").status_code == 404


def test_create_rejects_several_images(client, admin_headers, settings):
    res = client.post(
        "/products",
        data={"name": "Mug", "description": "d", "price": "1", "category": "mugs"},
        files=[
            ("image", ("a.png", PNG_BYTES, "image/png")),
            ("image", ("b.png", PNG_BYTES, "image/png")),
        ],
        headers=admin_headers,
    )
    assert res.status_code == 400
    assert res.json()["error"] == "UploadRejected"
    assert os.listdir(settings.UPLOAD_DIR) == []


def test_update_rejects_several_images(client, create_product, admin_headers):
    created = create_product().json()
    res = client.put(
        f"/products/{created['id']}",
        files=[
            ("image", ("a.gif", b"GIF89a", "image/gif")),
            ("image", ("b.gif", b"GIF89a", "image/gif")),
        ],
        headers=admin_headers,
    )
    assert res.status_code == 400
    assert res.json()["error"] == "UploadRejected"
    assert client.get(f"/products/{created['id']}").json()["imageUrl"] == created["imageUrl"]
