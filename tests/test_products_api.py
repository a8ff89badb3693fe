"""Product endpoints via TestClient."""

PRODUCT_FORM = {
    "name": "Caneca",
    "price": "59.9",
    "discounted_price": "49.9",
    "description": "Ceramic mug",
    "tags": "kitchen,mug",
    "height": "10",
}


def _images(*names):
    return [("images", (name, b"img", "image/jpeg")) for name in names]


class TestCreateProduct:
    def test_admin_creates_product(self, client, db, make_user, auth_headers):
        admin = make_user("admin@shop.test", role="admin")
        response = client.post("/api/products", data=PRODUCT_FORM, files=_images("1.jpg", "2.jpg"), headers=auth_headers(admin))
        assert response.status_code == 201
        product = db.rows("products")[0]
        assert product["name"] == "Caneca"
        assert product["price"] == 59.9
        assert product["discounted_price"] == 49.9
        assert product["weight"] == 0.3
        assert product["height"] == 10.0
        assert len(product["images"]) == 2
        assert all("/products/" in url for url in product["images"])
        assert response.json()["failed"] == []

    def test_non_admin(self, client, db, make_user, auth_headers):
        user = make_user("a@x.com")
        response = client.post("/api/products", data=PRODUCT_FORM, files=_images("1.jpg"), headers=auth_headers(user))
        assert response.status_code == 403
        assert db.rows("products") == []

    def test_missing_text_fields(self, client, make_user, auth_headers):
        admin = make_user("admin@shop.test", role="admin")
        form = {**PRODUCT_FORM, "name": ""}
        response = client.post("/api/products", data=form, files=_images("1.jpg"), headers=auth_headers(admin))
        assert response.status_code == 400
        assert response.json()["error"] == "missing_field"

    def test_negative_price(self, client, make_user, auth_headers):
        admin = make_user("admin@shop.test", role="admin")
        form = {**PRODUCT_FORM, "price": "-1"}
        response = client.post("/api/products", data=form, files=_images("1.jpg"), headers=auth_headers(admin))
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_images_required(self, client, db, make_user, auth_headers):
        admin = make_user("admin@shop.test", role="admin")
        response = client.post("/api/products", data=PRODUCT_FORM, headers=auth_headers(admin))
        assert response.status_code == 400
        assert db.rows("products") == []


class TestReadAndDelete:
    def test_list_and_get(self, client, db):
        db.table("products").insert({"id": "p1", "name": "Mug", "price": 10.0}).execute()
        assert client.get("/api/products").json()["data"][0]["id"] == "p1"
        assert client.get("/api/products/p1").json()["data"]["name"] == "Mug"

    def test_get_unknown(self, client):
        assert client.get("/api/products/nope").status_code == 404

    def test_admin_deletes(self, client, db, make_user, auth_headers):
        admin = make_user("admin@shop.test", role="admin")
        db.table("products").insert({"id": "p1", "name": "Mug", "price": 10.0}).execute()
        response = client.delete("/api/products/p1", headers=auth_headers(admin))
        assert response.status_code == 200
        assert db.rows("products") == []

    def test_delete_unknown(self, client, make_user, auth_headers):
        admin = make_user("admin@shop.test", role="admin")
        assert client.delete("/api/products/nope", headers=auth_headers(admin)).status_code == 404
