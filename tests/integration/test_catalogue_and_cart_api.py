"""Integration tests for the product and cart endpoints via TestClient."""


def _create_product(client, admin, **overrides):
    body = {
        "name": "Metro Backpack",
        "description": "Laptop backpack with rain cover",
        "price": 1500,
        "category": "backpacks",
        "stock": 4,
        "images": ["https://cdn.example.com/metro.jpg"],
    }
    body.update(overrides)
    return client.post("/products", json=body, headers=admin)


class TestProductEndpoints:
    def test_create_requires_admin(self, client, customer):
        assert _create_product(client, customer).status_code == 403

    def test_create_and_get(self, client, admin):
        response = _create_product(client, admin, salePrice=1200)
        assert response.status_code == 201
        product = response.json()["product"]
        assert product["effectivePrice"] == 1200
        assert product["image"] == "https://cdn.example.com/metro.jpg"

        fetched = client.get(f"/products/{product['_id']}").json()["product"]
        assert fetched["name"] == "Metro Backpack"

    def test_duplicate_name_updates_existing(self, client, admin):
        _create_product(client, admin)
        response = _create_product(client, admin, name="metro backpack", stock=9)
        assert response.json()["message"] == "Existing product updated"
        assert client.get("/products").json()["total"] == 1

    def test_image_required(self, client, admin):
        response = _create_product(client, admin, images=[])
        assert response.status_code == 400
        assert response.json()["message"] == "Product image is required"

    def test_unknown_product(self, client):
        assert client.get("/products/prod-404").status_code == 404

    def test_listing(self, client, admin):
        _create_product(client, admin, name="Cheap Pack", price=500)
        _create_product(client, admin, name="Pricey Pack", price=2500)
        _create_product(client, admin, name="City Tote", price=900, category="handbags")

        data = client.get("/products", params={"category": "backpacks", "sort": "price-high"}).json()
        assert [p["name"] for p in data["products"]] == ["Pricey Pack", "Cheap Pack"]
        assert data["total"] == 2
        assert data["totalPages"] == 1
        assert data["currentPage"] == 1

        data = client.get("/products", params={"search": "tote"}).json()
        assert [p["name"] for p in data["products"]] == ["City Tote"]

    def test_featured_and_categories(self, client, admin):
        _create_product(client, admin, name="Featured Pack", featured=True)
        _create_product(client, admin, name="Sold Out Pack", featured=True, stock=0)

        featured = client.get("/products/featured").json()["products"]
        assert [p["name"] for p in featured] == ["Featured Pack"]

        categories = client.get("/products/categories").json()["categories"]
        assert {c["value"] for c in categories} == {"handbags", "trolley-luggage", "travel-bags", "backpacks"}

    def test_update_and_delete(self, client, admin):
        product_id = _create_product(client, admin).json()["product"]["_id"]

        response = client.put(f"/products/{product_id}", json={"price": 1400}, headers=admin)
        assert response.json()["product"]["price"] == 1400

        assert client.delete(f"/products/{product_id}", headers=admin).status_code == 200
        assert client.get(f"/products/{product_id}").status_code == 404

    def test_partial_update_keeps_omitted_fields(self, client, admin):
        product_id = _create_product(client, admin, salePrice=1200).json()["product"]["_id"]

        response = client.put(f"/products/{product_id}", json={"stock": 1}, headers=admin)

        assert response.status_code == 200
        product = response.json()["product"]
        assert product["stock"] == 1
        assert product["price"] == 1500
        assert product["salePrice"] == 1200
        assert product["images"] == ["https://cdn.example.com/metro.jpg"]
        assert product["category"] == "backpacks"

    def test_create_without_optional_fields(self, client, admin):
        body = {
            "name": "Plain Tote",
            "description": "Canvas tote",
            "price": 400,
            "category": "handbags",
            "image": "https://cdn.example.com/tote.jpg",
        }
        response = client.post("/products", json=body, headers=admin)

        assert response.status_code == 201
        product = response.json()["product"]
        assert product["stock"] == 0
        assert product["images"] == ["https://cdn.example.com/tote.jpg"]

    def test_review(self, client, admin, customer):
        product_id = _create_product(client, admin).json()["product"]["_id"]

        response = client.post(f"/products/{product_id}/review", json={"rating": 4, "comment": "Roomy"}, headers=customer)
        assert response.status_code == 200

        product = client.get(f"/products/{product_id}").json()["product"]
        assert product["rating"] == 4
        assert product["numReviews"] == 1
        assert product["reviews"][0]["name"] == "Asha Rao"

        response = client.post(f"/products/{product_id}/review", json={"rating": 7}, headers=customer)
        assert response.status_code == 400


class TestCartEndpoints:
    def test_get_cart_creates_empty_cart(self, client, customer):
        response = client.get("/cart", headers=customer)
        assert response.status_code == 200
        assert response.json()["cart"]["items"] == []

    def test_add_update_remove(self, client, admin, customer):
        product_id = _create_product(client, admin, salePrice=1000).json()["product"]["_id"]

        cart = client.post("/cart/add", json={"productId": product_id, "quantity": 2}, headers=customer).json()["cart"]
        assert cart["items"][0]["price"] == 1000
        assert cart["totalPrice"] == 2000

        cart = client.put("/cart/update", json={"productId": product_id, "quantity": 3}, headers=customer).json()["cart"]
        assert cart["items"][0]["quantity"] == 3

        response = client.put("/cart/update", json={"productId": product_id, "quantity": 10}, headers=customer)
        assert response.status_code == 400

        response = client.request("DELETE", "/cart/remove", json={"productId": product_id}, headers=customer)
        assert response.json()["cart"]["items"] == []

    def test_add_beyond_stock(self, client, admin, customer):
        product_id = _create_product(client, admin, stock=1).json()["product"]["_id"]
        response = client.post("/cart/add", json={"productId": product_id, "quantity": 2}, headers=customer)
        assert response.status_code == 400
        assert response.json()["message"] == "Insufficient stock"

    def test_add_unknown_product(self, client, customer):
        response = client.post("/cart/add", json={"productId": "prod-404"}, headers=customer)
        assert response.status_code == 404

    def test_update_missing_line(self, client, admin, customer):
        product_id = _create_product(client, admin).json()["product"]["_id"]
        client.get("/cart", headers=customer)
        response = client.put("/cart/update", json={"productId": product_id, "quantity": 1}, headers=customer)
        assert response.status_code == 404

    def test_clear(self, client, admin, customer):
        product_id = _create_product(client, admin).json()["product"]["_id"]
        client.post("/cart/add", json={"productId": product_id}, headers=customer)

        response = client.request("DELETE", "/cart/clear", headers=customer)

        assert response.json()["cart"]["items"] == []

    def test_cart_requires_token(self, client):
        assert client.get("/cart").status_code == 401
