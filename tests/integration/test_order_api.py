"""Integration tests for the order endpoints via TestClient."""

from protean import current_domain
from storefront.order.order import Order

SHIPPING = {
    "shippingAddress": {
        "fullName": "Asha Rao",
        "address": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "pincode": "560001",
    },
    "phone": "9876543210",
    "paymentMethod": "COD",
}


def _product(client, admin, **overrides):
    body = {
        "name": "Voyager Cabin Trolley",
        "description": "Hard-shell cabin trolley",
        "price": 1000,
        "salePrice": 800,
        "category": "trolley-luggage",
        "stock": 5,
        "images": ["https://cdn.example.com/trolley.jpg"],
    }
    body.update(overrides)
    response = client.post("/products", json=body, headers=admin)
    assert response.status_code == 201
    return response.json()["product"]["_id"]


def _place_order(client, customer, product_id, quantity=2, body=None):
    response = client.post("/cart/add", json={"productId": product_id, "quantity": quantity}, headers=customer)
    assert response.status_code == 200
    return client.post("/orders", json=body or SHIPPING, headers=customer)


def _stock(client, product_id):
    return client.get(f"/products/{product_id}").json()["product"]["stock"]


class TestPlaceOrderEndpoint:
    def test_checkout_scenario(self, client, admin, customer):
        product_id = _product(client, admin)

        response = _place_order(client, customer, product_id)

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        order = data["order"]
        assert order["totalPrice"] == 1600
        assert order["totalAmount"] == 1600
        assert order["orderStatus"] == "Pending"
        assert order["orderItems"][0]["price"] == 800
        assert order["shippingDetails"]["name"] == "Asha Rao"
        assert order["shippingAddress"]["state"] == "Karnataka"
        assert _stock(client, product_id) == 3
        assert client.get("/cart", headers=customer).json()["cart"]["items"] == []

    def test_legacy_shipping_details_shape(self, client, admin, customer):
        product_id = _product(client, admin)
        body = {
            "shippingDetails": {
                "name": "Legacy Name",
                "phone": "9000000000",
                "address": "1 Park Street",
                "city": "Kolkata",
                "pincode": "700016",
            }
        }

        order = _place_order(client, customer, product_id, body=body).json()["order"]

        assert order["shippingAddress"]["fullName"] == "Legacy Name"
        assert order["shippingAddress"]["city"] == "Kolkata"
        assert order["phone"] == "9000000000"

    def test_empty_cart(self, client, customer):
        response = client.post("/orders", json=SHIPPING, headers=customer)
        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Cart is empty"}

    def test_insufficient_stock(self, client, admin, customer):
        product_id = _product(client, admin, stock=2)
        client.post("/cart/add", json={"productId": product_id, "quantity": 2}, headers=customer)
        client.put(f"/products/{product_id}", json={"stock": 1}, headers=admin)

        response = client.post("/orders", json=SHIPPING, headers=customer)

        assert response.status_code == 400
        assert "Insufficient stock for Voyager Cabin Trolley" in response.json()["message"]
        assert _stock(client, product_id) == 1

    def test_requires_token(self, client):
        response = client.post("/orders", json=SHIPPING)
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_invalid_token(self, client):
        response = client.post("/orders", json=SHIPPING, headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401


class TestReadOrders:
    def test_my_orders_and_owner_access(self, client, admin, customer, other_customer):
        product_id = _product(client, admin)
        order_id = _place_order(client, customer, product_id).json()["order"]["_id"]

        mine = client.get("/orders/my-orders", headers=customer).json()["orders"]
        assert [o["_id"] for o in mine] == [order_id]

        assert client.get(f"/orders/{order_id}", headers=customer).status_code == 200
        assert client.get(f"/orders/{order_id}", headers=admin).status_code == 200
        assert client.get(f"/orders/{order_id}", headers=other_customer).status_code == 403

    def test_unknown_order(self, client, customer):
        response = client.get("/orders/ord-404", headers=customer)
        assert response.status_code == 404
        assert response.json()["message"] == "Order not found"

    def test_orders_by_user(self, client, admin, customer, other_customer):
        product_id = _product(client, admin)
        _place_order(client, customer, product_id)

        assert len(client.get("/orders/user/cust-001", headers=customer).json()["orders"]) == 1
        assert len(client.get("/orders/user/cust-001", headers=admin).json()["orders"]) == 1
        assert client.get("/orders/user/cust-001", headers=other_customer).status_code == 403

    def test_admin_listing_and_pagination(self, client, admin, customer):
        product_id = _product(client, admin, stock=10)
        for _ in range(3):
            assert _place_order(client, customer, product_id, quantity=1).status_code == 201

        assert len(client.get("/orders", headers=admin).json()["orders"]) == 3

        data = client.get("/orders/all", params={"page": 2, "limit": 2}, headers=admin).json()
        assert data["total"] == 3
        assert data["totalPages"] == 2
        assert data["currentPage"] == 2
        assert len(data["orders"]) == 1
        assert data["totalRevenue"] == 0

        pending = client.get("/orders/all", params={"status": "Shipped"}, headers=admin).json()
        assert pending["total"] == 0

    def test_admin_routes_reject_customers(self, client, customer):
        assert client.get("/orders", headers=customer).status_code == 403
        assert client.get("/orders/analytics", headers=customer).status_code == 403
        assert client.get("/orders/returns", headers=customer).status_code == 403


class TestStatusEndpoints:
    def test_shipped_then_cancelled_restocks(self, client, admin, customer):
        product_id = _product(client, admin)
        order_id = _place_order(client, customer, product_id).json()["order"]["_id"]

        response = client.put(f"/orders/{order_id}/tracking", json={"trackingId": "AWB-77"}, headers=admin)
        assert response.json()["order"]["orderStatus"] == "Shipped"
        assert response.json()["order"]["trackingId"] == "AWB-77"

        response = client.put(f"/orders/{order_id}/status", json={"orderStatus": "Cancelled"}, headers=admin)
        assert response.status_code == 200
        assert response.json()["order"]["orderStatus"] == "Cancelled"
        assert _stock(client, product_id) == 5

    def test_accept_is_strict(self, client, admin, customer):
        product_id = _product(client, admin)
        order_id = _place_order(client, customer, product_id).json()["order"]["_id"]

        assert client.put(f"/orders/{order_id}/accept", headers=admin).json()["order"]["orderStatus"] == "Accepted"
        assert client.put(f"/orders/{order_id}/accept", headers=admin).status_code == 400

    def test_tracking_id_required(self, client, admin, customer):
        product_id = _product(client, admin)
        order_id = _place_order(client, customer, product_id).json()["order"]["_id"]
        response = client.put(f"/orders/{order_id}/tracking", json={"trackingId": "  "}, headers=admin)
        assert response.status_code == 400

    def test_invalid_status(self, client, admin, customer):
        product_id = _product(client, admin)
        order_id = _place_order(client, customer, product_id).json()["order"]["_id"]
        response = client.put(f"/orders/{order_id}/status", json={"orderStatus": "Lost"}, headers=admin)
        assert response.status_code == 400

    def test_customer_cancel(self, client, admin, customer, other_customer):
        product_id = _product(client, admin)
        order_id = _place_order(client, customer, product_id).json()["order"]["_id"]

        assert client.put(f"/orders/{order_id}/cancel", headers=other_customer).status_code == 403
        assert client.put(f"/orders/{order_id}/cancel", headers=customer).status_code == 200
        assert client.put(f"/orders/{order_id}/cancel", headers=customer).status_code == 400
        assert _stock(client, product_id) == 5

    def test_delete_restocks(self, client, admin, customer):
        product_id = _product(client, admin)
        order_id = _place_order(client, customer, product_id).json()["order"]["_id"]

        response = client.delete(f"/orders/{order_id}", headers=admin)

        assert response.status_code == 200
        assert response.json()["message"] == "Order deleted successfully"
        assert _stock(client, product_id) == 5
        assert current_domain.repository_for(Order).all_orders() == []
        assert client.delete(f"/orders/{order_id}", headers=admin).status_code == 404


class TestReturnExchangeEndpoints:
    def _delivered_order(self, client, admin, customer):
        product_id = _product(client, admin)
        order_id = _place_order(client, customer, product_id).json()["order"]["_id"]
        client.put(f"/orders/{order_id}/status", json={"orderStatus": "Delivered"}, headers=admin)
        return order_id

    def test_upi_return_then_duplicate_rejected(self, client, admin, customer):
        order_id = self._delivered_order(client, admin, customer)
        body = {"requestType": "Return", "reason": "Wheel broke", "refundMode": "UPI", "upiId": "a@upi"}

        response = client.post(f"/orders/{order_id}/return-exchange", json=body, headers=customer)
        assert response.status_code == 201
        assert response.json()["request"]["status"] == "Requested"

        response = client.post(f"/orders/{order_id}/return-exchange", json=body, headers=customer)
        assert response.status_code == 400
        assert response.json()["message"] == "An active return/exchange request already exists for this order"

    def test_not_delivered(self, client, admin, customer):
        product_id = _product(client, admin)
        order_id = _place_order(client, customer, product_id).json()["order"]["_id"]
        body = {"requestType": "Return", "refundMode": "UPI", "upiId": "a@upi"}
        response = client.post(f"/orders/{order_id}/return-exchange", json=body, headers=customer)
        assert response.status_code == 400

    def test_not_owner(self, client, admin, customer, other_customer):
        order_id = self._delivered_order(client, admin, customer)
        body = {"requestType": "Return", "refundMode": "UPI", "upiId": "a@upi"}
        response = client.post(f"/orders/{order_id}/return-exchange", json=body, headers=other_customer)
        assert response.status_code == 403

    def test_non_owner_gets_403_before_delivery(self, client, admin, customer, other_customer):
        product_id = _product(client, admin)
        order_id = _place_order(client, customer, product_id).json()["order"]["_id"]
        body = {"requestType": "Return", "refundMode": "UPI", "upiId": "a@upi"}
        response = client.post(f"/orders/{order_id}/return-exchange", json=body, headers=other_customer)
        assert response.status_code == 403

    def test_exchange_price_must_be_higher(self, client, admin, customer):
        order_id = self._delivered_order(client, admin, customer)
        body = {
            "requestType": "Exchange",
            "requestedProductName": "Voyager Large",
            "requestedProductColor": "Navy",
            "requestedProductPrice": 1600,
        }
        assert client.post(f"/orders/{order_id}/return-exchange", json=body, headers=customer).status_code == 400

        body["requestedProductPrice"] = 2000
        response = client.post(f"/orders/{order_id}/return-exchange", json=body, headers=customer)
        assert response.status_code == 201
        assert response.json()["request"]["exchangeDetails"]["extraPayable"] == 400

    def test_admin_queue_and_status_update(self, client, admin, customer):
        order_id = self._delivered_order(client, admin, customer)
        body = {
            "requestType": "Return",
            "refundMode": "Bank",
            "accountHolderName": "Asha Rao",
            "accountNumber": "001122334455",
            "ifscCode": "hdfc0000123",
            "bankName": "HDFC",
        }
        request_id = client.post(f"/orders/{order_id}/return-exchange", json=body, headers=customer).json()[
            "request"
        ]["_id"]

        rows = client.get("/orders/returns", headers=admin).json()["requests"]
        assert len(rows) == 1
        assert rows[0]["refundDetails"]["ifscCode"] == "HDFC0000123"
        assert len(client.get("/orders/returns", params={"limit": 0}, headers=admin).json()["requests"]) == 1
        assert len(client.get("/orders/returns", params={"limit": 5000}, headers=admin).json()["requests"]) == 1

        response = client.put(f"/orders/returns/{request_id}/status", json={"status": "Approved"}, headers=admin)
        assert response.status_code == 200
        assert response.json()["order"]["returnExchangeRequests"][0]["status"] == "Approved"

        response = client.put(f"/orders/returns/{request_id}/status", json={"status": "Refunded"}, headers=admin)
        assert response.status_code == 400
        assert client.put("/orders/returns/req-404/status", json={"status": "Approved"}, headers=admin).status_code == 404


class TestAnalyticsEndpoint:
    def test_analytics(self, client, admin, customer):
        product_id = _product(client, admin)
        _place_order(client, customer, product_id)

        analytics = client.get("/orders/analytics", headers=admin).json()["analytics"]

        assert analytics["totalOrders"] == 1
        assert analytics["pendingOrders"] == 1
        assert analytics["totalRevenue"] == 0
        assert analytics["monthlyOrders"][0]["count"] == 1
