"""HTTP-контракт: коды ответов, авторизация, формат ошибок."""

from decimal import Decimal

import pytest


async def add(client, headers, item_id, quantity=1, **extra):
    return await client.post("/cart", json={"item_id": item_id, "quantity": quantity, **extra}, headers=headers)


class TestAuth:
    async def test_missing_token(self, client, world):
        resp = await client.get("/cart")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Access token required"

    async def test_unknown_token(self, client, world):
        resp = await client.get("/cart", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    async def test_deactivated_account(self, client, world, auth):
        resp = await client.get("/cart", headers=auth(world.inactive))
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Account is deactivated"

    async def test_owner_cannot_use_cart(self, client, world, auth):
        resp = await client.get("/cart", headers=auth(world.owner))
        assert resp.status_code == 403

    async def test_customer_cannot_manage_orders(self, client, world, auth):
        resp = await client.get("/restaurant/orders", headers=auth(world.customer))
        assert resp.status_code == 403

    async def test_me(self, client, world, auth):
        resp = await client.get("/users/me", headers=auth(world.customer))
        assert resp.status_code == 200
        assert resp.json()["email"] == "asha@example.com"
        assert resp.json()["role"] == "customer"


async def test_health(client, world):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["database"] == "connected"


class TestCartEndpoints:
    async def test_empty_cart_view(self, client, world, auth):
        resp = await client.get("/cart", headers=auth(world.customer))
        assert resp.status_code == 200
        body = resp.json()
        assert body["items"] == []
        assert body["item_count"] == 0
        assert Decimal(body["total_amount"]) == 0

    async def test_add_and_view(self, client, world, auth):
        headers = auth(world.customer)
        await add(client, headers, world.biryani.id)
        resp = await add(client, headers, world.naan.id, quantity=2)
        assert resp.status_code == 200

        body = (await client.get("/cart", headers=headers)).json()
        assert body["item_count"] == 3
        assert Decimal(body["subtotal"]) == Decimal("410.00")
        assert Decimal(body["tax"]) == Decimal("20.50")
        assert Decimal(body["total_amount"]) == Decimal("460.50")

    async def test_add_errors(self, client, world, auth):
        headers = auth(world.customer)
        assert (await add(client, headers, 9999)).status_code == 404
        assert (await add(client, headers, world.jamun.id)).status_code == 400

        await add(client, headers, world.biryani.id)
        resp = await add(client, headers, world.dosa.id)
        assert resp.status_code == 400
        assert "different restaurants" in resp.json()["detail"]

    async def test_add_validation_error_is_400(self, client, world, auth):
        resp = await add(client, auth(world.customer), world.naan.id, quantity=0)
        assert resp.status_code == 400
        body = resp.json()
        assert body["detail"] == "Validation failed"
        assert body["errors"][0]["field"] == "quantity"

    async def test_missing_field_is_400(self, client, world, auth):
        resp = await client.post("/cart", json={}, headers=auth(world.customer))
        assert resp.status_code == 400
        assert [e["field"] for e in resp.json()["errors"]] == ["item_id"]

    async def test_update_and_remove(self, client, world, auth):
        headers = auth(world.customer)
        await add(client, headers, world.naan.id)

        resp = await client.put(f"/cart/{world.naan.id}", json={"quantity": 5}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["items"][0]["quantity"] == 5

        assert (await client.put(f"/cart/{world.naan.id}", json={"quantity": 0}, headers=headers)).status_code == 400
        assert (await client.put(f"/cart/{world.biryani.id}", json={"quantity": 1}, headers=headers)).status_code == 404

        resp = await client.delete(f"/cart/{world.naan.id}", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["items"] == []
        assert (await client.delete(f"/cart/{world.naan.id}", headers=headers)).status_code == 404

    async def test_update_without_cart_is_404(self, client, world, auth):
        resp = await client.put(f"/cart/{world.naan.id}", json={"quantity": 2}, headers=auth(world.customer))
        assert resp.status_code == 404

    async def test_clear(self, client, world, auth):
        headers = auth(world.customer)
        await add(client, headers, world.naan.id)

        resp = await client.delete("/cart", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["message"] == "Cart cleared successfully"

        resp = await client.delete("/cart", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["message"] == "Cart is already empty"


class TestCheckout:
    async def test_checkout_creates_order(self, client, world, auth):
        headers = auth(world.customer)
        await add(client, headers, world.biryani.id)
        await add(client, headers, world.naan.id, quantity=2)

        resp = await client.post(
            "/cart/checkout",
            json={"delivery_address_id": world.address.id, "payment_method": "online"},
            headers=headers,
        )

        assert resp.status_code == 201
        order = resp.json()
        assert order["order_number"].startswith("ORD")
        assert order["status"] == "placed"
        assert order["payment_method"] == "online"
        assert order["payment_status"] == "pending"
        assert Decimal(order["total_amount"]) == Decimal("460.50")
        assert order["delivery_address"]["city"] == "Bengaluru"
        assert len(order["tracking_history"]) == 1

        assert (await client.get("/cart", headers=headers)).json()["items"] == []

    async def test_checkout_failures(self, client, world, auth):
        headers = auth(world.customer)
        body = {"delivery_address_id": world.address.id}

        assert (await client.post("/cart/checkout", json=body, headers=headers)).status_code == 404

        await add(client, headers, world.naan.id)
        resp = await client.post("/cart/checkout", json=body, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Minimum order amount is 150.00"

        resp = await client.post(
            "/cart/checkout", json={"delivery_address_id": world.other_address.id}, headers=headers
        )
        assert resp.status_code == 404

    async def test_empty_cart_checkout(self, client, world, auth):
        headers = auth(world.customer)
        await add(client, headers, world.naan.id)
        await client.delete(f"/cart/{world.naan.id}", headers=headers)

        resp = await client.post("/cart/checkout", json={"delivery_address_id": world.address.id}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Cart is empty"


class TestCustomerOrders:
    async def _place(self, client, headers, world):
        resp = await client.post(
            "/customer/orders",
            json={
                "restaurant_id": world.restaurant.id,
                "delivery_address_id": world.address.id,
                "items": [{"item_id": world.biryani.id, "quantity": 1}],
            },
            headers=headers,
        )
        assert resp.status_code == 201
        return resp.json()

    async def test_direct_order_and_views(self, client, world, auth):
        headers = auth(world.customer)
        order = await self._place(client, headers, world)

        resp = await client.get(f"/customer/orders/{order['id']}", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["order_number"] == order["order_number"]

        resp = await client.get(f"/customer/orders/{order['id']}/track", headers=headers)
        assert resp.status_code == 200
        assert [e["status"] for e in resp.json()["tracking_history"]] == ["placed"]

        resp = await client.get("/customer/orders", headers=headers)
        assert resp.json()["pagination"] == {"page": 1, "limit": 10, "total": 1, "pages": 1}

    async def test_direct_order_requires_items(self, client, world, auth):
        resp = await client.post(
            "/customer/orders",
            json={"restaurant_id": world.restaurant.id, "delivery_address_id": world.address.id, "items": []},
            headers=auth(world.customer),
        )
        assert resp.status_code == 400

    async def test_direct_order_item_mismatch(self, client, world, auth):
        resp = await client.post(
            "/customer/orders",
            json={
                "restaurant_id": world.restaurant.id,
                "delivery_address_id": world.address.id,
                "items": [{"item_id": world.dosa.id, "quantity": 2}],
            },
            headers=auth(world.customer),
        )
        assert resp.status_code == 400

    async def test_foreign_order_is_forbidden(self, client, world, auth):
        order = await self._place(client, auth(world.customer), world)

        resp = await client.get(f"/customer/orders/{order['id']}", headers=auth(world.other_customer))
        assert resp.status_code == 403
        resp = await client.get("/customer/orders/9999", headers=auth(world.customer))
        assert resp.status_code == 404


class TestRestaurantOrders:
    async def _order_id(self, client, world, auth):
        resp = await client.post(
            "/customer/orders",
            json={
                "restaurant_id": world.restaurant.id,
                "delivery_address_id": world.address.id,
                "items": [{"item_id": world.biryani.id, "quantity": 1}],
            },
            headers=auth(world.customer),
        )
        return resp.json()["id"]

    async def test_status_flow(self, client, world, auth):
        order_id = await self._order_id(client, world, auth)
        headers = auth(world.owner)

        resp = await client.patch(
            f"/restaurant/orders/{order_id}/status",
            json={"status": "confirmed", "message": "Order confirmed", "estimated_delivery_time": "2026-10-17T13:30:00Z"},
            headers=headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "confirmed"
        assert body["estimated_delivery_time"] is not None
        assert [e["status"] for e in body["tracking_history"]] == ["placed", "confirmed"]
        assert body["tracking_history"][-1]["updated_by_id"] == world.owner.id

        resp = await client.patch(
            f"/restaurant/orders/{order_id}/status",
            json={"status": "placed", "message": "back"},
            headers=headers,
        )
        assert resp.status_code == 400

        resp = await client.get("/restaurant/orders", params={"status": "confirmed"}, headers=headers)
        assert resp.status_code == 200
        assert [o["id"] for o in resp.json()["orders"]] == [order_id]

    async def test_other_restaurant_cannot_see_order(self, client, world, auth):
        order_id = await self._order_id(client, world, auth)
        headers = auth(world.other_owner)

        assert (await client.get(f"/restaurant/orders/{order_id}", headers=headers)).status_code == 404
        resp = await client.patch(
            f"/restaurant/orders/{order_id}/status",
            json={"status": "confirmed", "message": "ok"},
            headers=headers,
        )
        assert resp.status_code == 404

    @pytest.mark.parametrize("payload", [{"status": "confirmed"}, {"status": "shipped", "message": "x"}])
    async def test_invalid_status_payload(self, client, world, auth, payload):
        order_id = await self._order_id(client, world, auth)
        resp = await client.patch(f"/restaurant/orders/{order_id}/status", json=payload, headers=auth(world.owner))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Validation failed"
