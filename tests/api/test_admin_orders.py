from models.products import Product
from models.notifications import Notification


async def _place(client, login_as, user, product, quantity=2):
    login_as(user)
    response = await client.post("/api/orders", json={
        "productId": product.id,
        "quantity": quantity,
        "customerInfo": {"name": "Juan Dela Cruz", "email": "customer@example.com", "phone": "09171234567"},
        "paymentMethod": "cod"
    })
    return response.json()


async def test_admin_lists_all_orders(client, login_as, admin, customer, product):
    placed = await _place(client, login_as, customer, product)
    login_as(admin)

    response = await client.get("/api/admin/orders")

    assert response.status_code == 200
    [order] = response.json()["orders"]
    assert order["orderNumber"] == placed["orderNumber"]
    assert order["items"] == f"2x {product.name}"
    assert order["deliveryMethod"] == "pickup"


async def test_admin_order_routes_require_admin(client, login_as, customer, product):
    placed = await _place(client, login_as, customer, product)

    assert (await client.get("/api/admin/orders")).status_code == 403
    assert (await client.get(f"/api/admin/orders/{placed['orderId']}/receipt")).status_code == 403
    response = await client.put(f"/api/admin/orders/{placed['orderId']}", json={"status": "cancelled"})
    assert response.status_code == 403


async def test_admin_order_detail_and_receipt(client, login_as, admin, customer, product):
    placed = await _place(client, login_as, customer, product)
    login_as(admin)

    detail = (await client.get(f"/api/admin/orders/{placed['orderId']}")).json()["order"]
    assert detail["items"][0]["quantity"] == 2
    assert detail["totalAmount"] == 500.0

    receipt = (await client.get(f"/api/admin/orders/{placed['orderId']}/receipt")).json()["receipt"]
    assert set(receipt) == {"store", "order", "items", "totals"}
    assert receipt["totals"] == {"subtotal": 500.0, "deliveryFee": 0.0, "total": 500.0}

    assert (await client.get("/api/admin/orders/999/receipt")).status_code == 404


async def test_cancel_and_restore(client, session, login_as, admin, customer, product):
    placed = await _place(client, login_as, customer, product, quantity=5)
    login_as(admin)

    response = await client.put(f"/api/admin/orders/{placed['orderId']}", json={"status": "cancelled"})
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Order status updated to cancelled",
        "stockUpdated": True
    }
    session.expire_all()
    assert session.get(Product, product.id).stock == 50

    response = await client.put(f"/api/admin/orders/{placed['orderId']}", json={"status": "confirmed"})
    assert response.json()["stockUpdated"] is True
    session.expire_all()
    assert session.get(Product, product.id).stock == 45

    titles = [n.title for n in session.query(Notification).filter(
        Notification.type == "order_status"
    ).order_by(Notification.id)]
    assert titles == ["Order Cancelled", "Order Confirmed"]


async def test_invalid_status(client, login_as, admin, customer, product):
    placed = await _place(client, login_as, customer, product)
    login_as(admin)

    response = await client.put(f"/api/admin/orders/{placed['orderId']}", json={"status": "lost"})

    assert response.status_code == 400


async def test_unknown_order_status_update(client, login_as, admin):
    login_as(admin)

    response = await client.put("/api/admin/orders/999", json={"status": "shipped"})

    assert response.status_code == 404
