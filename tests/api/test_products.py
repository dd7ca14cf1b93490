from models.products import Product
from models.product_images import ProductImage


async def test_list_products_public(client, product, make_sale):
    make_sale(product, sale_price="200.00", discount="20.00", quantity=10, quantity_sold=2)

    response = await client.get("/api/products")

    assert response.status_code == 200
    [item] = response.json()["items"]
    assert item["id"] == product.id
    assert item["category"] == "Eggs"
    assert item["price"] == 200.0
    assert item["originalPrice"] == 250.0
    assert item["listPrice"] == 250.0
    assert item["isOnSale"] is True
    assert item["saleInfo"]["remainingQuantity"] == 8
    assert item["image"] == "/uploads/brown-eggs.jpg"


async def test_get_product_with_images(client, product):
    response = await client.get(f"/api/products/{product.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["isOnSale"] is False
    assert data["originalPrice"] is None
    assert data["images"] == [{"url": "/uploads/brown-eggs.jpg", "alt": product.name, "isPrimary": True}]


async def test_get_unknown_product(client):
    response = await client.get("/api/products/999")

    assert response.status_code == 404
    assert response.json() == {"error": "Product not found"}


async def test_create_product_as_admin(client, session, login_as, admin, eggs_category):
    login_as(admin)

    response = await client.post("/api/products", json={
        "name": "Quail Eggs (Pack of 24)",
        "category": "Eggs",
        "price": 95.5,
        "stock": 40,
        "description": "Small but mighty",
        "images": ["/uploads/quail-1.jpg", "/uploads/quail-2.jpg"]
    })

    assert response.status_code == 201
    product_id = response.json()["id"]

    product = session.get(Product, product_id)
    assert product.status == "active"
    assert [(i.image_url, i.is_primary) for i in product.images] == [
        ("/uploads/quail-1.jpg", True),
        ("/uploads/quail-2.jpg", False)
    ]


async def test_create_product_low_stock_is_inactive(client, session, login_as, admin, eggs_category):
    login_as(admin)

    response = await client.post("/api/products", json={
        "name": "Goose Eggs", "category": "Eggs", "price": 60, "stock": 10
    })

    assert session.get(Product, response.json()["id"]).status == "inactive"


async def test_create_product_unknown_category(client, login_as, admin, eggs_category):
    login_as(admin)

    response = await client.post("/api/products", json={
        "name": "Turkey Chick", "category": "Poults", "price": 150, "stock": 20
    })

    assert response.status_code == 400
    assert response.json() == {"error": "Category not found"}


async def test_create_product_requires_admin(client, login_as, customer, eggs_category):
    login_as(customer)

    response = await client.post("/api/products", json={
        "name": "Goose Eggs", "category": "Eggs", "price": 60, "stock": 10
    })

    assert response.status_code == 403
    assert response.json() == {"error": "Not authorized"}


async def test_create_product_requires_login(client, eggs_category):
    response = await client.post("/api/products", json={
        "name": "Goose Eggs", "category": "Eggs", "price": 60, "stock": 10
    })

    assert response.status_code == 401


async def test_update_product_rederives_status(client, session, login_as, admin, product):
    login_as(admin)

    response = await client.put(f"/api/products/{product.id}", json={
        "name": product.name, "category": "Eggs", "price": 260, "stock": 4
    })

    assert response.status_code == 200
    session.expire_all()
    updated = session.get(Product, product.id)
    assert updated.status == "inactive"
    assert updated.stock == 4
    # images untouched when omitted
    assert len(updated.images) == 1


async def test_update_product_replaces_images(client, session, login_as, admin, product):
    login_as(admin)

    await client.put(f"/api/products/{product.id}", json={
        "name": product.name, "category": "Eggs", "price": 250, "stock": 50,
        "images": ["/uploads/new.jpg"]
    })

    session.expire_all()
    assert [i.image_url for i in session.query(ProductImage).all()] == ["/uploads/new.jpg"]


async def test_delete_product(client, session, login_as, admin, product):
    login_as(admin)

    response = await client.delete(f"/api/products/{product.id}")

    assert response.status_code == 200
    assert session.query(Product).count() == 0
    assert session.query(ProductImage).count() == 0

    response = await client.delete(f"/api/products/{product.id}")
    assert response.status_code == 404


async def test_list_categories(client, eggs_category):
    response = await client.get("/api/categories")

    assert response.status_code == 200
    assert response.json()["categories"][0]["name"] == "Eggs"
