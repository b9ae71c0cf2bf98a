"""HTTP tests for the /products endpoints."""
from app.models.bills import BillProduct

PRODUCT = {
    "name": "Test Product",
    "description": "Description of test product",
    "price": 100000,
    "quantity": 100000,
}


def test_product_lifecycle(client):
    response = client.post("/products/", json=PRODUCT)
    assert response.status_code == 201
    product = response.json()
    assert {k: product[k] for k in PRODUCT} == PRODUCT

    assert client.get(f"/products/{product['id']}").json() == product
    assert product["id"] in [p["id"] for p in client.get("/products/").json()]

    updated = dict(PRODUCT, name="Updated Test Product", price=50000, quantity=50000)
    response = client.patch(f"/products/{product['id']}", json=updated)
    assert response.status_code == 200
    assert client.get(f"/products/{product['id']}").json()["name"] == "Updated Test Product"

    assert client.delete(f"/products/{product['id']}").status_code == 200
    assert client.get(f"/products/{product['id']}").status_code == 404


def test_non_positive_price_is_rejected(client):
    response = client.post("/products/", json=dict(PRODUCT, price=0))

    assert response.status_code == 422


def test_missing_product(client):
    assert client.get("/products/9999").status_code == 404
    assert client.patch("/products/9999", json=PRODUCT).status_code == 404
    assert client.delete("/products/9999").status_code == 404


def test_product_on_a_bill_cannot_be_deleted(client, writer, make_customer, make_product):
    p1 = make_product()
    writer.create_bill(make_customer(), [BillProduct(product=p1, quantity=1)])

    response = client.delete(f"/products/{p1}")

    assert response.status_code == 409
    assert client.get(f"/products/{p1}").status_code == 200
