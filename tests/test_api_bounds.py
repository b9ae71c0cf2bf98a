"""Integers outside the INTEGER column range are refused as invalid input."""
import pytest

TOO_BIG = 2**64

BILL = {"customer": 1, "products": [{"product": 1, "quantity": 1}]}
PRODUCT = {"name": "P", "description": "D", "price": 1, "quantity": 1}
CUSTOMER = {"first_name": "F", "last_name": "L"}


@pytest.mark.parametrize("method, url, body", [
    ("POST", "/bills/", dict(BILL, customer=TOO_BIG)),
    ("POST", "/bills/", dict(BILL, products=[{"product": TOO_BIG, "quantity": 1}])),
    ("POST", "/bills/", dict(BILL, products=[{"product": 1, "quantity": TOO_BIG}])),
    ("PATCH", "/bills/1", dict(BILL, customer=TOO_BIG)),
    ("PATCH", f"/bills/{TOO_BIG}", BILL),
    ("GET", f"/bills/{TOO_BIG}", None),
    ("DELETE", f"/bills/{TOO_BIG}", None),
    ("GET", f"/bills/{TOO_BIG}/products", None),
    ("POST", f"/bills/{TOO_BIG}/products", {"product": 1, "quantity": 1}),
    ("POST", "/bills/1/products", {"product": TOO_BIG, "quantity": 1}),
    ("POST", "/bills/1/products", {"product": 1, "quantity": TOO_BIG}),
    ("DELETE", f"/bills/1/products/{TOO_BIG}", None),
    ("DELETE", f"/bills/{TOO_BIG}/products/1", None),
    ("POST", "/products/", dict(PRODUCT, price=TOO_BIG)),
    ("POST", "/products/", dict(PRODUCT, quantity=TOO_BIG)),
    ("GET", f"/products/{TOO_BIG}", None),
    ("PATCH", f"/products/{TOO_BIG}", PRODUCT),
    ("DELETE", f"/products/{TOO_BIG}", None),
    ("GET", f"/customers/{TOO_BIG}", None),
    ("PATCH", f"/customers/{TOO_BIG}", CUSTOMER),
    ("DELETE", f"/customers/{TOO_BIG}", None),
])
def test_oversized_integers_are_rejected(client, method, url, body):
    response = client.request(method, url, json=body)

    assert response.status_code == 422


def test_largest_stored_integer_is_accepted(client):
    response = client.post("/products/", json=dict(PRODUCT, price=2**31 - 1))

    assert response.status_code == 201
    assert response.json()["price"] == 2**31 - 1


def test_unknown_id_in_range_is_not_found(client):
    assert client.get(f"/bills/{2**31 - 1}").status_code == 404
