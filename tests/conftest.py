"""
Shared pytest fixtures: catalog rows, a staff account and a logged-in
console client.
"""
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.contrib.sessions.backends.signed_cookies import SessionStore

from shop.cart import Cart
from shop.models import Category, Product

STAFF_EMAIL = "owner@khattakmart.pk"
STAFF_PASSWORD = "s3cret-pass-123"


@pytest.fixture
def session():
    return SessionStore()


@pytest.fixture
def cart(session):
    return Cart(session)


@pytest.fixture
def category(db):
    return Category.objects.create(name="Dairy", slug="dairy", display_order=1)


@pytest.fixture
def make_product(db, category):
    def _make(name="Milk 1L", price="250.00", **kwargs):
        kwargs.setdefault("category", category)
        kwargs.setdefault("stock_quantity", 10)
        return Product.objects.create(name=name, price=Decimal(price), **kwargs)
    return _make


@pytest.fixture
def milk(make_product):
    return make_product("Milk 1L", "250.00")


@pytest.fixture
def bread(make_product):
    return make_product("Bread", "120.50")


@pytest.fixture
def staff_user(db):
    User = get_user_model()
    return User.objects.create_user(
        username="owner",
        email=STAFF_EMAIL,
        password=STAFF_PASSWORD,
        first_name="Imran",
        last_name="Khattak",
        is_staff=True,
    )


@pytest.fixture
def console_client(client, staff_user):
    response = client.post("/console/login/", {"email": STAFF_EMAIL, "password": STAFF_PASSWORD})
    assert response.status_code == 302
    return client
