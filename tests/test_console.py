from decimal import Decimal
from unittest.mock import patch

import pytest
from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile

from shop.auth import ADMIN_SESSION_KEY
from shop.cart import Cart
from shop.console_views import dashboard_stats, filter_orders
from shop.models import Order, OrderStatus, PaymentMethod, PaymentStatus, Product

from .conftest import STAFF_EMAIL, STAFF_PASSWORD


def make_order(number, **kwargs):
    kwargs.setdefault("customer_name", "Ali Raza")
    kwargs.setdefault("customer_phone", "03001234567")
    kwargs.setdefault("delivery_address", "G-9, Islamabad")
    kwargs.setdefault("total_amount", Decimal("100.00"))
    kwargs.setdefault("subtotal", kwargs["total_amount"])
    return Order.objects.create(order_number=number, **kwargs)


@pytest.mark.django_db
class TestAdminAuthGate:
    """Console login, logout and gating"""

    def test_console_requires_login(self, client):
        for url in ("/console/", "/console/orders/", "/console/products/"):
            response = client.get(url)
            assert response.status_code == 302
            assert response.url == "/console/login/"

    def test_login_stores_marker(self, client, staff_user):
        response = client.post("/console/login/", {"email": STAFF_EMAIL, "password": STAFF_PASSWORD})

        assert response.status_code == 302
        assert response.url == "/console/"
        assert client.session[ADMIN_SESSION_KEY] == {
            "id": staff_user.pk,
            "email": STAFF_EMAIL,
            "full_name": "Imran Khattak",
        }

    def test_full_name_falls_back_to_admin(self, client, staff_user):
        staff_user.first_name = staff_user.last_name = ""
        staff_user.save()
        client.post("/console/login/", {"email": STAFF_EMAIL, "password": STAFF_PASSWORD})
        assert client.session[ADMIN_SESSION_KEY]["full_name"] == "Admin"

    def test_wrong_password(self, client, staff_user):
        response = client.post("/console/login/", {"email": STAFF_EMAIL, "password": "nope"})
        assert response.status_code == 200
        assert "Invalid credentials" in response.content.decode()
        assert ADMIN_SESSION_KEY not in client.session

    def test_non_staff_user_is_refused(self, client, db):
        get_user_model().objects.create_user(
            username="shopper", email="shopper@example.com", password=STAFF_PASSWORD,
        )
        response = client.post("/console/login/", {"email": "shopper@example.com", "password": STAFF_PASSWORD})
        assert response.status_code == 200
        assert ADMIN_SESSION_KEY not in client.session

    def test_logout_clears_marker(self, console_client):
        response = console_client.post("/console/logout/")
        assert response.status_code == 302
        assert ADMIN_SESSION_KEY not in console_client.session
        assert console_client.get("/console/").status_code == 302

    def test_logout_keeps_shopper_cart(self, client, staff_user, milk):
        client.post(f"/cart/add/{milk.pk}/")
        client.post("/console/login/", {"email": STAFF_EMAIL, "password": STAFF_PASSWORD})

        client.post("/console/logout/")

        assert ADMIN_SESSION_KEY not in client.session
        assert Cart(client.session).get_count() == 1

    def test_logged_in_user_skips_login_page(self, console_client):
        response = console_client.get("/console/login/")
        assert response.url == "/console/"


@pytest.mark.django_db
class TestDashboard:

    def test_stats(self):
        make_order("KM-1", total_amount=Decimal("300.00"))
        make_order("KM-2", total_amount=Decimal("200.50"), payment_method=PaymentMethod.EASYPAISA,
                   order_status=OrderStatus.CONFIRMED)
        make_order("KM-3", total_amount=Decimal("99.50"), order_status=OrderStatus.DELIVERED)

        stats = dashboard_stats()
        assert stats["total_orders"] == 3
        assert stats["pending_orders"] == 1
        assert stats["cod_orders"] == 2
        assert stats["easypaisa_orders"] == 1
        assert stats["total_revenue"] == Decimal("600.00")
        assert stats["today_orders"] == 3

    def test_stats_without_orders(self):
        assert dashboard_stats()["total_revenue"] == Decimal("0.00")

    def test_dashboard_page(self, console_client):
        make_order("KM-20250101-0001")
        response = console_client.get("/console/")
        body = response.content.decode()
        assert response.status_code == 200
        assert "Welcome, Imran Khattak" in body
        assert "KM-20250101-0001" in body


@pytest.mark.django_db
class TestOrderManagement:

    def test_filter_orders(self):
        make_order("KM-A1", customer_name="Sara Ahmed", customer_phone="03111111111")
        make_order("KM-B2", customer_name="Bilal", customer_phone="03222222222",
                   order_status=OrderStatus.DELIVERED)

        qs = Order.objects.all()
        assert [o.order_number for o in filter_orders(qs, "sara")] == ["KM-A1"]
        assert [o.order_number for o in filter_orders(qs, "km-b")] == ["KM-B2"]
        assert [o.order_number for o in filter_orders(qs, "0322")] == ["KM-B2"]
        assert [o.order_number for o in filter_orders(qs, "", OrderStatus.DELIVERED)] == ["KM-B2"]
        assert filter_orders(qs, "", "ALL").count() == 2

    def test_order_list_page_filters(self, console_client):
        make_order("KM-A1")
        make_order("KM-B2", order_status=OrderStatus.CANCELLED)
        response = console_client.get("/console/orders/", {"status": "CANCELLED"})
        body = response.content.decode()
        assert "KM-B2" in body
        assert "KM-A1" not in body

    def test_order_detail(self, console_client):
        order = make_order("KM-A1")
        order.items.create(product_name="Milk", product_price=Decimal("50.00"), quantity=2,
                           subtotal=Decimal("100.00"))
        response = console_client.get(f"/console/orders/{order.pk}/")
        body = response.content.decode()
        assert response.status_code == 200
        assert "Milk" in body
        assert "https://wa.me/" in body

    def test_update_order_status(self, console_client):
        order = make_order("KM-A1")
        other = make_order("KM-A2")

        response = console_client.post(f"/console/orders/{order.pk}/status/", {"order_status": "CONFIRMED"})

        assert response.status_code == 302
        order.refresh_from_db()
        other.refresh_from_db()
        assert order.order_status == OrderStatus.CONFIRMED
        assert other.order_status == OrderStatus.PENDING

    def test_update_payment_status(self, console_client):
        order = make_order("KM-A1", payment_method=PaymentMethod.EASYPAISA,
                           payment_status=PaymentStatus.VERIFICATION_PENDING)
        console_client.post(f"/console/orders/{order.pk}/payment/", {"payment_status": "PAID"})
        order.refresh_from_db()
        assert order.payment_status == PaymentStatus.PAID

    def test_invalid_status_is_rejected(self, console_client):
        order = make_order("KM-A1")
        console_client.post(f"/console/orders/{order.pk}/status/", {"order_status": "SHIPPED"})
        order.refresh_from_db()
        assert order.order_status == OrderStatus.PENDING

    def test_status_update_requires_login(self, client):
        order = make_order("KM-A1")
        response = client.post(f"/console/orders/{order.pk}/status/", {"order_status": "CONFIRMED"})
        assert response.status_code == 302
        order.refresh_from_db()
        assert order.order_status == OrderStatus.PENDING


@pytest.mark.django_db
class TestProductManagement:

    def product_data(self, category, **overrides):
        data = {
            "category": category.pk,
            "name": "Frozen Paratha",
            "slug": "",
            "description": "Pack of 5",
            "price": "320.00",
            "image_url": "",
            "manufacturing_date": "",
            "expiry_date": "",
            "stock_quantity": "40",
            "is_available": "on",
            "is_active": "on",
        }
        data.update(overrides)
        return data

    def test_create_product(self, console_client, category):
        response = console_client.post("/console/products/new/", self.product_data(category))
        assert response.status_code == 302
        product = Product.objects.get(name="Frozen Paratha")
        assert product.slug == "frozen-paratha"
        assert product.price == Decimal("320.00")

    def test_create_with_uploaded_image(self, console_client, category):
        url = "https://res.cloudinary.com/demo/image/upload/products/p.png"
        data = self.product_data(category)
        data["image_file"] = SimpleUploadedFile("p.png", b"\x89PNG data", content_type="image/png")
        with patch("cloudinary.uploader.upload", return_value={"secure_url": url}):
            console_client.post("/console/products/new/", data)
        assert Product.objects.get().image_url == url

    def test_negative_price_is_rejected(self, console_client, category):
        response = console_client.post("/console/products/new/", self.product_data(category, price="-1"))
        assert response.status_code == 200
        assert not Product.objects.exists()

    def test_expiry_before_manufacturing_is_rejected(self, console_client, category):
        data = self.product_data(category, manufacturing_date="2025-05-01", expiry_date="2025-04-01")
        console_client.post("/console/products/new/", data)
        assert not Product.objects.exists()

    def test_edit_product(self, console_client, category, milk):
        data = self.product_data(category, name="Milk 1.5L", slug=milk.slug, price="300.00")
        console_client.post(f"/console/products/{milk.pk}/", data)
        milk.refresh_from_db()
        assert milk.name == "Milk 1.5L"
        assert milk.price == Decimal("300.00")

    def test_delete_product_keeps_order_snapshot(self, console_client, milk):
        order = make_order("KM-A1")
        item = order.items.create(product=milk, product_name=milk.name, product_price=milk.price,
                                  quantity=1, subtotal=milk.price)

        response = console_client.post(f"/console/products/{milk.pk}/delete/")

        assert response.status_code == 302
        assert not Product.objects.filter(pk=milk.pk).exists()
        item.refresh_from_db()
        assert item.product is None
        assert item.product_name == "Milk 1L"
