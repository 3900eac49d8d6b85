from decimal import Decimal

import pytest

from shop.cart import CART_SESSION_KEY, Cart


@pytest.mark.django_db
class TestCartMutations:
    """Add / update / remove behaviour of the session cart"""

    def test_adding_same_product_twice_merges_quantity(self, cart, milk):
        cart.add(milk, 1)
        cart.add(milk, 2)

        lines = cart.lines()
        assert len(lines) == 1
        assert lines[0].quantity == 3
        assert len(cart) == 1

    def test_add_rejects_non_positive_quantity(self, cart, milk):
        with pytest.raises(ValueError):
            cart.add(milk, 0)
        assert cart.is_empty

    def test_update_to_zero_removes_line(self, cart, milk, bread):
        cart.add(milk, 2)
        cart.add(bread, 1)

        cart.update(milk.pk, 0)

        assert cart.quantity_of(milk.pk) == 0
        assert [line.name for line in cart] == ["Bread"]

    def test_update_negative_removes_line(self, cart, milk):
        cart.add(milk, 2)
        cart.update(milk.pk, -3)
        assert cart.is_empty

    def test_update_sets_quantity(self, cart, milk):
        cart.add(milk, 1)
        cart.update(str(milk.pk), 5)
        assert cart.quantity_of(milk.pk) == 5

    def test_update_unknown_product_is_ignored(self, cart, milk):
        cart.add(milk, 1)
        cart.update(99999, 4)
        assert len(cart) == 1
        assert cart.get_count() == 1

    def test_remove_and_clear(self, cart, milk, bread):
        cart.add(milk)
        cart.add(bread)

        cart.remove(milk.pk)
        assert len(cart) == 1

        cart.clear()
        assert cart.is_empty
        assert cart.get_total() == Decimal("0.00")


@pytest.mark.django_db
class TestCartTotals:
    """Derived totals"""

    def test_total_is_sum_of_price_times_quantity(self, cart, milk, bread):
        cart.add(milk, 2)       # 500.00
        cart.add(bread, 3)      # 361.50
        assert cart.get_total() == Decimal("861.50")
        assert cart.get_count() == 5

    def test_total_tracks_a_sequence_of_operations(self, cart, milk, bread, make_product):
        eggs = make_product("Eggs (dozen)", "390.00")
        cart.add(milk, 1)
        cart.add(eggs, 2)
        cart.add(bread, 1)
        cart.update(eggs.pk, 1)
        cart.add(milk, 2)
        cart.remove(bread.pk)

        expected = sum(line.price * line.quantity for line in cart.lines())
        assert cart.get_total() == expected == Decimal("1140.00")
        assert cart.get_count() == 4

    def test_line_subtotal(self, cart, bread):
        cart.add(bread, 2)
        assert cart.lines()[0].subtotal == Decimal("241.00")


@pytest.mark.django_db
class TestCartSession:
    """The cart persists in the session between requests"""

    def test_state_is_visible_to_a_new_cart_on_same_session(self, session, milk):
        Cart(session).add(milk, 2)

        again = Cart(session)
        assert again.quantity_of(milk.pk) == 2
        assert session.modified is True

    def test_stored_values_are_json_safe(self, session, milk):
        Cart(session).add(milk, 1)
        entry = session[CART_SESSION_KEY][str(milk.pk)]
        assert entry == {"name": "Milk 1L", "price": "250.00", "image_url": "", "quantity": 1}

    def test_reading_does_not_touch_session(self, session):
        Cart(session).get_count()
        assert CART_SESSION_KEY not in session
