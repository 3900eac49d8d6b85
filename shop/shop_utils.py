# shop/shop_utils.py
from decimal import Decimal, InvalidOperation

from .cart import Cart


def get_cart_count(request):
    """
    Returns the total item count in the session cart.
    """
    return Cart(request.session).get_count()


def format_rupees(value):
    """Render an amount the way the shop prints prices: ``Rs. 1,250``."""
    try:
        amount = Decimal(value).quantize(Decimal('0.01'))
    except (InvalidOperation, TypeError, ValueError):
        return "Rs. 0"
    if amount == amount.to_integral_value():
        return f"Rs. {int(amount):,}"
    return f"Rs. {amount:,.2f}"
