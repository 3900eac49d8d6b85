"""
Session-backed shopping cart.

The cart lives in ``request.session['cart']`` as a mapping of product id
(string) to a small product snapshot plus quantity. Values stay JSON safe so
the default session serializer can store them; prices are kept as strings
and turned back into ``Decimal`` on read.
"""
from dataclasses import dataclass
from decimal import Decimal

CART_SESSION_KEY = 'cart'
LAST_ORDER_SESSION_KEY = 'last_order_number'
LAST_ORDER_WHATSAPP_KEY = 'last_order_whatsapp_url'

# Shopper state that outlives an admin logout in the same browser.
SHOPPER_SESSION_KEYS = (CART_SESSION_KEY, LAST_ORDER_SESSION_KEY, LAST_ORDER_WHATSAPP_KEY)


@dataclass(frozen=True)
class CartLine:
    product_id: str
    name: str
    price: Decimal
    quantity: int
    image_url: str = ''

    @property
    def subtotal(self):
        return self.price * self.quantity


class Cart:
    """One line per product; repeated adds merge into the existing line."""

    def __init__(self, session):
        self.session = session
        cart = session.get(CART_SESSION_KEY)
        self._data = cart if isinstance(cart, dict) else {}

    # -------------------------------
    # Mutations
    # -------------------------------
    def add(self, product, quantity=1):
        quantity = int(quantity)
        if quantity < 1:
            raise ValueError("quantity must be at least 1")

        key = str(product.pk)
        current = self._data.get(key, {}).get('quantity', 0)
        self._data[key] = {
            'name': product.name,
            'price': str(product.price),
            'image_url': product.image_url or '',
            'quantity': current + quantity,
        }
        self._save()
        return self._data[key]['quantity']

    def update(self, product_id, quantity):
        key = str(product_id)
        if key not in self._data:
            return
        quantity = int(quantity)
        if quantity <= 0:
            del self._data[key]
        else:
            self._data[key]['quantity'] = quantity
        self._save()

    def remove(self, product_id):
        if self._data.pop(str(product_id), None) is not None:
            self._save()

    def clear(self):
        self._data.clear()
        self._save()

    def _save(self):
        self.session[CART_SESSION_KEY] = self._data
        self.session.modified = True

    # -------------------------------
    # Reads
    # -------------------------------
    def lines(self):
        return [
            CartLine(
                product_id=key,
                name=entry['name'],
                price=Decimal(entry['price']),
                quantity=int(entry['quantity']),
                image_url=entry.get('image_url') or '',
            )
            for key, entry in self._data.items()
        ]

    def quantity_of(self, product_id):
        entry = self._data.get(str(product_id))
        return int(entry['quantity']) if entry else 0

    def get_total(self):
        total = Decimal('0.00')
        for line in self.lines():
            total += line.subtotal
        return total.quantize(Decimal('0.01'))

    def get_count(self):
        return sum(int(entry['quantity']) for entry in self._data.values())

    @property
    def is_empty(self):
        return not self._data

    def __iter__(self):
        return iter(self.lines())

    def __len__(self):
        return len(self._data)
