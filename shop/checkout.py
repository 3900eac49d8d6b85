"""
Order placement.

Turns the session cart plus a validated ``CheckoutForm`` into an ``Order``
and its ``OrderItem`` rows. Two steps degrade softly instead of failing the
checkout: order-number generation falls back to a timestamp identifier, and
a failed payment-proof upload is treated as "no proof".
"""
import logging
import threading
import time
from dataclasses import dataclass
from decimal import Decimal

import cloudinary.uploader
from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from .models import Order, OrderItem, OrderStatus, PaymentMethod, PaymentStatus, Product
from .notifications import (
    notify_admins_new_order,
    order_whatsapp_message,
    send_order_confirmation,
    whatsapp_url,
)

logger = logging.getLogger(__name__)

PAYMENT_PROOF_FOLDER = "payment-proofs"


class CheckoutError(Exception):
    pass


@dataclass
class PlacedOrder:
    order: Order
    whatsapp_url: str


# -------------------------------
# Order numbers
# -------------------------------
def _next_order_number():
    prefix = settings.SHOP_ORDER_PREFIX
    today = timezone.localdate()
    stem = f"{prefix}-{today:%Y%m%d}-"
    seq = Order.objects.filter(order_number__startswith=stem).count() + 1
    candidate = f"{stem}{seq:04d}"
    while Order.objects.filter(order_number=candidate).exists():
        seq += 1
        candidate = f"{stem}{seq:04d}"
    return candidate


def fallback_order_number():
    return f"{settings.SHOP_ORDER_PREFIX}-{int(time.time() * 1000)}"


def generate_order_number():
    try:
        return _next_order_number()
    except DatabaseError:
        number = fallback_order_number()
        logger.warning("Order number generation failed, using fallback %s", number, exc_info=True)
        return number


# -------------------------------
# Payment proof upload
# -------------------------------
def upload_payment_proof(proof, order_number):
    """Upload a payment screenshot and return its public URL, or None."""
    if not proof:
        return None
    public_id = f"{order_number}-{int(time.time() * 1000)}"
    try:
        result = cloudinary.uploader.upload(
            proof,
            folder=PAYMENT_PROOF_FOLDER,
            public_id=public_id,
            resource_type="image",
        )
        return result.get("secure_url") or result.get("url")
    except Exception:
        logger.exception("Payment proof upload failed for order %s", order_number)
        return None


def resolve_payment_status(payment_method, proof_url):
    if payment_method == PaymentMethod.EASYPAISA and proof_url:
        return PaymentStatus.VERIFICATION_PENDING
    return PaymentStatus.PENDING


# -------------------------------
# Placement
# -------------------------------
def _start_thread(target, order, label):
    try:
        threading.Thread(target=target, args=(order.pk,), daemon=True).start()
        logger.info("Started %s thread for order %s", label, order.order_number)
    except Exception:
        logger.exception("Failed to start %s thread for order %s", label, order.order_number)


def _schedule_notifications(order):
    transaction.on_commit(lambda: _start_thread(notify_admins_new_order, order, "admin notification"))
    if order.customer_email:
        transaction.on_commit(lambda: _start_thread(send_order_confirmation, order, "customer confirmation"))


def _create_order(order_number, lines, data, proof_url, total, existing_ids):
    payment_method = data['payment_method']
    with transaction.atomic():
        order = Order.objects.create(
            order_number=order_number,
            customer_name=data['customer_name'],
            customer_phone=data['customer_phone'],
            customer_email=data.get('customer_email') or None,
            delivery_address=data['delivery_address'],
            payment_method=payment_method,
            payment_status=resolve_payment_status(payment_method, proof_url),
            payment_proof_url=proof_url,
            order_status=OrderStatus.PENDING,
            subtotal=total,
            delivery_charges=Decimal('0.00'),
            total_amount=total,
            notes=data.get('notes') or None,
            whatsapp_sent=True,
        )
        items = [
            OrderItem(
                order=order,
                product_id=int(line.product_id) if line.product_id in existing_ids else None,
                product_name=line.name,
                product_price=line.price,
                quantity=line.quantity,
                subtotal=line.subtotal,
            )
            for line in lines
        ]
        OrderItem.objects.bulk_create(items)
        _schedule_notifications(order)
    return order, items


def place_order(cart, data):
    """
    Create the order for ``cart`` from cleaned checkout ``data``.

    Order and items are written in one transaction. If the generated order
    number was taken by a concurrent checkout, the insert is retried once
    with the timestamp fallback. On success the cart is cleared and the
    WhatsApp deep link for the shop is returned alongside the order.
    """
    lines = cart.lines()
    if not lines:
        raise CheckoutError("Your cart is empty.")

    payment_method = data['payment_method']
    order_number = generate_order_number()

    proof_url = None
    if payment_method == PaymentMethod.EASYPAISA:
        proof_url = upload_payment_proof(data.get('payment_proof'), order_number)

    total = cart.get_total()
    existing_ids = set(
        str(pk) for pk in Product.objects.filter(pk__in=[line.product_id for line in lines])
        .values_list('pk', flat=True)
    )

    try:
        order, items = _create_order(order_number, lines, data, proof_url, total, existing_ids)
    except IntegrityError:
        if not Order.objects.filter(order_number=order_number).exists():
            raise
        retry_number = fallback_order_number()
        logger.warning("Order number %s already taken, retrying as %s", order_number, retry_number)
        order, items = _create_order(retry_number, lines, data, proof_url, total, existing_ids)

    logger.info(
        "Order %s placed: %d items, total %s, payment %s/%s",
        order.order_number, len(items), order.total_amount, order.payment_method, order.payment_status,
    )

    link = whatsapp_url(order_whatsapp_message(order, items))
    cart.clear()
    return PlacedOrder(order=order, whatsapp_url=link)
