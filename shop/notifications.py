import logging
from urllib.parse import quote

from anymail.message import AnymailMessage
from django.conf import settings
from django.template.loader import render_to_string

from .models import Order, PaymentMethod, PaymentStatus
from .shop_utils import format_rupees

logger = logging.getLogger(__name__)

WHATSAPP_BASE_URL = "https://wa.me"


# -------------------------------
# WhatsApp deep links
# -------------------------------
def whatsapp_url(message, number=None):
    number = number or settings.SHOP_WHATSAPP_NUMBER
    return f"{WHATSAPP_BASE_URL}/{number}?text={quote(message, safe='')}"


def _payment_status_line(order):
    if order.payment_method == PaymentMethod.COD:
        return "Pending - COD"
    if order.payment_status == PaymentStatus.VERIFICATION_PENDING:
        return "Verification Pending"
    return "Pending"


def order_whatsapp_message(order, items):
    """Text summary of a new order, sent to the shop's WhatsApp number."""
    item_blocks = []
    for index, item in enumerate(items, start=1):
        item_blocks.append(
            f"{index}. {item.product_name}\n"
            f"   Qty: {item.quantity} x {format_rupees(item.product_price)}\n"
            f"   Subtotal: {format_rupees(item.subtotal)}"
        )

    message = (
        f"*New Order - {settings.SHOP_NAME}*\n\n"
        f"Order Number: *{order.order_number}*\n\n"
        f"*Customer Details:*\n"
        f"Name: {order.customer_name}\n"
        f"Phone: {order.customer_phone}\n"
        f"Email: {order.customer_email or 'N/A'}\n\n"
        f"*Delivery Address:*\n{order.delivery_address}\n\n"
        f"*Order Items:*\n"
        + "\n\n".join(item_blocks)
        + "\n\n*Payment Details:*\n"
        f"Method: {PaymentMethod(order.payment_method).label}\n"
        f"Status: {_payment_status_line(order)}\n\n"
        f"*Total Amount: {format_rupees(order.total_amount)}*\n"
        f"Delivery Charges: FREE\n\n"
    )
    if order.notes:
        message += f"*Notes:* {order.notes}\n\n"
    message += f"Order ID: {order.pk}"
    return message


def order_update_message(order):
    return (
        f"*Order Update - {settings.SHOP_NAME}*\n\n"
        f"Order Number: *{order.order_number}*\n"
        f"Customer: {order.customer_name}\n"
        f"Phone: {order.customer_phone}\n"
        f"Status: {order.order_status}\n"
        f"Payment: {order.payment_method} - {order.payment_status}"
    )


# -------------------------------
# Email
# -------------------------------
def send_order_confirmation(order_id):
    """Email the customer a copy of their order. Never raises."""
    try:
        order = Order.objects.prefetch_related('items').get(pk=order_id)
        if not order.customer_email:
            return False

        ctx = {
            "order": order,
            "items": list(order.items.all()),
            "name": order.customer_name or "Customer",
            "shop_name": settings.SHOP_NAME,
            "site_url": settings.SHOP_SITE_URL,
        }
        plain = render_to_string("shop/emails/order_confirmation.txt", ctx)
        html = render_to_string("shop/emails/order_confirmation.html", ctx)

        msg = AnymailMessage(
            subject=f"Order confirmation {order.order_number} - {settings.SHOP_NAME}",
            body=plain,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[order.customer_email],
        )
        msg.attach_alternative(html, "text/html")
        msg.send()
        logger.info("Order confirmation sent for order %s", order.order_number)
        return True
    except Exception:
        logger.exception("Order confirmation send failed for order %s", order_id)
        return False


def admin_recipients():
    raw_admins = getattr(settings, "ADMIN_NOTIFICATION_EMAILS", None)
    if isinstance(raw_admins, str):
        recipients = [e.strip() for e in raw_admins.split(",") if e.strip()]
    elif isinstance(raw_admins, (list, tuple)):
        recipients = [e.strip() for e in raw_admins if e and e.strip()]
    else:
        recipients = []
    if not recipients:
        recipients = [settings.DEFAULT_FROM_EMAIL]

    seen = set()
    unique = []
    for r in recipients:
        if r.lower() not in seen:
            unique.append(r)
            seen.add(r.lower())
    return unique


def notify_admins_new_order(order_id):
    """Tell the shop staff about a new order (and its payment proof, if any)."""
    try:
        order = Order.objects.get(pk=order_id)
        recipients = admin_recipients()
        lines = [
            f"A new order has been placed on {settings.SHOP_NAME}.",
            "",
            f"Order Number: {order.order_number}",
            f"Name: {order.customer_name}",
            f"Phone: {order.customer_phone}",
            f"Payment Method: {PaymentMethod(order.payment_method).label}",
            f"Payment Status: {order.payment_status}",
            f"Total: {format_rupees(order.total_amount)}",
        ]
        if order.payment_proof_url:
            lines.append(f"Payment Proof: {order.payment_proof_url}")
        lines += ["---", "Please review it in the admin console."]

        logger.info("Sending admin notification for order %s to %s", order.order_number, recipients)
        msg = AnymailMessage(
            subject=f"New Order {order.order_number} - {settings.SHOP_NAME}",
            body="\n".join(lines),
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=recipients,
        )
        msg.send()
        return True
    except Exception:
        logger.exception("Admin notification failed for order %s", order_id)
        return False
