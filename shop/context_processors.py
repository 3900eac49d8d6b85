from django.conf import settings

from .shop_utils import get_cart_count


def shop(request):
    """Cart badge and shop identity for every template."""
    return {
        'cart_count': get_cart_count(request) if hasattr(request, 'session') else 0,
        'shop_name': settings.SHOP_NAME,
        'easypaisa_number': settings.SHOP_EASYPAISA_NUMBER,
        'admin_user': getattr(request, 'admin_user', None),
    }
