"""Read-only catalog queries used by the storefront."""
from django.conf import settings
from django.db.models import Q
from django.shortcuts import get_object_or_404

from .models import Category, Product


def active_categories():
    return Category.objects.filter(is_active=True).order_by('display_order', 'name')


def listed_products():
    """Products the storefront may show: active and flagged available."""
    return (
        Product.objects.filter(is_active=True, is_available=True)
        .select_related('category')
        .order_by('-created_at')
    )


def featured_products(limit=None):
    if limit is None:
        limit = settings.SHOP_FEATURED_PRODUCTS
    return listed_products()[:limit]


def category_products(category):
    return listed_products().filter(category=category)


def search_products(term):
    term = (term or '').strip()
    if not term:
        return listed_products().none()
    return listed_products().filter(
        Q(name__icontains=term) | Q(description__icontains=term)
    )


def get_category(slug):
    return get_object_or_404(Category, slug=slug, is_active=True)


def get_product(pk):
    return get_object_or_404(Product.objects.select_related('category'), pk=pk, is_active=True)
