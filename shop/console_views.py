"""
Admin console: dashboard, order management and product management.

Every view except login requires the ``admin_user`` session marker set by
``shop.auth.login_admin``.
"""
import logging
from decimal import Decimal

import cloudinary.uploader
from django.contrib import messages
from django.db.models import Count, Q, Sum
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.views.decorators.http import require_POST

from .auth import admin_required, current_admin, login_admin, logout_admin
from .forms import (
    AdminLoginForm,
    OrderFilterForm,
    OrderStatusForm,
    PaymentStatusForm,
    ProductForm,
)
from .models import Order, OrderStatus, PaymentMethod, Product
from .notifications import order_update_message, whatsapp_url

logger = logging.getLogger(__name__)

PRODUCT_IMAGE_FOLDER = "products"
RECENT_ORDERS = 5


# -------------------------------
# Login / logout
# -------------------------------
def console_login(request):
    if current_admin(request):
        return redirect('console_dashboard')

    form = AdminLoginForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        profile = login_admin(request, form.cleaned_data['email'], form.cleaned_data['password'])
        if profile:
            return redirect('console_dashboard')
        messages.error(request, "Invalid credentials")
    return render(request, 'shop/console/login.html', {'form': form})


@require_POST
def console_logout(request):
    logout_admin(request)
    messages.success(request, "Logged out.")
    return redirect('home')


# -------------------------------
# Dashboard
# -------------------------------
def dashboard_stats():
    today = timezone.localdate()
    stats = Order.objects.aggregate(
        total_orders=Count('id'),
        pending_orders=Count('id', filter=Q(order_status=OrderStatus.PENDING)),
        cod_orders=Count('id', filter=Q(payment_method=PaymentMethod.COD)),
        easypaisa_orders=Count('id', filter=Q(payment_method=PaymentMethod.EASYPAISA)),
        total_revenue=Sum('total_amount'),
        today_orders=Count('id', filter=Q(created_at__date=today)),
    )
    stats['total_revenue'] = stats['total_revenue'] or Decimal('0.00')
    return stats


@admin_required
def dashboard(request):
    return render(request, 'shop/console/dashboard.html', {
        'stats': dashboard_stats(),
        'recent_orders': Order.objects.all()[:RECENT_ORDERS],
    })


# -------------------------------
# Orders
# -------------------------------
def filter_orders(queryset, term='', status='ALL'):
    term = (term or '').strip()
    if term:
        queryset = queryset.filter(
            Q(order_number__icontains=term)
            | Q(customer_name__icontains=term)
            | Q(customer_phone__contains=term)
        )
    if status and status != 'ALL':
        queryset = queryset.filter(order_status=status)
    return queryset


@admin_required
def order_list(request):
    form = OrderFilterForm(request.GET or None)
    term, status = '', 'ALL'
    if form.is_valid():
        term = form.cleaned_data.get('q') or ''
        status = form.cleaned_data.get('status') or 'ALL'
    return render(request, 'shop/console/orders.html', {
        'form': form,
        'orders': filter_orders(Order.objects.all(), term, status),
    })


@admin_required
def order_detail(request, pk):
    order = get_object_or_404(Order, pk=pk)
    return render(request, 'shop/console/order_detail.html', {
        'order': order,
        'items': order.items.all(),
        'status_form': OrderStatusForm(initial={'order_status': order.order_status}),
        'payment_form': PaymentStatusForm(initial={'payment_status': order.payment_status}),
        'whatsapp_url': whatsapp_url(order_update_message(order)),
    })


def _update_order_field(request, pk, form_class, field):
    form = form_class(request.POST)
    if not form.is_valid():
        messages.error(request, "Invalid status.")
        return redirect('console_order_detail', pk=pk)

    value = form.cleaned_data[field]
    updated = Order.objects.filter(pk=pk).update(**{field: value, 'updated_at': timezone.now()})
    if not updated:
        messages.error(request, "Order not found.")
        return redirect('console_orders')

    logger.info("Order %s %s set to %s by %s", pk, field, value, current_admin(request)['email'])
    messages.success(request, f"{field.replace('_', ' ').capitalize()} updated successfully!")
    return redirect('console_order_detail', pk=pk)


@admin_required
@require_POST
def update_order_status(request, pk):
    return _update_order_field(request, pk, OrderStatusForm, 'order_status')


@admin_required
@require_POST
def update_payment_status(request, pk):
    return _update_order_field(request, pk, PaymentStatusForm, 'payment_status')


# -------------------------------
# Products
# -------------------------------
def upload_product_image(image):
    try:
        result = cloudinary.uploader.upload(image, folder=PRODUCT_IMAGE_FOLDER, resource_type="image")
    except Exception:
        logger.exception("Product image upload failed")
        return None
    return result.get("secure_url") or result.get("url")


@admin_required
def product_list(request):
    products = Product.objects.select_related('category').order_by('-created_at')
    return render(request, 'shop/console/products.html', {'products': products})


def _save_product_form(request, form):
    product = form.save(commit=False)
    image = form.cleaned_data.get('image_file')
    if image:
        url = upload_product_image(image)
        if url is None:
            messages.error(request, "Image upload failed; product not saved.")
            return None
        product.image_url = url
    product.save()
    return product


@admin_required
def product_create(request):
    form = ProductForm(request.POST or None, request.FILES or None)
    if request.method == 'POST' and form.is_valid():
        product = _save_product_form(request, form)
        if product:
            logger.info("Product %s created", product.pk)
            messages.success(request, "Product saved.")
            return redirect('console_products')
    return render(request, 'shop/console/product_form.html', {'form': form, 'product': None})


@admin_required
def product_edit(request, pk):
    product = get_object_or_404(Product, pk=pk)
    form = ProductForm(request.POST or None, request.FILES or None, instance=product)
    if request.method == 'POST' and form.is_valid():
        if _save_product_form(request, form):
            logger.info("Product %s updated", product.pk)
            messages.success(request, "Product saved.")
            return redirect('console_products')
    return render(request, 'shop/console/product_form.html', {'form': form, 'product': product})


@admin_required
@require_POST
def product_delete(request, pk):
    product = get_object_or_404(Product, pk=pk)
    name = product.name
    product.delete()
    logger.info("Product %s (%s) deleted", pk, name)
    messages.success(request, f"{name} deleted.")
    return redirect('console_products')
