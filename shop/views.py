import logging

from django.contrib import messages
from django.http import JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST

from . import catalog
from .cart import LAST_ORDER_SESSION_KEY, LAST_ORDER_WHATSAPP_KEY, Cart
from .checkout import CheckoutError, place_order
from .forms import CheckoutForm
from .models import Order, Product

logger = logging.getLogger(__name__)


# -------------------------------
# Catalog pages
# -------------------------------
def home(request):
    return render(request, 'shop/home.html', {
        'categories': catalog.active_categories(),
        'products': catalog.featured_products(),
    })


def category_view(request, slug):
    category = catalog.get_category(slug)
    return render(request, 'shop/category.html', {
        'category': category,
        'products': catalog.category_products(category),
    })


def search_view(request):
    term = request.GET.get('q', '').strip()
    return render(request, 'shop/search.html', {
        'q': term,
        'products': catalog.search_products(term),
    })


def product_detail(request, pk):
    product = catalog.get_product(pk)
    return render(request, 'shop/product_detail.html', {'product': product})


# -------------------------------
# CART SYSTEM
# -------------------------------
def _wants_json(request):
    return request.headers.get('x-requested-with') == 'XMLHttpRequest'


@require_POST
def add_to_cart(request, product_id):
    product = get_object_or_404(Product, pk=product_id, is_active=True)
    if not product.can_purchase:
        messages.error(request, f"{product.name} is not available right now.")
        return redirect('product_detail', pk=product.pk)

    try:
        qty = int(request.POST.get('quantity', 1))
    except (TypeError, ValueError):
        qty = 1
    qty = max(1, qty)

    cart = Cart(request.session)
    cart.add(product, qty)

    if _wants_json(request):
        return JsonResponse({'status': 'success', 'cart_count': cart.get_count()})

    messages.success(request, f"{product.name} added to cart.")
    next_url = request.POST.get('next')
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return redirect(next_url)
    return redirect('cart')


@require_POST
def update_cart_item(request, product_id):
    try:
        qty = int(request.POST.get('quantity', ''))
    except (TypeError, ValueError):
        if _wants_json(request):
            return JsonResponse({'status': 'error', 'message': 'Invalid quantity'}, status=400)
        messages.error(request, "Please enter a whole number for the quantity.")
        return redirect('cart')

    cart = Cart(request.session)
    cart.update(product_id, qty)

    if _wants_json(request):
        return JsonResponse({
            'status': 'success',
            'cart_count': cart.get_count(),
            'cart_total': str(cart.get_total()),
        })
    return redirect('cart')


@require_POST
def remove_from_cart(request, product_id):
    Cart(request.session).remove(product_id)
    return redirect('cart')


def cart_view(request):
    cart = Cart(request.session)
    return render(request, 'shop/cart.html', {
        'cart_items': cart.lines(),
        'total_price': cart.get_total(),
    })


# -------------------------------
# CHECKOUT
# -------------------------------
def checkout(request):
    cart = Cart(request.session)
    if cart.is_empty:
        messages.info(request, "Your cart is empty.")
        return redirect('home')

    if request.method == 'POST':
        form = CheckoutForm(request.POST, request.FILES)
        if form.is_valid():
            try:
                placed = place_order(cart, form.cleaned_data)
            except CheckoutError as e:
                messages.error(request, str(e))
                return redirect('cart')
            except Exception:
                logger.exception("Error placing order")
                messages.error(request, "Failed to place order. Please try again.")
            else:
                request.session[LAST_ORDER_SESSION_KEY] = placed.order.order_number
                request.session[LAST_ORDER_WHATSAPP_KEY] = placed.whatsapp_url
                return redirect('order_confirmation', order_number=placed.order.order_number)
        else:
            messages.error(request, "Please fill in all required fields.")
    else:
        form = CheckoutForm()

    return render(request, 'shop/checkout.html', {
        'form': form,
        'cart_items': cart.lines(),
        'total_price': cart.get_total(),
    })


def order_confirmation(request, order_number):
    if request.session.get(LAST_ORDER_SESSION_KEY) != order_number:
        messages.error(request, "Could not find your order.")
        return redirect('home')
    order = get_object_or_404(Order, order_number=order_number)
    return render(request, 'shop/order_confirmation.html', {
        'order': order,
        'whatsapp_url': request.session.get(LAST_ORDER_WHATSAPP_KEY),
    })
