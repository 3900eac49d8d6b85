from django.contrib import admin
from django.utils.html import format_html

from .models import Category, Order, OrderItem, OrderStatus, PaymentStatus, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'display_order', 'is_active')
    list_editable = ('display_order', 'is_active')
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'price', 'stock_quantity', 'expiry_date', 'is_available', 'is_active')
    list_filter = ('category', 'is_available', 'is_active')
    search_fields = ('name', 'slug', 'description')
    prepopulated_fields = {'slug': ('name',)}


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ('product', 'product_name', 'product_price', 'quantity', 'subtotal')
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        'order_number', 'customer_name', 'customer_phone', 'total_amount',
        'payment_method', 'payment_status', 'order_status', 'created_at',
    )
    list_filter = ('order_status', 'payment_status', 'payment_method', 'created_at')
    search_fields = ('order_number', 'customer_name', 'customer_phone')
    readonly_fields = ('order_number', 'subtotal', 'delivery_charges', 'total_amount', 'proof_preview')
    inlines = [OrderItemInline]

    actions = ['mark_as_confirmed', 'mark_as_delivered', 'mark_as_cancelled', 'mark_as_paid']

    @admin.display(description="Proof")
    def proof_preview(self, obj):
        if obj.payment_proof_url:
            return format_html('<img src="{}" width="120" style="border-radius:8px;" />', obj.payment_proof_url)
        return "No proof"

    @admin.action(description="Mark as Confirmed")
    def mark_as_confirmed(self, request, queryset):
        queryset.update(order_status=OrderStatus.CONFIRMED)

    @admin.action(description="Mark as Delivered")
    def mark_as_delivered(self, request, queryset):
        queryset.update(order_status=OrderStatus.DELIVERED)

    @admin.action(description="Mark as Cancelled")
    def mark_as_cancelled(self, request, queryset):
        queryset.update(order_status=OrderStatus.CANCELLED)

    @admin.action(description="Mark payment as Paid")
    def mark_as_paid(self, request, queryset):
        queryset.update(payment_status=PaymentStatus.PAID)
