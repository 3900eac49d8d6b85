from django.urls import path

from . import console_views, views

urlpatterns = [
    path('', views.home, name='home'),
    path('category/<slug:slug>/', views.category_view, name='category'),
    path('search/', views.search_view, name='search'),
    path('product/<int:pk>/', views.product_detail, name='product_detail'),
    path('cart/', views.cart_view, name='cart'),
    path('cart/add/<int:product_id>/', views.add_to_cart, name='add_to_cart'),
    path('cart/update/<int:product_id>/', views.update_cart_item, name='update_cart_item'),
    path('cart/remove/<int:product_id>/', views.remove_from_cart, name='remove_from_cart'),
    path('checkout/', views.checkout, name='checkout'),
    path('order/<str:order_number>/', views.order_confirmation, name='order_confirmation'),

    # Admin console
    path('console/login/', console_views.console_login, name='console_login'),
    path('console/logout/', console_views.console_logout, name='console_logout'),
    path('console/', console_views.dashboard, name='console_dashboard'),
    path('console/orders/', console_views.order_list, name='console_orders'),
    path('console/orders/<int:pk>/', console_views.order_detail, name='console_order_detail'),
    path('console/orders/<int:pk>/status/', console_views.update_order_status, name='console_order_status'),
    path('console/orders/<int:pk>/payment/', console_views.update_payment_status, name='console_payment_status'),
    path('console/products/', console_views.product_list, name='console_products'),
    path('console/products/new/', console_views.product_create, name='console_product_create'),
    path('console/products/<int:pk>/', console_views.product_edit, name='console_product_edit'),
    path('console/products/<int:pk>/delete/', console_views.product_delete, name='console_product_delete'),
]
