from django.contrib import admin
from django.urls import include, path

# Main URL configuration
urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('shop.urls')),
]
