# shop/middleware.py
from django.utils.deprecation import MiddlewareMixin

from .auth import current_admin


class AdminSessionMiddleware(MiddlewareMixin):
    """
    Expose the console login marker as ``request.admin_user``.
    Must run after SessionMiddleware.
    """
    def process_request(self, request):
        request.admin_user = current_admin(request)
