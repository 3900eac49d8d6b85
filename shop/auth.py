"""
Admin console login.

Credentials are checked by Django's auth backends. A successful staff login
also stores a small ``admin_user`` marker in the session; the console treats
that marker as the session and drops it on logout.
"""
import logging
from functools import wraps

from django.contrib import auth
from django.contrib.auth import get_user_model
from django.shortcuts import redirect

from .cart import SHOPPER_SESSION_KEYS

logger = logging.getLogger(__name__)

ADMIN_SESSION_KEY = 'admin_user'


def _username_for_email(email):
    User = get_user_model()
    user = User.objects.filter(email__iexact=email).only(User.USERNAME_FIELD).first()
    if user is None:
        return email
    return user.get_username()


def admin_profile(user):
    return {
        'id': user.pk,
        'email': user.email,
        'full_name': user.get_full_name() or 'Admin',
    }


def login_admin(request, email, password):
    """Authenticate a staff user; returns the session marker or None."""
    user = auth.authenticate(request, username=_username_for_email(email), password=password)
    if user is None or not user.is_staff:
        logger.info("Admin login failed for %s", email)
        return None

    auth.login(request, user)
    profile = admin_profile(user)
    request.session[ADMIN_SESSION_KEY] = profile
    logger.info("Admin login for %s", email)
    return profile


def logout_admin(request):
    """
    End the console session. ``auth.logout`` flushes the whole session, so
    the shopper's cart and last order are carried over to the new one.
    """
    kept = {key: request.session[key] for key in SHOPPER_SESSION_KEYS if key in request.session}
    request.session.pop(ADMIN_SESSION_KEY, None)
    auth.logout(request)
    for key, value in kept.items():
        request.session[key] = value


def current_admin(request):
    return request.session.get(ADMIN_SESSION_KEY)


def admin_required(view_func):
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not current_admin(request):
            return redirect('console_login')
        return view_func(request, *args, **kwargs)
    return wrapper
