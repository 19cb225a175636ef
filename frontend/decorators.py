"""
Frontend view decorators.
"""

from functools import wraps
from urllib.parse import urlencode

from django.conf import settings
from django.shortcuts import redirect


def frontend_login_required(view_func):
    """
    Redirect unauthenticated users to settings.LOGIN_URL with a ``next``
    parameter pointing back at the requested page.
    """

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            params = urlencode({"next": request.get_full_path()})
            return redirect(f"{settings.LOGIN_URL}?{params}")
        return view_func(request, *args, **kwargs)

    return wrapper
