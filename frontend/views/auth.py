"""Authentication views for the frontend app."""

from django.contrib import auth
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_http_methods

from frontend.forms.auth import FrontendLoginForm


@require_http_methods(["GET", "POST"])
def login_view(request):
    """Login page with session-based authentication."""
    if request.user.is_authenticated:
        return redirect("frontend:profile")

    next_url = request.GET.get("next") or request.POST.get("next") or ""
    if request.method == "POST":
        form = FrontendLoginForm(request, data=request.POST)
        if form.is_valid():
            auth.login(request, form.get_user())
            if next_url and url_has_allowed_host_and_scheme(
                next_url, allowed_hosts={request.get_host()}
            ):
                return redirect(next_url)
            return redirect("frontend:profile")
    else:
        form = FrontendLoginForm(request)

    return render(
        request,
        "frontend/auth/login.html",
        {"form": form, "next": next_url},
    )


def logout_view(request):
    """Logout and redirect to login."""
    auth.logout(request)
    return redirect("frontend:login")
