"""Profile views: upload and replace profile files, delete the profile."""

import logging

from django.contrib import messages
from django.db import transaction
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_http_methods, require_POST
from portal.models import Profile
from uploader.exceptions import StorageWriteError

from frontend.decorators import frontend_login_required
from frontend.forms.profile import ProfileForm

logger = logging.getLogger(__name__)


def _render_form(request, form, profile, status=200):
    template = (
        "frontend/profile/partials/form.html"
        if request.htmx
        else "frontend/profile/index.html"
    )
    return render(
        request,
        template,
        {"form": form, "profile": profile},
        status=status,
    )


@frontend_login_required
@require_http_methods(["GET", "POST"])
def profile_view(request):
    """Profile page with avatar and resume uploads."""
    profile = Profile.objects.filter(owner=request.user).first()
    if profile is None:
        profile = Profile(owner=request.user)

    if request.method == "GET":
        return _render_form(request, ProfileForm(instance=profile), profile)

    form = ProfileForm(request.POST, request.FILES, instance=profile)
    if not form.is_valid():
        return _render_form(request, form, profile, status=422 if request.htmx else 200)

    adding = profile._state.adding
    try:
        with transaction.atomic():
            profile = form.save()
    except StorageWriteError as exc:
        if adding:
            # The insert was rolled back.
            profile.pk = None
            profile._state.adding = True
        logger.warning(
            "Profile upload failed: user=%s slot=%s name=%s error=%s",
            request.user.pk,
            exc.slot,
            exc.name,
            exc,
        )
        form.add_error(exc.slot, "The file could not be stored. Please try again.")
        return _render_form(request, form, profile, status=422 if request.htmx else 200)

    logger.info("Profile saved: pk=%s user=%s", profile.pk, request.user.pk)
    if request.htmx:
        return render(
            request,
            "frontend/profile/partials/form.html",
            {"form": ProfileForm(instance=profile), "profile": profile, "saved": True},
        )

    messages.success(request, "Profile saved.")
    return redirect("frontend:profile")


@frontend_login_required
@require_POST
def profile_delete_view(request):
    """Delete the user's profile together with its uploaded files."""
    profile = get_object_or_404(Profile, owner=request.user)
    pk = profile.pk
    profile.delete()
    logger.info("Profile deleted: pk=%s user=%s", pk, request.user.pk)
    messages.success(request, "Profile deleted.")
    return redirect("frontend:profile")
