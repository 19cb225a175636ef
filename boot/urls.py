"""URL configuration for the fileslots project."""

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path


def healthz(request):
    """Liveness probe: no I/O, always returns 200."""
    return JsonResponse({"status": "ok"})


urlpatterns = [
    path("healthz/", healthz, name="healthz"),
    path("admin/", admin.site.urls),
    path("app/", include("frontend.urls")),
]

# Slot files are written under MEDIA_ROOT/uploads by default.
urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
