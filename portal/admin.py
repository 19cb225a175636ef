"""Admin configuration for portal models."""

from django.contrib import admin
from uploader.forms import FileSlotsModelForm

from portal.models import Profile


class ProfileAdminForm(FileSlotsModelForm):
    class Meta:
        model = Profile
        fields = ("owner", "display_name", "avatar", "resume")


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    """Admin interface for profiles. Uploads go through the file slots."""

    form = ProfileAdminForm
    list_display = ("owner", "display_name", "avatar", "resume", "created_at")
    search_fields = ("display_name", "owner__email", "avatar", "resume")
    readonly_fields = ("created_at", "updated_at")
    list_select_related = ("owner",)
    date_hierarchy = "created_at"
