"""Django AppConfig for the uploader app."""

from django.apps import AppConfig


class UploaderConfig(AppConfig):
    name = "uploader"
    verbose_name = "Uploader"
    default_auto_field = "django.db.models.BigAutoField"
