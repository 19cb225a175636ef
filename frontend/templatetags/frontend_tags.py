"""Template tags and filters for the frontend app."""

from pathlib import Path
from urllib.parse import quote

from django import template
from django.conf import settings

register = template.Library()


@register.simple_tag
def slot_url(instance, slot_name):
    """URL of a slot's stored file: {% slot_url profile 'avatar' %}.

    Empty when the slot holds no file or its storage directory is not
    served from MEDIA_ROOT.
    """
    name = getattr(instance, slot_name, "")
    if not name:
        return ""
    directory = Path(instance.file_slots.storage_directory).resolve()
    try:
        relative = directory.relative_to(Path(settings.MEDIA_ROOT).resolve())
    except ValueError:
        return ""
    return settings.MEDIA_URL + "/".join(quote(part) for part in (*relative.parts, name))


@register.filter
def is_image(filename):
    """True if a stored filename has an image extension."""
    from uploader.models import IMAGE_EXTENSIONS

    return str(filename).rpartition(".")[2].lower() in IMAGE_EXTENSIONS


@register.filter
def get_field(form, field_name):
    """Get a form field by name: {{ form|get_field:'name' }}."""
    try:
        return form[field_name]
    except KeyError:
        return ""
