"""Rename policies applied to uploaded file base names."""

import hashlib
import logging
import string

from django.core.exceptions import SuspiciousFileOperation
from django.core.files.utils import validate_file_name
from django.db import models
from django.utils.crypto import get_random_string
from django.utils.text import slugify

from uploader.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

RANDOM_NAME_LENGTH = 32
RANDOM_NAME_CHARS = string.ascii_letters + string.digits + "_-"


class RenamePolicy(models.TextChoices):
    NONE = "none", "Keep original name"
    MD5 = "md5", "MD5 digest"
    SHA1 = "sha1", "SHA-1 digest"
    SLUG = "slug", "Slug"
    RANDOM = "random", "Random token"


def resolve_rename_policy(value):
    """Validate a rename policy value.

    Args:
        value: A RenamePolicy, its string value, or a callable with the
            signature ``fn(base_name, record) -> str``.

    Returns:
        The RenamePolicy member, or the callable unchanged.

    Raises:
        ConfigurationError: If the value is neither a known policy nor
            callable.
    """
    if callable(value):
        return value
    try:
        return RenamePolicy(value)
    except ValueError:
        raise ConfigurationError(
            f"Rename policy must be a callable or one of "
            f"{', '.join(RenamePolicy.values)}, got {value!r}."
        ) from None


def random_name():
    return get_random_string(RANDOM_NAME_LENGTH, allowed_chars=RANDOM_NAME_CHARS)


def rename(policy, base_name, record=None):
    """Produce the new base name for an upload.

    Args:
        policy: A value accepted by resolve_rename_policy().
        base_name: The uploaded file's name without extension.
        record: The owning record, passed through to custom callables.

    Returns:
        The new base name.

    Raises:
        ConfigurationError: If a custom callable raises or returns an
            unusable name.
    """
    if callable(policy):
        return _call_custom(policy, base_name, record)

    policy = RenamePolicy(policy)
    if policy == RenamePolicy.MD5:
        return hashlib.md5(base_name.encode()).hexdigest()
    if policy == RenamePolicy.SHA1:
        return hashlib.sha1(base_name.encode()).hexdigest()
    if policy == RenamePolicy.SLUG:
        slug = slugify(base_name)
        if not slug:
            logger.warning(
                "Slug of base name is empty, using random name: base_name=%r",
                base_name,
            )
            return random_name()
        return slug
    if policy == RenamePolicy.RANDOM:
        return random_name()
    return base_name


def _call_custom(fn, base_name, record):
    try:
        new_name = fn(base_name, record)
    except Exception as exc:
        raise ConfigurationError(
            f"Custom rename function {fn!r} failed for {base_name!r}: {exc}"
        ) from exc

    if not isinstance(new_name, str) or not new_name:
        raise ConfigurationError(
            f"Custom rename function {fn!r} must return a non-empty string, "
            f"got {new_name!r}."
        )
    try:
        validate_file_name(new_name)
    except SuspiciousFileOperation as exc:
        raise ConfigurationError(
            f"Custom rename function {fn!r} returned an unsafe name "
            f"{new_name!r}."
        ) from exc
    return new_name
