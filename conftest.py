"""Shared pytest fixtures for the fileslots project."""

import pytest


@pytest.fixture
def user(db):
    """Create a test user."""
    from accounts.models import User

    return User.objects.create_user(
        username="testuser",
        email="test@example.com",
        password="testpass123",
    )


@pytest.fixture
def upload_dir(tmp_path, settings):
    """Point slot storage at a temporary directory that does not exist yet."""
    directory = tmp_path / "uploads"
    settings.MEDIA_ROOT = tmp_path
    settings.UPLOADER_STORAGE_DIRECTORY = directory
    return directory
