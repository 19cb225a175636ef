"""Unit tests for portal models."""

import pytest

from portal.models import Profile


@pytest.mark.django_db
class TestProfile:
    """Profile defaults and representation."""

    def test_slots_default_to_empty(self, user):
        profile = Profile.objects.create(owner=user)
        assert profile.avatar == ""
        assert profile.resume == ""

    def test_str_prefers_display_name(self, user):
        profile = Profile.objects.create(owner=user, display_name="Ada")
        assert str(profile) == "Ada"

    def test_str_falls_back_to_owner(self, user):
        profile = Profile.objects.create(owner=user)
        assert str(profile) == "test@example.com"

    def test_profile_uses_slug_names(self, user, upload_dir):
        manager = Profile(owner=user).file_slots
        assert manager.rename_policy == "slug"
        assert manager.storage_directory == upload_dir

    def test_timestamps_set(self, user):
        profile = Profile.objects.create(owner=user)
        assert profile.created_at is not None
        assert profile.updated_at is not None
