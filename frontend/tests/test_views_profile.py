"""Tests for the profile views."""

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client
from portal.models import Profile

# Override staticfiles storage to avoid WhiteNoise manifest issues in tests
_SIMPLE_STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"
    },
}


@pytest.fixture(autouse=True)
def _simple_storages(settings):
    """Override STORAGES to avoid WhiteNoise manifest issues."""
    settings.STORAGES = _SIMPLE_STORAGES


@pytest.fixture
def client_logged_in(user):
    client = Client()
    client.force_login(user)
    return client


@pytest.mark.django_db
class TestLoginView:
    """Tests for /app/login/."""

    def test_get_renders_form(self):
        response = Client().get("/app/login/")
        assert response.status_code == 200

    def test_login_with_email_redirects_to_next(self, user):
        response = Client().post(
            "/app/login/?next=/app/profile/",
            {"username": "test@example.com", "password": "testpass123"},
        )
        assert response.status_code == 302
        assert response.url == "/app/profile/"

    def test_external_next_is_ignored(self, user):
        response = Client().post(
            "/app/login/?next=https://evil.example.com/",
            {"username": "test@example.com", "password": "testpass123"},
        )
        assert response.status_code == 302
        assert response.url == "/app/profile/"


@pytest.mark.django_db
class TestProfileViewGet:
    """Tests for GET /app/profile/."""

    def test_authenticated_user_gets_200(self, client_logged_in):
        response = client_logged_in.get("/app/profile/")
        assert response.status_code == 200

    def test_unauthenticated_redirects_to_login(self):
        response = Client().get("/app/profile/")
        assert response.status_code == 302
        assert "/app/login/" in response.url

    def test_shows_stored_file_link(self, client_logged_in, user, upload_dir):
        Profile.objects.create(owner=user, resume="cv.pdf")
        response = client_logged_in.get("/app/profile/")
        assert b"uploads/cv.pdf" in response.content


@pytest.mark.django_db(transaction=True)
class TestProfileViewPost:
    """Tests for POST /app/profile/."""

    def test_upload_creates_profile_and_file(self, client_logged_in, user, upload_dir):
        response = client_logged_in.post(
            "/app/profile/",
            {
                "display_name": "Ada",
                "avatar": SimpleUploadedFile("Head Shot.jpg", b"jpeg"),
            },
        )

        assert response.status_code == 302
        profile = Profile.objects.get(owner=user)
        assert profile.avatar == "head-shot.jpg"
        assert (upload_dir / "head-shot.jpg").read_bytes() == b"jpeg"

    def test_replace_removes_old_file(self, client_logged_in, user, upload_dir):
        client_logged_in.post(
            "/app/profile/",
            {"display_name": "Ada", "resume": SimpleUploadedFile("cv-2023.pdf", b"old")},
        )
        client_logged_in.post(
            "/app/profile/",
            {"display_name": "Ada", "resume": SimpleUploadedFile("cv-2024.pdf", b"new")},
        )

        assert Profile.objects.get(owner=user).resume == "cv-2024.pdf"
        assert not (upload_dir / "cv-2023.pdf").exists()
        assert (upload_dir / "cv-2024.pdf").exists()

    def test_htmx_post_returns_partial(self, client_logged_in, upload_dir):
        response = client_logged_in.post(
            "/app/profile/",
            {"display_name": "Ada", "resume": SimpleUploadedFile("cv.pdf", b"%PDF")},
            HTTP_HX_REQUEST="true",
        )

        assert response.status_code == 200
        assert b"Profile saved." in response.content
        assert b"<html" not in response.content

    def test_invalid_avatar_shows_error(self, client_logged_in, user, upload_dir):
        response = client_logged_in.post(
            "/app/profile/",
            {"display_name": "Ada", "avatar": SimpleUploadedFile("virus.exe", b"MZ")},
        )

        assert response.status_code == 200
        assert not Profile.objects.filter(owner=user).exists()
        assert not upload_dir.exists()

    def test_storage_failure_rolls_back(self, client_logged_in, user, settings, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"")
        settings.UPLOADER_STORAGE_DIRECTORY = blocker

        response = client_logged_in.post(
            "/app/profile/",
            {"display_name": "Ada", "resume": SimpleUploadedFile("cv.pdf", b"%PDF")},
        )

        assert response.status_code == 200
        assert b"could not be stored" in response.content
        assert not Profile.objects.filter(owner=user).exists()


@pytest.mark.django_db(transaction=True)
class TestProfileDeleteView:
    """Tests for POST /app/profile/delete/."""

    def test_delete_removes_profile_and_files(self, client_logged_in, user, upload_dir):
        client_logged_in.post(
            "/app/profile/",
            {"display_name": "Ada", "resume": SimpleUploadedFile("cv.pdf", b"%PDF")},
        )
        assert (upload_dir / "cv.pdf").exists()

        response = client_logged_in.post("/app/profile/delete/", follow=True)

        assert response.status_code == 200
        assert not Profile.objects.filter(owner=user).exists()
        assert not (upload_dir / "cv.pdf").exists()
        messages_list = [str(m) for m in response.context["messages"]]
        assert "Profile deleted." in messages_list

    def test_get_not_allowed(self, client_logged_in):
        response = client_logged_in.get("/app/profile/delete/")
        assert response.status_code == 405

    def test_missing_profile_is_404(self, client_logged_in):
        response = client_logged_in.post("/app/profile/delete/")
        assert response.status_code == 404
