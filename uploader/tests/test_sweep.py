"""Tests for the orphan sweep service, task and management command."""

import json
import os
import time
from io import StringIO

import pytest
from django.core.management import call_command
from portal.models import Profile

from uploader.services.sweep import (
    find_dangling_references,
    find_orphaned_files,
    slot_models,
    sweep_orphaned_files,
)
from uploader.tasks import sweep_orphaned_uploads_task


def _write(directory, name, hours_old=0):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_bytes(b"data")
    if hours_old:
        stamp = time.time() - hours_old * 3600
        os.utime(path, (stamp, stamp))
    return path


@pytest.fixture
def populated(user, upload_dir):
    """One referenced file, an old orphan, a fresh orphan and a dangling row."""
    Profile.objects.create(owner=user, avatar="kept.png", resume="missing.pdf")
    _write(upload_dir, "kept.png", hours_old=5)
    _write(upload_dir, "old-orphan.png", hours_old=5)
    _write(upload_dir, "fresh-orphan.png")
    return upload_dir


@pytest.mark.django_db
class TestFindOrphanedFiles:
    """Tests for find_orphaned_files and find_dangling_references."""

    def test_slot_models(self):
        assert Profile in slot_models()

    def test_lists_only_old_unreferenced_files(self, populated):
        orphans = find_orphaned_files(grace_hours=1)
        assert [o["name"] for o in orphans] == ["old-orphan.png"]
        assert orphans[0]["directory"] == str(populated)

    def test_zero_grace_includes_fresh_files(self, populated):
        names = [o["name"] for o in find_orphaned_files(grace_hours=0)]
        assert names == ["fresh-orphan.png", "old-orphan.png"]

    def test_missing_directory_has_no_orphans(self, user, upload_dir):
        Profile.objects.create(owner=user, avatar="a.png")
        assert find_orphaned_files() == []

    def test_media_root_as_storage_directory_is_never_swept(self, user, settings, tmp_path):
        settings.MEDIA_ROOT = tmp_path
        settings.UPLOADER_STORAGE_DIRECTORY = tmp_path
        Profile.objects.create(owner=user, avatar="kept.png")
        _write(tmp_path, "kept.png", hours_old=5)
        _write(tmp_path, "site-logo.png", hours_old=5)

        assert find_orphaned_files(grace_hours=1) == []
        assert sweep_orphaned_files(grace_hours=1)["deleted"] == 0
        assert (tmp_path / "site-logo.png").exists()

    def test_dangling_references(self, populated):
        dangling = find_dangling_references()
        assert len(dangling) == 1
        assert dangling[0]["model"] == "portal.Profile"
        assert dangling[0]["slot"] == "resume"
        assert dangling[0]["name"] == "missing.pdf"


@pytest.mark.django_db
class TestSweepOrphanedFiles:
    """Tests for sweep_orphaned_files."""

    def test_deletes_old_orphans_only(self, populated):
        result = sweep_orphaned_files(grace_hours=1)

        assert result == {"deleted": 1, "failed": 0, "dangling": 1}
        assert not (populated / "old-orphan.png").exists()
        assert (populated / "fresh-orphan.png").exists()
        assert (populated / "kept.png").exists()

    def test_dry_run_deletes_nothing(self, populated):
        result = sweep_orphaned_files(grace_hours=1, dry_run=True)

        assert result["deleted"] == 0
        assert [o["name"] for o in result["orphans"]] == ["old-orphan.png"]
        assert (populated / "old-orphan.png").exists()

    def test_task(self, populated, settings):
        settings.UPLOADER_ORPHAN_GRACE_HOURS = 1
        result = sweep_orphaned_uploads_task()
        assert result["deleted"] == 1


@pytest.mark.django_db
class TestSweepUploadsCommand:
    """Tests for the sweep_uploads management command."""

    def test_json_dry_run(self, populated):
        out = StringIO()
        call_command("sweep_uploads", "--dry-run", "--json", "--grace-hours", "1", stdout=out)

        data = json.loads(out.getvalue())
        assert data["dangling"] == 1
        assert [o["name"] for o in data["orphans"]] == ["old-orphan.png"]
        assert (populated / "old-orphan.png").exists()

    def test_deletes(self, populated):
        out = StringIO()
        call_command("sweep_uploads", "--grace-hours", "1", stdout=out)

        assert "Deleted 1 orphaned file(s)" in out.getvalue()
        assert not (populated / "old-orphan.png").exists()
