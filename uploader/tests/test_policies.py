"""Unit tests for rename policies."""

import hashlib

import pytest

from uploader.exceptions import ConfigurationError
from uploader.policies import (
    RANDOM_NAME_CHARS,
    RANDOM_NAME_LENGTH,
    RenamePolicy,
    rename,
    resolve_rename_policy,
)


class TestResolveRenamePolicy:
    """Tests for resolve_rename_policy."""

    def test_accepts_enum_member(self):
        assert resolve_rename_policy(RenamePolicy.SHA1) == RenamePolicy.SHA1

    def test_accepts_string_value(self):
        assert resolve_rename_policy("slug") == RenamePolicy.SLUG

    def test_accepts_callable(self):
        def fn(name, record):
            return name

        assert resolve_rename_policy(fn) is fn

    @pytest.mark.parametrize("value", ["bogus", 7, None, ""])
    def test_rejects_unknown_values(self, value):
        with pytest.raises(ConfigurationError, match="Rename policy"):
            resolve_rename_policy(value)


class TestBuiltinPolicies:
    """Tests for the built-in rename policies."""

    def test_none_keeps_name(self):
        assert rename(RenamePolicy.NONE, "Holiday Photo") == "Holiday Photo"

    def test_md5_is_digest_of_base_name(self):
        assert rename(RenamePolicy.MD5, "photo") == hashlib.md5(b"photo").hexdigest()

    def test_sha1_is_digest_of_base_name(self):
        assert rename(RenamePolicy.SHA1, "photo") == hashlib.sha1(b"photo").hexdigest()

    def test_hash_policies_are_deterministic(self):
        assert rename("md5", "report") == rename("md5", "report")
        assert rename("sha1", "report") == rename("sha1", "report")

    def test_slug(self):
        assert rename(RenamePolicy.SLUG, "My Holiday Photo!") == "my-holiday-photo"

    def test_slug_of_plain_name_is_unchanged(self):
        assert rename(RenamePolicy.SLUG, "photo") == "photo"

    def test_empty_slug_falls_back_to_random_name(self):
        name = rename(RenamePolicy.SLUG, "!!!")
        assert len(name) == RANDOM_NAME_LENGTH

    def test_random_name_shape(self):
        name = rename(RenamePolicy.RANDOM, "photo")
        assert len(name) == RANDOM_NAME_LENGTH
        assert set(name) <= set(RANDOM_NAME_CHARS)

    def test_random_names_differ(self):
        names = {rename(RenamePolicy.RANDOM, "photo") for _ in range(20)}
        assert len(names) == 20


class TestCustomPolicy:
    """Tests for caller-supplied rename functions."""

    def test_receives_name_and_record(self):
        record = {"id": 7}

        def fn(name, owner):
            return f"{owner['id']}-{name.upper()}"

        assert rename(fn, "avatar", record) == "7-AVATAR"

    def test_exception_becomes_configuration_error(self):
        def fn(name, record):
            raise RuntimeError("boom")

        with pytest.raises(ConfigurationError, match="boom") as exc_info:
            rename(fn, "avatar")
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.parametrize("bad", [None, 5, ""])
    def test_non_string_or_empty_result_raises(self, bad):
        with pytest.raises(ConfigurationError, match="non-empty string"):
            rename(lambda name, record: bad, "avatar")

    @pytest.mark.parametrize("bad", ["../escape", "nested/name", ".."])
    def test_path_components_raise(self, bad):
        with pytest.raises(ConfigurationError, match="unsafe name"):
            rename(lambda name, record: bad, "avatar")
