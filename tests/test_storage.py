"""Unit tests for the storage backend interface and local backend."""

from pathlib import Path
from typing import Protocol
from unittest.mock import Mock

import pytest

from media_storage.exceptions import BackendError, ErrorKind, ScopeViolationError
from media_storage.storage import LocalFilesystemBackend, StorageBackend
from media_storage.storage.base import (
    escape_wildcard,
    key_from_url,
    matches_wildcard,
    sanitize_namespace,
)


class TestStorageBackend:
    """Test StorageBackend interface."""

    def test_interface_protocol(self):
        """Test that StorageBackend is a proper Protocol."""
        assert issubclass(StorageBackend, Protocol)

    def test_interface_methods_defined(self):
        """Test that interface has required methods."""
        for method in ("set_namespace", "save_file", "delete_file", "delete_files_with_wildcard"):
            assert hasattr(StorageBackend, method)

    def test_runtime_checkable(self):
        """Test that StorageBackend can be used with isinstance at runtime."""
        mock_backend = Mock(spec=StorageBackend)
        assert isinstance(mock_backend, StorageBackend)

    def test_non_compliant_class(self):
        """Test that non-compliant classes don't match the protocol."""
        class BadBackend:
            def save_file(self, data: bytes, name: str) -> str:
                return "url"
            # Missing delete and namespace methods

        assert not isinstance(BadBackend(), StorageBackend)


class TestBackendHelpers:
    """Test helpers shared by the backends."""

    @pytest.mark.parametrize("raw,expected", [
        ("example.com/photos", "example-com-photos"),
        ("Example.com\\Photo Album", "example-com-photo-album"),
        ("a//b..c  d", "a-b-c-d"),
        ("-uploads-", "uploads"),
    ])
    def test_sanitize_namespace(self, raw, expected):
        """Test that illegal runs collapse into a single filler."""
        assert sanitize_namespace(raw) == expected

    def test_sanitize_namespace_truncates(self):
        """Test that names are cut to the maximum length."""
        assert len(sanitize_namespace("a" * 100)) == 63

    def test_sanitize_namespace_empty(self):
        """Test that a name with no legal characters is rejected."""
        with pytest.raises(ValueError):
            sanitize_namespace("../..")

    @pytest.mark.parametrize("url,expected", [
        ("https://s3.us-east-1.amazonaws.com/bucket/photo.jpg", "photo.jpg"),
        ("/media/uploads/my%20photo.jpg", "my photo.jpg"),
        ("photo.jpg", "photo.jpg"),
        ("https://acct.blob.core.windows.net/c/a.png?sv=2020", "a.png"),
    ])
    def test_key_from_url(self, url, expected):
        """Test resolving the key from the trailing URL segment."""
        assert key_from_url(url) == expected

    def test_matches_wildcard(self):
        """Test glob matching, not regex."""
        assert matches_wildcard("img-w800.jpg", "img-w*.jpg")
        assert not matches_wildcard("img-w800.png", "img-w*.jpg")
        assert not matches_wildcard("IMG-w800.jpg", "img-w*.jpg")
        assert not matches_wildcard("imgXw800.jpg", "img.w*.jpg")

    @pytest.mark.parametrize("text,expected", [
        ("img[1]", "img[[]1]"),
        ("a*b?c", "a[*]b[?]c"),
        ("plain-name_1.jpg", "plain-name_1.jpg"),
    ])
    def test_escape_wildcard(self, text, expected):
        """Test glob characters are quoted and match only themselves."""
        assert escape_wildcard(text) == expected
        assert matches_wildcard(text, escape_wildcard(text))

    def test_escaped_brackets_are_not_a_character_class(self):
        """Test an escaped name no longer matches names the class would."""
        assert matches_wildcard("img1-w800.png", "img[1]-w*.png")
        assert not matches_wildcard("img1-w800.png", escape_wildcard("img[1]") + "-w*.png")


class TestLocalFilesystemBackend:
    """Test LocalFilesystemBackend implementation."""

    @pytest.fixture
    def backend(self, tmp_path):
        """Create a backend with a namespace in a temporary directory."""
        return LocalFilesystemBackend("/media", tmp_path / "media", namespace="uploads")

    def test_init_creates_namespace_directory(self, tmp_path):
        """Test that selecting a namespace creates its directory."""
        backend = LocalFilesystemBackend("/media", tmp_path, namespace="photos")
        assert (tmp_path / "photos").is_dir()
        assert backend.url_path == "/media/photos"
        assert backend.disk_path == tmp_path / "photos"

    def test_set_namespace_idempotent(self, backend, tmp_path):
        """Test that setting an existing namespace again does not fail."""
        backend.set_namespace("uploads")
        backend.set_namespace("uploads")
        assert (tmp_path / "media" / "uploads").is_dir()

    def test_set_namespace_sanitizes(self, backend, tmp_path):
        """Test that traversal and punctuation are removed from folder names."""
        backend.set_namespace("../photos\\2024/my album.v2")
        assert backend.namespace == "photos/2024/my_album_v2"
        assert backend.disk_path == tmp_path / "media" / "photos" / "2024" / "my_album_v2"
        assert backend.disk_path.is_dir()

    def test_set_namespace_failure(self, backend, monkeypatch):
        """Test BackendError when the directory cannot be created."""
        def mock_mkdir(self, *args, **kwargs):
            raise PermissionError("Simulated mkdir failure")

        monkeypatch.setattr(Path, "mkdir", mock_mkdir)

        with pytest.raises(BackendError, match="Failed to create storage directory") as exc_info:
            backend.set_namespace("other")
        assert isinstance(exc_info.value.cause, PermissionError)
        assert exc_info.value.__cause__ is exc_info.value.cause

    def test_save_file(self, backend):
        """Test successful file save."""
        url = backend.save_file(b"file content", "photo.jpg")

        assert url == "/media/uploads/photo.jpg"
        assert (backend.disk_path / "photo.jpg").read_bytes() == b"file content"

    def test_save_file_rejects_paths(self, backend):
        """Test that names with separators cannot escape the namespace."""
        with pytest.raises(ScopeViolationError) as exc_info:
            backend.save_file(b"x", "../escape.txt")
        assert exc_info.value.kind == ErrorKind.SCOPE_VIOLATION

    def test_save_file_storage_error(self, backend, monkeypatch):
        """Test BackendError when the write fails."""
        def mock_write_bytes(self, content):
            raise IOError("Simulated write failure")

        monkeypatch.setattr(Path, "write_bytes", mock_write_bytes)

        with pytest.raises(BackendError, match="Failed to save file"):
            backend.save_file(b"content", "photo.jpg")

    def test_delete_file_by_url(self, backend):
        """Test deleting a file by the URL save returned."""
        url = backend.save_file(b"content", "photo.jpg")
        backend.delete_file(url)
        assert not (backend.disk_path / "photo.jpg").exists()

    def test_save_file_encodes_url(self, backend):
        """Test the returned URL percent-encodes the name and still deletes it."""
        url = backend.save_file(b"content", "photo(1) [a].jpg")

        assert url == "/media/uploads/photo%281%29%20%5Ba%5D.jpg"
        assert (backend.disk_path / "photo(1) [a].jpg").exists()

        backend.delete_file(url)
        assert not (backend.disk_path / "photo(1) [a].jpg").exists()

    def test_delete_file_by_absolute_url(self, backend):
        """Test deleting via a URL including scheme and host."""
        backend.save_file(b"content", "photo.jpg")
        backend.delete_file("https://example.com/media/uploads/photo.jpg")
        assert not (backend.disk_path / "photo.jpg").exists()

    def test_delete_file_by_name(self, backend):
        """Test deleting by bare filename."""
        backend.save_file(b"content", "photo.jpg")
        backend.delete_file("photo.jpg")
        assert not (backend.disk_path / "photo.jpg").exists()

    def test_delete_missing_file(self, backend):
        """Test that deleting an absent file is not an error."""
        backend.delete_file("/media/uploads/missing.jpg")

    def test_delete_file_outside_scope(self, backend):
        """Test that deleting outside the namespace is refused."""
        backend.save_file(b"content", "photo.jpg")

        with pytest.raises(ScopeViolationError):
            backend.delete_file("/media/other/photo.jpg")
        assert (backend.disk_path / "photo.jpg").exists()

    def test_delete_files_with_wildcard(self, backend):
        """Test that only matching files are deleted."""
        for name in ("img-w800.jpg", "img-w400.jpg", "img-w400.png", "other-w800.jpg"):
            backend.save_file(b"content", name)

        backend.delete_files_with_wildcard("/media/uploads/img-w*.jpg")

        remaining = sorted(p.name for p in backend.disk_path.iterdir())
        assert remaining == ["img-w400.png", "other-w800.jpg"]

    def test_delete_files_with_wildcard_bare_pattern(self, backend):
        """Test that a pattern without folder applies to the namespace."""
        backend.save_file(b"content", "a-w1.gif")
        backend.delete_files_with_wildcard("a-w*.gif")
        assert list(backend.disk_path.iterdir()) == []

    def test_delete_files_with_wildcard_outside_scope(self, backend):
        """Test that a pattern for another folder raises ScopeViolationError."""
        backend.save_file(b"content", "img-w800.jpg")

        with pytest.raises(ScopeViolationError):
            backend.delete_files_with_wildcard("/media/elsewhere/img-w*.jpg")
        assert (backend.disk_path / "img-w800.jpg").exists()

    def test_delete_files_with_wildcard_skips_directories(self, backend):
        """Test that subdirectories are never removed."""
        (backend.disk_path / "img-w1").mkdir()
        backend.delete_files_with_wildcard("img-w*")
        assert (backend.disk_path / "img-w1").is_dir()

    def test_implements_storage_backend_protocol(self, backend):
        """Test that LocalFilesystemBackend implements StorageBackend protocol."""
        assert isinstance(backend, StorageBackend)
