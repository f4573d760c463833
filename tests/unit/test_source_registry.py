"""
Unit tests for the source path registry.
"""

import threading
import uuid

import pytest

from loom.utils.config import set_config
from loom.utils.source_registry import (
    SourceRegistry,
    get_source_registry,
    is_local_path,
    set_source_registry,
)

NETWORK_PATH = "//server/share/T.tt"


class TestIsLocalPath:
    """Test classification of paths backends can address directly."""

    @pytest.mark.parametrize("path", ["t.tt", "/abs/t.tt", "C:\\dir\\t.tt", "rel/dir/t.tt", ""])
    def test_local(self, path):
        assert is_local_path(path)

    @pytest.mark.parametrize("path", ["\\\\server\\share\\t.tt", NETWORK_PATH, "http://host/t.tt"])
    def test_not_local(self, path):
        assert not is_local_path(path)


class TestRegistration:
    """Test token minting and lookups."""

    def test_token_is_uuid(self, registry):
        token = registry.register(NETWORK_PATH)
        assert str(uuid.UUID(token)) == token

    def test_same_path_same_token(self, registry):
        assert registry.register(NETWORK_PATH) == registry.register(NETWORK_PATH)
        assert len(registry) == 1

    def test_paths_matched_case_insensitively(self, registry):
        token = registry.register(NETWORK_PATH)
        assert registry.register(NETWORK_PATH.upper()) == token
        assert registry.token_for(NETWORK_PATH.upper()) == token

    def test_first_spelling_is_kept(self, registry):
        token = registry.register(NETWORK_PATH)
        registry.register(NETWORK_PATH.upper())
        assert registry.resolve(token) == NETWORK_PATH

    def test_distinct_paths(self, registry):
        assert registry.register("//a/x.tt") != registry.register("//b/x.tt")
        assert len(registry) == 2

    def test_unknown_lookups(self, registry):
        assert registry.resolve(str(uuid.uuid4())) is None
        assert registry.token_for(NETWORK_PATH) is None

    def test_contains(self, registry):
        token = registry.register(NETWORK_PATH)
        assert token in registry
        assert "missing" not in registry


class TestLocalCopies:
    """Test staging of local source copies."""

    def test_staged_from_text(self, registry):
        token = registry.register(NETWORK_PATH, text="Hello <#= x #>")
        assert registry.local_copy_path(token).read_text(encoding="utf-8") == "Hello <#= x #>"

    def test_staged_from_readable_file(self, registry, tmp_path):
        source = tmp_path / "T.tt"
        source.write_text("file text", encoding="utf-8")

        token = registry.register(str(source))
        assert registry.local_copy_path(token).read_text(encoding="utf-8") == "file text"

    def test_unreadable_source_not_staged(self, registry):
        token = registry.register(NETWORK_PATH)
        assert not registry.local_copy_path(token).exists()

    def test_existing_copy_kept(self, registry):
        token = registry.register(NETWORK_PATH, text="first")
        registry.register(NETWORK_PATH, text="second")
        assert registry.local_copy_path(token).read_text(encoding="utf-8") == "first"


class TestTranslate:
    """Test translation of backend filenames back to original paths."""

    def test_token(self, registry):
        token = registry.register(NETWORK_PATH)
        assert registry.translate(token) == NETWORK_PATH

    def test_token_as_last_segment(self, registry):
        token = registry.register(NETWORK_PATH)
        assert registry.translate(f"/tmp/loom-sources/{token}") == NETWORK_PATH
        assert registry.translate(f"C:\\staging\\{token}") == NETWORK_PATH

    def test_existing_file_unchanged(self, registry, tmp_path):
        existing = tmp_path / "real.tt"
        existing.write_text("", encoding="utf-8")
        assert registry.translate(str(existing)) == str(existing)

    def test_unknown_token_unchanged(self, registry):
        unknown = str(uuid.uuid4())
        assert registry.translate(unknown) == unknown

    @pytest.mark.parametrize("filename", ["", "page.tt", "<loom-unit-3>"])
    def test_non_token_unchanged(self, registry, filename):
        assert registry.translate(filename) == filename


class TestConcurrency:
    """Test concurrent registration."""

    def test_one_token_per_path(self, registry):
        tokens = []
        lock = threading.Lock()

        def register():
            for i in range(50):
                token = registry.register(f"//server/share/{i % 5}.tt")
                with lock:
                    tokens.append((i % 5, token))

        threads = [threading.Thread(target=register) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        by_path = {}
        for path_index, token in tokens:
            by_path.setdefault(path_index, set()).add(token)

        assert len(registry) == 5
        assert all(len(found) == 1 for found in by_path.values())


class TestGlobalRegistry:
    """Test the process-wide registry accessors."""

    def test_get_and_set(self, registry):
        previous = get_source_registry()
        try:
            set_source_registry(registry)
            assert get_source_registry() is registry
        finally:
            set_source_registry(previous)

    def test_created_on_first_use(self):
        previous = get_source_registry()
        try:
            set_source_registry(None)
            created = get_source_registry()
            assert isinstance(created, SourceRegistry)
            assert get_source_registry() is created
        finally:
            set_source_registry(previous)

    def test_created_with_configured_staging_dir(self, config, tmp_path):
        config.compilation.staging_dir = str(tmp_path / "configured")
        set_config(config)

        previous = get_source_registry()
        try:
            set_source_registry(None)
            assert get_source_registry().staging_dir == tmp_path / "configured"
        finally:
            set_source_registry(previous)
