"""
Pytest configuration and shared fixtures for loom tests.

This module provides common test fixtures, configuration, and utilities
used across the test suite.
"""

import pytest
from pathlib import Path
from typing import Any, List, Optional, Sequence

from loom.codegen import create_emitter
from loom.compiler import Backend, CompileResult, Diagnostic
from loom.transformer import TextTemplateTransformer
from loom.utils.config import LoomConfig, set_config
from loom.utils.source_registry import SourceRegistry


class FakeBackend(Backend):
    """Backend returning canned diagnostics and recording what it compiled."""

    name = "fake"

    def __init__(self, diagnostics: Optional[List[Diagnostic]] = None):
        self.diagnostics = list(diagnostics or [])
        self.compiled: List[dict] = []

    def compile(
        self,
        source_text: str,
        language: str,
        language_version: Optional[str] = None,
        referenced_modules: Sequence[str] = (),
    ) -> CompileResult:
        self.compiled.append(
            {
                "source_text": source_text,
                "language": language,
                "language_version": language_version,
                "referenced_modules": list(referenced_modules),
            }
        )
        return CompileResult(None, list(self.diagnostics))

    def instantiate(self, artifact: Any) -> Any:
        raise AssertionError("FakeBackend never produces an artifact")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep configuration environment variables and the global config out of tests."""
    monkeypatch.delenv("LOOM_CONFIG", raising=False)
    monkeypatch.delenv("LOOM_DEBUG", raising=False)
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def config():
    """Default configuration, independent of the environment."""
    return LoomConfig()


@pytest.fixture
def registry(tmp_path):
    """Source registry staging local copies under the test directory."""
    return SourceRegistry(staging_dir=str(tmp_path / "staging"))


@pytest.fixture
def template_dir(tmp_path):
    """Directory for template files."""
    directory = tmp_path / "templates"
    directory.mkdir()
    return directory


@pytest.fixture
def write_template(template_dir):
    """Write a template file relative to ``template_dir`` and return its path."""

    def _write(relative_path: str, text: str) -> Path:
        path = template_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_transformer(template_dir, registry, config):
    """Create transformers rooted at ``template_dir`` sharing the test registry."""

    def _make(**kwargs) -> TextTemplateTransformer:
        kwargs.setdefault("base_directory", template_dir)
        kwargs.setdefault("registry", registry)
        kwargs.setdefault("config", config)
        return TextTemplateTransformer(**kwargs)

    return _make


@pytest.fixture
def emitter(registry):
    """Python unit emitter with provenance markers."""
    return create_emitter(
        "Python",
        namespace_name="loom.inline_scripting",
        class_name="DocumentScripts",
        registry=registry,
    )


@pytest.fixture
def plain_emitter(registry):
    """Python unit emitter without provenance markers."""
    return create_emitter(
        "Python",
        namespace_name="loom.inline_scripting",
        class_name="DocumentScripts",
        registry=registry,
        include_source_references=False,
    )


@pytest.fixture
def fake_backend():
    """Backend reporting no diagnostics and no artifact."""
    return FakeBackend()


@pytest.fixture
def make_fake_backend():
    """Create backends reporting the given diagnostics."""
    return FakeBackend


def pytest_collection_modifyitems(config, items):
    """Mark tests by the directory they live in."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests for individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests for complete transformations"
    )
