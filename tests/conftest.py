"""Pytest configuration and fixtures for tessera tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tessera import Environment, ExtensionRegistry, StringTemplateHandler, ViewContext

from .helpers import Ad, CallbackHandler, RecordingHandler


@pytest.fixture
def views_dir(tmp_path: Path) -> Path:
    """Empty view directory under tmp_path."""
    path = tmp_path / "views"
    path.mkdir()
    return path


@pytest.fixture
def recorder() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def callbacks() -> CallbackHandler:
    return CallbackHandler()


@pytest.fixture
def extensions(recorder: RecordingHandler, callbacks: CallbackHandler) -> ExtensionRegistry:
    """Registry with the real ``tmpl`` handler plus the two test handlers."""
    return ExtensionRegistry(
        {"tmpl": StringTemplateHandler(), "rec": recorder, "cb": callbacks},
        default="tmpl",
    )


@pytest.fixture
def env(views_dir: Path, extensions: ExtensionRegistry) -> Environment:
    """Environment searching views_dir."""
    return Environment(search_paths=[str(views_dir)], extensions=extensions)


@pytest.fixture
def view(env: Environment) -> ViewContext:
    """ViewContext with no scope and no ambient values."""
    return ViewContext(env)


@pytest.fixture
def ads() -> list[Ad]:
    return [Ad("Summer sale"), Ad("Winter sale"), Ad("Spring sale")]
