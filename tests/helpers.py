"""Test handlers, domain objects and file helpers shared by tessera tests."""

from __future__ import annotations

import string
from collections.abc import Callable
from pathlib import Path
from typing import Any

from tessera import FormBuilder


class RecordingHandler:
    """``string.Template`` handler that records every execution.

    ``calls`` holds ``(source, locals)`` pairs in execution order, with the
    locals copied at the moment the template ran.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.compiled = 0

    def compile(self, source: str, template_path: Any) -> string.Template:
        self.compiled += 1
        return string.Template(source)

    def execute(self, compiled: string.Template, local_assigns: dict[str, Any], view: Any) -> str:
        self.calls.append((compiled.template, dict(local_assigns)))
        return compiled.safe_substitute(local_assigns)

    def locals_for(self, source: str) -> list[dict[str, Any]]:
        return [assigns for src, assigns in self.calls if src == source]


class CallbackHandler:
    """Handler whose template source is the name of a registered callable.

    Lets a test template do anything Python can: render nested partials
    through the view, raise, inspect its locals.
    """

    def __init__(self) -> None:
        self.callbacks: dict[str, Callable[[dict[str, Any], Any], str]] = {}

    def compile(self, source: str, template_path: Any) -> str:
        return source.strip()

    def execute(self, compiled: str, local_assigns: dict[str, Any], view: Any) -> str:
        return self.callbacks[compiled](local_assigns, view)


class CountingLookup:
    """Wraps a lookup callable and counts calls per path."""

    def __init__(self, lookup: Callable[[str], Any]) -> None:
        self._lookup = lookup
        self.counts: dict[str, int] = {}

    def __call__(self, path: str) -> Any:
        self.counts[path] = self.counts.get(path, 0) + 1
        return self._lookup(path)


def write_template(root: Path, relative_path: str, source: str) -> Path:
    """Write ``source`` to ``root/relative_path``, creating directories."""
    path = root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source)
    return path


class Ad:
    def __init__(self, title: str):
        self.title = title

    def __str__(self) -> str:
        return self.title


class Campaign:
    def __init__(self, name: str):
        self.name = name

    def __str__(self) -> str:
        return self.name


class Category:
    def to_partial_path(self) -> str:
        return "taxonomy/node"


class LabellingFormBuilder(FormBuilder):
    pass
