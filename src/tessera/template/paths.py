"""Template path grammar.

A template path carries up to three dot-separated segments after its name,
read right to left:

    ```
    dir/sub/_item                 → name
    dir/sub/_item.tmpl            → name + extension   (tmpl is registered)
    dir/sub/_item.html            → name + format      (html is not)
    dir/sub/_item.html.tmpl       → name + format + extension
    dir/sub/_item.html.iphone.tmpl → name + multipart format + extension
    ```

Only the single-segment case needs the extension registry to decide.
"""

from __future__ import annotations

import os
import re
from typing import TYPE_CHECKING, NamedTuple

from tessera.environment.exceptions import MalformedPathError

if TYPE_CHECKING:
    from tessera.environment.registry import ExtensionRegistry

PARTIAL_MARKER = "_"

_PATH_RE = re.compile(r"^(.*/)?([^./]+)\.?(\w+)?\.?(\w+)?\.?(\w+)?$")
_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9_]")


class TemplatePath(NamedTuple):
    """A template path split into its semantic parts."""

    directory: str | None
    name: str
    format: str | None
    extension: str | None


def parse_template_path(raw: str, extensions: ExtensionRegistry) -> TemplatePath:
    """Split ``raw`` into directory, name, format and extension.

    Raises:
        MalformedPathError: If no base name can be extracted, or more than
            three segments follow it
    """
    m = _PATH_RE.match(raw)
    if m is None:
        raise MalformedPathError(raw)

    directory, name, first, second, third = m.groups()
    if directory is not None:
        directory = directory.rstrip("/")

    if third is not None:
        return TemplatePath(directory, name, f"{first}.{second}", third)
    if second is not None:
        return TemplatePath(directory, name, first, second)
    if extensions.is_registered_extension(first):
        return TemplatePath(directory, name, None, first)
    return TemplatePath(directory, name, first, None)


def join_path(directory: str | None, *parts: str | None) -> str:
    """Join a directory with dot-joined name parts, skipping missing pieces.

    Example:
        >>> join_path("ads", "_ad", None, "tmpl")
        'ads/_ad.tmpl'
    """
    filename = ".".join(p for p in parts if p is not None)
    if directory is None:
        return filename
    return f"{directory}/{filename}"


def format_and_extension(format: str | None, extension: str | None) -> str | None:
    joined = ".".join(p for p in (format, extension) if p is not None)
    return joined or None


def is_partial_name(name: str) -> bool:
    return name.startswith(PARTIAL_MARKER)


def cache_key_for(filename: str, project_root: str | None = None) -> str:
    """Filesystem-safe key derived from the template's absolute path.

    The project root prefix is dropped so keys are stable across checkouts,
    and each remaining character outside ``[A-Za-z0-9_]`` is replaced by its
    code point.

    Example:
        >>> cache_key_for("/srv/app/views/ads/_ad.tmpl", "/srv/app")
        '47views47ads47_ad46tmpl'
    """
    segment = os.path.abspath(filename)
    if project_root is not None:
        root = os.path.abspath(project_root)
        if segment.startswith(root):
            segment = segment[len(root):]
    return _UNSAFE_KEY_CHARS.sub(lambda m: str(ord(m.group(0))), segment)
