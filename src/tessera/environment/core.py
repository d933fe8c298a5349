"""tessera Environment — configuration plus the template lookup cache.

The Environment owns everything that is fixed for the life of an
application: where templates live, which extensions are registered, and the
cache of finalized templates.

Lookup:
``get_template("ads/_ad", "html")`` tries, first hit wins:

    ```
    ads/_ad                       # as given
    ads/_ad.html.tmpl             # format + each registered extension
    ads/_ad.html.fmt
    ads/_ad.tmpl                  # each registered extension alone
    ads/_ad.fmt
    ```

Each candidate is looked for in every search path in order before moving on
to the next candidate. A path that already ends in a registered extension is
only tried as given; any other trailing token (``_ad.html.iphone``) is part of
the format and still gets every extension appended.

Thread-Safety:
Templates are built and finalized under a lock and cached only once
finalized, so readers always get a complete, immutable Template. Two lookups
that land on the same file share one Template object.

"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from pathlib import Path

from tessera.environment.exceptions import TemplateNotFoundError
from tessera.environment.registry import ExtensionRegistry
from tessera.render_context import DEFAULT_MAX_PARTIAL_DEPTH
from tessera.template.core import Template, TemplateBuilder
from tessera.template.paths import parse_template_path

logger = logging.getLogger(__name__)


class Environment:
    """Central configuration and template cache.

    Args:
        search_paths: Directories searched in order; earlier ones shadow later
        extensions: Extension registry (defaults to the built-in handlers)
        project_root: Prefix stripped from template cache keys
        default_format: Format tried first when a path names none
        cache_templates: Reuse finalized templates across lookups
        max_partial_depth: Deepest partial nesting before PartialDepthError

    Example:
        >>> env = Environment(search_paths=["app/views", "shared/views"])
        >>> template = env.get_template("ads/_ad")
        >>> template.path
        'ads/_ad.html.tmpl'
    """

    def __init__(
        self,
        search_paths: Sequence[str | Path] = (),
        *,
        extensions: ExtensionRegistry | None = None,
        project_root: str | Path | None = None,
        default_format: str | None = "html",
        cache_templates: bool = True,
        max_partial_depth: int = DEFAULT_MAX_PARTIAL_DEPTH,
    ):
        if isinstance(search_paths, (str, Path)):
            search_paths = [search_paths]
        self.search_paths: tuple[str, ...] = tuple(
            str(p).rstrip("/") or "/" for p in search_paths
        )
        self.extensions = extensions if extensions is not None else ExtensionRegistry.with_builtins()
        self.project_root = str(project_root) if project_root is not None else None
        self.default_format = default_format
        self.cache_templates = cache_templates
        self.max_partial_depth = max_partial_depth

        self._lock = threading.Lock()
        self._cache: dict[tuple[str, str | None], Template] = {}
        self._by_filename: dict[str, Template] = {}

    def get_template(self, path: str, template_format: str | None = None) -> Template:
        """Resolve ``path`` to a finalized Template.

        Args:
            path: Template path, with or without format and extension
            template_format: Preferred format; defaults to ``default_format``

        Raises:
            MalformedPathError: If the path does not parse
            TemplateNotFoundError: If no candidate exists in any search path
            TemplateCompileError: If the handler rejects the source
        """
        fmt = template_format or self.default_format
        key = (path, fmt)
        if self.cache_templates:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        with self._lock:
            if self.cache_templates and key in self._cache:
                return self._cache[key]

            builder = self._find(path, fmt)
            template = self._by_filename.get(builder.filename) if self.cache_templates else None
            if template is None:
                template = builder.finalize()
                logger.debug(f"Resolved template '{path}' to {template.filename}")

            if self.cache_templates:
                self._by_filename[template.filename] = template
                self._cache[key] = template
            return template

    def _find(self, path: str, fmt: str | None) -> TemplateBuilder:
        for candidate in self.candidate_paths(path, fmt):
            try:
                return TemplateBuilder(
                    candidate,
                    self.search_paths,
                    extensions=self.extensions,
                    project_root=self.project_root,
                )
            except TemplateNotFoundError:
                continue
        raise TemplateNotFoundError(self.search_paths, path)

    def candidate_paths(self, path: str, fmt: str | None = None) -> list[str]:
        """Paths tried for ``path``, in order."""
        parsed = parse_template_path(path, self.extensions)
        candidates = [path]
        if self.extensions.is_registered_extension(parsed.extension):
            return candidates

        extensions = self.extensions.extensions()
        if fmt is not None and parsed.format is None:
            candidates.extend(f"{path}.{fmt}.{ext}" for ext in extensions)
        candidates.extend(f"{path}.{ext}" for ext in extensions)
        return candidates

    def clear_cache(self) -> None:
        """Drop every cached template."""
        with self._lock:
            self._cache.clear()
            self._by_filename.clear()

    def cache_info(self) -> dict[str, int]:
        return {"lookups": len(self._cache), "templates": len(self._by_filename)}

    def __repr__(self) -> str:
        return f"<Environment search_paths={list(self.search_paths)!r}>"
