"""tessera Template — a resolved, compiled, immutable template file.

Lifecycle:
    ```
    TemplateBuilder("ads/_ad.html.tmpl", search_paths)   # parse + find file
        └── finalize()                                   # read, derive, compile
              └── Template (frozen)                      # cached, shared, rendered
    ```

The builder is the only mutable stage. ``finalize()`` computes every derived
value up front (paths, source, cache key, handler, compiled form) and hands
back a frozen ``Template``; nothing on a ``Template`` is ever computed lazily,
so concurrent readers need no locking.

Rendering:
``render()`` wraps the handler's ``execute()`` in the instrumentation hook.
Failures escaping it are turned into ``TemplateRenderError``; when that error
passes through an enclosing template, the enclosing file is prepended to its
``template_stack`` instead of wrapping again, giving a readable
"partial of partial of ..." chain.

"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from tessera.environment.exceptions import (
    TemplateCompileError,
    TemplateNotFoundError,
    TemplateRenderError,
)
from tessera.instrumentation import benchmark
from tessera.render_context import partial_frame
from tessera.template.paths import (
    cache_key_for,
    format_and_extension,
    is_partial_name,
    join_path,
    parse_template_path,
)

if TYPE_CHECKING:
    from tessera.environment.handlers import TemplateHandler
    from tessera.environment.registry import ExtensionRegistry

logger = logging.getLogger(__name__)

Instrument = Callable[[str, Callable[[], str]], str]


@runtime_checkable
class AmbientValueProvider(Protocol):
    """View capability: values a partial may bind by its variable name.

    Stands in for the controller's instance variables; a partial named
    ``_account`` with no explicit object binds ``lookup_ambient_value("account")``.
    """

    def lookup_ambient_value(self, name: str) -> Any: ...


class TemplateBuilder:
    """Mutable first stage of a template: parsed and located, not yet read.

    Args:
        template_path: Path as requested, e.g. ``"ads/_ad.html.tmpl"``
        search_paths: Directories tried in order; the bare path is tried last
        extensions: Registry used to tell formats from extensions and to pick
            the handler
        project_root: Prefix stripped from the absolute path in ``cache_key``

    Raises:
        MalformedPathError: If the path does not parse
        TemplateNotFoundError: If no search path holds the file
    """

    def __init__(
        self,
        template_path: str,
        search_paths: Sequence[str] = (),
        *,
        extensions: ExtensionRegistry,
        project_root: str | None = None,
    ):
        self.template_path = template_path
        self.parsed = parse_template_path(template_path, extensions)
        self.extensions = extensions
        self.project_root = project_root
        self.search_root, self.filename = find_full_path(template_path, search_paths)
        self._template: Template | None = None

    @property
    def is_partial(self) -> bool:
        return is_partial_name(self.parsed.name)

    def finalize(self) -> Template:
        """Compute every derived value and return the frozen Template.

        Idempotent: later calls return the same object without touching the
        file again.
        """
        if self._template is not None:
            return self._template

        directory, name, fmt, extension = self.parsed
        try:
            source = Path(self.filename).read_text(encoding="utf-8")
            handler = self.extensions.handler_for(extension)
            compiled = handler.compile(source, self.parsed)
        except Exception as e:
            raise TemplateCompileError(self.filename, e) from e

        self._template = Template(
            search_root=self.search_root,
            directory=directory,
            name=name,
            format=fmt,
            extension=extension,
            filename=self.filename,
            is_partial=self.is_partial,
            format_and_extension=format_and_extension(fmt, extension),
            path=join_path(directory, name, fmt, extension),
            path_without_extension=join_path(directory, name, fmt),
            path_without_format_and_extension=join_path(directory, name),
            source=source,
            cache_key=cache_key_for(self.filename, self.project_root),
            handler=handler,
            compiled=compiled,
        )
        logger.debug(f"Compiled template {self._template.path} from {self.filename}")
        return self._template


def find_full_path(path: str, search_paths: Sequence[str]) -> tuple[str | None, str]:
    """Return ``(search_root, filename)`` for the first search path holding ``path``.

    The bare path (no prefix) is tried after every search path, so earlier
    directories shadow later ones and absolute paths still resolve.

    Raises:
        TemplateNotFoundError: If the file exists nowhere
    """
    for search_root in [*search_paths, None]:
        filename = path if search_root is None else f"{search_root}/{path}"
        if Path(filename).is_file():
            return search_root, filename
    raise TemplateNotFoundError(search_paths, path)


def resolve_template(
    template_path: str,
    search_paths: Sequence[str] = (),
    *,
    extensions: ExtensionRegistry,
    project_root: str | None = None,
) -> Template:
    """Parse, locate, read and compile ``template_path`` in one step."""
    return TemplateBuilder(
        template_path,
        search_paths,
        extensions=extensions,
        project_root=project_root,
    ).finalize()


@dataclass(frozen=True, slots=True)
class Template:
    """A finalized template: every field is computed, nothing can be reassigned.

    Attributes:
        search_root: Search path the file was found under (None if found as given)
        directory: Directory part of the template path, no trailing slash
        name: Base name, e.g. ``_ad``
        format: Format token, possibly multipart (``html.iphone``)
        extension: Registered extension selecting the handler
        filename: Concrete file that was read
        is_partial: True if the name starts with ``_``
        path: ``directory/name.format.extension``
        source: File contents
        cache_key: Filesystem-safe encoding of the absolute filename

    Thread-Safety:
        Immutable. Share freely between threads; ``render()`` keeps all of
        its state in locals and the render context.
    """

    search_root: str | None
    directory: str | None
    name: str
    format: str | None
    extension: str | None
    filename: str
    is_partial: bool
    format_and_extension: str | None
    path: str
    path_without_extension: str
    path_without_format_and_extension: str
    source: str = field(repr=False)
    cache_key: str = field(repr=False)
    handler: TemplateHandler = field(repr=False, compare=False)
    compiled: Any = field(repr=False, compare=False)

    def __str__(self) -> str:
        return self.path

    def render(
        self,
        view: Any,
        local_assigns: dict[str, Any] | None = None,
        *,
        instrument: Instrument | None = None,
    ) -> str:
        """Execute the compiled template against a copy of ``local_assigns``.

        Args:
            view: Passed through to the handler (helpers, nested renders)
            local_assigns: Variables visible to the template
            instrument: ``(label, block) -> str`` wrapper, defaults to
                ``tessera.instrumentation.benchmark``

        Raises:
            TemplateRenderError: If anything fails during execution
        """
        assigns = dict(local_assigns or {})
        wrap = instrument or benchmark

        def execute() -> str:
            with partial_frame(self.filename):
                return self.handler.execute(self.compiled, assigns, view)

        try:
            return wrap(f"Rendered {self.path_without_format_and_extension}", execute)
        except TemplateRenderError as e:
            e.add_outer_template(self.filename)
            raise
        except Exception as e:
            raise TemplateRenderError(self.filename, e) from e

    def render_partial(
        self,
        view: Any,
        variable_name: str,
        obj: Any = None,
        local_assigns: dict[str, Any] | None = None,
        as_name: str | None = None,
        *,
        instrument: Instrument | None = None,
    ) -> str:
        """Bind the partial's object by naming convention, then render.

        The object is ``obj`` if given, else the view's ambient value named
        ``variable_name`` (when the view provides one), else None. It is
        bound under ``object`` and ``variable_name`` unless the caller's
        locals already hold a value there, and under ``as_name`` when given.
        The caller's mapping is left untouched.
        """
        assigns = dict(local_assigns or {})
        if obj is None and isinstance(view, AmbientValueProvider):
            obj = view.lookup_ambient_value(variable_name)

        if assigns.get(variable_name) is None:
            assigns[variable_name] = obj
        if assigns.get("object") is None:
            assigns["object"] = assigns[variable_name]
        if as_name and assigns.get(as_name) is None:
            assigns[as_name] = assigns["object"]

        return self.render(view, assigns, instrument=instrument)
