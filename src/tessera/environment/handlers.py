"""Template handlers: the backends that turn source into output.

tessera does not define a template language. A handler is anything that can
compile a template's source once and execute the compiled form many times
against a locals mapping:

    ```python
    class MarkdownHandler:
        def compile(self, source: str, template_path: TemplatePath) -> Any:
            return markdown_compiler.compile(source)

        def execute(self, compiled: Any, local_assigns: dict[str, Any], view: Any) -> str:
            return compiled.render(local_assigns, helpers=view)
    ```

Register it under an extension and every ``*.md`` template uses it:

    >>> env.extensions.register("md", MarkdownHandler())

Two small handlers ship with tessera so it is usable on its own:

- ``StringTemplateHandler`` (``tmpl``): ``$name`` / ``${name}`` substitution
- ``FormatHandler`` (``fmt``): ``str.format_map``, so ``{ad.title}`` and
  ``{items[0]}`` work

Thread-Safety:
``compile()`` runs once per template under the environment's lock;
``execute()`` must be safe to call concurrently on the same compiled value.
Both built-in handlers only read their compiled value.

"""

from __future__ import annotations

import string
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tessera.template.paths import TemplatePath


@runtime_checkable
class TemplateHandler(Protocol):
    """Backend contract consumed by ``Template``."""

    def compile(self, source: str, template_path: TemplatePath) -> Any: ...

    def execute(self, compiled: Any, local_assigns: dict[str, Any], view: Any) -> str: ...


class StringTemplateHandler:
    """``string.Template`` substitution.

    Every placeholder must be bound in the locals; a missing one raises
    ``KeyError`` at render time.

    Example:
        ``_ad.html.tmpl``::

            <li>$ad ($ad_counter)</li>
    """

    __slots__ = ()

    def compile(self, source: str, template_path: TemplatePath) -> string.Template:
        compiled = string.Template(source)
        if not compiled.is_valid():
            raise ValueError(f"Invalid placeholder in template '{template_path.name}'")
        return compiled

    def execute(
        self, compiled: string.Template, local_assigns: dict[str, Any], view: Any
    ) -> str:
        return compiled.substitute(local_assigns)


class FormatHandler:
    """``str.format_map`` rendering with attribute and index access.

    Example:
        ``_account.html.fmt``::

            <p>{account.name}: {account.balance:.2f}</p>
    """

    __slots__ = ("_formatter",)

    def __init__(self) -> None:
        self._formatter = string.Formatter()

    def compile(self, source: str, template_path: TemplatePath) -> str:
        # Formatter.parse raises ValueError on unbalanced braces
        for _literal, _field, _spec, _conversion in self._formatter.parse(source):
            pass
        return source

    def execute(self, compiled: str, local_assigns: dict[str, Any], view: Any) -> str:
        return compiled.format_map(local_assigns)
