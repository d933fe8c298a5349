"""Extension registry for tessera environments.

Maps a template's extension token (``tmpl`` in ``_ad.html.tmpl``) to the
handler that compiles and executes its source. The registry is also what the
path grammar consults to tell ``foo.tmpl`` (extension) apart from
``foo.html`` (format).
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tessera.environment.handlers import TemplateHandler


class ExtensionRegistry:
    """Dict-like registry of extension → handler.

    Supports:
        - registry['tmpl'] = handler
        - registry.update({'tmpl': handler})
        - handler = registry['tmpl']
        - 'tmpl' in registry

    Mutations use copy-on-write, so readers never see a half-applied update.
    Registration is meant to happen at startup; templates already finalized
    keep the handler they were compiled with.

    Example:
        >>> registry = ExtensionRegistry({"tmpl": StringTemplateHandler()})
        >>> registry.is_registered_extension("tmpl")
        True
        >>> registry.is_registered_extension("html")
        False
    """

    __slots__ = ("_default", "_handlers")

    def __init__(
        self,
        handlers: dict[str, TemplateHandler] | None = None,
        default: str | None = None,
    ):
        self._handlers: dict[str, TemplateHandler] = dict(handlers or {})
        if default is not None and default not in self._handlers:
            raise KeyError(f"Default extension '{default}' is not registered")
        self._default = default

    @classmethod
    def with_builtins(cls) -> ExtensionRegistry:
        """Registry holding the built-in handlers, ``tmpl`` as the default."""
        from tessera.environment.handlers import FormatHandler, StringTemplateHandler

        return cls(
            {"tmpl": StringTemplateHandler(), "fmt": FormatHandler()},
            default="tmpl",
        )

    def __getitem__(self, extension: str) -> TemplateHandler:
        return self._handlers[extension]

    def __setitem__(self, extension: str, handler: TemplateHandler) -> None:
        self.register(extension, handler)

    def __contains__(self, extension: object) -> bool:
        return extension in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def register(self, extension: str, handler: TemplateHandler) -> None:
        new = self._handlers.copy()
        new[extension] = handler
        self._handlers = new

    def update(self, mapping: dict[str, TemplateHandler]) -> None:
        """Register several handlers at once."""
        new = self._handlers.copy()
        new.update(mapping)
        self._handlers = new

    def get(
        self, extension: str, default: TemplateHandler | None = None
    ) -> TemplateHandler | None:
        return self._handlers.get(extension, default)

    def is_registered_extension(self, token: str | None) -> bool:
        return token is not None and token in self._handlers

    def extensions(self) -> tuple[str, ...]:
        """Registered extensions in registration order."""
        return tuple(self._handlers)

    @property
    def default_extension(self) -> str | None:
        return self._default

    def handler_for(self, extension: str | None) -> TemplateHandler:
        """Handler for ``extension``, or the default handler when it is None.

        Raises:
            KeyError: If the extension is unknown, or there is no default
        """
        if extension is None:
            if self._default is None:
                raise KeyError("No default template handler registered")
            return self._handlers[self._default]
        return self._handlers[extension]
