"""tessera RenderContext — per-render state kept out of the locals mapping.

Tracks which template files are currently rendering so runaway partial
recursion stops with a clear error instead of a ``RecursionError`` deep in a
handler. The state lives in a ContextVar, so each thread or asyncio task
sees its own stack.

"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager, nullcontext
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Any

DEFAULT_MAX_PARTIAL_DEPTH = 50


@dataclass
class RenderContext:
    """Per-render state isolated from the template's locals.

    Attributes:
        template_stack: Files currently rendering, outermost first
        max_depth: Deepest nesting allowed before PartialDepthError
    """

    template_stack: list[str] = field(default_factory=list)
    max_depth: int = DEFAULT_MAX_PARTIAL_DEPTH

    @property
    def depth(self) -> int:
        return len(self.template_stack)

    def check_depth(self, filename: str) -> None:
        """Raise PartialDepthError if rendering ``filename`` would exceed the limit."""
        if self.depth >= self.max_depth:
            from tessera.environment.exceptions import PartialDepthError

            raise PartialDepthError(filename, self.max_depth)

    def child_context(self, filename: str) -> RenderContext:
        """Context for a nested render of ``filename``."""
        return RenderContext(
            template_stack=[*self.template_stack, filename],
            max_depth=self.max_depth,
        )


_render_context: ContextVar[RenderContext | None] = ContextVar(
    "tessera_render_context",
    default=None,
)


def get_render_context() -> RenderContext | None:
    """Current render context, or None outside of any render."""
    return _render_context.get()


@contextmanager
def render_context(max_depth: int = DEFAULT_MAX_PARTIAL_DEPTH) -> Iterator[RenderContext]:
    """Start a fresh top-level render context.

    Example:
        with render_context(max_depth=10):
            html = view.render(partial="ad", collection=ads)
    """
    ctx = RenderContext(max_depth=max_depth)
    token: Token[RenderContext | None] = _render_context.set(ctx)
    try:
        yield ctx
    finally:
        _render_context.reset(token)


@contextmanager
def partial_frame(filename: str) -> Iterator[RenderContext]:
    """Push ``filename`` onto the render stack for the duration of the block.

    Creates a root context when called outside of ``render_context()``.

    Raises:
        PartialDepthError: If the stack is already at its limit
    """
    parent = _render_context.get() or RenderContext()
    parent.check_depth(filename)
    child = parent.child_context(filename)
    token = _render_context.set(child)
    try:
        yield child
    finally:
        _render_context.reset(token)


def render_scope(max_depth: int = DEFAULT_MAX_PARTIAL_DEPTH) -> AbstractContextManager[Any]:
    """Enter ``render_context(max_depth)`` unless a render is already active.

    Nested renders reuse the active context so depth accumulates across
    every entry point.
    """
    if _render_context.get() is not None:
        return nullcontext()
    return render_context(max_depth=max_depth)
