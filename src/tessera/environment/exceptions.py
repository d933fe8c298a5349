"""Exceptions for the tessera template system.

Exception Hierarchy:
TemplateError (base)
├── MalformedPathError          # Template path does not parse
├── TemplateNotFoundError       # No search path holds the file
├── TemplateCompileError        # Handler rejected the template source
├── TemplateRenderError         # Backend execution failed (carries nesting chain)
├── PartialDepthError           # Partials nested deeper than the limit
└── UnsupportedReferenceError   # render_reference() got a shape it can't bind

Nesting Chain:
A failure deep inside nested partials surfaces as a single
TemplateRenderError. Each enclosing template prepends its own file on the
way out, so the chain reads outermost first:

    ```
    TemplateRenderError: KeyError: 'price' in views/ads/_ad.html.tmpl
       Template stack:
         • views/advertiser/index.html.tmpl
         • views/ads/_ad.html.tmpl
    ```

"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from tessera.environment import terminal


class ErrorCode(Enum):
    """Searchable error codes for tessera errors.

    Format: T-{CATEGORY}-{NUMBER}
    Categories: PTH (path parsing), TPL (template loading), RUN (runtime),
    REF (reference binding)
    """

    MALFORMED_PATH = "T-PTH-001"

    TEMPLATE_NOT_FOUND = "T-TPL-001"
    COMPILE_ERROR = "T-TPL-002"

    RENDER_ERROR = "T-RUN-001"
    PARTIAL_DEPTH = "T-RUN-002"

    UNSUPPORTED_REFERENCE = "T-REF-001"

    @property
    def category(self) -> str:
        """Error category (e.g., 'runtime', 'path', 'template')."""
        prefix = self.value.split("-")[1]
        return {
            "PTH": "path",
            "TPL": "template",
            "RUN": "runtime",
            "REF": "reference",
        }.get(prefix, "unknown")


def format_template_stack(stack: Sequence[str] | None) -> str:
    """Format a partial nesting chain for error messages.

    Example:
        >>> print(format_template_stack(["index.html.tmpl", "_ad.html.tmpl"]))
        Template stack:
          • index.html.tmpl
          • _ad.html.tmpl
    """
    if not stack:
        return ""

    lines = [terminal.dim_text("Template stack:")]
    for filename in stack:
        lines.append(f"  • {terminal.location(filename)}")
    return "\n".join(lines)


class TemplateError(Exception):
    """Base exception for all tessera template errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a one-screen summary without traceback noise."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header


class MalformedPathError(TemplateError, ValueError):
    """Template path does not split into directory, name, format and extension.

    Example:
            >>> parse_template_path("pages/.hidden", registry)
        MalformedPathError: Malformed template path 'pages/.hidden'
    """

    code: ErrorCode | None = ErrorCode.MALFORMED_PATH

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Malformed template path '{path}'")


class TemplateNotFoundError(TemplateError):
    """No search path yields an existing file for the template path.

    Attributes:
        search_paths: Directories that were tried, in order
        path: The template path that was looked up
    """

    code: ErrorCode | None = ErrorCode.TEMPLATE_NOT_FOUND

    def __init__(self, search_paths: Sequence[str], path: str):
        self.search_paths = tuple(search_paths)
        self.path = path
        if self.search_paths:
            where = ", ".join(self.search_paths)
        else:
            where = "<no search paths>"
        super().__init__(f"Missing template {path} in view path {where}")


class TemplateCompileError(TemplateError):
    """The extension's handler could not compile the template source."""

    code: ErrorCode | None = ErrorCode.COMPILE_ERROR

    def __init__(self, filename: str, cause: BaseException):
        self.filename = filename
        self.cause = cause
        super().__init__(
            f"Could not compile {terminal.location(filename)}: "
            f"{type(cause).__name__}: {cause}"
        )


class TemplateRenderError(TemplateError):
    """Render-time failure with the partial nesting chain attached.

    The innermost template that failed creates the error; every enclosing
    template calls ``add_outer_template()`` as it propagates. The message is
    rebuilt from the current chain each time it is formatted.

    Attributes:
        filename: Resolved file of the template whose execution failed
        cause: The original exception
        template_stack: Resolved files from outermost partial inward
    """

    code: ErrorCode | None = ErrorCode.RENDER_ERROR

    def __init__(
        self,
        filename: str,
        cause: BaseException,
        template_stack: Sequence[str] | None = None,
    ):
        self.filename = filename
        self.cause = cause
        self.template_stack: list[str] = list(template_stack or [filename])
        super().__init__(filename, cause)

    def add_outer_template(self, filename: str) -> None:
        """Record that ``filename`` was rendering when this error passed through."""
        self.template_stack.insert(0, filename)

    @property
    def message(self) -> str:
        error_str = str(self.cause).strip()
        cause_type = type(self.cause).__name__
        if not error_str:
            return f"{cause_type} (no details available)"
        return f"{cause_type}: {error_str}"

    def __str__(self) -> str:
        parts = [f"{self.message} in {terminal.location(self.filename)}"]
        if len(self.template_stack) > 1:
            parts.append(format_template_stack(self.template_stack))
        return "\n".join(parts)

    def format_compact(self) -> str:
        parts = [
            terminal.format_error_header(
                self.code.value if self.code else None,
                self.message,
            ),
            f"  Location: {terminal.location(self.filename)}",
        ]
        if len(self.template_stack) > 1:
            parts.append(format_template_stack(self.template_stack))
        return "\n".join(parts)


class PartialDepthError(TemplateError):
    """Partials nested deeper than the render context allows."""

    code: ErrorCode | None = ErrorCode.PARTIAL_DEPTH

    def __init__(self, filename: str, max_depth: int):
        self.filename = filename
        self.max_depth = max_depth
        super().__init__(
            f"Maximum partial depth exceeded ({max_depth}) when rendering "
            f"'{filename}'\n  {terminal.hint('Hint:')} "
            "Check for partials that render themselves: A → B → A"
        )


class UnsupportedReferenceError(TemplateError, TypeError):
    """``render_reference()`` was handed something it cannot bind to a partial."""

    code: ErrorCode | None = ErrorCode.UNSUPPORTED_REFERENCE
