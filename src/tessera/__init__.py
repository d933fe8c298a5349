"""tessera — template resolution and partial rendering.

tessera sits in front of whatever template language you use. It turns a
logical reference into a concrete template file and renders it with the right
local variables bound by convention:

    >>> from tessera import Environment, ViewContext
    >>> env = Environment(search_paths=["app/views"])
    >>> view = ViewContext(env, scope_name="advertiser", assigns={"account": buyer})
    >>> view.render(partial="account")            # app/views/advertiser/_account.html.tmpl
    >>> view.render(partial="ad", collection=ads) # once per ad, with ad and ad_counter bound

Architecture:
reference → PartialBinder → (variable name, lookup path) → Environment
→ Template (frozen) → handler.execute(compiled, locals, view)

Pieces:
1. **Path grammar**: ``dir/_name.format.extension`` split right to left;
   a lone trailing segment is an extension only if a handler is registered
   for it
2. **Template**: located through ordered search paths, finalized once into
   an immutable value with every derived field precomputed
3. **PartialBinder**: paths, form builders, collections and domain objects
   mapped to partials and locals by naming convention
4. **Handlers**: pluggable backends; ``tmpl`` (``string.Template``) and
   ``fmt`` (``str.format_map``) ship built in

Thread-Safety:
Finalized templates are immutable and cached behind a lock in the
Environment; every render builds its own locals, so one Environment can
serve many threads. ViewContext is per request.

"""

from tessera.environment import (
    Environment,
    ErrorCode,
    ExtensionRegistry,
    FormatHandler,
    MalformedPathError,
    PartialDepthError,
    StringTemplateHandler,
    TemplateCompileError,
    TemplateError,
    TemplateHandler,
    TemplateNotFoundError,
    TemplateRenderError,
    UnsupportedReferenceError,
)
from tessera.instrumentation import RenderAccumulator, benchmark, get_accumulator, profiled_render
from tessera.partials import (
    FormBuilder,
    PartialBinder,
    ReferenceKind,
    classify_reference,
    partial_path_for,
)
from tessera.render_context import RenderContext, get_render_context, render_context
from tessera.template import (
    Template,
    TemplateBuilder,
    TemplatePath,
    parse_template_path,
    resolve_template,
)
from tessera.view import ViewContext

__version__ = "0.1.0"

__all__ = [
    "Environment",
    "ErrorCode",
    "ExtensionRegistry",
    "FormBuilder",
    "FormatHandler",
    "MalformedPathError",
    "PartialBinder",
    "PartialDepthError",
    "ReferenceKind",
    "RenderAccumulator",
    "RenderContext",
    "StringTemplateHandler",
    "Template",
    "TemplateBuilder",
    "TemplateCompileError",
    "TemplateError",
    "TemplateHandler",
    "TemplateNotFoundError",
    "TemplatePath",
    "TemplateRenderError",
    "UnsupportedReferenceError",
    "ViewContext",
    "__version__",
    "benchmark",
    "classify_reference",
    "get_accumulator",
    "get_render_context",
    "parse_template_path",
    "partial_path_for",
    "profiled_render",
    "render_context",
    "resolve_template",
]


def __getattr__(name: str) -> object:
    """Free-threading declaration (PEP 703)."""
    if name == "_Py_mod_gil":
        # 0 = Py_MOD_GIL_NOT_USED
        return 0
    raise AttributeError(f"module 'tessera' has no attribute {name!r}")
