"""PartialBinder — turns a partial reference into a rendered partial.

A reference can be a path (``"ad"``, ``"shared/ad"``), a form builder, a
collection, or a single domain object. ``classify_reference()`` decides which
once, at the call boundary, and ``render_reference()`` dispatches on the
result:

    ```
    reference                 ReferenceKind   renders
    "account"                 PATH            <scope>/_account with account=<ambient account>
    "shared/ad"               PATH            shared/_ad with ad=obj
    LabellingFormBuilder(...) BUILDER         <scope>/_labelling_form with labelling_form=builder
    [ad1, ad2]                COLLECTION      ads/_ad once per element, ad_counter=0,1
    ad                        OBJECT          ads/_ad with ad=ad
    ```

Collections:
Each element renders against its own shallow copy of the caller's locals
carrying ``object``, ``<variable>``, ``<variable>_counter`` and the optional
``as`` alias. The caller's mapping never sees those keys, and nothing from
one element leaks into the next.

"""

from __future__ import annotations

import posixpath
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence, Set
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from tessera.environment.exceptions import UnsupportedReferenceError
from tessera.partials.form_builder import FormBuilder
from tessera.partials.naming import builder_variable_name, partial_path_for
from tessera.render_context import DEFAULT_MAX_PARTIAL_DEPTH, render_scope
from tessera.template.paths import PARTIAL_MARKER

if TYPE_CHECKING:
    from tessera.template.core import Instrument, Template

EMPTY_COLLECTION = " "


@runtime_checkable
class NamingScopeProvider(Protocol):
    """View capability: the default directory for bare partial names."""

    def current_scope_name(self) -> str | None: ...


class ReferenceKind(Enum):
    """Shape of a partial reference."""

    PATH = "path"
    BUILDER = "builder"
    COLLECTION = "collection"
    OBJECT = "object"


def classify_reference(reference: Any) -> ReferenceKind:
    """Decide how ``render_reference()`` treats ``reference``.

    Raises:
        UnsupportedReferenceError: For mappings and bytes, which are neither
            paths nor collections of domain objects
    """
    if reference is None or isinstance(reference, str):
        return ReferenceKind.PATH
    if isinstance(reference, (bytes, bytearray, Mapping)):
        raise UnsupportedReferenceError(
            f"Cannot render a partial for {type(reference).__name__}; "
            "pass a partial path, an object, or a collection of objects"
        )
    if isinstance(reference, FormBuilder):
        return ReferenceKind.BUILDER
    if isinstance(reference, (Sequence, Set, Iterator)):
        return ReferenceKind.COLLECTION
    return ReferenceKind.OBJECT


class PartialBinder:
    """Binds references to partial templates and renders them.

    Args:
        lookup: Resolves a lookup path (``"ads/_ad"``) to a finalized Template
        view: Handed to templates; consulted for the naming scope and for
            ambient values when it provides those capabilities
        path_for: ``(obj, scope_name) -> partial path`` convention for objects
        instrument: Wrapper passed to every ``Template.render()``
        max_depth: Partial nesting limit for renders this binder starts

    Example:
        >>> binder = PartialBinder(env.get_template, view)
        >>> binder.render_reference("ad", ad)
        '<li>Summer sale</li>'
        >>> binder.render_collection(None, [ad1, ad2], spacer_template="ad_divider")
        '<li>Summer sale</li><hr><li>Winter sale</li>'
    """

    __slots__ = ("_instrument", "_lookup", "_max_depth", "_path_for", "view")

    def __init__(
        self,
        lookup: Callable[[str], Template],
        view: Any = None,
        *,
        path_for: Callable[[Any, str | None], str] = partial_path_for,
        instrument: Instrument | None = None,
        max_depth: int = DEFAULT_MAX_PARTIAL_DEPTH,
    ):
        self._lookup = lookup
        self.view = view
        self._path_for = path_for
        self._instrument = instrument
        self._max_depth = max_depth

    @property
    def scope_name(self) -> str | None:
        if isinstance(self.view, NamingScopeProvider):
            return self.view.current_scope_name() or None
        return None

    def partial_pieces(self, partial_path: str) -> tuple[str, str]:
        """Split a partial reference into ``(variable_name, lookup_path)``.

        Example:
            >>> binder.partial_pieces("shared/ad.html")
            ('ad', 'shared/_ad.html')
            >>> binder.partial_pieces("account")   # scope "advertiser"
            ('account', 'advertiser/_account')
        """
        if "/" in partial_path:
            trimmed = partial_path.rstrip("/")
            variable_name = posixpath.basename(trimmed)
            path = f"{posixpath.dirname(trimmed) or '.'}/{PARTIAL_MARKER}{variable_name}"
        elif (scope := self.scope_name) is not None:
            variable_name = partial_path
            path = f"{scope}/{PARTIAL_MARKER}{variable_name}"
        else:
            variable_name = partial_path
            path = f"{PARTIAL_MARKER}{variable_name}"
        return variable_name.split(".", 1)[0], path

    def render_reference(
        self,
        reference: Any,
        obj: Any = None,
        local_assigns: dict[str, Any] | None = None,
        as_name: str | None = None,
    ) -> str:
        """Render the partial ``reference`` points at.

        Args:
            reference: Partial path, form builder, collection or domain object
            obj: Object to bind; for a None reference, the object to render
            local_assigns: Extra locals for the partial (not modified)
            as_name: Extra local name for the bound object

        Raises:
            UnsupportedReferenceError: For a reference that cannot be bound
            TemplateNotFoundError: If the partial does not exist
            TemplateRenderError: If rendering fails
        """
        handler = _REFERENCE_DISPATCH[classify_reference(reference)]
        with render_scope(self._max_depth):
            return handler(self, reference, obj, local_assigns or {}, as_name)

    def _render_path(
        self,
        partial_path: str | None,
        obj: Any,
        local_assigns: dict[str, Any],
        as_name: str | None,
    ) -> str:
        if partial_path is None:
            if obj is None:
                raise UnsupportedReferenceError(
                    "render_reference() needs a partial path or an object"
                )
            return self._render_object(obj, None, local_assigns, as_name)
        variable_name, path = self.partial_pieces(partial_path)
        return self._lookup(path).render_partial(
            self.view,
            variable_name,
            obj,
            local_assigns,
            as_name,
            instrument=self._instrument,
        )

    def _render_builder(
        self,
        builder: FormBuilder,
        obj: Any,
        local_assigns: dict[str, Any],
        as_name: str | None,
    ) -> str:
        name = builder_variable_name(builder)
        return self._render_path(name, obj, {**local_assigns, name: builder}, as_name)

    def _render_collection_reference(
        self,
        collection: Iterable[Any],
        obj: Any,
        local_assigns: dict[str, Any],
        as_name: str | None,
    ) -> str:
        collection = _materialize(collection)
        if not collection:
            return ""
        return self.render_collection(None, collection, None, local_assigns, as_name)

    def _render_object(
        self,
        reference: Any,
        obj: Any,
        local_assigns: dict[str, Any],
        as_name: str | None,
    ) -> str:
        return self._render_path(
            self._path_for(reference, self.scope_name), reference, local_assigns, as_name
        )

    def render_collection(
        self,
        partial_path: str | None,
        collection: Iterable[Any],
        spacer_template: str | None = None,
        local_assigns: dict[str, Any] | None = None,
        as_name: str | None = None,
    ) -> str:
        """Render one partial per element and join the results.

        Args:
            partial_path: Partial for every element; None derives it per
                element from the element's type
            collection: Elements, rendered in iteration order
            spacer_template: Partial rendered once and placed between elements
            local_assigns: Locals shared by every element (not modified)
            as_name: Extra local name for each element

        Returns:
            The joined output, or a single space for an empty collection.
        """
        collection = _materialize(collection)
        if not collection:
            return EMPTY_COLLECTION

        with render_scope(self._max_depth):
            return self._render_elements(
                partial_path, collection, spacer_template, local_assigns, as_name
            )

    def _render_elements(
        self,
        partial_path: str | None,
        collection: Sequence[Any],
        spacer_template: str | None,
        local_assigns: dict[str, Any] | None,
        as_name: str | None,
    ) -> str:
        base_assigns = dict(local_assigns or {})
        spacer = self.render_reference(spacer_template) if spacer_template else ""
        pieces: dict[str, tuple[str, str]] = {}
        templates: dict[str, Template] = {}
        scope = self.scope_name

        results = []
        for index, element in enumerate(collection):
            element_path = partial_path or self._path_for(element, scope)
            if element_path not in pieces:
                pieces[element_path] = self.partial_pieces(element_path)
            variable_name, path = pieces[element_path]
            if path not in templates:
                templates[path] = self._lookup(path)

            assigns = dict(base_assigns)
            assigns[f"{variable_name}_counter"] = index
            assigns["object"] = assigns[variable_name] = element
            if as_name:
                assigns[as_name] = element

            results.append(
                templates[path].render_partial(
                    self.view,
                    variable_name,
                    element,
                    assigns,
                    instrument=self._instrument,
                )
            )
        return spacer.join(results)


def _materialize(collection: Iterable[Any]) -> Sequence[Any]:
    if isinstance(collection, Sequence):
        return collection
    return list(collection)


_REFERENCE_DISPATCH: dict[ReferenceKind, Callable[..., str]] = {
    ReferenceKind.PATH: PartialBinder._render_path,
    ReferenceKind.BUILDER: PartialBinder._render_builder,
    ReferenceKind.COLLECTION: PartialBinder._render_collection_reference,
    ReferenceKind.OBJECT: PartialBinder._render_object,
}
