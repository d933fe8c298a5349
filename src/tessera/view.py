"""ViewContext — the object templates are rendered against.

A ViewContext stands in for the host framework's view: it knows the
environment, the current naming scope (``"advertiser"`` for templates under
``advertiser/``), the preferred format, and the ambient values partials bind
by name. Handlers receive it as ``view``, so a template can render nested
partials through ``view.render(...)``.

Example:
    >>> view = ViewContext(env, scope_name="advertiser", assigns={"account": buyer})
    >>> view.render(partial="account")                  # advertiser/_account, account=buyer
    >>> view.render(partial="ad", collection=ads, spacer_template="ad_divider")
    >>> view.render(obj=ad)                             # ads/_ad, ad=ad

"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from tessera.partials.binder import PartialBinder
from tessera.render_context import render_scope

if TYPE_CHECKING:
    from tessera.environment.core import Environment
    from tessera.template.core import Instrument, Template

logger = logging.getLogger(__name__)


class ViewContext:
    """Default host view: naming scope, ambient values and ``render()``.

    Args:
        environment: Where templates are looked up
        assigns: Ambient values partials bind by their variable name
        scope_name: Directory for bare partial names (``"advertiser"``)
        template_format: Preferred format, overriding the environment default
        instrument: Render timing wrapper passed to every template

    Thread-Safety:
        One ViewContext per request; do not share between threads.
    """

    def __init__(
        self,
        environment: Environment,
        *,
        assigns: dict[str, Any] | None = None,
        scope_name: str | None = None,
        template_format: str | None = None,
        instrument: Instrument | None = None,
    ):
        self.environment = environment
        self.assigns = dict(assigns or {})
        self.scope_name = scope_name
        self.template_format = template_format
        self.partials = PartialBinder(
            self.pick_template,
            self,
            instrument=instrument,
            max_depth=environment.max_partial_depth,
        )
        self._instrument = instrument

    def lookup_ambient_value(self, name: str) -> Any:
        return self.assigns.get(name)

    def current_scope_name(self) -> str | None:
        return self.scope_name

    def pick_template(self, path: str) -> Template:
        return self.environment.get_template(path, self.template_format)

    def render(
        self,
        partial: Any = None,
        *,
        obj: Any = None,
        collection: Iterable[Any] | None = None,
        local_assigns: dict[str, Any] | None = None,
        spacer_template: str | None = None,
        as_name: str | None = None,
    ) -> str:
        """Render a partial, a collection of partials, or an object's partial.

        Args:
            partial: Partial path, form builder, collection or object
            obj: Object bound to the partial (or rendered, if no partial given)
            collection: Render ``partial`` once per element
            local_assigns: Extra locals for the partial
            spacer_template: Partial placed between collection elements
            as_name: Extra local name for the bound object

        Example:
            >>> view.render(partial="ad", collection=ads, as_name="item")
        """
        if collection is not None:
            return self.partials.render_collection(
                partial, collection, spacer_template, local_assigns, as_name
            )
        return self.partials.render_reference(partial, obj, local_assigns, as_name)

    def render_template(self, path: str, local_assigns: dict[str, Any] | None = None) -> str:
        """Render a full (non-partial) template such as ``advertiser/index``."""
        with render_scope(self.environment.max_partial_depth):
            template = self.pick_template(path)
            logger.debug(f"Rendering template {template.path}")
            return template.render(self, local_assigns, instrument=self._instrument)

    def __repr__(self) -> str:
        return f"<ViewContext scope={self.scope_name!r}>"

