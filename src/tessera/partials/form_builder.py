"""Form builder references.

Passing a builder to ``render_reference()`` renders the partial named after
the builder's type with the builder itself bound:

    >>> class LabellingFormBuilder(FormBuilder): ...
    >>> binder.render_reference(LabellingFormBuilder("ad", ad, view))
    # renders "<scope>/_labelling_form" with labelling_form=<the builder>
"""

from __future__ import annotations

from typing import Any


class FormBuilder:
    """Base class for objects that build a form for one record.

    Attributes:
        object_name: Name the form fields are scoped under (``"ad"``)
        object: The record being edited
        view: The view the form is rendered in
    """

    __slots__ = ("object", "object_name", "view")

    def __init__(self, object_name: str, obj: Any = None, view: Any = None):
        self.object_name = object_name
        self.object = obj
        self.view = view

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.object_name!r}>"
