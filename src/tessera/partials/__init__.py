"""Partial binding: references, naming conventions and collection rendering."""

from tessera.partials.binder import (
    NamingScopeProvider,
    PartialBinder,
    ReferenceKind,
    classify_reference,
)
from tessera.partials.form_builder import FormBuilder
from tessera.partials.naming import builder_variable_name, partial_path_for

__all__ = [
    "FormBuilder",
    "NamingScopeProvider",
    "PartialBinder",
    "ReferenceKind",
    "builder_variable_name",
    "classify_reference",
    "partial_path_for",
]
