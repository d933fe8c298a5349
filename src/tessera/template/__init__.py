"""tessera Template package — path grammar and finalized template objects."""

from tessera.template.core import (
    AmbientValueProvider,
    Template,
    TemplateBuilder,
    find_full_path,
    resolve_template,
)
from tessera.template.paths import TemplatePath, parse_template_path

__all__ = [
    "AmbientValueProvider",
    "Template",
    "TemplateBuilder",
    "TemplatePath",
    "find_full_path",
    "parse_template_path",
    "resolve_template",
]
