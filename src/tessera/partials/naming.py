"""Naming conventions that map objects and types to partial paths."""

from __future__ import annotations

import re
from typing import Any

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")
_ES_ENDINGS = ("s", "x", "z", "ch", "sh")


def demodulize(name: str) -> str:
    """Drop any module or namespace prefix: ``shop.models.LineItem`` → ``LineItem``."""
    return re.split(r"\.|::", name)[-1]


def underscore(name: str) -> str:
    """``LineItem`` → ``line_item``, ``HTMLFormBuilder`` → ``html_form_builder``."""
    word = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    word = _WORD_BOUNDARY.sub(r"\1_\2", word)
    return word.replace("-", "_").lower()


def pluralize(word: str) -> str:
    """English plural for the regular cases used in partial paths.

    ``ad`` → ``ads``, ``category`` → ``categories``, ``box`` → ``boxes``.
    Irregular nouns are not handled; give such types a ``to_partial_path()``.
    """
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    if word.endswith(_ES_ENDINGS):
        return word + "es"
    return word + "s"


def partial_path_for(obj: Any, scope_name: str | None = None) -> str:
    """Conventional partial path for a domain object.

    An object may choose its own path with a ``to_partial_path()`` method.
    Otherwise the path is ``<plural>/<singular>`` of its type name, nested
    under the scope's namespace when the scope has one.

    Example:
        >>> partial_path_for(Ad())
        'ads/ad'
        >>> partial_path_for(Ad(), "admin/campaigns")
        'admin/ads/ad'
    """
    to_partial_path = getattr(obj, "to_partial_path", None)
    if callable(to_partial_path):
        path = to_partial_path()
    else:
        singular = underscore(demodulize(type(obj).__qualname__))
        path = f"{pluralize(singular)}/{singular}"

    if scope_name and "/" in scope_name:
        return f"{scope_name.rsplit('/', 1)[0]}/{path}"
    return path


def builder_variable_name(builder: Any) -> str:
    """``LabellingFormBuilder`` → ``labelling_form``."""
    name = underscore(demodulize(type(builder).__qualname__))
    return re.sub(r"_builder$", "", name)
