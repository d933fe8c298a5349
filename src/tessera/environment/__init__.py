"""tessera environment: configuration, extension registry, handlers and errors."""

from tessera.environment.core import Environment
from tessera.environment.exceptions import (
    ErrorCode,
    MalformedPathError,
    PartialDepthError,
    TemplateCompileError,
    TemplateError,
    TemplateNotFoundError,
    TemplateRenderError,
    UnsupportedReferenceError,
)
from tessera.environment.handlers import FormatHandler, StringTemplateHandler, TemplateHandler
from tessera.environment.registry import ExtensionRegistry

__all__ = [
    "Environment",
    "ErrorCode",
    "ExtensionRegistry",
    "FormatHandler",
    "MalformedPathError",
    "PartialDepthError",
    "StringTemplateHandler",
    "TemplateCompileError",
    "TemplateError",
    "TemplateHandler",
    "TemplateNotFoundError",
    "TemplateRenderError",
    "UnsupportedReferenceError",
]
