from .render import MissingVariable, RenderedRequest, RequestBuilder, substitute
from .store import (
    FileTemplateStore,
    TemplateNotFound,
    TemplateSource,
    TemplateStore,
    normalize_template_name,
)

__all__ = [
    "FileTemplateStore",
    "MissingVariable",
    "RenderedRequest",
    "RequestBuilder",
    "TemplateNotFound",
    "TemplateSource",
    "TemplateStore",
    "normalize_template_name",
    "substitute",
]
