from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .store import TemplateStore

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\[\[([^\[\]]+)\]\]")


class MissingVariable(Exception):
    def __init__(self, name: str) -> None:
        super().__init__(f"No value for template placeholder [[{name}]]")
        self.name = name


@dataclass(frozen=True, slots=True)
class RenderedRequest:
    identifier: str
    xml: str


def substitute(template: str, variables: Mapping[str, Any], *, strict: bool = False) -> str:
    """
    Replace every `[[name]]` with `str(variables[name])`.

    Names are matched verbatim. An unknown name becomes "" unless `strict`,
    in which case MissingVariable is raised.
    """

    def _replace(m: re.Match[str]) -> str:
        name = m.group(1)
        if name in variables:
            value = variables[name]
            return "" if value is None else str(value)
        if strict:
            raise MissingVariable(name)
        logger.debug("Placeholder [[%s]] has no value; substituting empty string", name)
        return ""

    return PLACEHOLDER_RE.sub(_replace, template)


class RequestBuilder:
    def __init__(self, store: TemplateStore, *, strict: bool = False) -> None:
        self._store = store
        self._strict = strict

    @property
    def strict(self) -> bool:
        return self._strict

    def render(self, name: str, variables: Mapping[str, Any]) -> RenderedRequest:
        source = self._store.load(name)
        xml = substitute(source.text, variables, strict=self._strict)
        return RenderedRequest(identifier=source.identifier, xml=xml)
