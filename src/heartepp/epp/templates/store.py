from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

TEMPLATE_DIR = "Template"
TEMPLATE_SUFFIX = ".xml"


class TemplateNotFound(Exception):
    pass


@dataclass(frozen=True, slots=True)
class TemplateSource:
    identifier: str
    text: str


class TemplateStore(Protocol):
    def load(self, name: str) -> TemplateSource: ...


def normalize_template_name(name: str) -> str:
    """`whois`, `WHOIS` and `Whois` all resolve to `Whois`."""

    return name[:1].upper() + name[1:].lower()


@dataclass(frozen=True, slots=True)
class FileTemplateStore:
    """
    Templates stored as `<root>/Template/[<subdir>/]<Name>.xml`.
    """

    root: Path
    subdir: str | None = None

    @property
    def directory(self) -> Path:
        base = Path(self.root) / TEMPLATE_DIR
        return base / self.subdir if self.subdir else base

    def load(self, name: str) -> TemplateSource:
        if not name:
            raise TemplateNotFound("Template name must not be empty")
        path = self.directory / f"{normalize_template_name(name)}{TEMPLATE_SUFFIX}"
        if not path.is_file():
            raise TemplateNotFound(f"Could not locate template: {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateNotFound(f"Could not read template {path}: {e}") from e
        return TemplateSource(identifier=str(path), text=text)
