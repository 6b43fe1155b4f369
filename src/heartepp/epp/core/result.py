from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from heartepp.epp.xml.decode import CONTENT_KEY, lookup, records

RESULT_OK = "1000"
RESULT_SESSION_ENDED = "1500"


@dataclass(frozen=True, slots=True)
class EppResult:
    code: str | None
    message: str | None

    @property
    def ok(self) -> bool:
        return self.code == RESULT_OK


@dataclass(frozen=True, slots=True)
class ProtocolFailure:
    """
    A well-formed response whose result code is not the one the command
    expects. Recorded on the session, never raised.
    """

    command: str
    code: str | None
    message: str | None


def _as_text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        content = value.get(CONTENT_KEY)
        return content if isinstance(content, str) else None
    return None


def result_of(document: Any) -> EppResult:
    """
    Read `response.result.code` / `response.result.msg`.

    Servers may send several <result> elements; the first one wins.
    """

    found = records(lookup(document, "response", "result"))
    first = found[0] if found else None
    if not isinstance(first, dict):
        return EppResult(code=None, message=_as_text(first))
    return EppResult(code=_as_text(first.get("code")), message=_as_text(first.get("msg")))
