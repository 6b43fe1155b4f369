from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from lxml import etree

ResponseDocument = dict[str, Any]

CONTENT_KEY = "content"


class XmlDecodeError(Exception):
    pass


def _parser() -> etree.XMLParser:
    # No entity expansion, no network fetches.
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
        huge_tree=False,
    )


def _qualified(el: etree._Element, clark: str) -> str:
    qn = etree.QName(clark)
    if qn.namespace is None:
        return qn.localname
    for prefix, uri in (el.nsmap or {}).items():
        if uri == qn.namespace and prefix:
            return f"{prefix}:{qn.localname}"
    return qn.localname


def _element_name(el: etree._Element) -> str:
    local = etree.QName(el).localname
    return f"{el.prefix}:{local}" if el.prefix else local


def _text_of(el: etree._Element) -> str:
    parts = [el.text or ""]
    parts.extend(c.tail or "" for c in el)
    return "".join(parts).strip()


def _fold(el: etree._Element) -> Any:
    children = [c for c in el if isinstance(c.tag, str)]
    text = _text_of(el)

    if not children and not el.attrib:
        return text if text else {}

    node: dict[str, Any] = {}
    for key, value in el.attrib.items():
        node[_qualified(el, key)] = value

    repeated: set[str] = set()
    for child in children:
        name = _element_name(child)
        value = _fold(child)
        if name not in node:
            node[name] = value
        elif name in repeated:
            node[name].append(value)
        else:
            node[name] = [node[name], value]
            repeated.add(name)

    if text:
        node[CONTENT_KEY] = text
    return node


def decode_document(payload: bytes | str) -> ResponseDocument:
    """
    Decode an EPP XML message into nested dicts/lists.

    Folding rules:
    - the root element itself is dropped, its contents are returned
    - names keep their source prefix ("domain:chkData")
    - text-only elements become strings, empty elements become {}
    - attributes and children share one mapping; mixed text goes to "content"
    - siblings with the same name become a list (one child stays a scalar,
      see one_or_many())
    """

    data = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
    if not data.strip():
        raise XmlDecodeError("Empty XML payload")
    try:
        root = etree.fromstring(data, _parser())
    except etree.XMLSyntaxError as e:
        raise XmlDecodeError(f"Malformed XML: {e}") from e
    if root is None:
        raise XmlDecodeError("XML payload has no root element")

    folded = _fold(root)
    if isinstance(folded, dict):
        return folded
    return {CONTENT_KEY: folded} if folded else {}


def lookup(document: Any, *path: str) -> Any:
    """Walk nested mappings; None as soon as a step is missing."""

    node = document
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


@dataclass(frozen=True, slots=True)
class One:
    value: Any


@dataclass(frozen=True, slots=True)
class Many:
    values: tuple[Any, ...]


OneOrMany = One | Many


def one_or_many(node: Any) -> OneOrMany:
    if node is None:
        return Many(())
    if isinstance(node, list):
        return Many(tuple(node))
    return One(node)


def records(node: Any) -> list[Any]:
    shape = one_or_many(node)
    if isinstance(shape, One):
        return [shape.value]
    return list(shape.values)
