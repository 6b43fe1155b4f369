from .decode import (
    Many,
    One,
    OneOrMany,
    ResponseDocument,
    XmlDecodeError,
    decode_document,
    lookup,
    one_or_many,
    records,
)

__all__ = [
    "Many",
    "One",
    "OneOrMany",
    "ResponseDocument",
    "XmlDecodeError",
    "decode_document",
    "lookup",
    "one_or_many",
    "records",
]
