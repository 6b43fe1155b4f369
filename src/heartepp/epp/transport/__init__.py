from .base import Endpoint, FramingError, TransportError, TransportTimeout
from .length_prefixed import LengthPrefixedFraming
from .tls import TlsTransport

__all__ = [
    "Endpoint",
    "FramingError",
    "LengthPrefixedFraming",
    "TlsTransport",
    "TransportError",
    "TransportTimeout",
]
