from heartepp.client import (
    ConfigError,
    NotConnected,
    Session,
    SessionConfig,
    SessionState,
    load_session_config,
)
from heartepp.epp.core.result import EppResult, ProtocolFailure
from heartepp.epp.rpc.engine import TransactionError
from heartepp.epp.templates import MissingVariable, TemplateNotFound
from heartepp.epp.transport import FramingError, TransportError
from heartepp.epp.xml import XmlDecodeError

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "EppResult",
    "FramingError",
    "MissingVariable",
    "NotConnected",
    "ProtocolFailure",
    "Session",
    "SessionConfig",
    "SessionState",
    "TemplateNotFound",
    "TransactionError",
    "TransportError",
    "XmlDecodeError",
    "load_session_config",
]
