from .config import (
    DEFAULT_PORT,
    DEFAULT_SERVER,
    SANDBOX_PORT,
    ConfigError,
    SessionConfig,
    load_session_config,
    session_config_from_mapping,
)
from .session import NotConnected, Session, SessionState, availability_from

__all__ = [
    "DEFAULT_PORT",
    "DEFAULT_SERVER",
    "SANDBOX_PORT",
    "ConfigError",
    "NotConnected",
    "Session",
    "SessionConfig",
    "SessionState",
    "availability_from",
    "load_session_config",
    "session_config_from_mapping",
]
