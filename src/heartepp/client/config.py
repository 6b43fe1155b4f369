from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from heartepp.epp.templates.store import TEMPLATE_DIR
from heartepp.epp.transport.base import Endpoint

DEFAULT_SERVER = "customer.heartinternet.co.uk"
DEFAULT_PORT = 700
SANDBOX_PORT = 1701
DEFAULT_NAMESPACE = "urn:ietf:params:xml:ns:epp-1.0"
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_IO_TIMEOUT = 30.0

# The installed package ships Template/{Login,Logout,Whois}.xml.
PACKAGE_ROOT = Path(__file__).resolve().parents[1]


class ConfigError(Exception):
    pass


@dataclass(frozen=True, slots=True)
class SessionConfig:
    server: str = DEFAULT_SERVER
    port: int = DEFAULT_PORT
    test: bool = False
    debug: bool = False
    path: Path = PACKAGE_ROOT
    template_subdir: str | None = None
    namespace: str = DEFAULT_NAMESPACE
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    io_timeout: float | None = DEFAULT_IO_TIMEOUT
    strict_templates: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path).expanduser())
        if self.test:
            # Sandbox mode always talks to the sandbox port.
            object.__setattr__(self, "port", SANDBOX_PORT)
        self.validate()

    @classmethod
    def create(cls, **options: Any) -> SessionConfig:
        """
        Build a config from keyword options; None means "use the default".
        """

        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigError(f"Unknown session option(s): {', '.join(unknown)}")
        return cls(**{k: v for k, v in options.items() if v is not None})

    @property
    def endpoint(self) -> Endpoint:
        return Endpoint(host=self.server, port=self.port)

    @property
    def template_root(self) -> Path:
        return self.path / TEMPLATE_DIR

    def validate(self) -> None:
        if not self.server:
            raise ConfigError("Invalid server")
        if not isinstance(self.port, int) or isinstance(self.port, bool):
            raise ConfigError(f"Invalid port: {self.port!r}")
        if not (0 < self.port < 65536):
            raise ConfigError(f"Invalid port: {self.port}")
        if self.connect_timeout <= 0:
            raise ConfigError("connect_timeout must be > 0")
        if self.io_timeout is not None and self.io_timeout <= 0:
            raise ConfigError("io_timeout must be > 0 (or None to disable)")
        if not self.template_root.is_dir():
            raise ConfigError(f"Could not locate {TEMPLATE_DIR} folder in '{self.path}'")
        if self.template_subdir and not (self.template_root / self.template_subdir).is_dir():
            raise ConfigError(
                f"Could not locate template folder '{self.template_subdir}' in '{self.template_root}'"
            )


def _as_bool(value: Any, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return default


def _as_int(value: Any, *, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as e:
            raise ConfigError(f"Not an integer: {value!r}") from e
    raise ConfigError(f"Not an integer: {value!r}")


def _as_optional_float(value: Any, *, default: float | None) -> float | None:
    if value is None:
        return default
    if isinstance(value, str) and value.strip().lower() in {"none", "null", ""}:
        return None
    if isinstance(value, bool):
        raise ConfigError(f"Not a number: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as e:
            raise ConfigError(f"Not a number: {value!r}") from e
    raise ConfigError(f"Not a number: {value!r}")


def _as_optional_str(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value if value else None


def session_config_from_mapping(
    data: Mapping[str, Any], *, base_dir: Path | None = None
) -> SessionConfig:
    """
    Lenient mapping -> SessionConfig. Unknown keys are ignored; a relative
    `path` is resolved against `base_dir` when given.
    """

    path_raw = _as_optional_str(data.get("path"))
    path = Path(path_raw).expanduser() if path_raw else PACKAGE_ROOT
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path

    connect_timeout = _as_optional_float(
        data.get("connect_timeout"), default=DEFAULT_CONNECT_TIMEOUT
    )
    return SessionConfig(
        server=_as_optional_str(data.get("server")) or DEFAULT_SERVER,
        port=_as_int(data.get("port"), default=DEFAULT_PORT),
        test=_as_bool(data.get("test"), default=False),
        debug=_as_bool(data.get("debug"), default=False),
        path=path,
        template_subdir=_as_optional_str(data.get("template_subdir")),
        namespace=_as_optional_str(data.get("namespace")) or DEFAULT_NAMESPACE,
        connect_timeout=(
            connect_timeout if connect_timeout is not None else DEFAULT_CONNECT_TIMEOUT
        ),
        io_timeout=_as_optional_float(data.get("io_timeout"), default=DEFAULT_IO_TIMEOUT),
        strict_templates=_as_bool(data.get("strict_templates"), default=False),
    )


def load_session_config(path: str | Path) -> SessionConfig:
    p = Path(path).expanduser()
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Could not read session config {p}: {e}") from e
    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise ConfigError(f"Failed to parse session config JSON: {p}") from e
    if not isinstance(payload, dict):
        raise ConfigError(f"Invalid session config at {p}: root must be an object")
    return session_config_from_mapping(cast(dict[str, Any], payload), base_dir=p.parent)
