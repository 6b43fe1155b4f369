from __future__ import annotations

import enum
import logging
import pprint
import types
from collections.abc import Callable, Mapping
from typing import Any, Protocol
from xml.sax.saxutils import escape

from heartepp.epp.core.result import (
    RESULT_OK,
    RESULT_SESSION_ENDED,
    EppResult,
    ProtocolFailure,
    result_of,
)
from heartepp.epp.core.trid import TransactionIdGenerator
from heartepp.epp.rpc.engine import TransactionEngine, TransactionError
from heartepp.epp.templates.render import MissingVariable, RequestBuilder
from heartepp.epp.templates.store import FileTemplateStore, TemplateNotFound
from heartepp.epp.transport.base import TransportError
from heartepp.epp.transport.tls import TlsTransport
from heartepp.epp.xml.decode import CONTENT_KEY, ResponseDocument, lookup, records

from .config import ConfigError, SessionConfig

logger = logging.getLogger(__name__)


class NotConnected(Exception):
    pass


class SessionState(enum.Enum):
    IDLE = "idle"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


class SessionTransport(Protocol):
    @property
    def is_connected(self) -> bool: ...
    def connect(self) -> None: ...
    def verify_hostname(self, host: str) -> None: ...
    def close(self) -> None: ...
    def send(self, payload: bytes) -> None: ...
    def recv(self) -> bytes: ...


TransportFactory = Callable[[SessionConfig], SessionTransport]


def _tls_transport(config: SessionConfig) -> SessionTransport:
    return TlsTransport(
        endpoint=config.endpoint,
        connect_timeout=config.connect_timeout,
        io_timeout=config.io_timeout,
    )


def _is_available(flag: Any) -> bool:
    return str(flag).strip().lower() in {"1", "true"}


def availability_from(document: ResponseDocument) -> dict[str, bool]:
    """
    Map every checked name to its availability.

    A check of one name yields a single `domain:cd` record, several names
    yield a list of them; both come out as the same mapping.
    """

    cd = lookup(document, "response", "resData", "domain:chkData", "domain:cd")
    out: dict[str, bool] = {}
    for record in records(cd):
        name_node = lookup(record, "domain:name")
        if isinstance(name_node, dict):
            name = name_node.get(CONTENT_KEY)
            avail = name_node.get("avail")
        else:
            name, avail = name_node, None
        if not isinstance(name, str) or not name:
            continue
        out[name] = _is_available(avail)
    return out


def extension_elements(extensions: tuple[str, ...] | list[str]) -> str:
    return "".join(f"<ext-domain:ext>{escape(ext)}</ext-domain:ext>" for ext in extensions)


class Session:
    """
    One EPP session over one TLS connection.

    idle -> connected -> authenticated -> closed. Nothing reconnects or
    retries on its own: failures come back as False/None with the cause in
    `last_error` (I/O, templates) or `last_failure` (result codes).

    Template variables live in `vars` and are set with `set_vars()`; the
    session itself writes `cltrid`, `domain` and `whois_ext`.
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        *,
        transport_factory: TransportFactory | None = None,
        **options: Any,
    ) -> None:
        if config is None:
            config = SessionConfig.create(**options)
        elif options:
            raise ConfigError("Pass either a SessionConfig or keyword options, not both")
        self._config = config
        self._transport_factory = transport_factory or _tls_transport
        self._builder = RequestBuilder(
            FileTemplateStore(config.path, config.template_subdir),
            strict=config.strict_templates,
        )
        self._trids = TransactionIdGenerator()
        self._vars: dict[str, Any] = {"namespace": config.namespace}

        self._transport: SessionTransport | None = None
        self._engine: TransactionEngine | None = None
        self._state = SessionState.IDLE

        self.greeting: ResponseDocument | None = None
        self.last_request: str | None = None
        self.last_template: str | None = None
        self.last_result: EppResult | None = None
        self.last_failure: ProtocolFailure | None = None
        self.last_error: Exception | None = None

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def vars(self) -> Mapping[str, Any]:
        return types.MappingProxyType(self._vars)

    @property
    def is_connected(self) -> bool:
        return self._transport is not None and self._transport.is_connected

    def set_vars(self, **values: Any) -> None:
        self._vars.update(values)

    def gen_trid(self, seed: object = None) -> str:
        trid = self._trids.next(seed)
        self._vars["cltrid"] = trid
        return trid

    def connect(self, verify: bool = False) -> bool:
        """
        Open the TLS connection and read the server greeting.

        With `verify`, the peer certificate must name the configured server.
        """

        cfg = self._config
        self._release_transport()
        self._trace("Testing mode (sandbox): %s", "ON" if cfg.test else "OFF")
        self._trace("SSL hostname verification: %s", "ON" if verify else "OFF")
        self._trace("Connecting to %s ...", cfg.endpoint)

        transport = self._transport_factory(cfg)
        try:
            transport.connect()
            if verify:
                transport.verify_hostname(cfg.server)
            engine = TransactionEngine(transport)
            greeting = engine.receive()
        except (TransportError, TransactionError) as e:
            transport.close()
            self._state = SessionState.IDLE
            self.last_error = e
            logger.warning("Failed connection to %s: %s", cfg.endpoint, e)
            return False

        self._transport = transport
        self._engine = engine
        self.greeting = greeting
        self._state = SessionState.CONNECTED
        self._trace("Greeting:\n%s", pprint.pformat(greeting))
        return True

    def login(self) -> bool:
        if not self._has_live_connection():
            self.last_error = NotConnected("Socket does not exist")
            logger.warning("login: socket does not exist")
            return False

        self.gen_trid()
        doc = self._exchange("Login")
        if doc is None or not self._accept("Login", doc, RESULT_OK):
            return False
        self._state = SessionState.AUTHENTICATED
        return True

    def whois(self, domain: str, *extensions: str) -> dict[str, bool] | None:
        """
        Check availability of `domain` against each extension.

        Logs in first when the session is not authenticated yet. Returns
        {name: available} or None when the check could not be made.
        """

        self._require_connection()
        self._vars["whois_ext"] = extension_elements(extensions)

        if self._state is not SessionState.AUTHENTICATED and not self.login():
            return None

        self._vars["domain"] = escape(domain)
        doc = self.command("Whois")
        if doc is None:
            return None
        return availability_from(doc)

    def command(self, name: str, /, **variables: Any) -> ResponseDocument | None:
        """
        Run an authenticated command from template `name`.

        `variables` are merged into `vars` first; a fresh `cltrid` is
        generated. Returns the decoded response on result code 1000.
        """

        self._require_connection()
        if self._state is not SessionState.AUTHENTICATED:
            self.last_failure = ProtocolFailure(command=name, code=None, message="Not logged in")
            logger.warning("%s: session is not logged in", name)
            return None

        self._vars.update(variables)
        self.gen_trid()
        doc = self._exchange(name)
        if doc is None or not self._accept(name, doc, RESULT_OK):
            return None
        return doc

    def logout(self) -> bool:
        if not self._has_live_connection():
            self.last_error = NotConnected("Socket does not exist")
            logger.warning("logout: socket does not exist")
            return False

        self.gen_trid()
        doc = self._exchange("Logout")
        if doc is None:
            return False
        if not self._accept("Logout", doc, RESULT_SESSION_ENDED):
            self._trace("Logout response:\n%s", pprint.pformat(doc))
            return False
        self._state = SessionState.CLOSED
        return True

    def close(self) -> None:
        self._release_transport()
        self._state = SessionState.CLOSED

    def __enter__(self) -> Session:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        self.close()

    def _has_live_connection(self) -> bool:
        return self.is_connected and self._state in {
            SessionState.CONNECTED,
            SessionState.AUTHENTICATED,
        }

    def _require_connection(self) -> None:
        if not self._has_live_connection():
            logger.error("Socket is not connected (state=%s)", self._state.value)
            raise NotConnected("Socket is not connected")

    def _release_transport(self) -> None:
        if self._transport is not None:
            self._transport.close()
        self._transport = None
        self._engine = None

    def _exchange(self, name: str) -> ResponseDocument | None:
        try:
            rendered = self._builder.render(name, self._vars)
        except (TemplateNotFound, MissingVariable) as e:
            self.last_error = e
            logger.warning("Could not render template %s: %s", name, e)
            return None

        self.last_request = rendered.xml
        self.last_template = rendered.identifier
        self._trace("Rendering template, %s", rendered.identifier)
        self._trace("OUTPUT:\n%s", rendered.xml)

        assert self._engine is not None
        try:
            doc = self._engine.execute(rendered.xml)
        except TransactionError as e:
            self.last_error = e
            logger.warning(
                "Bad response from %s on template %s (%s): %s",
                self._config.server,
                rendered.identifier,
                e.phase,
                e,
            )
            if e.fatal:
                self._release_transport()
                self._state = SessionState.CLOSED
            return None

        self._trace("Response:\n%s", pprint.pformat(doc))
        return doc

    def _accept(self, name: str, doc: ResponseDocument, expected: str) -> bool:
        result = result_of(doc)
        self.last_result = result
        if result.code == expected:
            self.last_failure = None
            return True
        self.last_failure = ProtocolFailure(command=name, code=result.code, message=result.message)
        logger.info("%s returned result code %s: %s", name, result.code, result.message)
        return False

    def _trace(self, msg: str, *args: Any) -> None:
        if self._config.debug:
            logger.debug(msg, *args)
