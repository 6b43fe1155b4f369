from __future__ import annotations

import contextlib
import logging
import socket
import ssl
from dataclasses import dataclass, field

from .base import Endpoint, Framing, TransportError, TransportTimeout
from .hostname import certificate_names, match_hostname
from .length_prefixed import LengthPrefixedFraming

logger = logging.getLogger(__name__)


def _default_context() -> ssl.SSLContext:
    # Chain is not verified; identity is checked by verify_hostname() on request.
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


@dataclass(slots=True)
class TlsTransport:
    endpoint: Endpoint
    framing: Framing = field(default_factory=LengthPrefixedFraming)
    connect_timeout: float = 10.0
    io_timeout: float | None = 30.0
    ssl_context: ssl.SSLContext | None = None

    _sock: ssl.SSLSocket | None = None

    @property
    def is_connected(self) -> bool:
        return self._sock is not None and self._sock.fileno() != -1

    def connect(self) -> None:
        if self._sock is not None:
            return
        try:
            raw = socket.create_connection(
                (self.endpoint.host, self.endpoint.port),
                timeout=self.connect_timeout,
            )
        except (OSError, ValueError) as e:
            # ValueError covers hostnames the IDNA codec refuses.
            raise TransportError(
                f"Failed to connect to {self.endpoint}: {e}", stage="connect"
            ) from e

        context = self.ssl_context if self.ssl_context is not None else _default_context()
        try:
            sock = context.wrap_socket(raw, server_hostname=self.endpoint.host)
        except (OSError, ValueError) as e:
            raw.close()
            raise TransportError(
                f"TLS handshake with {self.endpoint} failed: {e}", stage="tls"
            ) from e

        sock.settimeout(self.io_timeout)
        self._sock = sock
        logger.debug("TLS session established with %s (%s)", self.endpoint, sock.version())

    def verify_hostname(self, host: str) -> None:
        sock = self._require("hostname-verify")
        der = sock.getpeercert(binary_form=True)
        if not der:
            raise TransportError("Peer presented no certificate", stage="hostname-verify")
        if not match_hostname(der, host):
            names = ", ".join(certificate_names(der)) or "<none>"
            raise TransportError(
                f"Certificate names ({names}) do not match {host!r}",
                stage="hostname-verify",
            )

    def close(self) -> None:
        if self._sock is None:
            return
        with contextlib.suppress(OSError):
            self._sock.close()
        self._sock = None

    def write(self, data: bytes) -> None:
        sock = self._require("send")
        try:
            # sendall() keeps writing until every byte is out or the socket fails.
            sock.sendall(data)
        except TimeoutError as e:
            raise TransportTimeout(f"Write to {self.endpoint} timed out", stage="send") from e
        except OSError as e:
            raise TransportError(f"Write to {self.endpoint} failed: {e}", stage="send") from e

    def read(self, n: int) -> bytes:
        sock = self._require("receive")
        try:
            return sock.recv(n)
        except TimeoutError as e:
            raise TransportTimeout(f"Read from {self.endpoint} timed out", stage="receive") from e
        except OSError as e:
            raise TransportError(f"Read from {self.endpoint} failed: {e}", stage="receive") from e

    def send(self, payload: bytes) -> None:
        self.write(self.framing.encode(payload))

    def recv(self) -> bytes:
        return self.framing.read_frame(self.read)

    def _require(self, stage: str) -> ssl.SSLSocket:
        if self._sock is None:
            raise TransportError("Not connected.", stage=stage)
        return self._sock
