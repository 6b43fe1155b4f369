from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from heartepp.epp.transport.base import FramingError, TransportError, TransportTimeout
from heartepp.epp.xml.decode import ResponseDocument, XmlDecodeError, decode_document

logger = logging.getLogger(__name__)


class PacketTransport(Protocol):
    def send(self, payload: bytes) -> None: ...
    def recv(self) -> bytes: ...


class TransactionError(Exception):
    """
    A command could not complete.

    `phase` is one of "send", "receive", "timeout" or "decode". When `fatal`
    is set the byte stream can no longer be trusted and the connection
    should be dropped.
    """

    def __init__(self, message: str, *, phase: str, fatal: bool = True) -> None:
        super().__init__(message)
        self.phase = phase
        self.fatal = fatal


class TransactionEngine:
    """
    One request, one response.

    EPP is strictly request-then-response; callers must not share one
    engine between threads. Result codes are left to the caller.
    """

    def __init__(
        self,
        transport: PacketTransport,
        *,
        decoder: Callable[[bytes], ResponseDocument] = decode_document,
    ) -> None:
        self._transport = transport
        self._decoder = decoder

    def execute(self, request_xml: str) -> ResponseDocument:
        payload = request_xml.encode("utf-8")
        try:
            self._transport.send(payload)
        except TransportTimeout as e:
            raise TransactionError(f"Timed out sending request: {e}", phase="timeout") from e
        except TransportError as e:
            raise TransactionError(f"Failed to send request: {e}", phase="send") from e
        logger.debug("Sent %d byte request", len(payload))
        return self.receive()

    def receive(self) -> ResponseDocument:
        try:
            raw = self._transport.recv()
        except TransportTimeout as e:
            raise TransactionError(f"Timed out waiting for response: {e}", phase="timeout") from e
        except (TransportError, FramingError) as e:
            raise TransactionError(f"Failed to receive response: {e}", phase="receive") from e
        logger.debug("Received %d byte response", len(raw))

        try:
            return self._decoder(raw)
        except XmlDecodeError as e:
            # The whole frame was consumed, so the stream is still aligned.
            raise TransactionError(f"Undecodable response: {e}", phase="decode", fatal=False) from e
