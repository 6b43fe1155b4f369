from __future__ import annotations

import datetime as dt
from collections import deque
from xml.sax.saxutils import escape

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from heartepp.epp.transport.base import FramingError, TransportError

EPP_NS = "urn:ietf:params:xml:ns:epp-1.0"
DOMAIN_NS = "urn:ietf:params:xml:ns:domain-1.0"

GREETING = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    f'<epp xmlns="{EPP_NS}"><greeting>'
    "<svID>Heart Internet EPP server</svID>"
    "<svDate>2026-10-18T12:00:00.0Z</svDate>"
    "<svcMenu><version>1.0</version><lang>en</lang>"
    f"<objURI>{DOMAIN_NS}</objURI></svcMenu>"
    "</greeting></epp>"
).encode()


def epp_response(code: str, msg: str = "Command completed successfully", res_data: str = "") -> bytes:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<epp xmlns="{EPP_NS}"><response>'
        f'<result code="{code}"><msg>{msg}</msg></result>'
        f"{res_data}"
        "<trID><clTRID>abc</clTRID><svTRID>srv-1</svTRID></trID>"
        "</response></epp>"
    ).encode()


def check_response(*names: tuple[str, bool]) -> bytes:
    cds = "".join(
        f'<domain:cd><domain:name avail="{1 if avail else 0}">{escape(name)}'
        "</domain:name></domain:cd>"
        for name, avail in names
    )
    res_data = (
        f'<resData><domain:chkData xmlns:domain="{DOMAIN_NS}">{cds}</domain:chkData></resData>'
    )
    return epp_response("1000", res_data=res_data)


class FakeTransport:
    """In-memory SessionTransport: replies are queued payloads or exceptions."""

    def __init__(
        self,
        replies: list[bytes | Exception] | None = None,
        *,
        greeting: bytes | Exception = GREETING,
        connect_error: Exception | None = None,
        verify_error: Exception | None = None,
    ) -> None:
        self.replies: deque[bytes | Exception] = deque(replies or [])
        self.greeting = greeting
        self.connect_error = connect_error
        self.verify_error = verify_error
        self.sent: list[bytes] = []
        self.verified_host: str | None = None
        self.connected = False
        self.close_calls = 0

    @property
    def is_connected(self) -> bool:
        return self.connected

    def connect(self) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True
        self.replies.appendleft(self.greeting)

    def verify_hostname(self, host: str) -> None:
        self.verified_host = host
        if self.verify_error is not None:
            raise self.verify_error

    def close(self) -> None:
        self.connected = False
        self.close_calls += 1

    def send(self, payload: bytes) -> None:
        if not self.connected:
            raise TransportError("Not connected.", stage="send")
        self.sent.append(payload)

    def recv(self) -> bytes:
        if not self.replies:
            raise FramingError("Stream ended after 0 of 4 expected bytes")
        item = self.replies.popleft()
        if isinstance(item, Exception):
            raise item
        return item


def self_signed_der(common_name: str, san: list[x509.GeneralName] | None = None) -> bytes:
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = dt.datetime.now(dt.timezone.utc)
    builder = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - dt.timedelta(days=1))
        .not_valid_after(now + dt.timedelta(days=1))
    )
    if san is not None:
        builder = builder.add_extension(x509.SubjectAlternativeName(san), critical=False)
    cert = builder.sign(key, hashes.SHA256())
    return cert.public_bytes(serialization.Encoding.DER)
