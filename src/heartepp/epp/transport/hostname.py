from __future__ import annotations

import ipaddress

from cryptography import x509
from cryptography.x509.oid import NameOID

from .base import TransportError


def _normalize(name: str) -> str:
    return name.strip().rstrip(".").lower()


def _dns_name_matches(pattern: str, host: str) -> bool:
    pattern = _normalize(pattern)
    host = _normalize(host)
    if not pattern or not host:
        return False
    if "*" not in pattern:
        return pattern == host

    # Only a whole left-most label wildcard is honoured ("*.example.com").
    first, _, rest = pattern.partition(".")
    if first != "*" or "*" in rest or rest.count(".") < 1:
        return False
    host_first, _, host_rest = host.partition(".")
    return bool(host_first) and host_rest == rest


def certificate_names(der_cert: bytes) -> list[str]:
    """
    Names a peer certificate is valid for: SAN DNS/IP entries, or the
    subject common name when the certificate carries no SAN extension.
    """

    cert = _load(der_cert)
    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return [
            str(attr.value)
            for attr in cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
        ]
    names = list(san.get_values_for_type(x509.DNSName))
    names.extend(str(ip) for ip in san.get_values_for_type(x509.IPAddress))
    return names


def match_hostname(der_cert: bytes, host: str) -> bool:
    cert = _load(der_cert)
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        ip = None

    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        san = None

    if ip is not None:
        if san is None:
            return False
        return ip in san.get_values_for_type(x509.IPAddress)

    if san is not None:
        candidates = list(san.get_values_for_type(x509.DNSName))
    else:
        candidates = [
            str(attr.value)
            for attr in cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
        ]
    return any(_dns_name_matches(c, host) for c in candidates)


def _load(der_cert: bytes) -> x509.Certificate:
    try:
        return x509.load_der_x509_certificate(der_cert)
    except ValueError as e:
        raise TransportError("Unreadable peer certificate", stage="hostname-verify") from e
