"""TLS configuration from PEM files and peer certificate inspection."""

from __future__ import annotations

import base64
import binascii
import re
import ssl
import tempfile
import textwrap
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from cryptography import x509
from cryptography.x509.oid import NameOID

PathLike = Union[str, Path]

_PEM_BLOCK = re.compile(
    rb"-----BEGIN ([A-Z0-9 ]+)-----(.*?)-----END \1-----", re.DOTALL
)
_KEY_LABELS = ("PRIVATE KEY", "RSA PRIVATE KEY", "EC PRIVATE KEY")


class TlsConfigError(Exception):
    """Raised when certificates or keys cannot be loaded into a TLS context."""


@dataclass(frozen=True)
class PrivateKey:
    """A DER-encoded private key together with its PEM label."""

    label: str
    der: bytes

    def to_pem(self) -> str:
        body = "\n".join(textwrap.wrap(base64.b64encode(self.der).decode("ascii"), 64))
        return f"-----BEGIN {self.label}-----\n{body}\n-----END {self.label}-----\n"


def _read(path: Path, what: str) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise TlsConfigError(f"failed to read {what} '{path}': {exc}") from exc


def _pem_blocks(data: bytes, path: Path, what: str) -> list[tuple[str, bytes]]:
    blocks = []
    for match in _PEM_BLOCK.finditer(data):
        label = match.group(1).decode("ascii")
        body = b"".join(match.group(2).split())
        try:
            der = base64.b64decode(body, validate=True)
        except binascii.Error as exc:
            raise TlsConfigError(f"failed to decode {what} '{path}': {exc}") from exc
        blocks.append((label, der))
    return blocks


def read_certs(path: PathLike) -> list[bytes]:
    """Return every certificate in a PEM file, DER-encoded, in file order."""
    path = Path(path)
    data = _read(path, "certificate")
    return [der for label, der in _pem_blocks(data, path, "certificate") if label == "CERTIFICATE"]


def _read_cert(path: PathLike) -> bytes:
    certs = read_certs(path)
    if not certs:
        raise TlsConfigError(f"no certificate found in '{path}'")
    return certs[0]


def read_key(path: PathLike) -> PrivateKey:
    """Return the first private key found in a PEM file."""
    path = Path(path)
    data = _read(path, "key")
    for label, der in _pem_blocks(data, path, "key"):
        if label in _KEY_LABELS:
            return PrivateKey(label, der)
    raise TlsConfigError(f"no private key found in '{path}'")


def _load(
    context: ssl.SSLContext, ca: bytes, chain: list[bytes], key: PrivateKey
) -> ssl.SSLContext:
    try:
        context.load_verify_locations(cadata=ca)
    except ssl.SSLError as exc:
        raise TlsConfigError(f"failed to add CA certificate to root store: {exc}") from exc

    pem = "".join(ssl.DER_cert_to_PEM_cert(der) for der in chain) + key.to_pem()
    with tempfile.TemporaryDirectory() as tmp:
        bundle = Path(tmp) / "identity.pem"
        bundle.write_text(pem, encoding="ascii")
        try:
            context.load_cert_chain(str(bundle))
        except ssl.SSLError as exc:
            raise TlsConfigError(f"failed to load certificate chain: {exc}") from exc
    return context


def tls_server_config(ca_path: PathLike, cert_path: PathLike, key_path: PathLike) -> ssl.SSLContext:
    """Build a server context that requires client certificates signed by the CA."""
    ca = _read_cert(ca_path)
    key = read_key(key_path)
    certs = read_certs(cert_path)
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.verify_mode = ssl.CERT_REQUIRED
    return _load(context, ca, [*certs, ca], key)


def tls_client_config(ca_path: PathLike, cert_path: PathLike, key_path: PathLike) -> ssl.SSLContext:
    """Build a client context trusting only the CA and presenting a client certificate."""
    ca = _read_cert(ca_path)
    key = read_key(key_path)
    certs = read_certs(cert_path)
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    return _load(context, ca, [*certs, ca], key)


def _subject_value(der: Optional[bytes], oid: x509.ObjectIdentifier) -> Optional[str]:
    if der is None:
        return None
    try:
        cert = x509.load_der_x509_certificate(der)
        attrs = cert.subject.get_attributes_for_oid(oid)
    except ValueError:
        return None
    if not attrs:
        return None
    value = attrs[0].value
    return value if isinstance(value, str) else None


def common_name(der: Optional[bytes]) -> Optional[str]:
    """Return the first subject common name of a DER certificate, if any."""
    return _subject_value(der, NameOID.COMMON_NAME)


def organization(der: Optional[bytes]) -> Optional[str]:
    """Return the first subject organization of a DER certificate, if any."""
    return _subject_value(der, NameOID.ORGANIZATION_NAME)


class TlsStreamExt(ABC):
    """Access to the identity presented by the peer of a TLS connection."""

    @abstractmethod
    def peer_certificate(self) -> Optional[bytes]:
        """Return the peer's leaf certificate in DER form, or None."""

    def peer_common_name(self) -> Optional[str]:
        return common_name(self.peer_certificate())

    def peer_organization(self) -> Optional[str]:
        return organization(self.peer_certificate())

    def peer_org_and_cn(self) -> Optional[tuple[str, str]]:
        der = self.peer_certificate()
        org = organization(der)
        cn = common_name(der)
        if org is None or cn is None:
            return None
        return org, cn