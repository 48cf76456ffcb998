"""SOAP 1.1 envelope codec, WS-Security header and HTTPS transport."""

from adwords.soap.envelope import (
    Envelope,
    Header,
    Body,
    encode_envelope,
    decode_envelope,
)
from adwords.soap.security import UsernameToken, SecurityHeader, build_username_token
from adwords.soap.headers import SoapHeader, SoapResponseHeader, RawHeader
from adwords.soap.transport import CancelToken, SOAPTransport

__all__ = [
    "Envelope",
    "Header",
    "Body",
    "encode_envelope",
    "decode_envelope",
    "UsernameToken",
    "SecurityHeader",
    "build_username_token",
    "SoapHeader",
    "SoapResponseHeader",
    "RawHeader",
    "CancelToken",
    "SOAPTransport",
]
