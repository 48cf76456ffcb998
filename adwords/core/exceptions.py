"""Custom exception hierarchy for the adwords package.

Every failure a SOAP call can produce maps onto one class below, so callers
can catch transport problems, protocol violations and server faults
separately, or all of them through ``AdWordsError``.
"""

from typing import Optional, Dict, Any


class AdWordsError(Exception):
    """Base exception for all adwords package errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(AdWordsError):
    """Raised when configuration is invalid or missing.

    Examples:
        - Missing developer token or client customer id
        - Configuration file not found or not valid YAML
    """

    pass


class TransportError(AdWordsError):
    """Raised when the HTTP exchange itself fails.

    Examples:
        - DNS failure, connection refused
        - TLS handshake failure
        - Read or write error on the socket
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.url = url


class ConnectTimeoutError(TransportError):
    """Raised when the TCP connection is not established within the dial timeout."""

    pass


class CallCancelledError(AdWordsError):
    """Raised when a call is aborted through its cancel token."""

    pass


class DeadlineExceededError(CallCancelledError):
    """Raised when a call runs past its deadline."""

    pass


class ProtocolError(AdWordsError):
    """Raised when a response violates the SOAP envelope protocol.

    Examples:
        - Malformed XML
        - Root element is not a SOAP Envelope
        - Missing Body, or more than one Body
        - More than one element inside the Body
    """

    pass


class DecodingError(AdWordsError):
    """Raised when well-formed XML does not fit the target record.

    Examples:
        - Non-numeric text in an integer field
        - Unknown enumeration value
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value

    def __str__(self) -> str:
        base = self.message
        if self.field:
            base = f"{base} (field: {self.field})"
        if self.value is not None:
            base = f"{base} - Got: {self.value!r}"
        return base


class HTTPStatusError(AdWordsError):
    """Raised for a non-2xx HTTP response whose body is not a SOAP envelope."""

    def __init__(
        self,
        message: str,
        status_code: int,
        response_body: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.response_body = response_body

    def __str__(self) -> str:
        base = f"[HTTP {self.status_code}] {self.message}"
        if self.response_body:
            base = f"{base}\nResponse: {self.response_body[:500]}"
        return base


class SOAPFault(AdWordsError):
    """A SOAP Fault returned by the server.

    The string form is exactly the faultstring, so ``str(fault)`` is the
    human-readable message the server sent.

    Attributes:
        code: faultcode
        string: faultstring
        actor: faultactor
        detail: text content of the detail element
        detail_element: the detail element itself, for typed decoding
        status_code: HTTP status of the response that carried the fault
    """

    def __init__(
        self,
        code: str = "",
        string: str = "",
        actor: str = "",
        detail: str = "",
        detail_element: Any = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(string)
        self.code = code
        self.string = string
        self.actor = actor
        self.detail = detail
        self.detail_element = detail_element
        self.status_code = status_code

    def __str__(self) -> str:
        return self.string

    def __repr__(self) -> str:
        return f"SOAPFault(code={self.code!r}, string={self.string!r}, actor={self.actor!r})"
