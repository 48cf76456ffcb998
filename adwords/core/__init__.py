"""Core module containing constants, exceptions, protocols and configuration."""

from adwords.core.protocols import (
    XmlMarshaller,
    XmlUnmarshaller,
    PayloadLogger,
)
from adwords.core.exceptions import (
    AdWordsError,
    ConfigurationError,
    TransportError,
    ConnectTimeoutError,
    CallCancelledError,
    DeadlineExceededError,
    ProtocolError,
    DecodingError,
    HTTPStatusError,
    SOAPFault,
)
from adwords.core.config import (
    BasicAuth,
    TransportConfig,
    AdWordsHeaderConfig,
    ClientConfig,
    ConfigurationManager,
)

__all__ = [
    # Protocols
    "XmlMarshaller",
    "XmlUnmarshaller",
    "PayloadLogger",
    # Exceptions
    "AdWordsError",
    "ConfigurationError",
    "TransportError",
    "ConnectTimeoutError",
    "CallCancelledError",
    "DeadlineExceededError",
    "ProtocolError",
    "DecodingError",
    "HTTPStatusError",
    "SOAPFault",
    # Configuration
    "BasicAuth",
    "TransportConfig",
    "AdWordsHeaderConfig",
    "ClientConfig",
    "ConfigurationManager",
]
