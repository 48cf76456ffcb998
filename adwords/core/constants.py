"""Constants and enumerations for the adwords package.

This module centralizes namespaces, wire headers and timeouts so the codec,
the transport and the services agree on a single definition.
"""

from enum import Enum
from typing import Final


# SOAP 1.1
SOAP_ENV_NAMESPACE: Final[str] = "http://schemas.xmlsoap.org/soap/envelope/"
XSI_NAMESPACE: Final[str] = "http://www.w3.org/2001/XMLSchema-instance"

# WS-Security 1.0 UsernameToken profile
WSSE_NAMESPACE: Final[str] = (
    "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-secext-1.0.xsd"
)
WSU_NAMESPACE: Final[str] = (
    "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-utility-1.0.xsd"
)
WSSE_PASSWORD_TEXT: Final[str] = (
    "http://docs.oasis-open.org/wss/2004/01/"
    "oasis-200401-wss-username-token-profile-1.0#PasswordText"
)
USERNAME_TOKEN_PREFIX: Final[str] = "UsernameToken-"
TOKEN_ID_LENGTH: Final[int] = 9
TOKEN_ALPHABET: Final[str] = (
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
)

# AdWords API
API_VERSION: Final[str] = "v201802"
ENDPOINT_BASE: Final[str] = "https://adwords.google.com/api/adwords"
NAMESPACE_BASE: Final[str] = "https://adwords.google.com/api/adwords"

# HTTP
CONTENT_TYPE: Final[str] = 'text/xml; charset="utf-8"'
USER_AGENT: Final[str] = "adwords-soap/0.1"
CONNECT_TIMEOUT_SECONDS: Final[float] = 30.0

# Logging
REDACTED: Final[str] = "***REDACTED***"
SENSITIVE_ELEMENTS: Final[frozenset] = frozenset(
    {"Username", "Password", "developerToken"}
)
SENSITIVE_HTTP_HEADERS: Final[frozenset] = frozenset(
    {"authorization", "proxy-authorization", "cookie"}
)

# Environment variables
ENV_ENDPOINT: Final[str] = "ADWORDS_ENDPOINT"
ENV_API_VERSION: Final[str] = "ADWORDS_API_VERSION"
ENV_CLIENT_CUSTOMER_ID: Final[str] = "ADWORDS_CLIENT_CUSTOMER_ID"
ENV_DEVELOPER_TOKEN: Final[str] = "ADWORDS_DEVELOPER_TOKEN"
ENV_USER_AGENT: Final[str] = "ADWORDS_USER_AGENT"
ENV_VALIDATE_ONLY: Final[str] = "ADWORDS_VALIDATE_ONLY"
ENV_PARTIAL_FAILURE: Final[str] = "ADWORDS_PARTIAL_FAILURE"
ENV_INSECURE_SKIP_VERIFY: Final[str] = "ADWORDS_INSECURE_SKIP_VERIFY"
ENV_LOG_PAYLOADS: Final[str] = "ADWORDS_LOG_PAYLOADS"
ENV_BASIC_AUTH_LOGIN: Final[str] = "ADWORDS_BASIC_AUTH_LOGIN"
ENV_BASIC_AUTH_PASSWORD: Final[str] = "ADWORDS_BASIC_AUTH_PASSWORD"


class ServiceGroup(Enum):
    """AdWords API service groups; each one is a distinct XML namespace."""

    CM = "cm"  # Campaign management
    RM = "rm"  # Remarketing
    O = "o"  # Optimization
    MCM = "mcm"  # Managed customer management
    CH = "ch"  # Change history


def namespace_for(group: ServiceGroup, version: str = API_VERSION) -> str:
    """Return the XML namespace of a service group at an API version."""
    return f"{NAMESPACE_BASE}/{group.value}/{version}"


CM_NAMESPACE: Final[str] = namespace_for(ServiceGroup.CM)
RM_NAMESPACE: Final[str] = namespace_for(ServiceGroup.RM)
