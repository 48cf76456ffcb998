"""
Logging configuration module.
Provides standardized logging setup using loguru, plus the redaction
helpers the transport applies before a SOAP payload reaches a log sink.
"""

import sys
from typing import Dict, Mapping, Optional, Union

from loguru import logger
from lxml import etree

from adwords.core.constants import REDACTED, SENSITIVE_ELEMENTS, SENSITIVE_HTTP_HEADERS

UNPARSEABLE_PAYLOAD = "<unparseable payload withheld>"

_parser = etree.XMLParser(resolve_entities=False, no_network=True)


def setup_logging(
    level: str = "INFO",
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
    log_file: Optional[str] = None,
) -> None:
    """
    Configure loguru logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Log message format
        log_file: Optional file path to write logs
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format=format,
        level=level,
        colorize=True,
    )

    if log_file:
        logger.add(
            log_file,
            format=format,
            level=level,
            rotation="10 MB",
            retention="7 days",
        )


def soap_logger():
    """Return the logger the transport writes payloads to by default."""
    return logger.bind(component="soap")


def redact_payload(payload: Union[bytes, str]) -> str:
    """
    Mask credentials inside a SOAP payload.

    The text of every element whose local name is sensitive (WS-Security
    Username and Password, the AdWords developerToken) is replaced.

    Args:
        payload: Raw XML

    Returns:
        The redacted document, or a placeholder if it cannot be parsed
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")

    try:
        root = etree.fromstring(payload, _parser)
    except etree.XMLSyntaxError:
        return UNPARSEABLE_PAYLOAD

    for element in root.iter(etree.Element):
        if etree.QName(element).localname in SENSITIVE_ELEMENTS:
            element.text = REDACTED
            for child in list(element):
                element.remove(child)

    return etree.tostring(root, encoding="unicode")


def sanitize_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """
    Remove credentials from HTTP headers before logging them.

    Args:
        headers: Request or response headers

    Returns:
        Sanitized copy of the headers
    """
    return {
        key: REDACTED if key.lower() in SENSITIVE_HTTP_HEADERS else value
        for key, value in headers.items()
    }
