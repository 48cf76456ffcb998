"""Protocol definitions (interfaces) for the adwords package.

The SOAP core never knows the concrete AdWords types it carries. It only
needs values that can turn themselves into an XML element on the way out,
and targets that can fill themselves from an XML element on the way back.
"""

from typing import Any, Protocol, runtime_checkable

from lxml import etree


@runtime_checkable
class XmlMarshaller(Protocol):
    """Capability of a request body or a SOAP header item."""

    def to_element(self) -> etree._Element:
        """Marshal this value as a single XML element.

        Returns:
            A detached lxml element carrying its own namespace
        """
        ...


@runtime_checkable
class XmlUnmarshaller(Protocol):
    """Capability of a response target."""

    def load_element(self, element: etree._Element) -> None:
        """Populate this value in place from an XML element.

        Args:
            element: The single element found inside the SOAP Body

        Raises:
            DecodingError: If the element does not fit this value's shape
        """
        ...


class PayloadLogger(Protocol):
    """Anything with a loguru-style ``debug`` method."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        ...
