"""AdWords request and response SOAP headers."""

import copy
from dataclasses import dataclass
from typing import Optional, Union

from lxml import etree

from adwords.core.config import AdWordsHeaderConfig
from adwords.schema.xml_model import XmlRecord, element
from adwords.soap.envelope import Envelope

_parser = etree.XMLParser(resolve_entities=False, no_network=True)


@dataclass
class SoapHeader(XmlRecord):
    """Persistent request header every AdWords call expects.

    Sent as ``RequestHeader``, the element name the server expects for the
    SoapHeader type.

    Attributes:
        client_customer_id: Account the call acts on
        developer_token: API developer credential
        user_agent: Caller's self-identifier, not the HTTP User-Agent
        validate_only: Validate the request without committing it
        partial_failure: Commit valid mutate operations, report the rest
    """

    xml_name = "RequestHeader"

    client_customer_id: Optional[str] = element("clientCustomerId")
    developer_token: Optional[str] = element("developerToken")
    user_agent: Optional[str] = element("userAgent")
    validate_only: Optional[bool] = element("validateOnly", bool)
    partial_failure: Optional[bool] = element("partialFailure", bool)

    @classmethod
    def from_config(cls, config: AdWordsHeaderConfig) -> "SoapHeader":
        return cls(
            client_customer_id=config.client_customer_id or None,
            developer_token=config.developer_token or None,
            user_agent=config.user_agent or None,
            validate_only=config.validate_only or None,
            partial_failure=config.partial_failure or None,
        )


@dataclass
class SoapResponseHeader(XmlRecord):
    xml_name = "ResponseHeader"
    # Older WSDL-generated clients name the element after its type
    xml_aliases = ("ResponseHeader", "SoapResponseHeader")

    request_id: Optional[str] = element("requestId")
    service_name: Optional[str] = element("serviceName")
    method_name: Optional[str] = element("methodName")
    operations: Optional[int] = element("operations", int)
    response_time: Optional[int] = element("responseTime", int)

    @classmethod
    def from_envelope(cls, envelope: Optional[Envelope]) -> Optional["SoapResponseHeader"]:
        """Find the response header among a decoded envelope's header items."""
        if envelope is None or envelope.header is None:
            return None
        for item in envelope.header.items:
            if isinstance(item, etree._Element) and etree.QName(item).localname in cls.xml_aliases:
                return cls.from_element(item)
        return None


class RawHeader:
    """A header item that is already XML.

    Args:
        xml: An lxml element or a serialized element
    """

    def __init__(self, xml: Union[etree._Element, str, bytes]):
        if isinstance(xml, str):
            xml = xml.encode("utf-8")
        if isinstance(xml, bytes):
            xml = etree.fromstring(xml, _parser)
        self._element = xml

    def to_element(self) -> etree._Element:
        return copy.deepcopy(self._element)

    def __repr__(self) -> str:
        return f"RawHeader({self._element.tag!r})"
