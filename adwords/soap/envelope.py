"""SOAP 1.1 envelope codec.

Encodes a wrapped-document/literal request (optional Header items plus one
Body element) and decodes a response envelope, handing the single Body
element to a caller-supplied callback or turning a Fault into a SOAPFault.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from lxml import etree

from adwords.core.constants import SOAP_ENV_NAMESPACE
from adwords.core.exceptions import ProtocolError, SOAPFault
from adwords.core.protocols import XmlMarshaller

ENVELOPE_TAG = f"{{{SOAP_ENV_NAMESPACE}}}Envelope"
HEADER_TAG = f"{{{SOAP_ENV_NAMESPACE}}}Header"
BODY_TAG = f"{{{SOAP_ENV_NAMESPACE}}}Body"
FAULT_TAG = f"{{{SOAP_ENV_NAMESPACE}}}Fault"

MULTIPLE_BODY_ELEMENTS = (
    "Found multiple elements inside SOAP body; not wrapped-document/literal WS-I compliant"
)
MISSING_CONTENT = "Content must be a pointer to a struct: an object with a load_element method"

ContentDecoder = Callable[[etree._Element], Any]

_parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)


@dataclass
class Header:
    """Ordered header items.

    On send every item is an XmlMarshaller or an lxml element. On receive
    the items are the raw lxml elements found in the response.
    """

    items: List[Any] = field(default_factory=list)


@dataclass
class Body:
    """Either one content element or a fault."""

    content: Any = None
    fault: Optional[SOAPFault] = None


@dataclass
class Envelope:
    body: Body = field(default_factory=Body)
    header: Optional[Header] = None


def encode_envelope(envelope: Envelope) -> bytes:
    """Serialize an envelope.

    Args:
        envelope: Envelope whose Body holds a request or a fault

    Returns:
        UTF-8 XML without prolog

    Raises:
        ProtocolError: If the Body is empty
        TypeError: If a header item or the content cannot marshal itself
    """
    body = envelope.body
    if body.content is None and body.fault is None:
        raise ProtocolError("SOAP Body content must not be empty")

    root = etree.Element(ENVELOPE_TAG, nsmap={"soap": SOAP_ENV_NAMESPACE})

    if envelope.header is not None and envelope.header.items:
        header = etree.SubElement(root, HEADER_TAG)
        for item in envelope.header.items:
            header.append(_marshal(item))

    body_element = etree.SubElement(root, BODY_TAG)
    if body.fault is not None:
        body_element.append(fault_to_element(body.fault))
    else:
        body_element.append(_marshal(body.content))

    return etree.tostring(root, encoding="utf-8")


def decode_envelope(data: bytes, decode_content: Optional[ContentDecoder]) -> Envelope:
    """Parse a response envelope.

    Args:
        data: Raw response body
        decode_content: Called with the single Body element when it is not
            a Fault; fills the caller's response target

    Returns:
        Envelope with the raw header items and a Body whose ``content`` is
        the decoded element, or whose ``fault`` is set

    Raises:
        ProtocolError: On malformed XML or a broken envelope structure
        DecodingError: Propagated from ``decode_content``
    """
    try:
        root = etree.fromstring(data, _parser)
    except etree.XMLSyntaxError as e:
        raise ProtocolError("Malformed SOAP response", details={"error": str(e)})

    if root.tag != ENVELOPE_TAG:
        raise ProtocolError(
            "Expected a SOAP Envelope root element",
            details={"root": root.tag},
        )

    headers = [child for child in root if child.tag == HEADER_TAG]
    bodies = [child for child in root if child.tag == BODY_TAG]
    if len(headers) > 1:
        raise ProtocolError("Found multiple Header sections in SOAP envelope")
    if not bodies:
        raise ProtocolError("SOAP envelope has no Body")
    if len(bodies) > 1:
        raise ProtocolError("Found multiple Body sections in SOAP envelope")

    envelope = Envelope()
    if headers:
        envelope.header = Header(items=list(headers[0].iterchildren(etree.Element)))

    inner = list(bodies[0].iterchildren(etree.Element))
    if len(inner) > 1:
        raise ProtocolError(MULTIPLE_BODY_ELEMENTS)
    if not inner:
        return envelope

    content = inner[0]
    if content.tag == FAULT_TAG:
        envelope.body = Body(fault=fault_from_element(content))
        return envelope

    if decode_content is None:
        raise ProtocolError(MISSING_CONTENT)
    decode_content(content)
    envelope.body = Body(content=content)
    return envelope


def fault_to_element(fault: SOAPFault) -> etree._Element:
    """Marshal a SOAPFault as a ``soap:Fault`` element."""
    element = etree.Element(FAULT_TAG, nsmap={"soap": SOAP_ENV_NAMESPACE})
    if fault.code:
        etree.SubElement(element, "faultcode").text = fault.code
    etree.SubElement(element, "faultstring").text = fault.string
    if fault.actor:
        etree.SubElement(element, "faultactor").text = fault.actor
    if fault.detail_element is not None:
        element.append(copy.deepcopy(fault.detail_element))
    elif fault.detail:
        etree.SubElement(element, "detail").text = fault.detail
    return element


def fault_from_element(element: etree._Element) -> SOAPFault:
    """Build a SOAPFault from a ``soap:Fault`` element."""
    values = {}
    detail_element = None
    for child in element.iterchildren(etree.Element):
        name = etree.QName(child).localname
        if name == "detail":
            detail_element = child
            values[name] = _direct_text(child)
        elif name in ("faultcode", "faultstring", "faultactor"):
            values[name] = child.text or ""

    return SOAPFault(
        code=values.get("faultcode", ""),
        string=values.get("faultstring", ""),
        actor=values.get("faultactor", ""),
        detail=values.get("detail", ""),
        detail_element=detail_element,
    )


def _direct_text(element: etree._Element) -> str:
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return "".join(parts).strip()


def _marshal(item: Any) -> etree._Element:
    if isinstance(item, etree._Element):
        return copy.deepcopy(item)
    if not isinstance(item, XmlMarshaller):
        raise TypeError(
            f"{type(item).__name__} cannot be marshalled; it must provide to_element()"
        )
    return item.to_element()
