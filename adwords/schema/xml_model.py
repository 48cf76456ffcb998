"""Declarative XML records.

A record is a dataclass whose fields are declared with ``element`` or
``elements``. It knows how to marshal itself into an lxml element and how
to fill itself from one, which is all the SOAP core asks of a request body,
a header item or a response target.

Example:
    @dataclass
    class Paging(XmlRecord):
        start_index: Optional[int] = element("startIndex", int)
        number_results: Optional[int] = element("numberResults", int)
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from functools import lru_cache
from typing import Any, ClassVar, Dict, NamedTuple, Optional, Type, TypeVar

from lxml import etree

from adwords.core.constants import CM_NAMESPACE, XSI_NAMESPACE
from adwords.core.exceptions import DecodingError

XSI_TYPE = f"{{{XSI_NAMESPACE}}}type"
XSI_NIL = f"{{{XSI_NAMESPACE}}}nil"

R = TypeVar("R", bound="XmlRecord")


def element(name: str, kind: Any = str, default: Any = None):
    """Declare a field carried by a single child element."""
    return field(default=default, metadata={"xml": name, "kind": kind, "many": False})


def elements(name: str, kind: Any = str):
    """Declare a field carried by a repeated child element."""
    return field(default_factory=list, metadata={"xml": name, "kind": kind, "many": True})


class _FieldSpec(NamedTuple):
    attr: str
    tag: str
    kind: Any
    many: bool
    namespace: str


@dataclass
class XmlRecord:
    """Base class of every typed AdWords value.

    Class variables:
        xml_name: local name when the record is a document or body root
        xml_namespace: namespace of the record and of the fields it declares
        xml_type: name used in xsi:type, defaults to the class name
        polymorphic: marks the root of a hierarchy resolved through xsi:type
        xml_name_declared: set when the class itself declares ``xml_name``;
            such records only load roots carrying that qualified name
    """

    xml_name: ClassVar[str] = ""
    xml_namespace: ClassVar[str] = CM_NAMESPACE
    xml_type: ClassVar[str] = ""
    polymorphic: ClassVar[bool] = False
    xml_name_declared: ClassVar[bool] = False
    _variants: ClassVar[Dict[str, type]]

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls.xml_name_declared = "xml_name" in cls.__dict__
        if "xml_name" not in cls.__dict__:
            cls.xml_name = cls.__name__
        if "xml_type" not in cls.__dict__:
            cls.xml_type = cls.__name__
        if cls.__dict__.get("polymorphic"):
            cls._variants = {cls.xml_type: cls}
        for base in cls.__mro__[1:]:
            if base.__dict__.get("polymorphic"):
                base._variants[cls.xml_type] = cls

    @classmethod
    def qualified_name(cls) -> str:
        return f"{{{cls.xml_namespace}}}{cls.xml_name}"

    def to_element(self, tag: Optional[str] = None) -> etree._Element:
        """Marshal the record as a detached element.

        Args:
            tag: Clark-notation tag; defaults to the record's qualified name

        Returns:
            lxml element declaring the record namespace as default namespace
        """
        root = etree.Element(tag or self.qualified_name(), nsmap={None: self.xml_namespace})
        self._fill(root)
        return root

    def to_xml(self) -> bytes:
        return etree.tostring(self.to_element(), encoding="utf-8")

    def _fill(self, parent: etree._Element) -> None:
        for spec in _field_specs(type(self)):
            value = getattr(self, spec.attr)
            if value is None:
                continue
            values = value if spec.many else [value]
            for item in values:
                if item is None:
                    continue
                tag = f"{{{spec.namespace}}}{spec.tag}"
                if isinstance(item, XmlRecord) and type(item) is not spec.kind:
                    # Subtype of the declared kind, tag it with xsi:type
                    child = etree.SubElement(
                        parent, tag, nsmap={"xsi": XSI_NAMESPACE, "tns": item.xml_namespace}
                    )
                    child.set(XSI_TYPE, f"tns:{item.xml_type}")
                else:
                    child = etree.SubElement(parent, tag)
                _encode_value(child, item)

    @classmethod
    def from_element(cls: Type[R], element: etree._Element) -> R:
        """Build a record from an element, resolving xsi:type variants."""
        record_cls = cls.resolve_variant(element)
        record = record_cls()
        record.load_element(element)
        return record

    @classmethod
    def from_xml(cls: Type[R], data: bytes) -> R:
        return cls.from_element(etree.fromstring(data, _parser))

    @classmethod
    def resolve_variant(cls, element: etree._Element) -> type:
        """Pick the subclass named by the element's xsi:type.

        Falls back to the ``<Base>.Type`` child AdWords emits, then to ``cls``.
        Unknown type names resolve to ``cls``.
        """
        base = _polymorphic_base(cls)
        if base is None:
            return cls

        type_name = element.get(XSI_TYPE)
        if type_name is None:
            marker = f"{base.xml_type}.Type"
            for child in element.iterchildren(etree.Element):
                if etree.QName(child).localname == marker:
                    type_name = (child.text or "").strip()
                    break
        if not type_name:
            return cls

        variant = base._variants.get(type_name.rsplit(":", 1)[-1])
        if variant is None or not issubclass(variant, cls):
            return cls
        return variant

    def load_element(self, element: etree._Element) -> None:
        """Populate the record in place.

        Children are matched on local name; unknown ones are ignored. The
        record is only modified once every child decoded successfully.

        Raises:
            DecodingError: If a child's text does not fit its field
        """
        specs = {spec.tag: spec for spec in _field_specs(type(self))}
        updates: Dict[str, Any] = {}

        for child in element.iterchildren(etree.Element):
            spec = specs.get(etree.QName(child).localname)
            if spec is None:
                continue
            value = _decode_value(child, spec)
            if spec.many:
                updates.setdefault(spec.attr, []).append(value)
            else:
                updates[spec.attr] = value

        for attr, value in updates.items():
            setattr(self, attr, value)

    def load_root(self, element: etree._Element) -> None:
        """Populate the record from a document or SOAP Body root.

        Unlike ``load_element``, the root's qualified name is checked when
        the record declares its own ``xml_name``.

        Raises:
            DecodingError: If the root is a different element, or if a
                child's text does not fit its field
        """
        if self.xml_name_declared and element.tag != self.qualified_name():
            raise DecodingError(
                f"Expected element {self.qualified_name()}",
                field=self.xml_name,
                value=element.tag,
            )
        self.load_element(element)


_parser = etree.XMLParser(resolve_entities=False, no_network=True)


@lru_cache(maxsize=None)
def _field_specs(cls: type):
    # A field belongs to the namespace of the record that first declares it
    owners: Dict[str, str] = {}
    for klass in reversed(cls.__mro__):
        for name in klass.__dict__.get("__dataclass_fields__", {}):
            owners.setdefault(name, klass.xml_namespace)

    specs = []
    for f in fields(cls):
        if "xml" not in f.metadata:
            continue
        specs.append(
            _FieldSpec(
                attr=f.name,
                tag=f.metadata["xml"],
                kind=f.metadata["kind"],
                many=f.metadata["many"],
                namespace=owners.get(f.name, cls.xml_namespace),
            )
        )
    return tuple(specs)


def _polymorphic_base(cls: type) -> Optional[type]:
    for klass in cls.__mro__:
        if klass.__dict__.get("polymorphic"):
            return klass
    return None


def _encode_value(child: etree._Element, value: Any) -> None:
    if isinstance(value, XmlRecord):
        value._fill(child)
    elif isinstance(value, Enum):
        child.text = str(value.value)
    elif isinstance(value, bool):
        child.text = "true" if value else "false"
    else:
        child.text = str(value)


def _decode_value(child: etree._Element, spec: _FieldSpec) -> Any:
    kind = spec.kind

    if child.get(XSI_NIL) in ("true", "1"):
        return None

    if isinstance(kind, type) and issubclass(kind, XmlRecord):
        return kind.from_element(child)

    text = (child.text or "").strip() if kind is not str else (child.text or "")

    if isinstance(kind, type) and issubclass(kind, Enum):
        return _decode_enum(kind, text)

    try:
        if kind is bool:
            if text in ("true", "1"):
                return True
            if text in ("false", "0"):
                return False
            raise ValueError(text)
        return kind(text)
    except (TypeError, ValueError):
        raise DecodingError(
            f"Cannot decode value as {getattr(kind, '__name__', kind)}",
            field=spec.tag,
            value=text,
        )


def _decode_enum(kind: Type[Enum], text: str) -> Any:
    """Decode an enumeration value the server may have added after v201802.

    Unlisted values map to the ``UNKNOWN`` member where the enum has one,
    otherwise the raw string is kept.
    """
    try:
        return kind(text)
    except ValueError:
        unknown = kind.__members__.get("UNKNOWN")
        return unknown if unknown is not None else text
