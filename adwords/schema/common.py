"""Types shared by every service of the ``cm`` namespace.

Selectors, paging and the generic operation/return-value shapes that the
concrete service records extend.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from adwords.schema.xml_model import XmlRecord, element, elements


class Operator(Enum):
    """Operation kinds accepted by mutate calls."""

    ADD = "ADD"
    REMOVE = "REMOVE"
    SET = "SET"
    UNKNOWN = "UNKNOWN"


class PredicateOperator(Enum):
    EQUALS = "EQUALS"
    NOT_EQUALS = "NOT_EQUALS"
    IN = "IN"
    NOT_IN = "NOT_IN"
    GREATER_THAN = "GREATER_THAN"
    GREATER_THAN_EQUALS = "GREATER_THAN_EQUALS"
    LESS_THAN = "LESS_THAN"
    LESS_THAN_EQUALS = "LESS_THAN_EQUALS"
    STARTS_WITH = "STARTS_WITH"
    STARTS_WITH_IGNORE_CASE = "STARTS_WITH_IGNORE_CASE"
    CONTAINS = "CONTAINS"
    CONTAINS_IGNORE_CASE = "CONTAINS_IGNORE_CASE"
    DOES_NOT_CONTAIN = "DOES_NOT_CONTAIN"
    DOES_NOT_CONTAIN_IGNORE_CASE = "DOES_NOT_CONTAIN_IGNORE_CASE"
    CONTAINS_ANY = "CONTAINS_ANY"
    CONTAINS_ALL = "CONTAINS_ALL"
    CONTAINS_NONE = "CONTAINS_NONE"
    UNKNOWN = "UNKNOWN"


class SortOrder(Enum):
    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"


@dataclass
class DateRange(XmlRecord):
    """Inclusive date range, dates formatted YYYYMMDD."""

    min: Optional[str] = element("min")
    max: Optional[str] = element("max")


@dataclass
class Predicate(XmlRecord):
    field: Optional[str] = element("field")
    operator: Optional[PredicateOperator] = element("operator", PredicateOperator)
    values: List[str] = elements("values")


@dataclass
class OrderBy(XmlRecord):
    field: Optional[str] = element("field")
    sort_order: Optional[SortOrder] = element("sortOrder", SortOrder)


@dataclass
class Paging(XmlRecord):
    start_index: Optional[int] = element("startIndex", int)
    number_results: Optional[int] = element("numberResults", int)


@dataclass
class Selector(XmlRecord):
    """Generic selector for get calls.

    Example:
        Selector(fields=["Id", "CriteriaType"],
                 predicates=[Predicate("AdGroupId", PredicateOperator.EQUALS, ["42"])],
                 paging=Paging(0, 100))
    """

    fields: List[str] = elements("fields")
    predicates: List[Predicate] = elements("predicates", Predicate)
    date_range: Optional[DateRange] = element("dateRange", DateRange)
    ordering: List[OrderBy] = elements("ordering", OrderBy)
    paging: Optional[Paging] = element("paging", Paging)


@dataclass
class Page(XmlRecord):
    """Base of every paged result."""

    total_num_entries: Optional[int] = element("totalNumEntries", int)
    page_type: Optional[str] = element("Page.Type")


@dataclass
class ListReturnValue(XmlRecord):
    """Base of every mutate result."""

    list_return_value_type: Optional[str] = element("ListReturnValue.Type")


@dataclass
class Operation(XmlRecord):
    """Base of every mutate operation."""

    operator: Optional[Operator] = element("operator", Operator)
    operation_type: Optional[str] = element("Operation.Type")


@dataclass
class StringStringMapEntry(XmlRecord):
    xml_type = "String_StringMapEntry"

    key: Optional[str] = element("key")
    value: Optional[str] = element("value")
