"""XML record layer and the AdWords types shared across services."""

from adwords.schema.xml_model import XmlRecord, element, elements
from adwords.schema.common import (
    DateRange,
    ListReturnValue,
    Operation,
    Operator,
    OrderBy,
    Page,
    Paging,
    Predicate,
    PredicateOperator,
    Selector,
    SortOrder,
)
from adwords.schema.errors import (
    ApiError,
    ApiException,
    ErrorCategory,
    classify_error,
    classify_fault,
)

__all__ = [
    "XmlRecord",
    "element",
    "elements",
    "DateRange",
    "ListReturnValue",
    "Operation",
    "Operator",
    "OrderBy",
    "Page",
    "Paging",
    "Predicate",
    "PredicateOperator",
    "Selector",
    "SortOrder",
    "ApiError",
    "ApiException",
    "ErrorCategory",
    "classify_error",
    "classify_fault",
]
