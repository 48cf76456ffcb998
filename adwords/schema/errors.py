"""ApiError variants and fault classification.

The server reports request problems as an ``ApiExceptionFault`` inside the
SOAP Fault detail. Each entry of its ``errors`` list is tagged with an
xsi:type naming one of the variants below, and decoding dispatches on that
tag. ``classify_fault`` turns a fault into a coarse category callers can
branch on (retry later, fix credentials, fix the request).
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from lxml import etree

from adwords.core.exceptions import SOAPFault
from adwords.schema.xml_model import XmlRecord, element, elements


@dataclass
class FieldPathElement(XmlRecord):
    field: Optional[str] = element("field")
    index: Optional[int] = element("index", int)


@dataclass
class ApiError(XmlRecord):
    """Root of the error variants; the xsi:type tag selects the subclass."""

    polymorphic = True

    field_path: Optional[str] = element("fieldPath")
    field_path_elements: List[FieldPathElement] = elements("fieldPathElements", FieldPathElement)
    trigger: Optional[str] = element("trigger")
    error_string: Optional[str] = element("errorString")
    api_error_type: Optional[str] = element("ApiError.Type")

    @property
    def kind(self) -> str:
        """Variant name, e.g. ``AuthenticationError``."""
        return self.api_error_type or self.xml_type


@dataclass
class ReasonError(ApiError):
    """Variant that carries only a reason code."""

    reason: Optional[str] = element("reason")


@dataclass
class AuthenticationError(ReasonError):
    pass


@dataclass
class AuthorizationError(ReasonError):
    pass


@dataclass
class ClientTermsError(ReasonError):
    pass


@dataclass
class CollectionSizeError(ReasonError):
    pass


@dataclass
class DatabaseError(ReasonError):
    pass


@dataclass
class DateError(ReasonError):
    pass


@dataclass
class DistinctError(ReasonError):
    pass


@dataclass
class EntityNotFound(ReasonError):
    pass


@dataclass
class IdError(ReasonError):
    pass


@dataclass
class InternalApiError(ReasonError):
    pass


@dataclass
class NotEmptyError(ReasonError):
    pass


@dataclass
class NullError(ReasonError):
    pass


@dataclass
class OperationAccessDenied(ReasonError):
    pass


@dataclass
class OperatorError(ReasonError):
    pass


@dataclass
class PagingError(ReasonError):
    pass


@dataclass
class QueryError(ReasonError):
    message: Optional[str] = element("message")


@dataclass
class QuotaCheckError(ReasonError):
    pass


@dataclass
class RangeError(ReasonError):
    pass


@dataclass
class RateExceededError(ReasonError):
    rate_name: Optional[str] = element("rateName")
    rate_scope: Optional[str] = element("rateScope")
    retry_after_seconds: Optional[int] = element("retryAfterSeconds", int)


@dataclass
class ReadOnlyError(ReasonError):
    pass


@dataclass
class RejectedError(ReasonError):
    pass


@dataclass
class RequestError(ReasonError):
    pass


@dataclass
class RequiredError(ReasonError):
    pass


@dataclass
class SelectorError(ReasonError):
    pass


@dataclass
class SizeLimitError(ReasonError):
    pass


@dataclass
class StringFormatError(ReasonError):
    pass


@dataclass
class StringLengthError(ReasonError):
    pass


@dataclass
class EntityCountLimitExceeded(ReasonError):
    enclosing_id: Optional[str] = element("enclosingId")
    limit: Optional[int] = element("limit", int)
    account_limit_type: Optional[str] = element("accountLimitType")
    existing_count: Optional[int] = element("existingCount", int)


@dataclass
class AdGroupCriterionError(ReasonError):
    pass


@dataclass
class CriterionError(ReasonError):
    pass


@dataclass
class ApiException(XmlRecord):
    """Typed content of the ``ApiExceptionFault`` detail element."""

    xml_name = "ApiExceptionFault"

    message: Optional[str] = element("message")
    application_exception_type: Optional[str] = element("ApplicationException.Type")
    errors: List[ApiError] = elements("errors", ApiError)

    @classmethod
    def from_fault(cls, fault: SOAPFault) -> Optional["ApiException"]:
        """Decode the ApiException carried in a fault's detail.

        Returns:
            ApiException, or None if the detail holds no ApiExceptionFault
        """
        detail = fault.detail_element
        if detail is None:
            return None
        for child in detail.iterchildren(etree.Element):
            if etree.QName(child).localname == cls.xml_name:
                return cls.from_element(child)
        return None


class ErrorCategory(Enum):
    """Coarse grouping of server-side failures."""

    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    QUOTA = "quota"
    RATE_EXCEEDED = "rate_exceeded"
    INTERNAL = "internal"
    REQUEST = "request"
    UNKNOWN = "unknown"


_CATEGORY_BY_TYPE = {
    AuthenticationError: ErrorCategory.AUTHENTICATION,
    AuthorizationError: ErrorCategory.AUTHORIZATION,
    ClientTermsError: ErrorCategory.AUTHORIZATION,
    OperationAccessDenied: ErrorCategory.AUTHORIZATION,
    QuotaCheckError: ErrorCategory.QUOTA,
    EntityCountLimitExceeded: ErrorCategory.QUOTA,
    SizeLimitError: ErrorCategory.QUOTA,
    RateExceededError: ErrorCategory.RATE_EXCEEDED,
    InternalApiError: ErrorCategory.INTERNAL,
    DatabaseError: ErrorCategory.INTERNAL,
}


# "AuthenticationError.AUTHENTICATION_FAILED" or "[RateExceededError <rateName=...>]"
_FAULTSTRING_VARIANT = re.compile(r"\s*\[?\s*(\w+)")


def classify_error(error: ApiError) -> ErrorCategory:
    for error_type, category in _CATEGORY_BY_TYPE.items():
        if isinstance(error, error_type):
            return category
    if type(error) is ApiError:
        return ErrorCategory.UNKNOWN
    return ErrorCategory.REQUEST


def classify_fault(fault: SOAPFault) -> ErrorCategory:
    """Map a fault onto an ErrorCategory.

    The first error of the ApiException decides. Without a typed detail the
    faultstring prefix (``AuthenticationError.AUTHENTICATION_FAILED``) is used.
    """
    exception = ApiException.from_fault(fault)
    if exception is not None and exception.errors:
        return classify_error(exception.errors[0])

    match = _FAULTSTRING_VARIANT.match(fault.string)
    variant = ApiError._variants.get(match.group(1)) if match else None
    if variant is None:
        return ErrorCategory.UNKNOWN
    return classify_error(variant())
