"""AdwordsUserListService (rm, v201802).

Audience user lists. Operations live in the ``rm`` namespace while the
request SOAP header and the shared selector types stay in ``cm``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from adwords.core.constants import RM_NAMESPACE, ServiceGroup
from adwords.schema.common import ListReturnValue, Operation, Page, Selector
from adwords.schema.errors import ApiError
from adwords.schema.xml_model import XmlRecord, element, elements
from adwords.services.base import ServiceFacade


class UserListMembershipStatus(Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class CustomerMatchUploadKeyType(Enum):
    UNKNOWN = "UNKNOWN"
    CONTACT_INFO = "CONTACT_INFO"
    CRM_ID = "CRM_ID"
    MOBILE_ADVERTISING_ID = "MOBILE_ADVERTISING_ID"


@dataclass
class UserList(XmlRecord):
    xml_namespace = RM_NAMESPACE
    polymorphic = True

    id: Optional[int] = element("id", int)
    is_read_only: Optional[bool] = element("isReadOnly", bool)
    name: Optional[str] = element("name")
    description: Optional[str] = element("description")
    status: Optional[UserListMembershipStatus] = element("status", UserListMembershipStatus)
    integration_code: Optional[str] = element("integrationCode")
    access_reason: Optional[str] = element("accessReason")
    account_user_list_status: Optional[str] = element("accountUserListStatus")
    membership_life_span: Optional[int] = element("membershipLifeSpan", int)
    size: Optional[int] = element("size", int)
    size_range: Optional[str] = element("sizeRange")
    size_for_search: Optional[int] = element("sizeForSearch", int)
    size_range_for_search: Optional[str] = element("sizeRangeForSearch")
    list_type: Optional[str] = element("listType")
    is_eligible_for_search: Optional[bool] = element("isEligibleForSearch", bool)
    is_eligible_for_display: Optional[bool] = element("isEligibleForDisplay", bool)
    closing_reason: Optional[str] = element("closingReason")
    user_list_type: Optional[str] = element("UserList.Type")


@dataclass
class CrmBasedUserList(UserList):
    """Customer Match list built from uploaded identifiers."""

    app_id: Optional[str] = element("appId")
    upload_key_type: Optional[CustomerMatchUploadKeyType] = element(
        "uploadKeyType", CustomerMatchUploadKeyType
    )
    data_source_type: Optional[str] = element("dataSourceType")
    upload_status: Optional[str] = element("uploadStatus")


@dataclass
class AddressInfo(XmlRecord):
    xml_namespace = RM_NAMESPACE

    hashed_first_name: Optional[str] = element("hashedFirstName")
    hashed_last_name: Optional[str] = element("hashedLastName")
    country_code: Optional[str] = element("countryCode")
    zip_code: Optional[str] = element("zipCode")


@dataclass
class Member(XmlRecord):
    """One list member; identifiers are SHA-256 hashes of normalized values."""

    xml_namespace = RM_NAMESPACE

    hashed_email: Optional[str] = element("hashedEmail")
    mobile_id: Optional[str] = element("mobileId")
    hashed_phone_number: Optional[str] = element("hashedPhoneNumber")
    address_info: Optional[AddressInfo] = element("addressInfo", AddressInfo)
    user_id: Optional[str] = element("userId")


@dataclass
class MutateMembersOperand(XmlRecord):
    xml_namespace = RM_NAMESPACE

    user_list_id: Optional[int] = element("userListId", int)
    remove_all: Optional[bool] = element("removeAll", bool)
    members_list: List[Member] = elements("membersList", Member)


@dataclass
class MutateMembersOperation(Operation):
    xml_namespace = RM_NAMESPACE

    operand: Optional[MutateMembersOperand] = element("operand", MutateMembersOperand)


@dataclass
class MutateMembersReturnValue(XmlRecord):
    xml_namespace = RM_NAMESPACE

    user_lists: List[UserList] = elements("userLists", UserList)


@dataclass
class UserListOperation(Operation):
    xml_namespace = RM_NAMESPACE

    operand: Optional[UserList] = element("operand", UserList)


@dataclass
class UserListPage(Page):
    xml_namespace = RM_NAMESPACE

    entries: List[UserList] = elements("entries", UserList)


@dataclass
class UserListReturnValue(ListReturnValue):
    xml_namespace = RM_NAMESPACE

    value: List[UserList] = elements("value", UserList)
    partial_failure_errors: List[ApiError] = elements("partialFailureErrors", ApiError)


@dataclass
class Get(XmlRecord):
    xml_name = "get"
    xml_namespace = RM_NAMESPACE

    service_selector: Optional[Selector] = element("serviceSelector", Selector)


@dataclass
class GetResponse(XmlRecord):
    xml_name = "getResponse"
    xml_namespace = RM_NAMESPACE

    rval: Optional[UserListPage] = element("rval", UserListPage)


@dataclass
class Mutate(XmlRecord):
    xml_name = "mutate"
    xml_namespace = RM_NAMESPACE

    operations: List[UserListOperation] = elements("operations", UserListOperation)


@dataclass
class MutateResponse(XmlRecord):
    xml_name = "mutateResponse"
    xml_namespace = RM_NAMESPACE

    rval: Optional[UserListReturnValue] = element("rval", UserListReturnValue)


@dataclass
class MutateMembers(XmlRecord):
    xml_name = "mutateMembers"
    xml_namespace = RM_NAMESPACE

    operations: List[MutateMembersOperation] = elements("operations", MutateMembersOperation)


@dataclass
class MutateMembersResponse(XmlRecord):
    xml_name = "mutateMembersResponse"
    xml_namespace = RM_NAMESPACE

    rval: Optional[MutateMembersReturnValue] = element("rval", MutateMembersReturnValue)


@dataclass
class Query(XmlRecord):
    xml_name = "query"
    xml_namespace = RM_NAMESPACE

    query: Optional[str] = element("query")


@dataclass
class QueryResponse(XmlRecord):
    xml_name = "queryResponse"
    xml_namespace = RM_NAMESPACE

    rval: Optional[UserListPage] = element("rval", UserListPage)


class AdwordsUserListService(ServiceFacade):
    """Client of AdwordsUserListService."""

    service_name = "AdwordsUserListService"
    service_group = ServiceGroup.RM

    def get(self, request: Get, **call_kwargs) -> GetResponse:
        """Return the user lists matching the selector."""
        return self._invoke(request, GetResponse, **call_kwargs)

    def mutate(self, request: Mutate, **call_kwargs) -> MutateResponse:
        """Add or update user lists."""
        return self._invoke(request, MutateResponse, **call_kwargs)

    def mutate_members(self, request: MutateMembers, **call_kwargs) -> MutateMembersResponse:
        """Add members to, or remove members from, CRM-based user lists.

        Only lists whose upload key type matches the member identifiers
        accept the operation.
        """
        return self._invoke(request, MutateMembersResponse, **call_kwargs)

    def query(self, request: Query, **call_kwargs) -> QueryResponse:
        """Return the user lists matching an AWQL query."""
        return self._invoke(request, QueryResponse, **call_kwargs)
