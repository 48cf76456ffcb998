"""AdGroupCriterionService (cm, v201802).

Manages the criteria (keywords, placements) attached to ad groups.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from adwords.core.constants import ServiceGroup
from adwords.schema.common import (
    ListReturnValue,
    Operation,
    Page,
    Selector,
    StringStringMapEntry,
)
from adwords.schema.errors import ApiError
from adwords.schema.xml_model import XmlRecord, element, elements
from adwords.services.base import ServiceFacade


class CriterionUse(Enum):
    BIDDABLE = "BIDDABLE"
    NEGATIVE = "NEGATIVE"


class KeywordMatchType(Enum):
    EXACT = "EXACT"
    PHRASE = "PHRASE"
    BROAD = "BROAD"


class UserStatus(Enum):
    ENABLED = "ENABLED"
    REMOVED = "REMOVED"
    PAUSED = "PAUSED"


@dataclass
class Label(XmlRecord):
    id: Optional[int] = element("id", int)
    name: Optional[str] = element("name")
    status: Optional[str] = element("status")
    label_type: Optional[str] = element("Label.Type")


@dataclass
class Criterion(XmlRecord):
    polymorphic = True

    id: Optional[int] = element("id", int)
    type: Optional[str] = element("type")
    criterion_type: Optional[str] = element("Criterion.Type")


@dataclass
class Keyword(Criterion):
    text: Optional[str] = element("text")
    match_type: Optional[KeywordMatchType] = element("matchType", KeywordMatchType)


@dataclass
class Placement(Criterion):
    url: Optional[str] = element("url")


@dataclass
class UrlList(XmlRecord):
    urls: List[str] = elements("urls")


@dataclass
class AdGroupCriterion(XmlRecord):
    polymorphic = True

    ad_group_id: Optional[int] = element("adGroupId", int)
    criterion_use: Optional[CriterionUse] = element("criterionUse", CriterionUse)
    criterion: Optional[Criterion] = element("criterion", Criterion)
    labels: List[Label] = elements("labels", Label)
    forward_compatibility_map: List[StringStringMapEntry] = elements(
        "forwardCompatibilityMap", StringStringMapEntry
    )
    base_campaign_id: Optional[int] = element("baseCampaignId", int)
    base_ad_group_id: Optional[int] = element("baseAdGroupId", int)
    ad_group_criterion_type: Optional[str] = element("AdGroupCriterion.Type")


@dataclass
class BiddableAdGroupCriterion(AdGroupCriterion):
    user_status: Optional[UserStatus] = element("userStatus", UserStatus)
    system_serving_status: Optional[str] = element("systemServingStatus")
    approval_status: Optional[str] = element("approvalStatus")
    disapproval_reasons: List[str] = elements("disapprovalReasons")
    bid_modifier: Optional[float] = element("bidModifier", float)
    final_urls: Optional[UrlList] = element("finalUrls", UrlList)
    final_mobile_urls: Optional[UrlList] = element("finalMobileUrls", UrlList)
    tracking_url_template: Optional[str] = element("trackingUrlTemplate")
    final_url_suffix: Optional[str] = element("finalUrlSuffix")


@dataclass
class NegativeAdGroupCriterion(AdGroupCriterion):
    pass


@dataclass
class AdGroupCriterionOperation(Operation):
    operand: Optional[AdGroupCriterion] = element("operand", AdGroupCriterion)


@dataclass
class AdGroupCriterionPage(Page):
    entries: List[AdGroupCriterion] = elements("entries", AdGroupCriterion)


@dataclass
class AdGroupCriterionReturnValue(ListReturnValue):
    value: List[AdGroupCriterion] = elements("value", AdGroupCriterion)
    partial_failure_errors: List[ApiError] = elements("partialFailureErrors", ApiError)


@dataclass
class AdGroupCriterionLabel(XmlRecord):
    ad_group_id: Optional[int] = element("adGroupId", int)
    criterion_id: Optional[int] = element("criterionId", int)
    label_id: Optional[int] = element("labelId", int)


@dataclass
class AdGroupCriterionLabelOperation(Operation):
    operand: Optional[AdGroupCriterionLabel] = element("operand", AdGroupCriterionLabel)


@dataclass
class AdGroupCriterionLabelReturnValue(ListReturnValue):
    value: List[AdGroupCriterionLabel] = elements("value", AdGroupCriterionLabel)
    partial_failure_errors: List[ApiError] = elements("partialFailureErrors", ApiError)


@dataclass
class Get(XmlRecord):
    xml_name = "get"

    service_selector: Optional[Selector] = element("serviceSelector", Selector)


@dataclass
class GetResponse(XmlRecord):
    xml_name = "getResponse"

    rval: Optional[AdGroupCriterionPage] = element("rval", AdGroupCriterionPage)


@dataclass
class Mutate(XmlRecord):
    xml_name = "mutate"

    operations: List[AdGroupCriterionOperation] = elements("operations", AdGroupCriterionOperation)


@dataclass
class MutateResponse(XmlRecord):
    xml_name = "mutateResponse"

    rval: Optional[AdGroupCriterionReturnValue] = element("rval", AdGroupCriterionReturnValue)


@dataclass
class MutateLabel(XmlRecord):
    xml_name = "mutateLabel"

    operations: List[AdGroupCriterionLabelOperation] = elements(
        "operations", AdGroupCriterionLabelOperation
    )


@dataclass
class MutateLabelResponse(XmlRecord):
    xml_name = "mutateLabelResponse"

    rval: Optional[AdGroupCriterionLabelReturnValue] = element(
        "rval", AdGroupCriterionLabelReturnValue
    )


@dataclass
class Query(XmlRecord):
    xml_name = "query"

    query: Optional[str] = element("query")


@dataclass
class QueryResponse(XmlRecord):
    xml_name = "queryResponse"

    rval: Optional[AdGroupCriterionPage] = element("rval", AdGroupCriterionPage)


class AdGroupCriterionService(ServiceFacade):
    """Client of AdGroupCriterionService.

    Example:
        service = AdGroupCriterionService.from_config(config)
        page = service.query(Query("SELECT Id WHERE AdGroupId = 42")).rval
    """

    service_name = "AdGroupCriterionService"
    service_group = ServiceGroup.CM

    def get(self, request: Get, **call_kwargs) -> GetResponse:
        """Return the criteria matching the selector.

        Raises:
            SOAPFault: ApiException if problems occurred while fetching
        """
        return self._invoke(request, GetResponse, **call_kwargs)

    def mutate(self, request: Mutate, **call_kwargs) -> MutateResponse:
        """Add, update or remove criteria.

        With the partialFailure header set, valid operations are committed
        and the others are reported in ``rval.partial_failure_errors``.
        """
        return self._invoke(request, MutateResponse, **call_kwargs)

    def mutate_label(self, request: MutateLabel, **call_kwargs) -> MutateLabelResponse:
        """Add labels to, or remove labels from, criteria."""
        return self._invoke(request, MutateLabelResponse, **call_kwargs)

    def query(self, request: Query, **call_kwargs) -> QueryResponse:
        """Return the criteria matching an AWQL query."""
        return self._invoke(request, QueryResponse, **call_kwargs)
