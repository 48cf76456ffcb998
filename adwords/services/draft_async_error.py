"""DraftAsyncErrorService (cm, v201802).

Reports the errors raised while a draft was being promoted asynchronously.
"""

from dataclasses import dataclass
from typing import List, Optional

from adwords.core.constants import ServiceGroup
from adwords.schema.common import Page, Selector
from adwords.schema.errors import ApiError
from adwords.schema.xml_model import XmlRecord, element, elements
from adwords.services.base import ServiceFacade


@dataclass
class DraftAsyncError(XmlRecord):
    base_campaign_id: Optional[int] = element("baseCampaignId", int)
    draft_id: Optional[int] = element("draftId", int)
    draft_campaign_id: Optional[int] = element("draftCampaignId", int)
    async_error: Optional[ApiError] = element("asyncError", ApiError)
    base_ad_group_id: Optional[int] = element("baseAdGroupId", int)
    draft_ad_group_id: Optional[int] = element("draftAdGroupId", int)


@dataclass
class DraftAsyncErrorPage(Page):
    entries: List[DraftAsyncError] = elements("entries", DraftAsyncError)


@dataclass
class Get(XmlRecord):
    xml_name = "get"

    service_selector: Optional[Selector] = element("serviceSelector", Selector)


@dataclass
class GetResponse(XmlRecord):
    xml_name = "getResponse"

    rval: Optional[DraftAsyncErrorPage] = element("rval", DraftAsyncErrorPage)


@dataclass
class Query(XmlRecord):
    xml_name = "query"

    query: Optional[str] = element("query")


@dataclass
class QueryResponse(XmlRecord):
    xml_name = "queryResponse"

    rval: Optional[DraftAsyncErrorPage] = element("rval", DraftAsyncErrorPage)


class DraftAsyncErrorService(ServiceFacade):
    service_name = "DraftAsyncErrorService"
    service_group = ServiceGroup.CM

    def get(self, request: Get, **call_kwargs) -> GetResponse:
        """Return the draft async errors matching the selector."""
        return self._invoke(request, GetResponse, **call_kwargs)

    def query(self, request: Query, **call_kwargs) -> QueryResponse:
        return self._invoke(request, QueryResponse, **call_kwargs)
