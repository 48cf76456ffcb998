"""AdWords service facades (v201802)."""

from adwords.services.base import ServiceFacade
from adwords.services.ad_group_criterion import AdGroupCriterionService
from adwords.services.adwords_user_list import AdwordsUserListService
from adwords.services.draft_async_error import DraftAsyncErrorService

__all__ = [
    "ServiceFacade",
    "AdGroupCriterionService",
    "AdwordsUserListService",
    "DraftAsyncErrorService",
]
