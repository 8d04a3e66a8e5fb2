"""Application services - async orchestration over the governance core."""

from chatdao.application.services.account_service import AccountService
from chatdao.application.services.base import LoggingMixin, RecordLoaderMixin
from chatdao.application.services.governance_service import GovernanceService
from chatdao.application.services.query_service import GovernanceQueryService

__all__: list[str] = [
    "AccountService",
    "GovernanceQueryService",
    "GovernanceService",
    "LoggingMixin",
    "RecordLoaderMixin",
]
