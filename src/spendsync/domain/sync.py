"""Fetch-then-reconcile flow that mirrors ledger activity into a local log."""

import logging
from datetime import date, timedelta
from typing import Callable, Optional, Union

from spendsync.domain.cache import CachedAggregateService
from spendsync.domain.entities import SyncResult
from spendsync.domain.ledger import LedgerService
from spendsync.domain.reconcile import ReconciliationService, expense_from_view

logger = logging.getLogger(__name__)

DEFAULT_SYNC_DAYS = 30


class SyncService:
    """Pulls a date window from the (cached) aggregates and merges it locally."""

    def __init__(
        self,
        aggregates: CachedAggregateService,
        ledger: LedgerService,
        reconciler: ReconciliationService,
        today: Callable[[], date] = date.today,
    ):
        self.aggregates = aggregates
        self.ledger = ledger
        self.reconciler = reconciler
        self.today = today

    def sync_range(
        self,
        user_id: str,
        start_date: Optional[Union[str, date]] = None,
        days: int = DEFAULT_SYNC_DAYS,
    ) -> SyncResult:
        """Merge the user's transactions from a window into the local log.

        With no start date, the window is the last ``days`` days.
        """
        if start_date is None:
            start_date = self.today() - timedelta(days=days)
        summary = self.aggregates.range_summary(user_id, start_date, days, include_categories=True)

        accounts = {a.account_id: a for a in self.ledger.list_accounts(user_id)}
        incoming = []
        for view in summary.transactions:
            account = accounts.get(view.transaction.account_id)
            incoming.append(
                expense_from_view(
                    view,
                    account_name=account.display_name if account else None,
                    institution=account.institution_name if account else None,
                )
            )

        merge = self.reconciler.reconcile(incoming)
        logger.info(
            "Synced %s..%s for user %s: %d added, %d already present, %d failed",
            summary.start_date,
            summary.end_date,
            user_id,
            merge.succeeded_count,
            len(merge.skipped),
            merge.failed_count,
        )
        return SyncResult(merge=merge, categories=summary.categories or ())
