"""
Reporting Engine.

Read-only aggregations over paid jobs within an inclusive time window.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Any, List, Optional, Tuple, Union

from ledger_backend.app.core.exceptions import InvalidRangeError, ResourceNotFoundError
from ledger_backend.app.db.ledger_store import LedgerStore
from ledger_backend.app.schemas.reports import ProfessionEarnings, PayerTotal

logger = logging.getLogger("ledger.reporting")

Bound = Union[str, date, datetime, None]


def _parse_bound(value: Bound, name: str, end_of_day: bool) -> datetime:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidRangeError()

    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                value = date.fromisoformat(text)
            else:
                value = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidRangeError(f"Invalid {name} date: {text}")

    if not isinstance(value, datetime):
        # A bare date covers the whole day
        value = datetime.combine(value, time.max if end_of_day else time.min)

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    # SQLite stores timestamps without their offset, so compare in UTC
    return value.astimezone(timezone.utc)


def parse_window(start: Bound, end: Bound) -> Tuple[datetime, datetime]:
    """
    Turn request bounds into an inclusive UTC window.

    Accepts ISO-8601 dates or datetimes (strings or objects). Naive values
    are taken as UTC, offset-bearing values are converted to UTC, and a
    date-only end runs to the end of that day.

    Raises:
        InvalidRangeError: a bound is missing, malformed, or start > end
    """
    window_start = _parse_bound(start, "start", end_of_day=False)
    window_end = _parse_bound(end, "end", end_of_day=True)
    if window_start > window_end:
        raise InvalidRangeError("Start date must not be after end date")
    return window_start, window_end


class ReportingEngine:

    def __init__(self, store: LedgerStore, default_limit: int = 2, max_limit: int = 100):
        self.store = store
        self.default_limit = default_limit
        self.max_limit = max_limit

    def normalize_limit(self, limit: Any) -> int:
        """
        Positive integer limits pass through, capped at max_limit.

        Anything else is the default.
        """
        if limit is None or isinstance(limit, bool):
            return self.default_limit
        try:
            value = int(str(limit).strip())
        except ValueError:
            return self.default_limit
        if value <= 0:
            return self.default_limit
        return min(value, self.max_limit)

    async def best_profession(self, start: Bound, end: Bound) -> ProfessionEarnings:
        """
        Profession whose performers earned the most in the window.

        Ties on the total go to the lexicographically smallest profession.

        Raises:
            InvalidRangeError: bad window
            ResourceNotFoundError: no paid jobs in the window
        """
        window_start, window_end = parse_window(start, end)

        async with self.store.transaction(read_only=True) as tx:
            rows = await tx.profession_earnings(window_start, window_end, limit=1)

        if not rows:
            raise ResourceNotFoundError("Profession")

        profession, total = rows[0]
        logger.debug("Best profession %s..%s: %s (%s)", window_start, window_end, profession, total)
        return ProfessionEarnings(profession=profession, total_earnings=total)

    async def best_payers(self, start: Bound, end: Bound, limit: Optional[Any] = None) -> List[PayerTotal]:
        """
        Payers who paid the most in the window, highest first.

        Ties on the total are ordered by payer id. An empty window yields an
        empty list.
        """
        window_start, window_end = parse_window(start, end)
        limit = self.normalize_limit(limit)

        async with self.store.transaction(read_only=True) as tx:
            rows = await tx.payer_totals(window_start, window_end, limit)

        return [
            PayerTotal(
                payer_id=payer_id,
                payer_name=f"{first_name} {last_name}",
                total_paid=total,
            )
            for payer_id, first_name, last_name, total in rows
        ]
