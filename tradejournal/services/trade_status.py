"""Trade lifecycle status, always re-derived from the current exit ledger."""

from tradejournal.utils.constants import (
    STATUS_CLOSED,
    STATUS_OPEN,
    STATUS_PARTIAL,
    TRADE_STATUSES,
)
from tradejournal.utils.numbers import to_float


def derive_status(total_shares, exited_shares, current: str | None = None) -> str:
    """Map the exit ledger onto open / partial / closed.

    With no exits the submitted status is kept, defaulting to "open" when it
    is missing or unknown. Over-filled ledgers resolve to "closed".
    """
    total = to_float(total_shares)
    exited = to_float(exited_shares)

    if exited > 0:
        if exited >= total:
            return STATUS_CLOSED
        return STATUS_PARTIAL

    if current in TRADE_STATUSES:
        return current
    return STATUS_OPEN
