from __future__ import annotations

from pydantic import BaseModel


class BalanceResponse(BaseModel):
    """Provisional and spendable TOIL balances, in minutes.

    ``balance`` counts PENDING and APPROVED events; ``available_balance``
    counts APPROVED events only. REJECTED events count toward neither.
    """

    balance: int
    add_minutes: int
    take_minutes: int
    available_balance: int
    available_add_minutes: int
    available_take_minutes: int
