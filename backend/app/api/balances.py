from __future__ import annotations

from fastapi import APIRouter

from app.api.deps import AuthDep
from app.db import SessionDep
from app.schemas.balance import BalanceResponse
from app.services import balance as balance_service

balance_router = APIRouter(prefix="/balance", tags=["balance"])


@balance_router.get("", response_model=BalanceResponse)
async def get_balance(
    session: SessionDep,
    auth: AuthDep,
) -> BalanceResponse:
    """Get the caller's total and available TOIL balances."""
    return await balance_service.get_balance(session, auth.user_id)
