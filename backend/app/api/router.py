from fastapi import APIRouter

from app.api.balances import balance_router
from app.api.events import events_router
from app.api.users import users_router

api_router = APIRouter()
api_router.include_router(events_router)
api_router.include_router(balance_router)
api_router.include_router(users_router)
