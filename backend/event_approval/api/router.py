from fastapi import APIRouter

from event_approval.api.notifications import notifications_router
from event_approval.api.requests import requests_router

api_router = APIRouter()
api_router.include_router(requests_router)
api_router.include_router(notifications_router)
