from fastapi import APIRouter

from fleetquery.api.routes import events, utils

api_router = APIRouter()
api_router.include_router(utils.router)
api_router.include_router(events.router)
