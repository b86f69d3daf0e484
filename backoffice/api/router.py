from fastapi import APIRouter

from backoffice.features.dialogs.api import router as dialogs_router

api_router = APIRouter()
api_router.include_router(dialogs_router)
