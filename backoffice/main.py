import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import api_router
from .core.config import get_settings
from .features.dialogs.service import DialogRegistry
from .features.entities.client import BusinessApiClient
from .features.media.uploads import MediaUploadClient

settings = get_settings()
logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    _configure_logging()
    uploader = MediaUploadClient.from_settings(settings)
    entity_client = BusinessApiClient.from_settings(settings)
    app.state.dialogs = DialogRegistry(
        uploader=uploader,
        entity_client=entity_client,
        settings=settings,
    )
    try:
        yield
    finally:
        open_dialogs = len(app.state.dialogs)
        if open_dialogs:
            logger.info("Closing %s open dialog(s) on shutdown.", open_dialogs)
        app.state.dialogs.close_all()
        await uploader.aclose()
        await entity_client.aclose()


app = FastAPI(title="Backoffice Media API", docs_url="/api/docs", lifespan=lifespan)
app.include_router(api_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def read_root() -> dict:
    return {"status": "ok", "service": "backoffice"}


@app.get("/health")
async def health_check() -> dict:
    return {"healthy": True}
