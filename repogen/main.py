import logging
from fastapi import FastAPI
from repogen import __version__
from repogen.core.config import settings
from repogen.core.logging import configure_logging
from repogen.api.routes import router as api_router

configure_logging(settings.log_level)
log = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version=__version__)
app.include_router(api_router, prefix="/v1")
