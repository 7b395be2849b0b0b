"""blobserve: serve files stored in nested sublevels over HTTP."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from blobserve.api.files import app_files
from blobserve.config import get_settings
from blobserve.db import StoreError, blob_database
from blobserve.gateway import Gateway
from blobserve.sublevel import Sublevel


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.info(f"Serving files from {settings.db_path} (env={settings.env.value}, cache={settings.cache_policy.value})")
    async with blob_database(settings.db_path):
        app.state.gateway = Gateway(Sublevel())
        yield


app = FastAPI(
    title="blobserve",
    description=__doc__ if __doc__ else "",
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)
app.include_router(app_files)


@app.exception_handler(StoreError)
async def store_error_exception_handler(request: Request, exc: StoreError):
    logging.error("Unhandled store error", exc_info=exc)
    message = "Internal server error." if get_settings().production else str(exc)
    return PlainTextResponse(message, status_code=500)
