from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from tradehub.core.config import settings
from tradehub.core.database import engine, Base
from tradehub.api.v1 import api_router
from tradehub.middleware.error_handler import (
    global_exception_handler,
    query_failure_handler,
)
from tradehub.middleware.logging import configure_logging
from tradehub.utils.exceptions import QueryFailure

import tradehub.models  # noqa: F401

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Starting TradeHub catalog service...")

    Base.metadata.create_all(bind=engine)

    yield

    logger.info("Shutting down TradeHub catalog service...")


app = FastAPI(title=settings.APP_NAME, version=settings.VERSION, lifespan=lifespan)


origins = settings.ALLOWED_ORIGINS

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


app.include_router(api_router, prefix="/api/v1")

app.add_exception_handler(QueryFailure, query_failure_handler)
app.add_exception_handler(Exception, global_exception_handler)


@app.get("/")
async def root():
    return {"message": settings.APP_NAME, "version": settings.VERSION, "docs": "/docs"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
