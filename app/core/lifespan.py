# app/core/lifespan.py
from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from app.clients import auth_service
from app.db import mongo

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup ---
    await mongo.connect()
    await auth_service.connect()

    # Application runs
    yield

    # --- Shutdown ---
    await auth_service.disconnect()
    logger.info("Auth services client closed")
    await mongo.disconnect()
    logger.info("Mongo disconnected")
