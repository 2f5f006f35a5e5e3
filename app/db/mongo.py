# app/db/mongo.py
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from app.core.config import get_settings
import certifi
import logging

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None


def get_client() -> AsyncIOMotorClient:
    assert _client is not None, "Mongo client not initialized"
    return _client


def get_db() -> AsyncIOMotorDatabase:
    assert _db is not None, "Mongo DB not initialized"
    return _db


async def connect():
    """
    Create the Motor client. SRV URIs (Atlas) get TLS with the certifi CA bundle.
    Do not crash the app if the initial ping fails: keep a lazy client so
    requests can retry once the network is OK.
    """
    global _client, _db
    settings = get_settings()

    def _new_client() -> AsyncIOMotorClient:
        kwargs = {}
        if settings.MONGO_URI.startswith("mongodb+srv://"):
            kwargs.update(tls=True, tlsCAFile=certifi.where())   # critical in containers
        return AsyncIOMotorClient(
            settings.MONGO_URI,
            uuidRepresentation="standard",
            tz_aware=True,
            serverSelectionTimeoutMS=6000,
            connectTimeoutMS=6000,
            **kwargs,
        )

    _client = _new_client()
    _db = _client[settings.MONGO_DB]
    try:
        await _client.admin.command("ping")
        logger.info("Mongo connected (ping ok) db=%s", settings.MONGO_DB)
    except Exception as e:
        # first real query will attempt to connect again
        logger.warning("Mongo ping at startup failed, using lazy connection: %s", e)


async def disconnect():
    global _client, _db
    if _client:
        _client.close()
    _client = None
    _db = None
