import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from motor.motor_asyncio import AsyncIOMotorClient

from app.config import Settings

logger = logging.getLogger(__name__)


class OrderedStore:
    """An ordered id -> record map backed by one MongoDB collection.

    Records are plain dicts carrying their own ``id``; the id is stored as
    the document ``_id`` so key order is the collection's ``_id`` order.
    """

    def __init__(self, collection):
        self.collection = collection

    @staticmethod
    def _to_record(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if document is None:
            return None
        record = dict(document)
        record["id"] = str(record.pop("_id"))
        return record

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        document = await self.collection.find_one({"_id": key})
        return self._to_record(document)

    async def insert(self, key: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Create or replace the record stored under ``key``."""
        document = {k: v for k, v in record.items() if k != "id"}
        document["_id"] = key
        await self.collection.replace_one({"_id": key}, document, upsert=True)
        return self._to_record(document)

    async def remove(self, key: str) -> Optional[Dict[str, Any]]:
        document = await self.collection.find_one_and_delete({"_id": key})
        return self._to_record(document)

    async def values(self) -> List[Dict[str, Any]]:
        """Snapshot of every record, ordered by key."""
        documents = await self.collection.find({}, sort=[("_id", 1)]).to_list(None)
        return [self._to_record(document) for document in documents]


async def connect_to_mongo(app: FastAPI, settings: Settings, client=None) -> None:
    """Open the database and attach both stores to ``app.state``."""
    if client is None:
        if not settings.mongo_uri:
            raise ValueError("MONGO_URI environment variable is not set! Check your .env file.")
        client = AsyncIOMotorClient(settings.mongo_uri)
        await client.admin.command("ping")
        app.state.owns_client = True
    else:
        app.state.owns_client = False

    db = client[settings.database_name]
    app.state.mongo_client = client
    app.state.db = db
    app.state.jobs = OrderedStore(db.jobs)
    app.state.applications = OrderedStore(db.applications)

    if "mongodb+srv" in settings.mongo_uri:
        logger.info("Connected to MongoDB Atlas, database %s", settings.database_name)
    else:
        logger.info("Connected to MongoDB, database %s", settings.database_name)


async def close_mongo_connection(app: FastAPI) -> None:
    client = getattr(app.state, "mongo_client", None)
    if client is not None and getattr(app.state, "owns_client", False):
        client.close()
        logger.info("MongoDB connection closed")


async def ping(app: FastAPI) -> bool:
    try:
        await app.state.db.command("ping")
    except Exception as e:
        logger.warning("Database ping failed: %s", e)
        return False
    return True


def get_job_store(request: Request) -> OrderedStore:
    return request.app.state.jobs


def get_application_store(request: Request) -> OrderedStore:
    return request.app.state.applications


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_write_lock(request: Request):
    return request.app.state.write_lock
