from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from datetime import datetime, timedelta, timezone
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from ...config import settings
from ...models.checkout import PendingSessionRecord


class PendingSessionStore(ABC):
    """
    Short-lived key/value store for checkout sessions awaiting the visitor's return.

    Any backend with `put`/`get` and expiry support can serve as the store.
    Records are never deleted explicitly; they expire.
    """

    @abstractmethod
    async def put(self, key: str, value: Dict[str, Any], ttl: int) -> None:
        ...

    @abstractmethod
    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    async def save_record(self, record: PendingSessionRecord, ttl: Optional[int] = None) -> str:
        """Store a pending session under its `pending_session_<id>` key"""
        key = PendingSessionRecord.key_for(record.session.id)
        ttl = ttl if ttl is not None else settings.PENDING_SESSION_TTL_SECONDS
        await self.put(key, record.model_dump(mode="json"), ttl)
        return key

    async def get_record(self, session_id: str) -> Optional[PendingSessionRecord]:
        if not session_id:
            return None

        value = await self.get(PendingSessionRecord.key_for(session_id))
        if value:
            return PendingSessionRecord.model_validate(value)
        return None


class PendingSessionRepository(PendingSessionStore):
    """
    MongoDB backed store.

    Documents carry an `expiresAt` date covered by a TTL index; MongoDB removes
    them lazily, so reads also skip anything already past its expiry.
    """

    def __init__(self, database: AsyncIOMotorDatabase):
        self.database = database
        self.collection = database.pending_sessions

    async def ensure_indexes(self) -> None:
        await self.collection.create_index(
            [("expiresAt", ASCENDING)],
            expireAfterSeconds=0,
            name="expiresAt_ttl"
        )

    async def put(self, key: str, value: Dict[str, Any], ttl: int) -> None:
        now = datetime.now(timezone.utc)
        await self.collection.replace_one(
            {"_id": key},
            {
                "_id": key,
                "value": value,
                "createdAt": now,
                "expiresAt": now + timedelta(seconds=ttl)
            },
            upsert=True
        )

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        document = await self.collection.find_one({
            "_id": key,
            "expiresAt": {"$gt": datetime.now(timezone.utc)}
        })
        if document:
            return document["value"]
        return None
