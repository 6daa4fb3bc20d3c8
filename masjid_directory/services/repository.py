"""
Document persistence for masajid and users.

Documents are stored as JSON, one key per document, with ids handed out by
an incrementing counter so they can be used directly as URL slugs. Writes
are single-document and non-transactional.
"""

import json
from typing import Any, Dict, List, Optional, Protocol

import structlog
from redis.asyncio import Redis

from masjid_directory.core.errors import StoreUnavailableError
from masjid_directory.models.dto import Masjid, User

logger = structlog.get_logger(__name__)

MASJID_COLLECTION = "masjid"
USER_COLLECTION = "user"


class DocumentStore(Protocol):
    async def next_id(self, collection: str) -> str: ...
    async def save(self, collection: str, doc: Dict[str, Any]) -> None: ...
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]: ...
    async def all(self, collection: str) -> List[Dict[str, Any]]: ...
    async def set_lookup(self, collection: str, field: str, value: str, doc_id: str) -> None: ...
    async def get_lookup(self, collection: str, field: str, value: str) -> Optional[str]: ...
    async def ping(self) -> bool: ...


def _sort_ids(ids) -> List[str]:
    return sorted((str(i) for i in ids), key=lambda i: (len(i), i))


class RedisDocumentStore:
    """Redis-backed store. Errors are logged and raised as StoreUnavailableError."""

    def __init__(self, redis_client: Redis):
        self.redis_client = redis_client

    @classmethod
    def from_url(cls, url: Optional[str]) -> "RedisDocumentStore":
        if not url:
            raise ValueError("REDIS_URL is not set in the environment")
        return cls(Redis.from_url(url, decode_responses=True))

    async def next_id(self, collection: str) -> str:
        try:
            return str(await self.redis_client.incr(f"{collection}:next_id"))
        except Exception as e:
            logger.error("store_next_id_error", error=str(e), collection=collection)
            raise StoreUnavailableError()

    async def save(self, collection: str, doc: Dict[str, Any]) -> None:
        try:
            await self.redis_client.set(f"{collection}:{doc['id']}", json.dumps(doc))
            await self.redis_client.sadd(f"{collection}:ids", doc["id"])
        except Exception as e:
            logger.error("store_save_error", error=str(e), collection=collection, doc_id=doc.get("id"))
            raise StoreUnavailableError()

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            raw = await self.redis_client.get(f"{collection}:{doc_id}")
        except Exception as e:
            logger.error("store_get_error", error=str(e), collection=collection, doc_id=doc_id)
            raise StoreUnavailableError()
        return json.loads(raw) if raw else None

    async def all(self, collection: str) -> List[Dict[str, Any]]:
        try:
            ids = _sort_ids(await self.redis_client.smembers(f"{collection}:ids"))
            if not ids:
                return []
            raws = await self.redis_client.mget([f"{collection}:{i}" for i in ids])
        except Exception as e:
            logger.error("store_all_error", error=str(e), collection=collection)
            raise StoreUnavailableError()
        return [json.loads(raw) for raw in raws if raw]

    async def set_lookup(self, collection: str, field: str, value: str, doc_id: str) -> None:
        try:
            await self.redis_client.set(f"{collection}:{field}:{value}", doc_id)
        except Exception as e:
            logger.error("store_lookup_error", error=str(e), collection=collection, field=field)
            raise StoreUnavailableError()

    async def get_lookup(self, collection: str, field: str, value: str) -> Optional[str]:
        try:
            return await self.redis_client.get(f"{collection}:{field}:{value}")
        except Exception as e:
            logger.error("store_lookup_error", error=str(e), collection=collection, field=field)
            raise StoreUnavailableError()

    async def ping(self) -> bool:
        try:
            return bool(await self.redis_client.ping())
        except Exception as e:
            logger.error("store_ping_error", error=str(e))
            return False

    async def close(self) -> None:
        await self.redis_client.aclose()


class InMemoryDocumentStore:
    """Process-local store used when Redis is disabled (development, tests)."""

    def __init__(self):
        self._docs: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._counters: Dict[str, int] = {}
        self._lookups: Dict[str, str] = {}

    async def next_id(self, collection: str) -> str:
        self._counters[collection] = self._counters.get(collection, 0) + 1
        return str(self._counters[collection])

    async def save(self, collection: str, doc: Dict[str, Any]) -> None:
        # Round-trip through JSON so callers never share state with the store
        self._docs.setdefault(collection, {})[str(doc["id"])] = json.loads(json.dumps(doc))

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = self._docs.get(collection, {}).get(str(doc_id))
        return json.loads(json.dumps(doc)) if doc else None

    async def all(self, collection: str) -> List[Dict[str, Any]]:
        docs = self._docs.get(collection, {})
        return [json.loads(json.dumps(docs[i])) for i in _sort_ids(docs)]

    async def set_lookup(self, collection: str, field: str, value: str, doc_id: str) -> None:
        self._lookups[f"{collection}:{field}:{value}"] = doc_id

    async def get_lookup(self, collection: str, field: str, value: str) -> Optional[str]:
        return self._lookups.get(f"{collection}:{field}:{value}")

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class MasjidRepository:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def create(self, doc: Dict[str, Any]) -> Masjid:
        doc = dict(doc, id=await self.store.next_id(MASJID_COLLECTION))
        await self.store.save(MASJID_COLLECTION, doc)
        return Masjid.model_validate(doc)

    async def get(self, masjid_id: str) -> Optional[Masjid]:
        doc = await self.store.get(MASJID_COLLECTION, masjid_id)
        return Masjid.model_validate(doc) if doc else None

    async def list(self) -> List[Masjid]:
        return [Masjid.model_validate(doc) for doc in await self.store.all(MASJID_COLLECTION)]

    async def replace(self, masjid: Masjid) -> Masjid:
        await self.store.save(MASJID_COLLECTION, masjid.model_dump())
        return masjid


class UserRepository:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def create(self, doc: Dict[str, Any]) -> User:
        doc = dict(doc, id=await self.store.next_id(USER_COLLECTION))
        await self.store.save(USER_COLLECTION, doc)
        await self.store.set_lookup(USER_COLLECTION, "email", doc["email"], doc["id"])
        return User.model_validate(doc)

    async def get(self, user_id: str) -> Optional[User]:
        doc = await self.store.get(USER_COLLECTION, user_id)
        return User.model_validate(doc) if doc else None

    async def find_by_email(self, email: str) -> Optional[User]:
        user_id = await self.store.get_lookup(USER_COLLECTION, "email", email)
        return await self.get(user_id) if user_id else None

    async def add_admin(self, user_id: str, masjid_id: str) -> Optional[User]:
        user = await self.get(user_id)
        if user is None:
            return None
        if masjid_id not in user.admin:
            user.admin.append(masjid_id)
            await self.store.save(USER_COLLECTION, user.model_dump())
        return user
