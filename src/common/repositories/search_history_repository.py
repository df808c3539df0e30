"""
Search History Repository

Archives completed searches on the user document so a user can revisit
earlier missions and their matches.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from pymongo import MongoClient

from .base import SearchHistoryRepositoryInterface

logger = logging.getLogger(__name__)


class AtlasSearchHistoryRepository(SearchHistoryRepositoryInterface):
    """
    Atlas MongoDB implementation of SearchHistoryRepository.

    One document per user in the users collection; archived searches are
    appended to its ``matches`` array, which keeps the newest
    ``max_entries`` searches.
    """

    _client: Optional[MongoClient] = None
    # Identical searches inside this window are archived once
    DUPLICATE_WINDOW = timedelta(minutes=5)

    def __init__(
        self,
        mongodb_uri: str,
        database: str = "linkedin_network_analysis",
        collection: str = "users",
        max_entries: int = 100,
    ):
        if not mongodb_uri:
            raise ValueError("MongoDB URI is required")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._mongodb_uri = mongodb_uri
        self._database = database
        self._collection_name = collection

    def _get_collection(self):
        if AtlasSearchHistoryRepository._client is None:
            AtlasSearchHistoryRepository._client = MongoClient(self._mongodb_uri)
            logger.info("Created new MongoDB client for search history repository")
        return AtlasSearchHistoryRepository._client[self._database][self._collection_name]

    @classmethod
    def reset_connection(cls) -> None:
        if cls._client is not None:
            cls._client.close()
            cls._client = None
            logger.info("Search history repository connection reset")

    def _is_recent_duplicate(self, user_doc: Optional[Dict[str, Any]], record: Dict, now: datetime) -> bool:
        if not user_doc:
            return False
        history = user_doc.get("matches") or []
        if not history:
            return False
        last = history[-1]
        created_at = last.get("created_at")
        if not isinstance(created_at, datetime):
            return False
        return (
            last.get("mission") == record.get("mission")
            and len(last.get("matches") or []) == len(record.get("matches") or [])
            and now - created_at < self.DUPLICATE_WINDOW
        )

    def append(self, user_id: str, record: Dict) -> bool:
        collection = self._get_collection()
        now = datetime.utcnow()

        user_doc = collection.find_one({"user_id": user_id}, {"matches": {"$slice": -1}})
        if self._is_recent_duplicate(user_doc, record, now):
            logger.info(f"Skipping duplicate history entry for user {user_id}")
            return False

        entry = {
            "id": f"match_{int(now.timestamp() * 1000)}",
            "mission": record.get("mission"),
            "matches": record.get("matches") or [],
            "recommendation": record.get("recommendation"),
            "created_at": now,
        }
        collection.update_one(
            {"user_id": user_id},
            {
                "$push": {"matches": {"$each": [entry], "$slice": -self._max_entries}},
                "$set": {"updated_at": now},
                "$setOnInsert": {"created_at": now},
            },
            upsert=True,
        )
        logger.info(f"Archived search {entry['id']} for user {user_id}")
        return True

    def get_history(self, user_id: str, limit: int = 20) -> List[Dict]:
        collection = self._get_collection()
        user_doc = collection.find_one({"user_id": user_id}, {"_id": 0, "matches": 1})
        if not user_doc:
            return []
        history = user_doc.get("matches") or []
        return list(reversed(history))[:limit]

    def ensure_indexes(self) -> None:
        try:
            self._get_collection().create_index("user_id", unique=True, background=True)
            logger.info("Search history indexes ensured")
        except Exception as e:
            logger.warning(f"Error creating search history indexes: {e}")
