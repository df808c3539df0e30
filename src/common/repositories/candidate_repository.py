"""
Atlas Candidate Repository

MongoDB implementation of the candidate store used by the match engine.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, MongoClient, UpdateOne
from pymongo.collection import Collection

from src.common.error_handling import log_on_exception
from src.common.types import Candidate

from .base import CandidateRepositoryInterface, WriteResult

logger = logging.getLogger(__name__)

# Fields owned by the store rather than by the incoming record
_STORE_FIELDS = {"embedding", "user_id", "session_id", "id"}


class AtlasCandidateRepository(CandidateRepositoryInterface):
    """
    Atlas repository for the candidates collection.

    Connection Management:
    - Uses singleton MongoClient for connection pooling
    - Client is created once and reused across requests
    - PyMongo handles connection pool internally

    Error Handling:
    - Fail-fast: All errors propagate to caller
    """

    _client: Optional[MongoClient] = None

    def __init__(
        self,
        mongodb_uri: str,
        database: str = "linkedin_network_analysis",
        collection: str = "profiles",
    ):
        """
        Initialize repository with connection parameters.

        Args:
            mongodb_uri: MongoDB connection string
            database: Database name
            collection: Collection name
        """
        if not mongodb_uri:
            raise ValueError("MongoDB URI is required")
        self._mongodb_uri = mongodb_uri
        self._database_name = database
        self._collection_name = collection

    def _get_collection(self) -> Collection:
        """Get the candidates collection, creating the client if needed."""
        if AtlasCandidateRepository._client is None:
            AtlasCandidateRepository._client = MongoClient(self._mongodb_uri)
            logger.info(
                f"Candidate repository connected: {self._database_name}.{self._collection_name}"
            )
        return AtlasCandidateRepository._client[self._database_name][self._collection_name]

    @classmethod
    def reset_connection(cls) -> None:
        """Reset the connection pool (testing or connection recovery)."""
        if cls._client:
            cls._client.close()
        cls._client = None
        logger.info("Candidate repository connection reset")

    def get_by_session(self, session_id: str, user_id: str) -> List[Candidate]:
        collection = self._get_collection()
        cursor = collection.find(
            {"session_id": session_id, "user_id": user_id},
            {"_id": 0},
        ).sort([("_id", ASCENDING)])

        candidates = []
        for doc in cursor:
            try:
                candidates.append(Candidate(**doc))
            except ValueError as e:
                # Legacy rows without a usable name cannot be matched
                logger.warning(f"Skipping malformed candidate {doc.get('id')}: {e}")
        return candidates

    def persist_embeddings(
        self,
        user_id: str,
        vectors: Dict[str, List[float]],
    ) -> WriteResult:
        if not vectors:
            return WriteResult()

        now = datetime.utcnow()
        operations = [
            UpdateOne(
                {"candidate_key": key, "user_id": user_id},
                {"$set": {"embedding": vector, "last_updated": now}},
            )
            for key, vector in vectors.items()
        ]
        collection = self._get_collection()
        with log_on_exception(logger, "persist embeddings", level=logging.ERROR):
            result = collection.bulk_write(operations, ordered=False)

        return WriteResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    def upsert_candidates(
        self,
        user_id: str,
        session_id: str,
        candidates: List[Candidate],
        reset_embeddings: bool = False,
    ) -> WriteResult:
        if not candidates:
            return WriteResult()

        now = datetime.utcnow()
        operations = []
        for candidate in candidates:
            owned = candidate.model_copy(update={"user_id": user_id, "session_id": session_id})
            fields: Dict[str, Any] = owned.model_dump(exclude=_STORE_FIELDS)
            update: Dict[str, Any] = {
                "$set": {
                    **fields,
                    "candidate_key": owned.candidate_key,
                    "user_id": user_id,
                    "session_id": session_id,
                    "last_updated": now,
                },
                "$setOnInsert": {"id": owned.id, "uploaded_at": now},
            }
            if reset_embeddings:
                update["$unset"] = {"embedding": ""}
            elif owned.embedding:
                update["$set"]["embedding"] = owned.embedding
            operations.append(
                UpdateOne({"candidate_key": owned.candidate_key}, update, upsert=True)
            )

        collection = self._get_collection()
        with log_on_exception(logger, "upsert candidates", level=logging.ERROR, include_traceback=True):
            result = collection.bulk_write(operations, ordered=False)

        logger.info(
            f"Upserted {len(operations)} candidates into session {session_id}: "
            f"{result.upserted_count} new, {result.modified_count} updated"
        )
        return WriteResult(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_count=result.upserted_count,
        )

    def clear_session(self, session_id: str, user_id: str) -> WriteResult:
        collection = self._get_collection()
        result = collection.delete_many({"session_id": session_id, "user_id": user_id})
        logger.info(f"Cleared {result.deleted_count} candidates from session {session_id}")
        return WriteResult(deleted_count=result.deleted_count)

    def ensure_indexes(self) -> None:
        try:
            collection = self._get_collection()
            # Duplicate prevention: upsert-by-key relies on this being unique
            collection.create_index("candidate_key", unique=True, background=True)
            collection.create_index(
                [("session_id", ASCENDING), ("user_id", ASCENDING)],
                background=True,
            )
            collection.create_index("user_id", background=True)
            logger.info("Candidate indexes ensured")
        except Exception as e:
            logger.warning(f"Error creating candidate indexes: {e}")

    def ping(self) -> bool:
        collection = self._get_collection()
        collection.database.client.admin.command("ping")
        return True
