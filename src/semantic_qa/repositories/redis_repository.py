"""Redis implementation of QuestionStore.

Each question is a Redis hash under ``<index_name>:<id>``. The embedding is
stored as packed float32 bytes. Optionally a redisvl HNSW index is kept over
the same hashes so the service can ask for nearest neighbours instead of
scanning everything (requires Redis Stack).
"""

import logging
import struct
import uuid
from datetime import datetime, timezone

import redis
from redisvl.index import SearchIndex
from redisvl.query import VectorQuery

from semantic_qa.config import get_redis_client, settings
from semantic_qa.entities import CachedQuestion
from semantic_qa.protocols import EmbeddingProvider

logger = logging.getLogger(__name__)


def pack_vector(vector: list[float]) -> bytes:
    """Convert a vector to float32 bytes for Redis."""
    return struct.pack(f"{len(vector)}f", *vector)


def unpack_vector(data: bytes) -> list[float]:
    """Convert float32 bytes from Redis back to a list of floats."""
    return list(struct.unpack(f"{len(data) // 4}f", data))


def _text(value: bytes | str) -> str:
    return value.decode() if isinstance(value, bytes) else value


class RedisQuestionRepository:
    """Redis hash storage for cached questions.

    This class satisfies the QuestionStore protocol (and, when the vector
    index is enabled, NearestNeighborStore) through structural typing.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        index_name: str | None = None,
        vector_index: bool = False,
        dimension: int | None = None,
    ) -> None:
        """Initialize the Redis question repository.

        Args:
            redis_client: Redis client instance. If None, creates default.
            index_name: Key prefix and search index name.
            vector_index: Maintain a redisvl HNSW index for find_nearest.
            dimension: Embedding dimension. If None, taken from the first
                stored question.
        """
        self._client = redis_client or get_redis_client()
        self._index_name = index_name or settings.question_index_name
        self._vector_index = vector_index
        self._index: SearchIndex | None = None

        if vector_index and dimension:
            self._ensure_index(dimension)

    @classmethod
    def from_settings(
        cls,
        embedding_provider: EmbeddingProvider | None = None,
        index_name: str | None = None,
        vector_index: bool | None = None,
    ) -> "RedisQuestionRepository":
        """Factory method to create RedisQuestionRepository from settings.

        Args:
            embedding_provider: Provider for the vector dimension.
            index_name: Redis key prefix. If None, uses settings.
            vector_index: Enable the HNSW index. If None, uses settings.

        Returns:
            Configured RedisQuestionRepository
        """
        if vector_index is None:
            vector_index = settings.use_vector_index
        return cls(
            index_name=index_name,
            vector_index=vector_index,
            dimension=embedding_provider.dimension if embedding_provider else None,
        )

    @property
    def prefix(self) -> str:
        return f"{self._index_name}:"

    def _key(self, question_id: str) -> str:
        return f"{self.prefix}{question_id}"

    def _ensure_index(self, dimension: int) -> None:
        """Ensure the Redis vector index exists."""
        if self._index is not None:
            return

        index_schema = {
            "index": {
                "name": self._index_name,
                "prefix": self.prefix,
                "storage_type": "hash",
            },
            "fields": [
                {"name": "question_id", "type": "tag"},
                {"name": "question", "type": "text"},
                {
                    "name": "embedding",
                    "type": "vector",
                    "attrs": {
                        "dims": dimension,
                        "algorithm": "hnsw",
                        "distance_metric": "cosine",
                        "datatype": "float32",
                    },
                },
                {"name": "created_at", "type": "numeric"},
            ],
        }

        index = SearchIndex.from_dict(index_schema, redis_client=self._client)
        if index.exists():
            logger.info("Using existing index: %s", self._index_name)
        else:
            index.create(overwrite=False)
            logger.info("Created new index: %s (dims=%d)", self._index_name, dimension)
        self._index = index

    def _from_hash(self, data: dict) -> CachedQuestion:
        fields = {_text(k): v for k, v in data.items()}
        return CachedQuestion(
            id=_text(fields["question_id"]),
            question=_text(fields["question"]),
            answer=_text(fields["answer"]),
            embedding=unpack_vector(fields["embedding"]),
            created_at=datetime.fromtimestamp(float(fields["created_at"]), tz=timezone.utc),
            updated_at=datetime.fromtimestamp(float(fields["updated_at"]), tz=timezone.utc),
        )

    def create(self, question: str, answer: str, embedding: list[float]) -> CachedQuestion:
        """Store a new question in Redis.

        Args:
            question: The question text
            answer: The answer text
            embedding: The embedding vector for the question

        Returns:
            The stored entity
        """
        if self._vector_index:
            self._ensure_index(len(embedding))

        question_id = uuid.uuid4().hex
        now = datetime.now(timezone.utc)
        timestamp = str(now.timestamp())

        pipe = self._client.pipeline()
        pipe.hset(
            self._key(question_id),
            mapping={
                "question_id": question_id,
                "question": question,
                "answer": answer,
                "embedding": pack_vector(embedding),
                "created_at": timestamp,
                "updated_at": timestamp,
            },
        )
        pipe.execute()

        # Round-trip through float32 so the entity matches what find_all returns
        return CachedQuestion(
            id=question_id,
            question=question,
            answer=answer,
            embedding=unpack_vector(pack_vector(embedding)),
            created_at=now,
            updated_at=now,
        )

    def _load(self, keys: list) -> list[CachedQuestion]:
        if not keys:
            return []
        pipe = self._client.pipeline()
        for key in keys:
            pipe.hgetall(key)
        return [self._from_hash(row) for row in pipe.execute() if row]

    def find_all(self) -> list[CachedQuestion]:
        """Return all questions, oldest first (ties broken by id)."""
        keys = list(self._client.scan_iter(match=f"{self.prefix}*"))
        questions = self._load(keys)
        questions.sort(key=lambda q: (q.created_at, q.id))
        return questions

    def find_by_id(self, question_id: str) -> CachedQuestion | None:
        data = self._client.hgetall(self._key(question_id))
        return self._from_hash(data) if data else None

    def find_by_text(self, question: str) -> CachedQuestion | None:
        for entry in self.find_all():
            if entry.question == question:
                return entry
        return None

    def find_nearest(self, vector: list[float], limit: int) -> list[CachedQuestion]:
        """Recall candidate questions through the HNSW index.

        Args:
            vector: The query embedding
            limit: Maximum number of candidates

        Returns:
            Candidate questions, closest first. Empty if the index has not
            been created yet.
        """
        if self._index is None:
            return []

        query = VectorQuery(
            vector=vector,
            vector_field_name="embedding",
            return_fields=["question_id"],
            num_results=limit,
        )
        results = self._index.query(query)
        keys = [self._key(_text(result["question_id"])) for result in results]
        return self._load(keys)

    def count_all(self) -> int:
        count = 0
        for _ in self._client.scan_iter(match=f"{self.prefix}*"):
            count += 1
        return count

    def health_check(self) -> bool:
        """Check if Redis is accessible."""
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
