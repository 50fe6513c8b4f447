"""In-memory implementation of QuestionStore.

Keeps questions in insertion order in a plain list. Useful for demos,
tests and single-process deployments that do not need durability.
"""

import threading
import uuid
from datetime import datetime, timezone

from semantic_qa.entities import CachedQuestion


class InMemoryQuestionRepository:
    """List-backed question store.

    This class satisfies the QuestionStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, questions: list[CachedQuestion] | None = None) -> None:
        self._questions: list[CachedQuestion] = list(questions or [])
        self._lock = threading.Lock()

    def create(self, question: str, answer: str, embedding: list[float]) -> CachedQuestion:
        now = datetime.now(timezone.utc)
        entry = CachedQuestion(
            id=uuid.uuid4().hex,
            question=question,
            answer=answer,
            embedding=list(embedding),
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._questions.append(entry)
        return entry

    def find_all(self) -> list[CachedQuestion]:
        with self._lock:
            return list(self._questions)

    def find_by_id(self, question_id: str) -> CachedQuestion | None:
        with self._lock:
            return next((q for q in self._questions if q.id == question_id), None)

    def find_by_text(self, question: str) -> CachedQuestion | None:
        with self._lock:
            return next((q for q in self._questions if q.question == question), None)

    def count_all(self) -> int:
        with self._lock:
            return len(self._questions)

    def health_check(self) -> bool:
        return True
