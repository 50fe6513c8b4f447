"""
Tests for SemanticQAService routing.
"""

import asyncio

import httpx
import pytest

from conftest import QUERY, FakeAnswerGenerator, FakeEmbeddingProvider, unit_at
from semantic_qa.exceptions import (
    DimensionMismatchError,
    EmbeddingUnavailableError,
    ProviderUnavailableError,
)
from semantic_qa.repositories import InMemoryQuestionRepository, OpenAIAnswerGenerator
from semantic_qa.services import SemanticQAService, build_adaptation_context

QUESTION = "What is 2+2?"


def seed(store, embedding, question="What is two plus two?", answer="2+2 equals 4."):
    return store.create(question, answer, embedding)


@pytest.mark.asyncio
async def test_miss_on_empty_cache_generates_and_caches(qa, store, embeddings, generator):
    embeddings.vectors[QUESTION] = QUERY

    turn = await qa.answer(QUESTION)

    assert turn.source == "generated"
    assert turn.answer == "generated answer"
    assert turn.confidence is None
    assert generator.calls == [(QUESTION, None)]

    cached = store.find_all()
    assert len(cached) == 1
    assert cached[0].question == QUESTION
    assert cached[0].answer == "generated answer"
    assert cached[0].embedding == QUERY
    # The query vector is re-used, not re-embedded
    assert embeddings.calls == [QUESTION]


@pytest.mark.asyncio
async def test_identical_embedding_is_high_confidence_hit(qa, store, embeddings, generator):
    embeddings.vectors[QUESTION] = QUERY
    seed(store, QUERY)

    turn = await qa.answer(QUESTION)

    assert turn.source == "cache"
    assert turn.answer == "2+2 equals 4."
    assert turn.confidence == pytest.approx(1.0)
    assert generator.calls == []
    assert store.count_all() == 1


@pytest.mark.asyncio
async def test_medium_confidence_appends_note(qa, store, embeddings, generator):
    embeddings.vectors[QUESTION] = QUERY
    seed(store, unit_at(0.85))

    turn = await qa.answer(QUESTION)

    assert turn.source == "cache"
    assert turn.answer == "2+2 equals 4.\n\n(Confidence: 85%)"
    assert turn.confidence == pytest.approx(0.85)
    assert generator.calls == []


@pytest.mark.asyncio
async def test_low_confidence_adapts_with_context(qa, store, embeddings, generator):
    embeddings.vectors[QUESTION] = QUERY
    match = seed(store, unit_at(0.75))
    generator.answer = "Two plus two is four."

    turn = await qa.answer(QUESTION)

    assert turn.source == "cache"
    assert turn.answer == "Two plus two is four."
    assert turn.confidence == pytest.approx(0.75)

    [(question, context)] = generator.calls
    assert question == QUESTION
    assert context == build_adaptation_context(match)
    assert match.question in context
    assert match.answer in context

    # Adapted answers are never written back
    assert store.count_all() == 1


@pytest.mark.asyncio
async def test_low_confidence_falls_back_when_generator_fails(qa, store, embeddings, generator):
    embeddings.vectors[QUESTION] = QUERY
    seed(store, unit_at(0.75))
    generator.error = ProviderUnavailableError("fake", "boom")

    turn = await qa.answer(QUESTION)

    assert turn.answer == "2+2 equals 4."
    assert turn.source == "cache"
    assert store.count_all() == 1


@pytest.mark.asyncio
async def test_low_confidence_falls_back_on_empty_generation(qa, store, embeddings, generator):
    embeddings.vectors[QUESTION] = QUERY
    seed(store, unit_at(0.75))
    generator.answer = "   "

    turn = await qa.answer(QUESTION)

    assert turn.answer == "2+2 equals 4."


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, ""])
async def test_low_confidence_keeps_stored_answer_on_empty_openai_completion(store, embeddings, content):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

    generator = OpenAIAnswerGenerator(
        api_key="sk-test",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    qa = SemanticQAService(store, embeddings, generator)
    embeddings.vectors[QUESTION] = QUERY
    seed(store, unit_at(0.75))

    turn = await qa.answer(QUESTION)

    assert turn.source == "cache"
    assert turn.answer == "2+2 equals 4."
    assert turn.confidence == pytest.approx(0.75)
    assert store.count_all() == 1


@pytest.mark.asyncio
async def test_below_threshold_is_a_miss(qa, store, embeddings, generator):
    embeddings.vectors[QUESTION] = QUERY
    seed(store, unit_at(0.65))

    turn = await qa.answer(QUESTION)

    assert turn.source == "generated"
    assert generator.calls == [(QUESTION, None)]
    assert store.count_all() == 2


@pytest.mark.asyncio
async def test_repeated_question_hits_cache(qa, store, generator):
    first = await qa.answer(QUESTION)
    second = await qa.answer(QUESTION)

    assert first.source == "generated"
    assert second.source == "cache"
    assert second.answer == first.answer
    assert second.confidence == pytest.approx(1.0)
    assert len(generator.calls) == 1
    assert store.count_all() == 1


@pytest.mark.asyncio
async def test_picks_best_of_several_candidates(qa, store, embeddings):
    embeddings.vectors[QUESTION] = QUERY
    seed(store, unit_at(0.72), answer="weak")
    seed(store, unit_at(0.97), answer="strong")
    seed(store, unit_at(0.81), answer="medium")

    turn = await qa.answer(QUESTION)

    assert turn.answer == "strong"


@pytest.mark.asyncio
async def test_embedding_failure_is_fatal(qa, store, embeddings, generator):
    embeddings.error = ConnectionError("down")

    with pytest.raises(EmbeddingUnavailableError) as exc_info:
        await qa.answer(QUESTION)

    assert isinstance(exc_info.value.__cause__, ConnectionError)
    assert generator.calls == []
    assert store.count_all() == 0


@pytest.mark.asyncio
async def test_empty_embedding_is_fatal(qa, embeddings):
    embeddings.vectors[QUESTION] = []

    with pytest.raises(EmbeddingUnavailableError):
        await qa.answer(QUESTION)


@pytest.mark.asyncio
async def test_generator_failure_on_miss_propagates(qa, store, generator):
    generator.error = ProviderUnavailableError("fake", "rate limited")

    with pytest.raises(ProviderUnavailableError):
        await qa.answer(QUESTION)

    assert store.count_all() == 0


@pytest.mark.asyncio
async def test_dimension_mismatch_propagates(qa, store, embeddings):
    embeddings.vectors[QUESTION] = QUERY
    seed(store, [1.0, 0.0])

    with pytest.raises(DimensionMismatchError):
        await qa.answer(QUESTION)


@pytest.mark.asyncio
@pytest.mark.parametrize("question", ["", "   ", "\n\t"])
async def test_blank_question_rejected(qa, embeddings, question):
    with pytest.raises(ValueError):
        await qa.answer(question)
    assert embeddings.calls == []


@pytest.mark.asyncio
async def test_answer_many_preserves_order(qa, store, embeddings):
    embeddings.vectors.update({"cached": QUERY, "new": [0.0, 0.0, 1.0]})
    seed(store, QUERY, answer="from cache")

    turns = await qa.answer_many(["cached", "new"])

    assert [t.source for t in turns] == ["cache", "generated"]
    assert turns[0].answer == "from cache"


def test_chat_turn_serialization_omits_missing_confidence():
    from semantic_qa.dto import ChatTurn

    assert ChatTurn(answer="a", source="generated").model_dump(exclude_none=True) == {
        "answer": "a",
        "source": "generated",
    }
    assert ChatTurn(answer="a", source="cache", confidence=0.9).model_dump() == {
        "answer": "a",
        "source": "cache",
        "confidence": 0.9,
    }


class NearestStore(InMemoryQuestionRepository):
    """In-memory store that also answers nearest-neighbour queries."""

    def __init__(self, nearest_ids: list[str] | None = None) -> None:
        super().__init__()
        self.nearest_ids = nearest_ids
        self.find_all_calls = 0
        self.nearest_calls: list[int] = []

    def find_all(self):
        self.find_all_calls += 1
        return super().find_all()

    def find_nearest(self, vector, limit):
        self.nearest_calls.append(limit)
        if self.nearest_ids is None:
            return []
        return [self.find_by_id(i) for i in self.nearest_ids]


@pytest.mark.asyncio
async def test_vector_index_candidates_are_rescored(embeddings, generator):
    embeddings.vectors[QUESTION] = QUERY
    store = NearestStore()
    far = store.create("far", "far answer", unit_at(0.1))
    near = store.create("near", "near answer", unit_at(0.95))
    # Index returns the candidates in the "wrong" order; exact scoring fixes it
    store.nearest_ids = [far.id, near.id]

    qa = SemanticQAService(
        store=store,
        embedding_provider=embeddings,
        answer_generator=generator,
        use_vector_index=True,
        vector_index_candidates=5,
    )
    turn = await qa.answer(QUESTION)

    assert turn.answer == "near answer"
    assert store.nearest_calls == [5]
    assert store.find_all_calls == 0


@pytest.mark.asyncio
async def test_vector_index_falls_back_to_full_scan(embeddings, generator):
    embeddings.vectors[QUESTION] = QUERY
    store = NearestStore(nearest_ids=None)
    store.create("cached", "cached answer", QUERY)

    qa = SemanticQAService(
        store=store,
        embedding_provider=embeddings,
        answer_generator=generator,
        use_vector_index=True,
    )
    turn = await qa.answer(QUESTION)

    assert turn.answer == "cached answer"
    assert store.find_all_calls == 1


@pytest.mark.asyncio
async def test_vector_index_ignored_when_disabled(embeddings):
    store = NearestStore()
    qa = SemanticQAService(store=store, embedding_provider=embeddings, answer_generator=FakeAnswerGenerator())

    await qa.answer(QUESTION)

    assert store.nearest_calls == []


class SlowGenerator(FakeAnswerGenerator):
    def __init__(self) -> None:
        super().__init__()
        self.release = asyncio.Event()

    async def generate(self, question, context=None):
        self.calls.append((question, context))
        await self.release.wait()
        return self.answer


async def _concurrent_misses(single_flight: bool):
    store = InMemoryQuestionRepository()
    embeddings = FakeEmbeddingProvider({QUESTION: QUERY, "what is 2+2? ": QUERY})
    generator = SlowGenerator()
    qa = SemanticQAService(
        store=store,
        embedding_provider=embeddings,
        answer_generator=generator,
        single_flight=single_flight,
    )

    tasks = [
        asyncio.create_task(qa.answer(QUESTION)),
        asyncio.create_task(qa.answer("what is 2+2? ")),
    ]
    # Let both requests reach the generator (or the in-flight wait)
    for _ in range(5):
        await asyncio.sleep(0)
    generator.release.set()
    turns = await asyncio.gather(*tasks)
    return turns, store, generator


@pytest.mark.asyncio
async def test_concurrent_misses_both_write_by_default():
    turns, store, generator = await _concurrent_misses(single_flight=False)

    assert [t.source for t in turns] == ["generated", "generated"]
    assert len(generator.calls) == 2
    assert store.count_all() == 2


@pytest.mark.asyncio
async def test_single_flight_collapses_concurrent_misses():
    turns, store, generator = await _concurrent_misses(single_flight=True)

    assert turns[0] == turns[1]
    assert len(generator.calls) == 1
    assert store.count_all() == 1


@pytest.mark.asyncio
async def test_is_healthy(qa, embeddings):
    assert await qa.is_healthy() is True

    embeddings.error = RuntimeError("down")
    assert await qa.is_healthy() is False


def test_create_uses_settings_defaults(store, embeddings, generator, monkeypatch):
    from semantic_qa.config import Settings
    from semantic_qa.services import qa_service

    monkeypatch.setattr(qa_service, "settings", Settings(single_flight=True, vector_index_candidates=3))

    service = SemanticQAService.create(store=store, embedding_provider=embeddings, answer_generator=generator)

    assert service._single_flight is not None
    assert service._vector_index_candidates == 3
    assert service.store is store
