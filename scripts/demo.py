#!/usr/bin/env python3
"""
Demo script for semantic QA.

Seeds a few question/answer pairs, then asks paraphrased questions to show
how each confidence tier is routed. Uses the providers configured in the
environment (see semantic_qa.config); set QUESTION_STORE=memory to run
without Redis.
"""

import asyncio
import time

from semantic_qa.bootstrap import create_qa_service
from semantic_qa.config import settings
from semantic_qa.logging_config import setup_logging
from semantic_qa.services import QuestionService


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


SEED_PAIRS = [
    (
        "What is a semantic cache?",
        "A semantic cache stores previous answers and reuses them for questions with the same meaning.",
    ),
    (
        "How does an embedding work?",
        "An embedding turns text into a numeric vector so that texts with similar meaning end up close together.",
    ),
    (
        "How is cosine similarity calculated?",
        "Cosine similarity is the dot product of two vectors divided by the product of their lengths.",
    ),
]

TEST_QUESTIONS = [
    "What is a semantic cache?",
    "Explain what a semantic cache is",
    "Why would I compute cosine similarity between embeddings?",
    "What is the capital of France?",
]


async def demo() -> None:
    qa = create_qa_service()
    questions = QuestionService(store=qa.store, embedding_provider=qa.embedding_provider)

    print_section("Seeding question cache")
    for question, answer in SEED_PAIRS:
        if questions.find_by_text(question) is None:
            await questions.add_question(question, answer)
            print(f"  + {question}")
    print(f"  {qa.store.count_all()} questions cached")

    print_section("Answering")
    for question in TEST_QUESTIONS:
        start = time.time()
        turn = await qa.answer(question)
        elapsed_ms = (time.time() - start) * 1000
        confidence = f"{turn.confidence:.3f}" if turn.confidence is not None else "-"
        print(f"\n  Q: {question}")
        print(f"  source={turn.source} confidence={confidence} ({elapsed_ms:.0f} ms)")
        print(f"  A: {turn.answer[:200]}")

    print_section("Asking the last question again")
    turn = await qa.answer(TEST_QUESTIONS[-1])
    print(f"  source={turn.source} confidence={turn.confidence}")


if __name__ == "__main__":
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    asyncio.run(demo())
