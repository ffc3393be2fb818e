from __future__ import annotations

import random
import sys
from pathlib import Path
from typing import Callable, List

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from obake.models import Choice, ContentDomain, Question, Session  # noqa: E402
from obake.quiz import initialize_session  # noqa: E402

START_MS = 1_700_000_000_000


class FakeClock:
    """Deterministic millisecond clock for tests."""

    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def make_question(question_id: str, domain: ContentDomain) -> Question:
    return Question(
        id=question_id,
        domain=domain,
        text=f"Question {question_id}",
        choices=[Choice(id=f"{question_id}-{letter}", text=letter.upper()) for letter in "abcd"],
        correct_choice_id=f"{question_id}-b",
        explanation=f"Because {question_id}",
        difficulty="medium",
        tags=["synthetic"],
    )


def build_pool(per_domain: dict[ContentDomain, int] | None = None) -> List[Question]:
    """Create a deterministic question pool, 10 per domain by default."""
    counts = per_domain if per_domain is not None else {domain: 10 for domain in ContentDomain}
    pool = []
    for domain, count in counts.items():
        for idx in range(count):
            pool.append(make_question(f"{domain.value}-{idx}", domain))
    return pool


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def pool() -> List[Question]:
    return build_pool()


@pytest.fixture
def pool_factory() -> Callable[..., List[Question]]:
    return build_pool


@pytest.fixture
def new_session(pool: List[Question], clock: FakeClock) -> Session:
    return initialize_session(pool, clock=clock, rng=random.Random(7))


@pytest.fixture
def questions_dir() -> Path:
    return ROOT / "questions"
