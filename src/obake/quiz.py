import logging
import random
import string
from typing import Dict, List, Optional, Sequence

from .config import settings
from .errors import InsufficientPoolError, QuizSizeError
from .models import ContentDomain, Question, Session
from .timer import Clock, system_clock

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


# --- Helpers ---
def group_by_domain(questions: Sequence[Question]) -> Dict[ContentDomain, List[Question]]:
    grouped: Dict[ContentDomain, List[Question]] = {domain: [] for domain in ContentDomain}
    for question in questions:
        grouped[question.domain].append(question)
    return grouped


def get_domain_distribution(questions: Sequence[Question]) -> Dict[ContentDomain, int]:
    return {domain: len(items) for domain, items in group_by_domain(questions).items()}


def validate_domain_representation(session: Session) -> bool:
    """True when every domain has at least one question in the session."""
    return all(count > 0 for count in get_domain_distribution(session.questions).values())


def _unique_by_id(pool: Sequence[Question]) -> List[Question]:
    seen = set()
    unique = []
    for question in pool:
        if question.id in seen:
            continue
        seen.add(question.id)
        unique.append(question)
    if len(unique) != len(pool):
        logger.warning(f"Dropped {len(pool) - len(unique)} duplicate question ids from pool")
    return unique


# --- Selection ---
def select_quiz_questions(
    pool: Sequence[Question],
    rng: Optional[random.Random] = None,
    size: Optional[int] = None,
) -> List[Question]:
    """Pick `size` questions with every non-empty domain represented.

    One question is drawn from each domain that has any, the rest are sampled
    without replacement from what is left, and the final list is shuffled so
    the per-domain picks are not clustered at the front.
    """
    rng = rng or random.Random()
    size = size if size is not None else settings.QUIZ_SIZE

    if len(pool) < size:
        raise InsufficientPoolError(len(pool), size)
    candidates = _unique_by_id(pool)
    if len(candidates) < size:
        raise InsufficientPoolError(len(candidates), size)

    grouped = group_by_domain(candidates)
    covered = sum(1 for questions in grouped.values() if questions)
    if size < covered:
        raise QuizSizeError(size, covered)

    selected: List[Question] = []
    for domain, questions in grouped.items():
        if not questions:
            logger.warning(
                f"No questions available for domain: {domain.value}. "
                "Continuing with available questions."
            )
            continue
        selected.append(rng.choice(questions))

    used_ids = {question.id for question in selected}
    remaining = [question for question in candidates if question.id not in used_ids]
    selected.extend(rng.sample(remaining, size - len(selected)))

    rng.shuffle(selected)
    return selected


def generate_session_id(now: int, rng: random.Random) -> str:
    suffix = "".join(rng.choice(_ID_ALPHABET) for _ in range(7))
    return f"quiz-{now}-{suffix}"


def initialize_session(
    pool: Sequence[Question],
    clock: Clock = system_clock,
    rng: Optional[random.Random] = None,
) -> Session:
    rng = rng or random.Random()
    questions = select_quiz_questions(pool, rng=rng)
    now = clock()
    session = Session(
        id=generate_session_id(now, rng),
        questions=questions,
        current_question_index=0,
        answers=[],
        start_time=now,
        is_complete=False,
    )
    logger.info(f"New session: {session.id} [{len(questions)} questions]")
    return session
