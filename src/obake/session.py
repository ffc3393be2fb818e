"""Quiz session transitions.

Every transition takes a `Session` and returns a new one; the input is never
modified. A session is in progress until every question has an answer, at
which point `record_answer` marks it complete and stamps `end_time`.

Advancing past the last question and calling `complete` are also allowed to
finalize a session. Once a session is complete both are no-ops, so the first
recorded `end_time` is kept.
"""

import logging
from typing import Optional

from .errors import DuplicateAnswerError, SessionCompleteError, UnknownQuestionError
from .models import Answer, Question, Session
from .timer import Clock, system_clock

logger = logging.getLogger(__name__)


def _finalize(session: Session, clock: Clock) -> Session:
    if session.is_complete:
        return session
    logger.info(f"Session complete: {session.id} [{len(session.answers)} answers]")
    return session.model_copy(update={"is_complete": True, "end_time": clock()})


def record_answer(
    session: Session,
    question_id: str,
    selected_choice_id: str,
    clock: Clock = system_clock,
) -> Session:
    """Append an answer, deriving correctness from the question itself.

    Raises `UnknownQuestionError` for ids outside the session and
    `DuplicateAnswerError` when the question already has an answer.
    """
    question = next((q for q in session.questions if q.id == question_id), None)
    if question is None:
        raise UnknownQuestionError(question_id)
    if session.is_complete:
        raise SessionCompleteError(session.id)
    if any(answer.question_id == question_id for answer in session.answers):
        raise DuplicateAnswerError(question_id)

    answer = Answer(
        question_id=question_id,
        selected_choice_id=selected_choice_id,
        is_correct=selected_choice_id == question.correct_choice_id,
        answered_at=clock(),
    )
    updated = session.model_copy(update={"answers": [*session.answers, answer]})
    if len(updated.answers) >= len(updated.questions):
        updated = _finalize(updated, lambda: answer.answered_at)
    return updated


def move_to_next_question(session: Session, clock: Clock = system_clock) -> Session:
    # The cursor stops at len(questions), one past the last question.
    next_index = min(session.current_question_index + 1, len(session.questions))
    updated = session.model_copy(update={"current_question_index": next_index})
    if next_index >= len(session.questions):
        updated = _finalize(updated, clock)
    return updated


def complete(session: Session, clock: Clock = system_clock) -> Session:
    return _finalize(session, clock)


def get_current_question(session: Session) -> Optional[Question]:
    if 0 <= session.current_question_index < len(session.questions):
        return session.questions[session.current_question_index]
    return None


def is_complete(session: Session) -> bool:
    return len(session.answers) >= len(session.questions)


def get_correct_count(session: Session) -> int:
    return sum(1 for answer in session.answers if answer.is_correct)
