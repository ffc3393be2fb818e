import random

from obake.models import ContentDomain
from obake.quiz import initialize_session
from obake.scoring import (
    calculate_percentage,
    calculate_result,
    get_performance_message,
    is_passing,
)
from obake.session import move_to_next_question, record_answer


def _play(session, clock, correct):
    for index, question in enumerate(session.questions):
        choice = question.correct_choice_id if correct(index) else question.choices[0].id
        clock.advance(1500)
        session = record_answer(session, question.id, choice, clock=clock)
        session = move_to_next_question(session, clock=clock)
    return session


def test_alternating_answers_score_fifty_percent(pool, clock) -> None:
    session = initialize_session(pool, clock=clock, rng=random.Random(2024))
    session = _play(session, clock, correct=lambda index: index % 2 == 0)
    result = calculate_result(session, clock=clock)

    assert result.session_id == session.id
    assert result.total_questions == 20
    assert result.correct_answers == 10
    assert result.percentage_score == 50
    assert result.total_time_seconds == 30
    assert result.completed_at == session.end_time
    assert sum(d.total_questions for d in result.domain_performance) == 20
    assert sum(d.correct_answers for d in result.domain_performance) == 10


def test_domain_breakdown_matches_session(new_session, clock) -> None:
    session = _play(new_session, clock, correct=lambda index: index < 13)
    result = calculate_result(session, clock=clock)

    assert [d.domain for d in result.domain_performance] == list(ContentDomain)
    for performance in result.domain_performance:
        indices = [
            i for i, q in enumerate(session.questions) if q.domain == performance.domain
        ]
        assert performance.total_questions == len(indices)
        assert performance.correct_answers == sum(1 for i in indices if i < 13)
        assert performance.percentage == (
            performance.correct_answers / performance.total_questions * 100
        )
    assert sum(d.correct_answers for d in result.domain_performance) == result.correct_answers


def test_scoring_is_idempotent(new_session, clock) -> None:
    session = _play(new_session, clock, correct=lambda index: index % 4 != 0)
    first = calculate_result(session, clock=clock)
    clock.advance(60_000)
    second = calculate_result(session, clock=clock)
    assert first == second


def test_partial_session_scores_against_full_quiz(new_session, clock) -> None:
    session = new_session
    for question in session.questions[:5]:
        session = record_answer(session, question.id, question.correct_choice_id, clock=clock)
    clock.advance(90_999)
    result = calculate_result(session, clock=clock)

    assert result.correct_answers == 5
    assert result.total_questions == 20
    assert result.percentage_score == 25
    assert result.total_time_seconds == 90
    assert result.completed_at == clock.now


def test_empty_domain_has_zero_percentage(pool_factory, clock) -> None:
    pool = pool_factory(
        {
            ContentDomain.COMPLEX_ORGANIZATIONS: 8,
            ContentDomain.NEW_SOLUTIONS: 8,
            ContentDomain.CONTINUOUS_IMPROVEMENT: 8,
        }
    )
    session = initialize_session(pool, clock=clock, rng=random.Random(9))
    result = calculate_result(session, clock=clock)
    missing = next(
        d for d in result.domain_performance
        if d.domain == ContentDomain.MIGRATION_MODERNIZATION
    )
    assert missing.total_questions == 0
    assert missing.correct_answers == 0
    assert missing.percentage == 0
    assert sum(d.total_questions for d in result.domain_performance) == 20


def test_calculate_percentage_handles_zero_total() -> None:
    assert calculate_percentage(0, 0) == 0
    assert calculate_percentage(3, 4) == 75


def test_passing_threshold() -> None:
    assert is_passing(70) is True
    assert is_passing(69.9) is False


def test_performance_message_bands() -> None:
    assert get_performance_message(100).startswith("Perfect score")
    assert get_performance_message(95).startswith("Excellent")
    assert get_performance_message(85).startswith("Great job")
    assert get_performance_message(70).startswith("Good effort")
    assert get_performance_message(60).startswith("You're making progress")
    assert get_performance_message(10).startswith("Keep learning")
