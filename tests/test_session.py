import pytest

from obake.errors import DuplicateAnswerError, SessionCompleteError, UnknownQuestionError
from obake.session import (
    complete,
    get_correct_count,
    get_current_question,
    is_complete,
    move_to_next_question,
    record_answer,
)


def _answer_all(session, clock, correct=lambda index: True):
    for index, question in enumerate(session.questions):
        choice = question.correct_choice_id if correct(index) else question.choices[0].id
        clock.advance(1000)
        session = record_answer(session, question.id, choice, clock=clock)
        session = move_to_next_question(session, clock=clock)
    return session


def test_correct_choice_is_marked_correct(new_session, clock) -> None:
    question = new_session.questions[0]
    session = record_answer(new_session, question.id, question.correct_choice_id, clock=clock)
    answer = session.answers[0]
    assert answer.is_correct is True
    assert answer.question_id == question.id
    assert answer.answered_at == clock.now


def test_other_choices_are_marked_incorrect(new_session, clock) -> None:
    question = new_session.questions[0]
    for choice in question.choices:
        if choice.id == question.correct_choice_id:
            continue
        session = record_answer(new_session, question.id, choice.id, clock=clock)
        assert session.answers[0].is_correct is False


def test_unrelated_choice_id_is_incorrect(new_session, clock) -> None:
    question = new_session.questions[0]
    session = record_answer(new_session, question.id, "not-a-choice", clock=clock)
    assert session.answers[0].is_correct is False


def test_record_answer_does_not_modify_input(new_session, clock) -> None:
    question = new_session.questions[0]
    record_answer(new_session, question.id, question.correct_choice_id, clock=clock)
    assert new_session.answers == []
    assert new_session.is_complete is False


def test_unknown_question_raises(new_session, clock) -> None:
    with pytest.raises(UnknownQuestionError) as excinfo:
        record_answer(new_session, "missing", "missing-a", clock=clock)
    assert excinfo.value.question_id == "missing"


def test_second_answer_for_same_question_raises(new_session, clock) -> None:
    question = new_session.questions[0]
    session = record_answer(new_session, question.id, question.correct_choice_id, clock=clock)
    with pytest.raises(DuplicateAnswerError):
        record_answer(session, question.id, question.choices[0].id, clock=clock)
    assert len(session.answers) == 1


def test_last_answer_completes_session(new_session, clock) -> None:
    session = new_session
    for question in session.questions:
        assert session.is_complete is False
        clock.advance(500)
        session = record_answer(session, question.id, question.correct_choice_id, clock=clock)
    assert session.is_complete is True
    assert session.end_time == clock.now
    assert is_complete(session)


def test_completion_matches_answer_count_at_every_step(new_session, clock) -> None:
    session = new_session
    assert is_complete(session) == (len(session.answers) >= len(session.questions))
    for question in new_session.questions:
        session = record_answer(session, question.id, question.correct_choice_id, clock=clock)
        assert is_complete(session) == (len(session.answers) >= len(session.questions))
        session = move_to_next_question(session, clock=clock)
        assert is_complete(session) == (len(session.answers) >= len(session.questions))


def test_move_to_next_question_advances_cursor(new_session, clock) -> None:
    session = move_to_next_question(new_session, clock=clock)
    assert session.current_question_index == 1
    assert get_current_question(session) == new_session.questions[1]
    assert new_session.current_question_index == 0
    assert session.is_complete is False


def test_moving_past_last_question_finalizes(new_session, clock) -> None:
    session = new_session
    for _ in range(len(session.questions)):
        session = move_to_next_question(session, clock=clock)
    assert session.current_question_index == len(session.questions)
    assert get_current_question(session) is None
    assert session.is_complete is True
    assert session.end_time == clock.now
    assert is_complete(session) is False

    clock.advance(5000)
    again = move_to_next_question(session, clock=clock)
    assert again.current_question_index == len(session.questions)
    assert again.end_time == session.end_time


def test_answer_then_advance_keeps_first_end_time(new_session, clock) -> None:
    session = _answer_all(new_session, clock)
    finished_at = session.answers[-1].answered_at
    assert session.end_time == finished_at
    assert session.current_question_index == len(session.questions)


def test_complete_sets_end_time_once(new_session, clock) -> None:
    clock.advance(2000)
    session = complete(new_session, clock=clock)
    assert session.is_complete is True
    assert session.end_time == clock.now
    assert session.answers == new_session.answers
    assert session.questions == new_session.questions

    clock.advance(2000)
    assert complete(session, clock=clock).end_time == session.end_time


def test_answering_completed_session_raises(new_session, clock) -> None:
    session = complete(new_session, clock=clock)
    question = session.questions[0]
    with pytest.raises(SessionCompleteError):
        record_answer(session, question.id, question.correct_choice_id, clock=clock)


def test_get_correct_count(new_session, clock) -> None:
    session = _answer_all(new_session, clock, correct=lambda index: index % 3 == 0)
    assert get_correct_count(session) == 7


def test_get_current_question_starts_at_first(new_session) -> None:
    assert get_current_question(new_session) == new_session.questions[0]
