from typing import Dict, List

from .config import settings
from .models import ContentDomain, DomainPerformance, QuizResult, Session
from .session import get_correct_count
from .timer import Clock, system_clock


def calculate_percentage(correct_answers: int, total_questions: int) -> float:
    if total_questions == 0:
        return 0.0
    return correct_answers / total_questions * 100


def calculate_domain_performance(session: Session) -> List[DomainPerformance]:
    question_domains = {q.id: q.domain for q in session.questions}
    totals: Dict[ContentDomain, int] = {domain: 0 for domain in ContentDomain}
    correct: Dict[ContentDomain, int] = {domain: 0 for domain in ContentDomain}

    for question in session.questions:
        totals[question.domain] += 1
    for answer in session.answers:
        domain = question_domains.get(answer.question_id)
        if domain is not None and answer.is_correct:
            correct[domain] += 1

    return [
        DomainPerformance(
            domain=domain,
            total_questions=totals[domain],
            correct_answers=correct[domain],
            percentage=calculate_percentage(correct[domain], totals[domain]),
        )
        for domain in ContentDomain
    ]


def calculate_result(session: Session, clock: Clock = system_clock) -> QuizResult:
    """Score a session.

    The percentage is taken over the full quiz size, so a partial session
    scores as if the unanswered questions were wrong. An unfinished session
    is timed up to `clock()`.
    """
    total_questions = len(session.questions)
    correct_answers = get_correct_count(session)
    end_time = session.end_time if session.end_time is not None else clock()

    return QuizResult(
        session_id=session.id,
        total_questions=total_questions,
        correct_answers=correct_answers,
        percentage_score=calculate_percentage(correct_answers, total_questions),
        total_time_seconds=max(0, (end_time - session.start_time) // 1000),
        domain_performance=calculate_domain_performance(session),
        completed_at=end_time,
    )


def is_passing(percentage_score: float) -> bool:
    return percentage_score >= settings.PASSING_SCORE_THRESHOLD


def get_performance_message(percentage_score: float) -> str:
    if percentage_score == 100:
        return "Perfect score! You're ready for the exam!"
    if percentage_score >= 90:
        return "Excellent work! You're well-prepared!"
    if percentage_score >= 80:
        return "Great job! Keep practicing to reach mastery!"
    if percentage_score >= 70:
        return "Good effort! Review the areas you missed."
    if percentage_score >= 60:
        return "You're making progress! Keep studying!"
    return "Keep learning! Review the explanations and try again."
