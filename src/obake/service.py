import logging
import random
from typing import List, Optional

from .errors import NoActiveSessionError
from .models import QuizResult, Session
from .question_bank import QuestionBank
from .quiz import initialize_session
from .scoring import calculate_result
from .session import complete, move_to_next_question, record_answer
from .storage import QuizStorage
from .timer import Clock, TimerState, get_timer_state, system_clock

logger = logging.getLogger(__name__)


class QuizService:
    """Runs one client's quiz attempt on top of its storage.

    Every transition is persisted before it is returned, so a reload can
    resume from the last answer.
    """

    def __init__(
        self,
        bank: QuestionBank,
        storage: QuizStorage,
        clock: Clock = system_clock,
        rng: Optional[random.Random] = None,
    ):
        self.bank = bank
        self.storage = storage
        self.clock = clock
        self.rng = rng or random.Random()

    def start(self, source: str) -> Session:
        pool = self.bank.load(source)
        session = initialize_session(pool, clock=self.clock, rng=self.rng)
        self.storage.save(session)
        return session

    def resume(self) -> Optional[Session]:
        state = self.storage.load()
        return state.current_session if state else None

    def answer(self, question_id: str, selected_choice_id: str) -> Session:
        session = record_answer(self._current(), question_id, selected_choice_id, clock=self.clock)
        self.storage.save(session)
        return session

    def next(self) -> Session:
        session = move_to_next_question(self._current(), clock=self.clock)
        self.storage.save(session)
        return session

    def finish(self) -> QuizResult:
        """Score the session, archive the result and drop the session."""
        session = complete(self._current(), clock=self.clock)
        result = calculate_result(session, clock=self.clock)
        self.storage.save_result(result)
        logger.info(
            f"Session finished: {session.id} "
            f"[{result.correct_answers}/{result.total_questions}]"
        )
        return result

    def discard(self) -> None:
        self.storage.clear()

    def timer(self) -> TimerState:
        session = self._current()
        now = session.end_time if session.end_time is not None else self.clock()
        return get_timer_state(session.start_time, now)

    def history(self) -> List[QuizResult]:
        return self.storage.completed_results()

    def _current(self) -> Session:
        session = self.resume()
        if session is None:
            raise NoActiveSessionError()
        return session
