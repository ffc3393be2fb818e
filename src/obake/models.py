from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


# --- Models ---
class WireModel(BaseModel):
    """Immutable record serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class ContentDomain(str, Enum):
    COMPLEX_ORGANIZATIONS = "complex-organizations"
    NEW_SOLUTIONS = "new-solutions"
    CONTINUOUS_IMPROVEMENT = "continuous-improvement"
    MIGRATION_MODERNIZATION = "migration-modernization"


class Choice(WireModel):
    id: str
    text: str


class Question(WireModel):
    id: str
    domain: ContentDomain
    text: str
    choices: List[Choice] = Field(min_length=4, max_length=4)
    correct_choice_id: str
    explanation: str
    difficulty: Literal["medium", "hard"]
    tags: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_choices(self) -> "Question":
        choice_ids = [choice.id for choice in self.choices]
        if len(set(choice_ids)) != len(choice_ids):
            raise ValueError(f"Question {self.id}: choice ids must be unique")
        if self.correct_choice_id not in choice_ids:
            raise ValueError(f"Question {self.id}: correctChoiceId not found in choices")
        return self


class Answer(WireModel):
    question_id: str
    selected_choice_id: str
    is_correct: bool
    answered_at: int


class Session(WireModel):
    id: str
    questions: List[Question]
    current_question_index: int = Field(ge=0)
    answers: List[Answer] = Field(default_factory=list)
    start_time: int
    end_time: Optional[int] = None
    is_complete: bool = False

    @model_validator(mode="after")
    def _check_consistency(self) -> "Session":
        question_ids = [question.id for question in self.questions]
        if len(set(question_ids)) != len(question_ids):
            raise ValueError(f"Session {self.id}: question ids must be unique")
        answered = [answer.question_id for answer in self.answers]
        unknown = set(answered) - set(question_ids)
        if unknown:
            raise ValueError(f"Session {self.id}: answers for unknown questions {sorted(unknown)}")
        # with known ids only, this also bounds len(answers) by len(questions)
        if len(set(answered)) != len(answered):
            raise ValueError(f"Session {self.id}: a question has more than one answer")
        if self.is_complete and self.end_time is None:
            raise ValueError(f"Session {self.id}: complete session has no end time")
        return self


class DomainPerformance(WireModel):
    domain: ContentDomain
    total_questions: int
    correct_answers: int
    percentage: float


class QuizResult(WireModel):
    session_id: str
    total_questions: int
    correct_answers: int
    percentage_score: float
    total_time_seconds: int
    domain_performance: List[DomainPerformance]
    completed_at: int


class StoredState(WireModel):
    version: str
    current_session: Optional[Session] = None
    completed_sessions: List[QuizResult]
    last_updated: int
