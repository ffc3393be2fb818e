class QuizError(Exception):
    """Base class for every error raised by the quiz core."""


# --- Selection ---
class InsufficientPoolError(QuizError):
    def __init__(self, available: int, required: int):
        super().__init__(
            f"Insufficient questions in question bank. "
            f"Available: {available}, Required: {required}"
        )
        self.available = available
        self.required = required


class QuizSizeError(QuizError):
    def __init__(self, size: int, domains: int):
        super().__init__(
            f"Quiz size {size} cannot cover {domains} content domains"
        )
        self.size = size
        self.domains = domains


# --- Session transitions ---
class UnknownQuestionError(QuizError):
    def __init__(self, question_id: str):
        super().__init__(f"Question with ID {question_id} not found in session")
        self.question_id = question_id


class DuplicateAnswerError(QuizError):
    def __init__(self, question_id: str):
        super().__init__(f"Question with ID {question_id} has already been answered")
        self.question_id = question_id


class SessionCompleteError(QuizError):
    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} is already complete")
        self.session_id = session_id


class NoActiveSessionError(QuizError):
    def __init__(self):
        super().__init__("No quiz session in progress")


# --- Question provider ---
class QuestionBankError(QuizError):
    pass


# --- Storage ---
class StorageError(QuizError):
    pass


class StorageQuotaError(StorageError):
    pass


class StorageUnavailableError(StorageError):
    pass


class StorageCorruptError(StorageError):
    pass
