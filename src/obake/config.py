class Settings:
    PROJECT_NAME: str = "obake"
    DEBUG: bool = False
    LOG_DIR: str = "log"
    LOG_FILE: str = "obake.log"
    LOG_TO_FILE: bool = True
    REDIS_URL: str = "redis://localhost:6379/0"
    QUESTION_DIR: str = "questions"
    DEFAULT_SOURCE: str = "en"
    QUIZ_SIZE: int = 20
    STORAGE_KEY: str = "sap-obake-quiz-state"
    SCHEMA_VERSION: str = "1.0.0"
    MAX_COMPLETED_RESULTS: int = 10
    PASSING_SCORE_THRESHOLD: int = 70
    WARNING_THRESHOLD_SECONDS: int = 1800
    CLIENT_COOKIE_NAME: str = "quiz_client_id"


settings = Settings()
