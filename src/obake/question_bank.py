import glob
import logging
import os
import re
from typing import Any, Dict, List

import pandas as pd

from .errors import QuestionBankError
from .models import Choice, ContentDomain, Question

logger = logging.getLogger(__name__)

CHOICE_COLUMNS = ["choice_a", "choice_b", "choice_c", "choice_d"]
REQUIRED_COLUMNS = [
    "id",
    "domain",
    "text",
    *CHOICE_COLUMNS,
    "correct",
    "explanation",
    "difficulty",
    "tags",
]
_CHOICE_LETTERS = ["A", "B", "C", "D"]
_DOMAINS = {domain.value for domain in ContentDomain}
_SOURCE_PATTERN = re.compile(r"^[\w-]+$")


def _split_tags(raw: str) -> List[str]:
    return [tag.strip() for tag in raw.split(";") if tag.strip()]


def validate_question(row: Dict[str, Any], index: int = 0) -> List[str]:
    """Return a list of problems with one question-bank row (empty if valid)."""
    errors = []
    for field in ("id", "text", "explanation"):
        if not str(row.get(field, "")).strip():
            errors.append(f"Question {index}: Missing or empty {field}")
    for choice_index, column in enumerate(CHOICE_COLUMNS):
        if not str(row.get(column, "")).strip():
            errors.append(f"Question {index}, Choice {choice_index}: Missing or empty text")
    if str(row.get("correct", "")).strip().upper() not in _CHOICE_LETTERS:
        errors.append(f"Question {index}: correct must be one of A, B, C, D")
    if str(row.get("domain", "")).strip() not in _DOMAINS:
        errors.append(f"Question {index}: Invalid domain")
    if str(row.get("difficulty", "")).strip() not in ("medium", "hard"):
        errors.append(f"Question {index}: Invalid difficulty (must be 'medium' or 'hard')")
    if not _split_tags(str(row.get("tags", ""))):
        errors.append(f"Question {index}: Missing or empty tags")
    return errors


def row_to_question(row: Dict[str, Any]) -> Question:
    question_id = str(row["id"]).strip()
    choices = [
        Choice(id=f"{question_id}-{letter.lower()}", text=str(row[column]).strip())
        for letter, column in zip(_CHOICE_LETTERS, CHOICE_COLUMNS)
    ]
    correct_letter = str(row["correct"]).strip().lower()
    return Question(
        id=question_id,
        domain=ContentDomain(str(row["domain"]).strip()),
        text=str(row["text"]).strip(),
        choices=choices,
        correct_choice_id=f"{question_id}-{correct_letter}",
        explanation=str(row["explanation"]).strip(),
        difficulty=str(row["difficulty"]).strip(),
        tags=_split_tags(str(row["tags"])),
    )


# --- Service Layer: Question Bank ---
class QuestionBank:
    """Loads question pools from `<directory>/<source>.csv` files."""

    def __init__(self, directory: str):
        self.directory = directory

    def list_sources(self) -> List[str]:
        csv_files = glob.glob(os.path.join(self.directory, "*.csv"))
        return sorted(os.path.splitext(os.path.basename(path))[0] for path in csv_files)

    def load(self, source: str) -> List[Question]:
        if not _SOURCE_PATTERN.match(source):
            raise QuestionBankError(f"Invalid question source: {source!r}")
        path = os.path.join(self.directory, f"{source}.csv")
        if not os.path.exists(path):
            raise QuestionBankError(f"Question bank not found: {path}")

        try:
            df = pd.read_csv(path, encoding="utf-8", dtype=str, keep_default_na=False)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load {path}: {e}")
            raise QuestionBankError(f"Failed to load questions from {source}: {e}") from e

        missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
        if missing:
            raise QuestionBankError(f"Question bank {source} is missing columns: {missing}")

        records = df.to_dict("records")
        errors = [error for index, row in enumerate(records) for error in validate_question(row, index)]
        if errors:
            logger.error(f"Question validation failed for {source}: {errors}")
            raise QuestionBankError(f"Question bank {source} has {len(errors)} invalid entries")

        questions = [row_to_question(row) for row in records]
        logger.info(f"Loaded {len(questions)} questions from {source}")
        return questions
