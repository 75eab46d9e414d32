"""
Question seed loader from YAML
"""
import logging
from pathlib import Path
from typing import List

import yaml
from pydantic import ValidationError as PydanticValidationError

from debug_contest.models import QuestionCreate
from debug_contest.store import RecordStore


logger = logging.getLogger(__name__)


def load_questions(yaml_path: str) -> List[QuestionCreate]:
    """
    Load question definitions from a YAML file

    YAML format:
        questions:
          - title: Off by one
            description: Sum 1..n
            max_points: 10
            buggy_code_python: |
              def total(n):
                  return sum(range(n))
            correct_answer_python: |
              def total(n):
                  return sum(range(n + 1))

    Args:
        yaml_path: Path to YAML file

    Returns:
        Validated question definitions in file order

    Raises:
        FileNotFoundError: If file not found
        ValueError: If an entry is invalid
    """
    path = Path(yaml_path)

    if not path.exists():
        raise FileNotFoundError(f"Questions file not found: {yaml_path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    entries = data.get("questions", []) if isinstance(data, dict) else data
    questions = []

    for idx, entry in enumerate(entries, start=1):
        try:
            questions.append(QuestionCreate(**entry))
        except (TypeError, PydanticValidationError) as e:
            raise ValueError(f"Question #{idx} in {yaml_path} is invalid: {e}") from e

    return questions


def seed_questions(store: RecordStore, yaml_path: str) -> int:
    """Insert questions from yaml_path if the store has none yet"""
    existing = store.count_questions()
    if existing:
        logger.info(f"Skipping question seed, store already has {existing} questions")
        return 0

    questions = load_questions(yaml_path)
    for question in questions:
        store.create_question(question)

    logger.info(f"✅ Seeded {len(questions)} questions from {yaml_path}")
    return len(questions)
