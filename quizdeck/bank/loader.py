import json
import pathlib
from typing import List, Dict, Any, Optional, Sequence

from pydantic import ValidationError

from quizdeck.utils import get_logger
from .models import QuizBank, QuizCategory, QuestionItem

LOG = get_logger()

MIN_UNIQUE_ANSWERS = 4


class BankError(Exception):
    pass


class BankLoadError(BankError):
    pass


class BankValidationError(BankError):
    pass


def all_answers(categories: Sequence[QuizCategory]) -> List[str]:
    """Every correct answer in the bank, in bank order, duplicates included."""
    return [q.answer for c in categories for q in c.questions]


def find_category_for_question(categories: Sequence[QuizCategory], question_text: str) -> Optional[str]:
    for cat in categories:
        if any(q.question == question_text for q in cat.questions):
            return cat.title
    return None


def validate_bank(bank: QuizBank, min_unique_answers: int = MIN_UNIQUE_ANSWERS) -> QuizBank:
    for cat in bank.categories:
        seen = set()
        for q in cat.questions:
            if q.question in seen:
                raise BankValidationError(f'Duplicate question in category {cat.title!r}: {q.question!r}')
            seen.add(q.question)
    unique = set(all_answers(bank.categories))
    if len(unique) < min_unique_answers:
        raise BankValidationError(
            f'Bank has {len(unique)} unique answers; at least {min_unique_answers} are required for multiple choice'
        )
    return bank


def parse_bank(data: Dict[str, Any], validate: bool = True, min_unique_answers: int = MIN_UNIQUE_ANSWERS) -> QuizBank:
    if not isinstance(data, dict):
        raise BankLoadError('Bank data must be a JSON object')
    try:
        bank = QuizBank.model_validate(data)
    except ValidationError as e:
        raise BankLoadError(f'Bank data does not match the expected schema: {e}') from e
    if validate:
        validate_bank(bank, min_unique_answers=min_unique_answers)
    return bank


def load_bank(path, validate: bool = True, min_unique_answers: int = MIN_UNIQUE_ANSWERS) -> QuizBank:
    p = pathlib.Path(path)
    try:
        raw = p.read_text(encoding='utf-8')
    except OSError as e:
        LOG.exception('bank_read_failed', exc_info=True, extra={'path': str(p)})
        raise BankLoadError(f'Could not read bank file {p}') from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise BankLoadError(f'Bank file {p} is not valid JSON') from e
    bank = parse_bank(data, validate=validate, min_unique_answers=min_unique_answers)
    LOG.info('bank_loaded', extra={
        'path': str(p),
        'categories': len(bank.categories),
        'questions': sum(len(c.questions) for c in bank.categories),
    })
    return bank
