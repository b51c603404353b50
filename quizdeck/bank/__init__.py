"""
Static question bank: models and loading.
"""
from .models import QuestionItem, QuizCategory, QuizBank, BankMetadata
from .loader import load_bank, parse_bank, validate_bank, all_answers, find_category_for_question, BankError, BankLoadError, BankValidationError

__all__ = [
	'QuestionItem', 'QuizCategory', 'QuizBank', 'BankMetadata',
	'load_bank', 'parse_bank', 'validate_bank', 'all_answers', 'find_category_for_question',
	'BankError', 'BankLoadError', 'BankValidationError',
]
