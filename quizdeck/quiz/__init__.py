"""
Multiple-choice quiz generation with same-type distractors.
"""
from .classifier import AnswerSystem, classify, SYSTEM_MAPPING, RULES, DEFAULT_SYSTEM
from .pools import build_pools, unique_answers
from .generator import QuizGenerator, QuizOption, QuizGrade, QuizAnswerResult, generate_quiz, grade_quiz, check_answer, shuffled, QuizGeneratorError, QuizValidationError

__all__ = [
	'AnswerSystem', 'classify', 'SYSTEM_MAPPING', 'RULES', 'DEFAULT_SYSTEM',
	'build_pools', 'unique_answers',
	'QuizGenerator', 'QuizOption', 'QuizGrade', 'QuizAnswerResult', 'generate_quiz', 'grade_quiz', 'check_answer', 'shuffled',
	'QuizGeneratorError', 'QuizValidationError',
]
