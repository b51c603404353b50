"""
quizdeck: self-study flashcards and multiple-choice quizzes built from a flat
question/answer bank, with per-question mastery tracking.
"""

__version__ = '1.0.0'
