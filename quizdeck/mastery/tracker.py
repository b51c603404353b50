"""Per-question mastery tracking.

Every question carries a level in ``[0, threshold]``. A ``known`` mark raises
it by one, an ``unknown`` mark lowers it by one. There is no time decay.

All update functions are functional: they take a ``HistoryStore`` and return
a new one, leaving the argument untouched.
"""
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Union

from pydantic import BaseModel

from quizdeck.bank.loader import find_category_for_question
from quizdeck.bank.models import QuestionItem, QuizCategory
from quizdeck.utils import get_logger, log_mastery_update, percentage
from .models import MASTERY_THRESHOLD, MarkStatus, QuestionStats, CategoryHistory, HistoryStore, copy_history

LOG = get_logger()


class MasteryData(BaseModel):
    current_score: int
    max_score: int
    percentage: int


class QuestionMastery(BaseModel):
    question: QuestionItem
    level: int
    mastered: bool


def _iso_now(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def get_or_create_category_history(history: HistoryStore, category_title: str) -> CategoryHistory:
    """Return the record for ``category_title``, inserting an empty one if absent.

    Mutates ``history``; callers pass a copy.
    """
    ch = history.get(category_title)
    if ch is None:
        ch = CategoryHistory(bestScore=0, lastPlayed='', questionStats={})
        history[category_title] = ch
    return ch


def get_or_create_question_stats(category_history: CategoryHistory, question_text: str) -> QuestionStats:
    stats = category_history.question_stats.get(question_text)
    if stats is None:
        stats = QuestionStats(correct=0, incorrect=0, masteryLevel=0)
        category_history.question_stats[question_text] = stats
    return stats


def record_outcome(history: HistoryStore, category_title: Optional[str], question_text: str, status: Union[MarkStatus, str], now: Optional[datetime] = None, threshold: int = MASTERY_THRESHOLD) -> HistoryStore:
    status = MarkStatus(status)
    if not category_title:
        LOG.debug('mastery_update_dropped', extra={'question': question_text})
        return history

    new_history = copy_history(history)
    ch = get_or_create_category_history(new_history, category_title)
    stats = get_or_create_question_stats(ch, question_text)
    if status == MarkStatus.KNOWN:
        stats.mastery_level = min(threshold, stats.mastery_level + 1)
        stats.correct_count += 1
    else:
        stats.mastery_level = max(0, stats.mastery_level - 1)
        stats.incorrect_count += 1
    ch.last_played = _iso_now(now)

    log_mastery_update(category_title, question_text, status.value, stats.mastery_level)
    return new_history


def record_mark(history: HistoryStore, categories: Sequence[QuizCategory], question_text: str, status: Union[MarkStatus, str], now: Optional[datetime] = None, threshold: int = MASTERY_THRESHOLD) -> HistoryStore:
    """Like ``record_outcome`` but resolves the category from the question text.

    A question that belongs to no category leaves ``history`` unchanged.
    """
    title = find_category_for_question(categories, question_text)
    return record_outcome(history, title, question_text, status, now=now, threshold=threshold)


def record_session_score(history: HistoryStore, category_title: str, score: int) -> HistoryStore:
    """Raise ``bestScore`` for an already played category.

    A category with no recorded marks has no record yet and is left alone.
    """
    if category_title not in history:
        LOG.debug('session_score_dropped', extra={'category': category_title, 'score': score})
        return history
    new_history = copy_history(history)
    ch = new_history[category_title]
    ch.best_score = max(ch.best_score, score)
    return new_history


def mastered_count(category_history: Optional[CategoryHistory], threshold: int = MASTERY_THRESHOLD) -> int:
    if category_history is None:
        return 0
    return len([s for s in category_history.question_stats.values() if s.mastery_level >= threshold])


def question_level(category_history: Optional[CategoryHistory], question_text: str, threshold: int = MASTERY_THRESHOLD) -> int:
    if category_history is None:
        return 0
    stats = category_history.question_stats.get(question_text)
    if stats is None:
        return 0
    return max(0, min(threshold, stats.mastery_level))


def weak_questions(questions: Sequence[QuestionItem], category_title: str, history: HistoryStore, threshold: int = MASTERY_THRESHOLD) -> List[QuestionItem]:
    ch = history.get(category_title)
    if ch is None:
        # never played: everything is unmastered
        return list(questions)
    return [q for q in questions if question_level(ch, q.question, threshold) < threshold]


def category_mastery_data(category: QuizCategory, category_history: Optional[CategoryHistory], threshold: int = MASTERY_THRESHOLD) -> MasteryData:
    max_score = len(category.questions) * threshold
    current = sum(question_level(category_history, q.question, threshold) for q in category.questions)
    return MasteryData(current_score=current, max_score=max_score, percentage=percentage(current, max_score))


def mastery_percentage(category: QuizCategory, category_history: Optional[CategoryHistory], threshold: int = MASTERY_THRESHOLD) -> int:
    return category_mastery_data(category, category_history, threshold).percentage


def overall_mastery(categories: Sequence[QuizCategory], history: HistoryStore, threshold: int = MASTERY_THRESHOLD) -> MasteryData:
    current = 0
    maximum = 0
    for cat in categories:
        data = category_mastery_data(cat, history.get(cat.title), threshold)
        current += data.current_score
        maximum += data.max_score
    return MasteryData(current_score=current, max_score=maximum, percentage=percentage(current, maximum))


def question_mastery(category: QuizCategory, category_history: Optional[CategoryHistory], threshold: int = MASTERY_THRESHOLD) -> List[QuestionMastery]:
    rows = []
    for q in category.questions:
        level = question_level(category_history, q.question, threshold)
        rows.append(QuestionMastery(question=q, level=level, mastered=level >= threshold))
    return rows
