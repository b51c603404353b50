import random
from datetime import datetime, timezone

import pytest

from quizdeck.bank import QuizCategory, QuestionItem
from quizdeck.mastery import (
    MASTERY_THRESHOLD,
    MarkStatus,
    CategoryHistory,
    QuestionStats,
    record_outcome,
    record_mark,
    record_session_score,
    mastered_count,
    weak_questions,
    mastery_percentage,
    category_mastery_data,
    overall_mastery,
    question_mastery,
)

CAT = 'Cat0'
Q = 'Cat0-Q0'


def _mark(history, status, times=1, question=Q):
    for _ in range(times):
        history = record_outcome(history, CAT, question, status)
    return history


def test_first_mark_creates_records_lazily():
    history = {}
    new = record_outcome(history, CAT, Q, 'known')
    assert history == {}
    stats = new[CAT].question_stats[Q]
    assert stats.mastery_level == 1
    assert stats.correct_count == 1
    assert stats.incorrect_count == 0
    assert new[CAT].best_score == 0


def test_record_outcome_does_not_mutate_input():
    history = _mark({}, MarkStatus.KNOWN)
    snapshot = history[CAT].model_dump()
    new = record_outcome(history, CAT, Q, MarkStatus.KNOWN)
    assert history[CAT].model_dump() == snapshot
    assert new[CAT].question_stats[Q].mastery_level == 2


def test_three_known_marks_reach_threshold_and_leave_weak_set(numbered_bank):
    cat = numbered_bank.get_category(CAT)
    history = {}
    assert cat.questions[0] in weak_questions(cat.questions, CAT, history)
    history = _mark(history, MarkStatus.KNOWN, 3)
    assert history[CAT].question_stats[Q].mastery_level == MASTERY_THRESHOLD
    weak = weak_questions(cat.questions, CAT, history)
    assert cat.questions[0] not in weak
    assert len(weak) == len(cat.questions) - 1


def test_unknown_after_mastery_drops_level_and_counts_miss(numbered_bank):
    cat = numbered_bank.get_category(CAT)
    history = _mark({}, MarkStatus.KNOWN, 3)
    before = history[CAT].question_stats[Q].incorrect_count
    history = _mark(history, MarkStatus.UNKNOWN)
    stats = history[CAT].question_stats[Q]
    assert stats.mastery_level == 2
    assert stats.incorrect_count == before + 1
    assert cat.questions[0] in weak_questions(cat.questions, CAT, history)


def test_level_is_clamped_at_both_ends():
    history = _mark({}, MarkStatus.UNKNOWN, 5)
    assert history[CAT].question_stats[Q].mastery_level == 0
    assert history[CAT].question_stats[Q].incorrect_count == 5
    history = _mark(history, MarkStatus.KNOWN, 10)
    assert history[CAT].question_stats[Q].mastery_level == MASTERY_THRESHOLD


@pytest.mark.parametrize('seed', range(10))
def test_level_stays_in_bounds_for_random_sequences(seed):
    rnd = random.Random(seed)
    history = {}
    for _ in range(60):
        history = record_outcome(history, CAT, Q, rnd.choice(list(MarkStatus)))
        assert 0 <= history[CAT].question_stats[Q].mastery_level <= MASTERY_THRESHOLD


def test_last_played_is_updated():
    now = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    history = record_outcome({}, CAT, Q, MarkStatus.KNOWN, now=now)
    assert history[CAT].last_played == '2024-05-01T12:30:00.000Z'


def test_invalid_status_rejected():
    with pytest.raises(ValueError):
        record_outcome({}, CAT, Q, 'maybe')


def test_mark_for_unknown_question_returns_history_unchanged(numbered_bank):
    history = _mark({}, MarkStatus.KNOWN)
    same = record_mark(history, numbered_bank.categories, 'not in the bank', MarkStatus.KNOWN)
    assert same is history


def test_record_mark_resolves_category(numbered_bank):
    history = record_mark({}, numbered_bank.categories, 'Cat1-Q2', MarkStatus.UNKNOWN)
    assert list(history) == ['Cat1']
    assert history['Cat1'].question_stats['Cat1-Q2'].incorrect_count == 1


def test_weak_questions_without_history_is_everything(numbered_bank):
    cat = numbered_bank.get_category(CAT)
    assert weak_questions(cat.questions, CAT, {}) == list(cat.questions)
    other = _mark({}, MarkStatus.KNOWN, 3)
    assert weak_questions(cat.questions, 'Cat1', other) == list(cat.questions)


def test_mastered_count():
    assert mastered_count(None) == 0
    history = _mark({}, MarkStatus.KNOWN, 3)
    history = _mark(history, MarkStatus.KNOWN, 2, question='Cat0-Q1')
    history = _mark(history, MarkStatus.KNOWN, 4, question='Cat0-Q2')
    assert mastered_count(history[CAT]) == 2


def test_mastery_percentage():
    cat = QuizCategory(title=CAT, questions=[QuestionItem(q=f'Cat0-Q{i}', a=f'A{i}') for i in range(2)])
    assert mastery_percentage(cat, None) == 0
    history = _mark({}, MarkStatus.KNOWN, 1)
    # 1 of 6
    assert mastery_percentage(cat, history[CAT]) == 17
    history = _mark(history, MarkStatus.KNOWN, 2)
    assert mastery_percentage(cat, history[CAT]) == 50
    history = _mark(history, MarkStatus.KNOWN, 3, question='Cat0-Q1')
    assert mastery_percentage(cat, history[CAT]) == 100


def test_mastery_percentage_empty_category():
    assert mastery_percentage(QuizCategory(title='empty', questions=[]), CategoryHistory()) == 0


def test_stats_for_questions_no_longer_in_category_are_ignored():
    cat = QuizCategory(title=CAT, questions=[QuestionItem(q=Q, a='A')])
    ch = CategoryHistory(questionStats={'gone': QuestionStats(masteryLevel=3)})
    data = category_mastery_data(cat, ch)
    assert data.current_score == 0
    assert data.max_score == 3


def test_overall_mastery(numbered_bank):
    history = _mark({}, MarkStatus.KNOWN, 3)
    data = overall_mastery(numbered_bank.categories, history)
    assert data.max_score == (25 + 7) * 3
    assert data.current_score == 3
    assert data.percentage == 3


def test_question_mastery_rows(numbered_bank):
    cat = numbered_bank.get_category(CAT)
    history = _mark({}, MarkStatus.KNOWN, 3)
    rows = question_mastery(cat, history[CAT])
    assert len(rows) == len(cat.questions)
    assert rows[0].mastered and rows[0].level == 3
    assert not rows[1].mastered and rows[1].level == 0


def test_record_session_score_keeps_best():
    history = record_session_score(_mark({}, MarkStatus.KNOWN, 1), CAT, 7)
    history = record_session_score(history, CAT, 4)
    assert history[CAT].best_score == 7
    history = record_session_score(history, CAT, 9)
    assert history[CAT].best_score == 9


def test_record_session_score_needs_a_played_category():
    history = {}
    assert record_session_score(history, CAT, 5) is history
    assert CAT not in history
