"""
Mastery tracking and history persistence.
"""
from .models import MASTERY_THRESHOLD, MarkStatus, QuestionStats, CategoryHistory, HistoryStore, history_to_dict, history_from_dict, copy_history
from .tracker import (
	MasteryData,
	QuestionMastery,
	record_outcome,
	record_mark,
	record_session_score,
	get_or_create_category_history,
	get_or_create_question_stats,
	mastered_count,
	question_level,
	weak_questions,
	category_mastery_data,
	mastery_percentage,
	overall_mastery,
	question_mastery,
)
from .history_store import (
	HistoryRepository,
	KeyValueStore,
	InMemoryKeyValueStore,
	JsonFileKeyValueStore,
	RedisKeyValueStore,
	create_store,
	serialize_history,
	HistoryStoreError,
	StorageUnavailableError,
)

__all__ = [
	'MASTERY_THRESHOLD', 'MarkStatus', 'QuestionStats', 'CategoryHistory', 'HistoryStore',
	'history_to_dict', 'history_from_dict', 'copy_history',
	'MasteryData', 'QuestionMastery', 'record_outcome', 'record_mark', 'record_session_score',
	'get_or_create_category_history', 'get_or_create_question_stats',
	'mastered_count', 'question_level', 'weak_questions', 'category_mastery_data', 'mastery_percentage',
	'overall_mastery', 'question_mastery',
	'HistoryRepository', 'KeyValueStore', 'InMemoryKeyValueStore', 'JsonFileKeyValueStore', 'RedisKeyValueStore',
	'create_store', 'serialize_history', 'HistoryStoreError', 'StorageUnavailableError',
]
