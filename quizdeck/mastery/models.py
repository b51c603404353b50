from enum import Enum
from typing import Dict, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MASTERY_THRESHOLD = 3


class MarkStatus(str, Enum):
    KNOWN = 'known'
    UNKNOWN = 'unknown'


class QuestionStats(BaseModel):
    """Per-question counters. Defaults are the values used on first mark."""
    model_config = ConfigDict(populate_by_name=True)

    correct_count: int = Field(0, alias='correct')
    incorrect_count: int = Field(0, alias='incorrect')
    mastery_level: int = Field(0, alias='masteryLevel')

    @field_validator('correct_count', 'incorrect_count', 'mastery_level', mode='before')
    @classmethod
    def non_negative(cls, v):
        # missing or negative stored counters read as 0
        if v is None:
            return 0
        return max(0, int(v))


class CategoryHistory(BaseModel):
    """Per-category record, created on the first mark in that category."""
    model_config = ConfigDict(populate_by_name=True)

    best_score: int = Field(0, alias='bestScore')
    last_played: str = Field('', alias='lastPlayed')
    question_stats: Dict[str, QuestionStats] = Field(default_factory=dict, alias='questionStats')


# category title -> CategoryHistory
HistoryStore = Dict[str, CategoryHistory]


def history_to_dict(history: HistoryStore) -> Dict[str, Any]:
    return {title: ch.model_dump(by_alias=True) for title, ch in history.items()}


def history_from_dict(data: Dict[str, Any]) -> HistoryStore:
    if not isinstance(data, dict):
        raise ValueError('history must be a JSON object')
    return {title: CategoryHistory.model_validate(raw) for title, raw in data.items()}


def copy_history(history: HistoryStore) -> HistoryStore:
    return {title: ch.model_copy(deep=True) for title, ch in history.items()}
