import math
import random
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, Field

from quizdeck.bank.models import QuestionItem, QuizCategory
from quizdeck.mastery.models import MASTERY_THRESHOLD, HistoryStore
from quizdeck.mastery.tracker import weak_questions
from quizdeck.quiz.generator import shuffled
from quizdeck.utils import percentage

DEFAULT_BLOCK_SIZE = 10


class StudyMode(str, Enum):
    NORMAL = 'normal'
    WEAKNESS = 'weakness'


class SessionError(Exception):
    pass


class SessionStateError(SessionError):
    pass


class BlockIndexError(SessionError):
    pass


class QuestionNotInSessionError(SessionError):
    pass


class SessionPool(BaseModel):
    """One play-through.

    ``base`` is the pool as chosen (block order); ``questions`` is the shuffled
    order presented to the player.
    """
    base: List[QuestionItem] = Field(default_factory=list)
    questions: List[QuestionItem] = Field(default_factory=list)
    unknowns: List[str] = Field(default_factory=list)
    position: int = 0

    def __len__(self):
        return len(self.questions)


class SessionResult(BaseModel):
    known_count: int
    total: int
    wrong_pool: List[QuestionItem] = Field(default_factory=list)

    @property
    def percentage(self) -> int:
        return percentage(self.known_count, self.total)


def build_pool(selected_categories: Iterable[str], mode: Union[StudyMode, str], all_categories: Sequence[QuizCategory], history: HistoryStore, threshold: int = MASTERY_THRESHOLD) -> List[QuestionItem]:
    """Concatenate the questions of the selected categories in bank order.

    In weakness mode only questions below the mastery threshold are taken.
    """
    mode = StudyMode(mode)
    selected = set(selected_categories)
    pool: List[QuestionItem] = []
    for cat in all_categories:
        if cat.title not in selected:
            continue
        if mode == StudyMode.WEAKNESS:
            pool.extend(weak_questions(cat.questions, cat.title, history, threshold))
        else:
            pool.extend(cat.questions)
    return pool


def block_count(pool_size: int, block_size: int = DEFAULT_BLOCK_SIZE) -> int:
    if block_size < 1:
        raise ValueError('block_size must be >= 1')
    return math.ceil(pool_size / block_size)


def partition_into_blocks(pool: Sequence[QuestionItem], block_size: int = DEFAULT_BLOCK_SIZE) -> List[List[QuestionItem]]:
    n = block_count(len(pool), block_size)
    return [list(pool[i * block_size:(i + 1) * block_size]) for i in range(n)]


def block_bounds(pool_size: int, block_size: int = DEFAULT_BLOCK_SIZE) -> List[Tuple[int, int]]:
    """1-based inclusive question ranges per block, e.g. ``(11, 20)``."""
    return [(i * block_size + 1, min((i + 1) * block_size, pool_size)) for i in range(block_count(pool_size, block_size))]


def select_block(pool: Sequence[QuestionItem], index: Optional[int], block_size: int = DEFAULT_BLOCK_SIZE) -> List[QuestionItem]:
    """Return block ``index`` of ``pool``; ``None`` selects the whole pool."""
    if index is None:
        return list(pool)
    n = block_count(len(pool), block_size)
    if index < 0 or index >= n:
        raise BlockIndexError(f'block index {index} out of range (0-{n - 1})')
    return list(pool[index * block_size:(index + 1) * block_size])


def start_session(pool: Sequence[QuestionItem], rng: random.Random = None) -> SessionPool:
    return SessionPool(base=list(pool), questions=shuffled(pool, rng), unknowns=[], position=0)


def complete_session(session_pool: SessionPool, unknown_question_texts: Iterable[str]) -> SessionResult:
    unknown = set(unknown_question_texts)
    wrong_pool = [q for q in session_pool.base if q.question in unknown]
    total = len(session_pool.base)
    return SessionResult(known_count=total - len(wrong_pool), total=total, wrong_pool=wrong_pool)


def retry_wrong(result: SessionResult, rng: random.Random = None) -> SessionPool:
    return start_session(result.wrong_pool, rng)


def retry_all(block_pool: Sequence[QuestionItem], rng: random.Random = None) -> SessionPool:
    # reshuffle the chosen block itself, never a previous presented order
    return start_session(block_pool, rng)
