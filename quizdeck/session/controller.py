"""Session lifecycle for one player.

idle -> category_selected -> pool_built -> block_chosen -> in_session
     -> completed -> (retry -> in_session | back -> idle)

``back_to_start`` returns to idle from any state.
"""
import uuid
import random
from enum import Enum
from typing import List, Optional, Union

from quizdeck.bank.loader import all_answers, load_bank
from quizdeck.bank.models import QuestionItem, QuizBank
from quizdeck.mastery.history_store import HistoryRepository
from quizdeck.mastery.models import MASTERY_THRESHOLD, MarkStatus, HistoryStore
from quizdeck.mastery.tracker import MasteryData, record_mark, record_session_score, category_mastery_data, overall_mastery, mastered_count
from quizdeck.quiz.generator import QuizOption, QuizGenerator, check_answer, DEFAULT_OPTION_COUNT
from quizdeck.utils import get_logger, log_session_event, set_session_context
from .pool_manager import (
    DEFAULT_BLOCK_SIZE,
    StudyMode,
    SessionPool,
    SessionResult,
    SessionStateError,
    QuestionNotInSessionError,
    build_pool,
    partition_into_blocks,
    block_bounds,
    select_block,
    start_session,
    complete_session,
    retry_wrong,
    retry_all,
)

LOG = get_logger()

NOTICE_ALL_MASTERED = 'All questions mastered'
NOTICE_NO_QUESTIONS = 'No questions found'
NOTICE_NO_SELECTION = 'Select at least one category'
NOTICE_NO_WRONG = 'No wrong answers to retry'


class SessionState(str, Enum):
    IDLE = 'idle'
    CATEGORY_SELECTED = 'category_selected'
    POOL_BUILT = 'pool_built'
    BLOCK_CHOSEN = 'block_chosen'
    IN_SESSION = 'in_session'
    COMPLETED = 'completed'


class SessionController:
    def __init__(self, bank: QuizBank, repository: Optional[HistoryRepository] = None, history: Optional[HistoryStore] = None, rng: random.Random = None, block_size: int = DEFAULT_BLOCK_SIZE, threshold: int = MASTERY_THRESHOLD, option_count: int = DEFAULT_OPTION_COUNT):
        self.bank = bank
        self.repository = repository
        if history is None:
            history = repository.load() if repository is not None else {}
        self.history: HistoryStore = history
        self.rng = rng or random.SystemRandom()
        self.block_size = block_size
        self.threshold = threshold
        self.option_count = option_count

        self.state = SessionState.IDLE
        self.mode = StudyMode.NORMAL
        self.selected: List[str] = []
        self.pending_pool: List[QuestionItem] = []
        self.block_pool: List[QuestionItem] = []
        self.session: Optional[SessionPool] = None
        self.result: Optional[SessionResult] = None
        self.notice: Optional[str] = None
        self.session_id: Optional[str] = None
        self.block_index: Optional[int] = None

    @classmethod
    def from_settings(cls, settings, bank: Optional[QuizBank] = None) -> 'SessionController':
        bank = bank or load_bank(settings.BANK_PATH, min_unique_answers=settings.OPTION_COUNT)
        return cls(
            bank,
            repository=HistoryRepository.from_settings(settings),
            rng=settings.make_rng(),
            block_size=settings.BLOCK_SIZE,
            threshold=settings.MASTERY_THRESHOLD,
            option_count=settings.OPTION_COUNT,
        )

    def _require(self, *states: SessionState):
        if self.state not in states:
            allowed = ', '.join(s.value for s in states)
            raise SessionStateError(f'action not allowed in state {self.state.value} (expected {allowed})')

    def _event(self, event: str, pool_size: int, known_count: int = None):
        log_session_event(event, self.state.value, pool_size, known_count)

    # selection

    def set_mode(self, mode: Union[StudyMode, str]):
        self._require(SessionState.IDLE, SessionState.CATEGORY_SELECTED)
        self.mode = StudyMode(mode)

    def toggle_category(self, title: str):
        self._require(SessionState.IDLE, SessionState.CATEGORY_SELECTED)
        if self.bank.get_category(title) is None:
            LOG.warning('toggle_unknown_category', extra={'category': title})
            return self.selected
        if title in self.selected:
            self.selected.remove(title)
        else:
            self.selected.append(title)
        self.state = SessionState.CATEGORY_SELECTED if self.selected else SessionState.IDLE
        return self.selected

    def build_pool(self) -> List[QuestionItem]:
        """Build the candidate pool; an empty result sets ``notice`` and keeps the state."""
        self.notice = None
        if not self.selected:
            self.notice = NOTICE_NO_SELECTION
            return []
        self._require(SessionState.CATEGORY_SELECTED)
        pool = build_pool(self.selected, self.mode, self.bank.categories, self.history, self.threshold)
        if not pool:
            self.notice = NOTICE_ALL_MASTERED if self.mode == StudyMode.WEAKNESS else NOTICE_NO_QUESTIONS
            return []
        self.pending_pool = pool
        self.state = SessionState.POOL_BUILT
        self._event('pool_built', len(pool))
        return pool

    @property
    def blocks(self) -> List[List[QuestionItem]]:
        return partition_into_blocks(self.pending_pool, self.block_size)

    @property
    def block_ranges(self):
        return block_bounds(len(self.pending_pool), self.block_size)

    def choose_block(self, index: Optional[int] = None, start: bool = True) -> List[QuestionItem]:
        """Pick block ``index`` of the pending pool, or the whole pool when ``None``."""
        self._require(SessionState.POOL_BUILT)
        self.block_pool = select_block(self.pending_pool, index, self.block_size)
        self.block_index = index
        self.state = SessionState.BLOCK_CHOSEN
        self._event('block_chosen', len(self.block_pool))
        if start:
            self.start()
        return self.block_pool

    # play

    def _begin(self, session: SessionPool):
        self.session = session
        self.result = None
        self.session_id = uuid.uuid4().hex
        set_session_context(self.session_id, self.block_index)
        self.state = SessionState.IN_SESSION
        self._event('session_started', len(self.session))

    def start(self) -> SessionPool:
        self._require(SessionState.BLOCK_CHOSEN)
        self._begin(start_session(self.block_pool, self.rng))
        return self.session

    @property
    def current_question(self) -> Optional[QuestionItem]:
        if self.session is None or self.state != SessionState.IN_SESSION:
            return None
        if self.session.position >= len(self.session.questions):
            return None
        return self.session.questions[self.session.position]

    @property
    def is_finished(self) -> bool:
        return self.session is not None and self.session.position >= len(self.session.questions)

    def mark(self, question_text: str, status: Union[MarkStatus, str]) -> HistoryStore:
        """Record a known/unknown mark, persist the history and advance."""
        self._require(SessionState.IN_SESSION)
        status = MarkStatus(status)
        if question_text not in {q.question for q in self.session.base}:
            raise QuestionNotInSessionError(f'question not in the current session: {question_text}')
        self.history = record_mark(self.history, self.bank.categories, question_text, status, threshold=self.threshold)
        if self.repository is not None:
            self.repository.save(self.history)
        if status == MarkStatus.UNKNOWN and question_text not in self.session.unknowns:
            self.session.unknowns.append(question_text)
        self.session.position += 1
        return self.history

    def quiz_items(self, count: Optional[int] = None) -> List[QuizOption]:
        """Multiple-choice items for the running session, drawing distractors from the whole bank."""
        self._require(SessionState.IN_SESSION)
        gen = QuizGenerator(answer_universe=all_answers(self.bank.categories), rng=self.rng, option_count=self.option_count)
        n = len(self.session.questions) if count is None else count
        return gen.generate(self.session.questions, n)

    def answer(self, item: QuizOption, selected: Optional[str]) -> bool:
        correct = check_answer(item, selected)
        self.mark(item.question, MarkStatus.KNOWN if correct else MarkStatus.UNKNOWN)
        return correct

    def complete(self) -> SessionResult:
        self._require(SessionState.IN_SESSION)
        self.result = complete_session(self.session, self.session.unknowns)
        # unplayed sessions leave no record
        if len(self.selected) == 1 and self.session.position > 0:
            self.history = record_session_score(self.history, self.selected[0], self.result.known_count)
            if self.repository is not None:
                self.repository.save(self.history)
        self.state = SessionState.COMPLETED
        self._event('session_completed', self.result.total, self.result.known_count)
        return self.result

    def retry_wrong(self) -> Optional[SessionPool]:
        self._require(SessionState.COMPLETED)
        self.notice = None
        if not self.result.wrong_pool:
            self.notice = NOTICE_NO_WRONG
            return None
        self._begin(retry_wrong(self.result, self.rng))
        return self.session

    def retry_all(self) -> SessionPool:
        self._require(SessionState.COMPLETED)
        self._begin(retry_all(self.block_pool, self.rng))
        return self.session

    def back_to_start(self):
        self.selected = []
        self.pending_pool = []
        self.block_pool = []
        self.block_index = None
        self.session = None
        self.result = None
        self.notice = None
        self.state = SessionState.IDLE
        self._event('back_to_start', 0)

    # history views

    def category_summary(self, title: str) -> MasteryData:
        cat = self.bank.get_category(title)
        if cat is None:
            raise KeyError(title)
        return category_mastery_data(cat, self.history.get(title), self.threshold)

    def mastered_in(self, title: str) -> int:
        return mastered_count(self.history.get(title), self.threshold)

    def overall_summary(self) -> MasteryData:
        return overall_mastery(self.bank.categories, self.history, self.threshold)
