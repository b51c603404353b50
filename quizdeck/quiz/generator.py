import time
import random
from typing import List, Optional, Dict, Sequence

from pydantic import BaseModel, Field, model_validator

from quizdeck.bank.models import QuestionItem
from quizdeck.utils import get_logger, log_quiz_generation, percentage
from .classifier import classify
from .pools import build_pools, unique_answers

LOG = get_logger()

DEFAULT_OPTION_COUNT = 4

_default_rng = random.SystemRandom()


# Exceptions
class QuizGeneratorError(Exception):
    pass


class QuizValidationError(QuizGeneratorError):
    pass


# Models
class QuizOption(BaseModel):
    question: str
    options: List[str]
    correct_answer: str

    @model_validator(mode='after')
    def check_options(self):
        if len(set(self.options)) != len(self.options):
            raise ValueError('options must be distinct')
        if self.correct_answer not in self.options:
            raise ValueError('options must contain the correct answer')
        return self


class QuizAnswerResult(BaseModel):
    question_index: int
    question: str
    correct: bool
    user_answer: Optional[str] = None
    correct_answer: str


class QuizGrade(BaseModel):
    score: int
    max_score: int
    results: List[QuizAnswerResult] = Field(default_factory=list)

    @property
    def percentage(self) -> int:
        return percentage(self.score, self.max_score)


def shuffled(items: Sequence, rng: random.Random = None) -> list:
    """Return a uniformly shuffled copy of ``items``."""
    rng = rng or _default_rng
    out = list(items)
    rng.shuffle(out)
    return out


class QuizGenerator:
    """Builds multiple-choice items from plain question/answer pairs.

    Distractors are other answers from the bank, taken from the same answer
    system as the correct answer where possible and padded from the whole
    answer universe otherwise.
    """

    def __init__(self, answer_universe: Optional[Sequence[str]] = None, rng: random.Random = None, option_count: int = DEFAULT_OPTION_COUNT):
        if option_count < 2:
            raise QuizValidationError('option_count must be at least 2')
        self.answer_universe = list(answer_universe) if answer_universe is not None else None
        self.rng = rng or _default_rng
        self.option_count = option_count

    def _pick_distractors(self, correct: str, pools, universe: List[str]):
        need = self.option_count - 1
        candidates = [a for a in pools[classify(correct)] if a != correct]
        if len(candidates) >= need:
            return shuffled(candidates, self.rng)[:need], False
        distractors = list(candidates)
        others = [a for a in universe if a != correct and a not in distractors]
        distractors.extend(shuffled(others, self.rng)[:need - len(distractors)])
        return distractors, True

    def generate(self, questions: Sequence[QuestionItem], count: int) -> List[QuizOption]:
        if count < 0:
            raise QuizValidationError('count must be >= 0')
        start = time.time()
        universe_src = self.answer_universe if self.answer_universe is not None else [q.answer for q in questions]
        # pools are rebuilt on every call; the bank is small
        pools = build_pools(universe_src)
        universe = unique_answers(universe_src)

        selected = shuffled(questions, self.rng)[:min(count, len(questions))]
        out: List[QuizOption] = []
        fallback_count = 0
        for item in selected:
            distractors, used_fallback = self._pick_distractors(item.answer, pools, universe)
            if used_fallback:
                fallback_count += 1
            if len(distractors) < self.option_count - 1:
                LOG.warning('quiz_option_count_reduced', extra={
                    'question': item.question,
                    'option_count': len(distractors) + 1,
                    'expected': self.option_count,
                })
            options = shuffled([item.answer] + distractors, self.rng)
            out.append(QuizOption(question=item.question, options=options, correct_answer=item.answer))

        duration_ms = int((time.time() - start) * 1000)
        log_quiz_generation(len(out), count, fallback_count, len(universe), duration_ms)
        return out


def check_answer(option: QuizOption, selected: Optional[str]) -> bool:
    if selected is None:
        return False
    return selected == option.correct_answer


def grade_quiz(quiz: Sequence[QuizOption], user_answers: Dict[int, str]) -> QuizGrade:
    """Score user answers, keyed by 0-based item index, against a quiz.

    Unanswered items count as wrong.
    """
    results = []
    score = 0
    for idx, opt in enumerate(quiz):
        ua = user_answers.get(idx) if isinstance(user_answers, dict) else None
        correct = check_answer(opt, ua)
        if correct:
            score += 1
        results.append(QuizAnswerResult(question_index=idx, question=opt.question, correct=correct, user_answer=ua, correct_answer=opt.correct_answer))
    return QuizGrade(score=score, max_score=len(quiz), results=results)


# convenience
def generate_quiz(questions: Sequence[QuestionItem], count: int, answer_universe: Optional[Sequence[str]] = None, rng: random.Random = None, option_count: int = DEFAULT_OPTION_COUNT) -> List[QuizOption]:
    g = QuizGenerator(answer_universe=answer_universe, rng=rng, option_count=option_count)
    return g.generate(questions, count)
