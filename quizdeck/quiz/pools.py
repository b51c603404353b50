from typing import Dict, Iterable, List

from .classifier import AnswerSystem, classify


def unique_answers(all_answers: Iterable[str]) -> List[str]:
    # first-seen order, so seeded shuffles stay reproducible
    return list(dict.fromkeys(all_answers))


def build_pools(all_answers: Iterable[str]) -> Dict[AnswerSystem, List[str]]:
    """Bucket every unique answer by its answer system.

    Each pool is duplicate-free and keeps first-seen order. Every system has
    an entry, empty when no answer maps to it.
    """
    pools: Dict[AnswerSystem, List[str]] = {s: [] for s in AnswerSystem}
    for ans in unique_answers(all_answers):
        pools[classify(ans)].append(ans)
    return pools
