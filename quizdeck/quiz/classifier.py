"""Answer classification for same-type distractor selection.

An answer is tagged with one of nine coarse answer systems. Resolution order:

1. exact match in ``SYSTEM_MAPPING``
2. the first matching rule in ``RULES`` (suffix / marker tests)
3. ``AnswerSystem.CONCEPT``
"""
from enum import Enum
from typing import Callable, Dict, List, Tuple


class AnswerSystem(str, Enum):
    PERSON = 'person'
    PLACE = 'place'
    EVENT = 'event'
    DOCUMENT = 'document'
    LAW = 'law'
    CONCEPT = 'concept'
    GROUP = 'group'
    TECHNICAL = 'technical'
    COUNTRY = 'country'


DEFAULT_SYSTEM = AnswerSystem.CONCEPT

_P = AnswerSystem.PERSON
_PL = AnswerSystem.PLACE
_E = AnswerSystem.EVENT
_D = AnswerSystem.DOCUMENT
_L = AnswerSystem.LAW
_C = AnswerSystem.CONCEPT
_G = AnswerSystem.GROUP
_T = AnswerSystem.TECHNICAL

SYSTEM_MAPPING: Dict[str, AnswerSystem] = {
    # Islamic world
    'ムハンマド': _P, 'アブー=バクル': _P, 'ウマル': _P, 'ウスマン': _P, 'アリー': _P,
    'ムアーウィヤ': _P, 'アブー=アルアッバース': _P, 'マンスール': _P,
    'ハールーン=アッラシード': _P, 'タバリー': _P, 'フワーリズミー': _P, 'イブン=シーナー': _P,
    'メッカ(マッカ)': _PL, 'メディナ': _PL, 'ダマスクス': _PL, 'バグダード': _PL,
    'コルドバ': _PL, 'カイロ': _PL, 'ブハラ': _PL,
    'ヒジュラ(聖遷)': _E, 'ニハーヴァンドの戦い': _E, 'タラス河畔の戦い': _E,
    'トゥール・ポワティエ間の戦い': _E,
    '『コーラン』(『クルアーン』)': _D, 'ハディース': _D,
    '『千夜一夜物語』(『アラビアン=ナイト』)': _D, '『医学典範』': _D,
    'シャリーア': _L, 'イスラーム法(シャリーア)': _L,
    'カリフ': _C, 'ウンマ': _C, 'ジハード(聖戦)': _C, 'ハラージュ': _C, 'ジズヤ': _C,
    'アター': _C, 'ワクフ': _C,
    'ウマイヤ朝': _G, 'アッバース朝': _G, 'シーア派': _G, 'スンナ派(スンニー派)': _G,
    '後ウマイヤ朝': _G, 'ファーティマ朝': _G, 'ブワイフ朝': _G, 'クライシュ族': _G,
    'アラビア数字': _T, 'アラベスク': _T, '製紙法': _T, 'ゼロの概念': _T,

    # Europe
    'クローヴィス': _P, 'ピピン(小ピピン)': _P, 'カール大帝(シャルルマーニュ)': _P,
    'アルクィン': _P, 'レオ3世': _P, 'オットー1世': _P, 'ユーグ=カペー': _P, 'ロロ': _P,
    'ルッジェーロ2世': _P, 'エグバート': _P, 'アルフレッド大王': _P, 'クヌート(カヌート)': _P,
    'ウィリアム1世': _P, 'リューリク': _P, 'アッティラ': _P, 'オドアケル': _P,
    'テオドリック大王': _P,
    'アーヘン': _PL, 'ノルマンディー公国': _PL, 'アイスランド': _PL, 'グリーンランド': _PL,
    'パンノニア': _PL, 'ラヴェンナ地方': _PL,
    'カールの戴冠': _E, '教会の東西分裂': _E, 'ノルマン=コンクェスト': _E,
    'ヘースティングズの戦い': _E, 'カタラウヌムの戦い': _E, 'ピピンの寄進': _E,
    '『ガリア戦記』': _D, '『ゲルマニア』': _D, '『ローマ法大全』': _D,
    '聖像禁止令': _L, 'ヴェルダン条約': _L, 'メルセン条約': _L,
    '封建社会': _C, '荘園': _C, '恩貸地制度': _C, '従士制': _C, '賦役': _C, '貢納': _C,
    '不輸不入権(インムニテート)': _C, '騎士道精神': _C, 'イタリア政策': _C,
    'メロヴィング朝': _G, 'カロリング朝': _G, 'カペー朝': _G, 'ノルマン朝': _G,
    'ザクセン家': _G, '神聖ローマ帝国': _G, 'アングロ=サクソン人': _G, 'ノルマン人': _G,
    '養蚕技術': _T, '絹織物産業': _T,
}

Rule = Tuple[Callable[[str], bool], AnswerSystem]


def ends_with(*suffixes: str) -> Callable[[str], bool]:
    def _pred(answer: str) -> bool:
        return answer.endswith(suffixes)
    return _pred


def contains(marker: str) -> Callable[[str], bool]:
    def _pred(answer: str) -> bool:
        return marker in answer
    return _pred


def any_of(*preds: Callable[[str], bool]) -> Callable[[str], bool]:
    def _pred(answer: str) -> bool:
        return any(p(answer) for p in preds)
    return _pred


# Evaluated top to bottom, first match wins.
RULES: List[Rule] = [
    # dynasty / house / sect / kingdom / army / clan
    (ends_with('朝', '家', '派', '王国', '軍', '一族'), AnswerSystem.GROUP),
    # law / treaty / decree / statute
    (ends_with('法', '条約', '令', '法規'), AnswerSystem.LAW),
    # battle / coup / incident / movement / migration
    (ends_with('の戦い', '変', '事件', '運動', '大移動'), AnswerSystem.EVENT),
    # book / record / canon, or a bracket-quoted title
    (any_of(ends_with('書', '記', '典'), contains('『')), AnswerSystem.DOCUMENT),
    # city / region / peninsula / island / capital
    (ends_with('市', '地方', '半島', '島', '都'), AnswerSystem.PLACE),
    # system / right / tax / road / agent
    (ends_with('制', '権', '税', '道', '者'), AnswerSystem.CONCEPT),
    # technique / numerals / style
    (ends_with('技術', '数字', '様式'), AnswerSystem.TECHNICAL),
]


def classify(answer: str, rules: List[Rule] = None, mapping: Dict[str, AnswerSystem] = None) -> AnswerSystem:
    mapping = SYSTEM_MAPPING if mapping is None else mapping
    rules = RULES if rules is None else rules
    hit = mapping.get(answer)
    if hit is not None:
        return hit
    for pred, tag in rules:
        if pred(answer):
            return tag
    return DEFAULT_SYSTEM
