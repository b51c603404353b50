import json

import pytest

from quizdeck.bank import (
    QuizBank,
    load_bank,
    parse_bank,
    all_answers,
    find_category_for_question,
    BankLoadError,
    BankValidationError,
)
from tests.fixtures.sample_data import islam_europe_bank


def test_parse_bank_reads_short_keys():
    bank = parse_bank(islam_europe_bank())
    first = bank.categories[0].questions[0]
    assert first.question == 'イスラーム教を創始した人物は？'
    assert first.answer == 'ムハンマド'


def test_metadata():
    meta = parse_bank(islam_europe_bank()).metadata()
    assert meta.chapter_number == '8'
    assert meta.title.startswith('イスラーム')


def test_to_dict_round_trips_wire_format():
    data = islam_europe_bank()
    assert parse_bank(data).to_dict() == data


def test_load_bank_from_file(tmp_path):
    path = tmp_path / 'bank.json'
    path.write_text(json.dumps(islam_europe_bank(), ensure_ascii=False), encoding='utf-8')
    bank = load_bank(path)
    assert isinstance(bank, QuizBank)
    assert bank.category_titles() == ['イスラーム世界の形成', 'ヨーロッパ世界の形成']


def test_missing_file(tmp_path):
    with pytest.raises(BankLoadError):
        load_bank(tmp_path / 'nope.json')


def test_invalid_json(tmp_path):
    path = tmp_path / 'bank.json'
    path.write_text('{', encoding='utf-8')
    with pytest.raises(BankLoadError):
        load_bank(path)


def test_schema_mismatch():
    with pytest.raises(BankLoadError):
        parse_bank({'categories': [{'title': 'x', 'questions': [{'q': 'only question'}]}]})
    with pytest.raises(BankLoadError):
        parse_bank(['not', 'a', 'dict'])


def test_duplicate_question_in_category_rejected():
    data = islam_europe_bank()
    data['categories'][0]['questions'].append({'q': '初代正統カリフは？', 'a': 'ウマル'})
    with pytest.raises(BankValidationError):
        parse_bank(data)


def test_too_few_unique_answers_rejected():
    data = {'categories': [{'title': 't', 'questions': [{'q': f'q{i}', 'a': 'same' if i else 'other'} for i in range(5)]}]}
    with pytest.raises(BankValidationError):
        parse_bank(data)
    assert len(parse_bank(data, validate=False).categories[0].questions) == 5


def test_all_answers_and_lookup():
    bank = parse_bank(islam_europe_bank())
    answers = all_answers(bank.categories)
    assert len(answers) == 16
    assert find_category_for_question(bank.categories, 'ノルマン朝を開いた人物は？') == 'ヨーロッパ世界の形成'
    assert find_category_for_question(bank.categories, 'unknown') is None
