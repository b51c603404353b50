import os
import random
import pytest
from unittest.mock import MagicMock
from pathlib import Path

from dotenv import load_dotenv

# load test env first
env_path = Path(__file__).resolve().parents[1] / '.env.test'
if env_path.exists():
    load_dotenv(env_path)

os.environ.setdefault('TESTING', '1')
os.environ.setdefault('LOG_FILE_PATH', '')


@pytest.fixture(autouse=True)
def silence_logger(monkeypatch):
    # Patch any project logger acquisition to avoid noisy logs
    try:
        import quizdeck.utils.logger as logger_mod
        monkeypatch.setattr(logger_mod, 'get_logger', lambda *a, **k: MagicMock())
    except Exception:
        pass
    yield


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def sample_bank():
    from quizdeck.bank import parse_bank
    from tests.fixtures.sample_data import islam_europe_bank
    return parse_bank(islam_europe_bank())


@pytest.fixture
def numbered_bank():
    from quizdeck.bank import parse_bank
    from tests.fixtures.sample_data import numbered_bank as make
    return parse_bank(make((25, 7)))


@pytest.fixture
def memory_repository():
    from quizdeck.mastery import HistoryRepository, InMemoryKeyValueStore
    return HistoryRepository(InMemoryKeyValueStore(), key='quizHistory')


@pytest.fixture
def mock_redis_client(monkeypatch):
    from tests.fixtures.mock_redis import MockRedisClient
    client = MockRedisClient()
    monkeypatch.setattr('redis.Redis', lambda *a, **k: client)
    monkeypatch.setattr('redis.from_url', lambda *a, **k: client)
    return client
