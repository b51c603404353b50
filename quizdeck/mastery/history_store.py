import os
import json
import pathlib
import tempfile
from typing import Optional, Dict

import redis
from tenacity import Retrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from quizdeck.utils import get_logger, log_storage_failure
from .models import HistoryStore, history_to_dict, history_from_dict

LOG = get_logger()

DEFAULT_HISTORY_KEY = 'quizHistory'


class HistoryStoreError(Exception):
    pass


class StorageUnavailableError(HistoryStoreError):
    pass


class KeyValueStore:
    """Minimal string key-value interface the history repository writes through."""
    name = 'base'

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    name = 'memory'

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore(KeyValueStore):
    """All keys live in one JSON object on disk; writes replace the file atomically."""
    name = 'file'

    def __init__(self, path):
        self.path = pathlib.Path(path)

    def _read_document(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            doc = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            raise StorageUnavailableError(f'Could not read {self.path}') from e
        if not isinstance(doc, dict):
            raise StorageUnavailableError(f'{self.path} does not hold a JSON object')
        return doc

    def get(self, key: str) -> Optional[str]:
        return self._read_document().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            doc = self._read_document()
        except StorageUnavailableError:
            LOG.warning('history_file_unreadable_overwriting', extra={'path': str(self.path)})
            doc = {}
        doc[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), suffix='.tmp')
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(doc, fh, ensure_ascii=False, sort_keys=True)
            os.replace(tmp, self.path)
        except OSError as e:
            raise StorageUnavailableError(f'Could not write {self.path}') from e


class RedisKeyValueStore(KeyValueStore):
    name = 'redis'

    def __init__(self, url: Optional[str] = None, host: str = 'localhost', port: int = 6379, password: Optional[str] = None, connect_attempts: int = 3):
        if url:
            self._client = redis.from_url(url, decode_responses=True)
        else:
            self._client = redis.Redis(host=host, port=port, password=password or None, decode_responses=True)
        self.connect_attempts = connect_attempts
        self._ping()
        LOG.info('history_redis_connected', extra={'host': host, 'port': port, 'url': bool(url)})

    def _ping(self):
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self.connect_attempts),
                wait=wait_exponential(multiplier=0.1, max=2),
                retry=retry_if_exception_type(redis.exceptions.ConnectionError),
                reraise=True,
            ):
                with attempt:
                    self._client.ping()
        except redis.exceptions.RedisError as e:
            raise StorageUnavailableError(f'Redis unavailable: {e}') from e

    def get(self, key: str) -> Optional[str]:
        try:
            return self._client.get(key)
        except redis.exceptions.RedisError as e:
            raise StorageUnavailableError(str(e)) from e

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(key, value)
        except redis.exceptions.RedisError as e:
            raise StorageUnavailableError(str(e)) from e


def create_store(settings) -> KeyValueStore:
    backend = settings.HISTORY_BACKEND
    if backend == 'memory':
        return InMemoryKeyValueStore()
    if backend == 'file':
        return JsonFileKeyValueStore(settings.HISTORY_FILE_PATH)
    try:
        return RedisKeyValueStore(
            url=settings.REDIS_URL,
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            password=settings.REDIS_PASSWORD,
            connect_attempts=settings.REDIS_CONNECT_ATTEMPTS,
        )
    except StorageUnavailableError as e:
        LOG.warning('history_redis_unavailable_using_memory', extra={'error': str(e)})
        return InMemoryKeyValueStore()


def serialize_history(history: HistoryStore) -> str:
    return json.dumps(history_to_dict(history), ensure_ascii=False, sort_keys=True)


class HistoryRepository:
    """Loads and saves the whole history blob under one key.

    Neither operation raises for storage problems: ``load`` falls back to an
    empty history and ``save`` reports failure through its return value.
    Concurrent writers race; the last full write wins.
    """

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_HISTORY_KEY):
        self.store = store
        self.key = key

    @classmethod
    def from_settings(cls, settings) -> 'HistoryRepository':
        return cls(create_store(settings), key=settings.HISTORY_KEY)

    def load(self) -> HistoryStore:
        try:
            raw = self.store.get(self.key)
        except Exception:
            log_storage_failure('load', self.store.name, self.key)
            return {}
        if not raw:
            return {}
        try:
            if not isinstance(raw, str):
                raise ValueError(f'expected a JSON string under {self.key}, got {type(raw).__name__}')
            history = history_from_dict(json.loads(raw))
        except ValueError:
            LOG.exception('history_corrupt', exc_info=True, extra={'backend': self.store.name, 'key': self.key})
            return {}
        LOG.info('history_loaded', extra={'backend': self.store.name, 'categories': len(history)})
        return history

    def save(self, history: HistoryStore) -> bool:
        try:
            self.store.set(self.key, serialize_history(history))
        except Exception:
            log_storage_failure('save', self.store.name, self.key)
            return False
        LOG.debug('history_saved', extra={'backend': self.store.name, 'categories': len(history)})
        return True
