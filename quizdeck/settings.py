import random
from functools import lru_cache
from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='QUIZDECK_', env_file='.env', env_file_encoding='utf-8', extra='ignore')

    BANK_PATH: str = 'quiz_data.json'

    HISTORY_BACKEND: str = 'file'
    HISTORY_FILE_PATH: str = 'quiz_history.json'
    HISTORY_KEY: str = 'quizHistory'

    REDIS_URL: Optional[str] = None
    REDIS_HOST: str = 'localhost'
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None
    REDIS_CONNECT_ATTEMPTS: int = Field(3, ge=1)

    MASTERY_THRESHOLD: int = Field(3, ge=1)
    BLOCK_SIZE: int = Field(10, ge=1)
    QUIZ_QUESTION_COUNT: int = Field(10, ge=0)
    OPTION_COUNT: int = Field(4, ge=2)
    RANDOM_SEED: Optional[int] = None

    @validator('HISTORY_BACKEND')
    def check_backend(cls, v):
        v = v.lower().strip()
        if v not in ('memory', 'file', 'redis'):
            raise ValueError('HISTORY_BACKEND must be one of memory, file, redis')
        return v

    def make_rng(self) -> random.Random:
        if self.RANDOM_SEED is not None:
            return random.Random(self.RANDOM_SEED)
        return random.SystemRandom()


@lru_cache()
def get_settings() -> Settings:
    return Settings()
