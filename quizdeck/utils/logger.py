import os
import sys
import logging
import pathlib
import contextvars
from logging.handlers import RotatingFileHandler
from pythonjsonlogger import jsonlogger

_session_ctx_var = contextvars.ContextVar('session_ctx', default={})


def set_session_context(session_id: str, block_index: int = None):
    _session_ctx_var.set({'session_id': session_id, 'block_index': block_index})


def get_session_context():
    return _session_ctx_var.get()


def _inject_session_context(record):
    ctx = get_session_context()
    record.session_id = ctx.get('session_id')
    record.block_index = ctx.get('block_index')
    return True


def get_logger(name: str = 'quizdeck'):
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FORMAT = os.getenv('LOG_FORMAT', 'json')
    # empty path keeps logging on stdout only
    LOG_FILE_PATH = os.getenv('LOG_FILE_PATH', '')
    LOG_MAX_SIZE = int(os.getenv('LOG_MAX_SIZE', str(10 * 1024 * 1024)))
    LOG_MAX_FILES = int(os.getenv('LOG_MAX_FILES', '7'))

    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(LOG_LEVEL.upper())

    ch = logging.StreamHandler(sys.stdout)
    if LOG_FORMAT == 'json':
        fmt = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s %(session_id)s %(block_index)s')
    else:
        fmt = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if LOG_FILE_PATH:
        log_path = pathlib.Path(LOG_FILE_PATH)
        if not log_path.is_absolute():
            log_path = pathlib.Path(os.getcwd()) / log_path
        log_path.mkdir(parents=True, exist_ok=True)

        combined = RotatingFileHandler(log_path / 'combined.log', maxBytes=LOG_MAX_SIZE, backupCount=LOG_MAX_FILES)
        combined.setFormatter(fmt)
        logger.addHandler(combined)

        errors = RotatingFileHandler(log_path / 'error.log', maxBytes=LOG_MAX_SIZE, backupCount=LOG_MAX_FILES)
        errors.setLevel(logging.ERROR)
        errors.setFormatter(fmt)
        logger.addHandler(errors)

    f = logging.Filter()
    f.filter = _inject_session_context
    logger.addFilter(f)

    logging.captureWarnings(True)

    return logger


def log_quiz_generation(question_count: int, requested: int, fallback_count: int, universe_size: int, duration_ms: float):
    logger = get_logger()
    logger.info('quiz_generation', extra={
        'question_count': question_count,
        'requested': requested,
        'fallback_count': fallback_count,
        'universe_size': universe_size,
        'duration_ms': duration_ms,
    })


def log_mastery_update(category_title: str, question: str, status: str, mastery_level: int):
    logger = get_logger()
    logger.info('mastery_update', extra={
        'category': category_title,
        'question': question,
        'status': status,
        'mastery_level': mastery_level,
    })


def log_session_event(event: str, state: str, pool_size: int, known_count: int = None):
    logger = get_logger()
    logger.info('session_event', extra={
        'event': event,
        'state': state,
        'pool_size': pool_size,
        'known_count': known_count,
    })


def log_storage_failure(operation: str, backend: str, key: str):
    logger = get_logger()
    logger.exception('history_storage_failed', exc_info=True, extra={
        'operation': operation,
        'backend': backend,
        'key': key,
    })
