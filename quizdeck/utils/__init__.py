"""Utility subpackage for quizdeck"""

from .numbers import percentage
from .logger import (
	get_logger,
	log_quiz_generation,
	log_mastery_update,
	log_session_event,
	log_storage_failure,
	set_session_context,
	get_session_context,
)

__all__ = [
	'percentage',
	'get_logger',
	'log_quiz_generation',
	'log_mastery_update',
	'log_session_event',
	'log_storage_failure',
	'set_session_context',
	'get_session_context',
]
