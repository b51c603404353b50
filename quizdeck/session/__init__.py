"""
Session pools: building, block partitioning, play-through and retries.
"""
from .pool_manager import (
	DEFAULT_BLOCK_SIZE,
	StudyMode,
	SessionPool,
	SessionResult,
	SessionError,
	SessionStateError,
	BlockIndexError,
	QuestionNotInSessionError,
	build_pool,
	block_count,
	partition_into_blocks,
	block_bounds,
	select_block,
	start_session,
	complete_session,
	retry_wrong,
	retry_all,
)
from .controller import SessionController, SessionState

__all__ = [
	'DEFAULT_BLOCK_SIZE', 'StudyMode', 'SessionPool', 'SessionResult',
	'SessionError', 'SessionStateError', 'BlockIndexError', 'QuestionNotInSessionError',
	'build_pool', 'block_count', 'partition_into_blocks', 'block_bounds', 'select_block',
	'start_session', 'complete_session', 'retry_wrong', 'retry_all',
	'SessionController', 'SessionState',
]
