"""Upload lifecycle events."""
from .event_emitter import EventEmitter

PART_SUBMITTED = 'part_submitted'
PART_SUCCEEDED = 'part_succeeded'
PART_FAILED = 'part_failed'
SESSION_INITIATED = 'session_initiated'
SESSION_COMPLETED = 'session_completed'
SESSION_ABORTED = 'session_aborted'

__all__ = [
    'EventEmitter',
    'PART_SUBMITTED',
    'PART_SUCCEEDED',
    'PART_FAILED',
    'SESSION_INITIATED',
    'SESSION_COMPLETED',
    'SESSION_ABORTED',
]
