"""
Shelfwise execution layer - batch classification and its audit journal.
"""

from .orchestrator import BatchOrchestrator, StepResult, classify_batch
from .journaling import Journal, get_journal, read_events

__all__ = [
    'BatchOrchestrator',
    'StepResult',
    'classify_batch',
    'Journal',
    'get_journal',
    'read_events',
]
