"""
Journaling system for Shelfwise operations.

Logs every store mutation made by a batch run (renames, tags, moves,
replicas, errors) to journal.log as an audit trail.
"""

import csv
from datetime import datetime
from pathlib import Path
from typing import Optional

JOURNAL_FIELDS = [
    'Timestamp', 'RunId', 'Operation', 'Reference', 'Target', 'Status', 'Details'
]


class Journal:
    """
    Append-only journal for store mutations.

    Journal format (CSV):
    - Timestamp: ISO 8601 datetime
    - RunId: Identifies one batch invocation
    - Operation: Rename | Tag | Comment | Metadata | Move | Replicate | Error
    - Reference: Record the operation applied to
    - Target: Destination path or new value
    - Status: OK | Error | SoftFailure
    - Details: Additional info (error message, failed step, etc.)
    """

    def __init__(self, journal_path: Path, run_id: Optional[str] = None):
        self.path = journal_path
        self.run_id = run_id or datetime.now().strftime('%Y%m%d_%H%M%S')
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Create with header if doesn't exist
        if not self.path.exists():
            self._write_header()

    def _write_header(self):
        with self.path.open('w', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=JOURNAL_FIELDS)
            writer.writeheader()

    def log(
            self,
            operation: str,
            reference: str,
            target: str = '',
            status: str = 'OK',
            details: str = '',
    ):
        """Log a single operation."""
        with self.path.open('a', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=JOURNAL_FIELDS)
            writer.writerow({
                'Timestamp': datetime.now().isoformat(),
                'RunId': self.run_id,
                'Operation': operation,
                'Reference': reference,
                'Target': target,
                'Status': status,
                'Details': details,
            })

    def log_move(self, reference: str, destination: str):
        self.log('Move', reference, destination)

    def log_replicate(self, reference: str, destination: str):
        self.log('Replicate', reference, destination)

    def log_soft_failure(self, reference: str, destination: str, error_msg: str):
        """Log a replicate failure that did not fail the directive."""
        self.log('Replicate', reference, destination, 'SoftFailure', error_msg)

    def log_error(self, reference: str, step: str, error_msg: str):
        self.log('Error', reference, '', 'Error', f'{step}: {error_msg}')


def read_events(journal_path: Path):
    """Read all journal rows, oldest first. Missing journal gives []."""
    if not journal_path.exists():
        return []
    with journal_path.open('r', newline='', encoding='utf-8') as f:
        return list(csv.DictReader(f))


def get_journal(state_dir: Path, run_id: Optional[str] = None) -> Journal:
    """Get or create the journal inside a state directory."""
    return Journal(state_dir / 'journal.log', run_id)
