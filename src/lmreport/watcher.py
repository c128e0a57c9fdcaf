"""Change detection for the incoming report directory.

A snapshot maps each file name to its modification time and size. Comparing
two snapshots is pure; ChangeWatcher owns the last snapshot so a polling loop
can ask "did anything change since last time?".
"""

import time
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from lmreport.models import FileChanges, FileState


def capture_file_state(directory: Path) -> dict[str, FileState]:
    directory = Path(directory)
    state: dict[str, FileState] = {}
    try:
        paths = list(directory.iterdir())
    except OSError as e:
        logger.warning(f"Could not read file state of {directory}: {e}")
        return {}

    for path in paths:
        try:
            if path.is_file():
                st = path.stat()
                state[path.name] = FileState(mtime=st.st_mtime, size=st.st_size)
        except FileNotFoundError:
            continue  # removed between listing and stat
    return state


def diff_file_states(
    previous: dict[str, FileState], current: dict[str, FileState]
) -> FileChanges:
    return FileChanges(
        added=sorted(set(current) - set(previous)),
        removed=sorted(set(previous) - set(current)),
        modified=sorted(
            name for name in set(current) & set(previous)
            if current[name] != previous[name]
        ),
    )


class ChangeWatcher:
    """Tracks the last seen state of one directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.snapshot = capture_file_state(self.directory)

    def check(self) -> FileChanges:
        """Compare against the last snapshot, replacing it if anything changed."""
        current = capture_file_state(self.directory)
        changes = diff_file_states(self.snapshot, current)
        if changes.has_changes:
            self.snapshot = current
            logger.info(
                f"File changes detected in {self.directory}: "
                f"+{len(changes.added)} -{len(changes.removed)} ~{len(changes.modified)}"
            )
        return changes

    def poll(
        self,
        interval: float,
        on_change: Callable[[FileChanges], None],
        max_polls: Optional[int] = None,
    ) -> None:
        """Call ``on_change`` whenever a check finds changes.

        Runs until interrupted, or for ``max_polls`` checks.
        """
        polls = 0
        while max_polls is None or polls < max_polls:
            if polls:
                time.sleep(interval)
            changes = self.check()
            if changes.has_changes:
                on_change(changes)
            polls += 1
