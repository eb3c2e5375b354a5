"""Process-local record of uploads that have completed but not yet been polled."""

import logging
from typing import Dict

logger = logging.getLogger(__name__)


class UploadStatusTracker:
    """
    Completion flags keyed by storage key, consumed by the first poll.

    Created once per application and owned by the ``FileRegistry``. Entries are
    independent per key: ``dict`` assignment and ``dict.pop`` are each atomic,
    so concurrent request threads can mark and take entries without a lock and
    without two pollers both seeing ``True`` for the same completion.
    """

    def __init__(self):
        self._completed: Dict[str, bool] = {}

    def mark_completed(self, key: str) -> None:
        self._completed[key] = True
        logger.debug(f"Marked upload of {key} as completed")

    def take(self, key: str) -> bool:
        """Return whether ``key`` completed, removing the entry so later polls report ``False``."""
        return self._completed.pop(key, False)

    def __len__(self) -> int:
        return len(self._completed)
