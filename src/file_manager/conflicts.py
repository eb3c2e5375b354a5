"""Detection and resolution policy for uploads whose filename is already taken."""

import logging
import threading
from enum import Enum
from typing import Optional

from file_manager.errors import FileManagerError, InvalidArgumentError
from file_manager.storage import MetadataStore
from file_manager.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)


class ConflictAction(str, Enum):
    """What the caller chose to do about a filename collision."""
    CANCEL = "cancel"
    REPLACE = "replace"
    KEEP_BOTH = "keepBoth"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ConflictAction":
        """Case-insensitive lookup (``keepboth`` and ``KEEPBOTH`` both mean ``keepBoth``)."""
        if value:
            for action in cls:
                if action.value.lower() == value.strip().lower():
                    return action
        raise InvalidArgumentError("Invalid action. Must be 'cancel', 'replace', or 'keepBoth'")


CONFLICT_OPTIONS = {
    ConflictAction.CANCEL.value: "Cancel the upload",
    ConflictAction.REPLACE.value: "Replace the existing file",
    ConflictAction.KEEP_BOTH.value: "Keep both files (new file will have a unique name)",
}


class ConflictResolver:
    """
    Finds a stored object that was uploaded under a given filename.

    The lookup lists the whole bucket and HEADs every object, comparing the
    ``original-filename`` metadata exactly (case-sensitive). It never fails:
    an object whose metadata cannot be read counts as a non-match, and a
    failed listing means "no match". Each such failure is logged and counted
    in ``scan_failures``.
    """

    def __init__(self, store: MetadataStore):
        self.store = store
        self.scan_failures = 0
        self._failures_lock = threading.Lock()

    def _record_failure(self) -> None:
        with self._failures_lock:
            self.scan_failures += 1

    @log_execution_time
    def find_existing(self, original_filename: str) -> Optional[str]:
        """Key of the first object (in listing order) stored under ``original_filename``, or ``None``."""
        try:
            stored_objects = self.store.list()
        except FileManagerError as err:
            self._record_failure()
            logger.warning(f"Conflict scan for {original_filename} could not list files, assuming no conflict: {err}")
            return None

        for stored_object in stored_objects:
            try:
                head = self.store.head(stored_object.key)
            except FileManagerError as err:
                self._record_failure()
                logger.warning(f"Conflict scan skipped {stored_object.key}: {err}")
                continue

            if head.original_filename == original_filename:
                logger.info(f"Found existing file with same original name: {original_filename} -> {stored_object.key}")
                return stored_object.key

        logger.info(f"No existing file found with original name: {original_filename}")
        return None
