"""
The file registry: list, search, upload, download and delete files in the bucket.

Uploads go through the conflict policy first. When an object already carries
the same ``original-filename``, nothing is written and a ``ConflictDescriptor``
is returned; the caller then settles it with ``resolve_conflict`` and one of
``cancel`` / ``replace`` / ``keepBoth``.
"""

import logging
from typing import List, Optional, Union

from file_manager.conflicts import ConflictAction, ConflictResolver
from file_manager.errors import InvalidArgumentError, NotFoundError
from file_manager.naming import generate_key, resolve_original_name
from file_manager.schemas import ConflictDescriptor, FileInfo
from file_manager.status_tracker import UploadStatusTracker
from file_manager.storage import MetadataStore, StoredObject
from file_manager.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)


class FileRegistry:
    """Orchestrates key naming, conflict detection and the metadata store for one bucket."""

    def __init__(
        self,
        store: MetadataStore,
        conflict_resolver: Optional[ConflictResolver] = None,
        status_tracker: Optional[UploadStatusTracker] = None,
    ):
        self.store = store
        self.conflict_resolver = conflict_resolver or ConflictResolver(store)
        self.status_tracker = status_tracker or UploadStatusTracker()

    def _describe(self, stored_object: StoredObject) -> Optional[FileInfo]:
        """Build the ``FileInfo`` of a listed object, or ``None`` if it vanished since the listing."""
        try:
            head = self.store.head(stored_object.key)
            download_url = self.store.sign_download(stored_object.key)
        except NotFoundError:
            logger.warning(f"{stored_object.key} was listed but no longer exists, skipping it")
            return None

        return FileInfo(
            key=stored_object.key,
            original_name=resolve_original_name(stored_object.key, head.metadata),
            size=stored_object.size,
            last_modified=stored_object.last_modified,
            download_url=download_url,
        )

    @log_execution_time
    def list_files(self) -> List[FileInfo]:
        stored_objects = self.store.list()
        logger.info(f"Retrieved {len(stored_objects)} files from S3")
        files = []
        for stored_object in stored_objects:
            file_info = self._describe(stored_object)
            if file_info is not None:
                files.append(file_info)
        return files

    @log_execution_time
    def search_files(self, query: str) -> List[FileInfo]:
        """Files whose resolved name or key contains ``query``, ignoring case."""
        needle = query.lower()
        matches = [
            file_info
            for file_info in self.list_files()
            if needle in file_info.original_name.lower() or needle in file_info.key.lower()
        ]
        logger.info(f"Found {len(matches)} matching files for query '{query}'")
        return matches

    def get_download_url(self, key: str) -> str:
        return self.store.presign_download(key)

    def _check_not_empty(self, content: bytes) -> None:
        if not content:
            raise InvalidArgumentError("Please select a file to upload")

    def _write_new(
        self,
        content: bytes,
        original_filename: str,
        content_type: Optional[str],
        avoid_key: Optional[str] = None,
    ) -> str:
        key = generate_key(original_filename)
        # Same stem within the same millisecond as avoid_key: wait for the clock to move on
        while key == avoid_key:
            key = generate_key(original_filename)
        self.store.put(key, content, content_type, original_filename)
        self.status_tracker.mark_completed(key)
        return key

    def upload_file(
        self,
        content: bytes,
        original_filename: str,
        content_type: Optional[str] = None,
    ) -> Union[str, ConflictDescriptor]:
        """
        Store a new file under a freshly generated key.

        :return: the new key, or a ``ConflictDescriptor`` naming the existing key
            when a file with the same original filename is already stored.
        """
        self._check_not_empty(content)

        existing_key = self.conflict_resolver.find_existing(original_filename)
        if existing_key is not None:
            logger.info(f"File conflict detected for: {original_filename} (existing key: {existing_key})")
            return ConflictDescriptor(original_filename=original_filename, existing_key=existing_key)

        return self._write_new(content, original_filename, content_type)

    def resolve_conflict(
        self,
        content: bytes,
        original_filename: str,
        action: Union[ConflictAction, str, None],
        existing_key: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> Optional[str]:
        """
        Apply the caller's decision about a conflicting upload.

        :return: the key written to, or ``None`` when the upload was cancelled.
        :raises InvalidArgumentError: for an empty file, an unknown action, or a
            ``replace`` whose ``existing_key`` is missing or no longer stored.
        """
        self._check_not_empty(content)
        if not isinstance(action, ConflictAction):
            action = ConflictAction.parse(action)

        if action is ConflictAction.CANCEL:
            logger.info(f"Upload of {original_filename} cancelled by user")
            return None

        if action is ConflictAction.REPLACE:
            if not existing_key:
                raise InvalidArgumentError("Existing key is required for replace action")
            try:
                self.store.head(existing_key)
            except NotFoundError as err:
                raise InvalidArgumentError(f"Existing key {existing_key} does not exist") from err

            logger.info(f"Replacing existing file: {existing_key} with new content")
            self.store.put(existing_key, content, content_type, original_filename)
            self.status_tracker.mark_completed(existing_key)
            return existing_key

        return self._write_new(content, original_filename, content_type, avoid_key=existing_key)

    def download_file(self, key: str) -> bytes:
        return self.store.get(key)

    def delete_file(self, key: str) -> bool:
        deleted = self.store.delete(key)
        if deleted:
            logger.info(f"Deleted {key}")
        else:
            logger.warning(f"S3 did not acknowledge deletion of {key}")
        return deleted

    def get_upload_status(self, key: str) -> bool:
        return self.status_tracker.take(key)
