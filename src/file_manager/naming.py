"""
Storage key naming.

Keys keep the user's filename readable: ``report.pdf`` is stored as
``report_1718000000000.pdf``. The millisecond timestamp makes sequential
uploads of the same name land on distinct keys; two uploads of the same stem
within one millisecond still collide.
"""

import logging
import time
import uuid
from typing import Callable, Mapping, Optional, Tuple
from urllib.parse import quote, unquote

logger = logging.getLogger(__name__)

ORIGINAL_FILENAME_METADATA_KEY = "original-filename"


def encode_original_filename(original_filename: str) -> str:
    """
    Percent-encode a filename for the ASCII-only S3 user metadata.

    >>> encode_original_filename("naïve.txt")
    'na%C3%AFve.txt'
    """
    return quote(original_filename, safe="")


def decode_original_filename(value: str) -> str:
    return unquote(value)


def current_epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def split_extension(filename: str) -> Tuple[str, str]:
    """
    Split ``filename`` into ``(stem, extension)`` at its last dot.

    A dot in first position (``.bashrc``) does not start an extension.

    >>> split_extension("archive.tar.gz")
    ('archive.tar', '.gz')
    >>> split_extension(".bashrc")
    ('.bashrc', '')
    """
    last_dot_index = filename.rfind(".")
    if last_dot_index > 0:
        return filename[:last_dot_index], filename[last_dot_index:]
    return filename, ""


def generate_key(
    original_filename: Optional[str],
    clock: Optional[Callable[[], int]] = None,
) -> str:
    """
    Derive a storage key from a user supplied filename.

    :param original_filename: The name the user uploaded the file under. Empty or ``None`` yields a random UUID.
    :param clock: Source of the epoch-millisecond timestamp embedded in the key (defaults to the wall clock).
    :return: ``<stem>_<epoch millis><extension>``.
    """
    if not original_filename:
        key = str(uuid.uuid4())
        logger.info(f"Generated UUID key for empty filename: {key}")
        return key

    stem, extension = split_extension(original_filename)
    timestamp = clock() if clock is not None else current_epoch_millis()
    key = f"{stem}_{timestamp}{extension}"
    logger.info(f"Generated key {key} from original filename {original_filename}")
    return key


def resolve_original_name(key: str, metadata: Optional[Mapping[str, str]]) -> str:
    """
    Recover the human filename of a stored object.

    Prefers the percent-decoded ``original-filename`` metadata. Without it,
    everything before the key's last underscore is used (the whole key if it has none, or only a
    leading one). The fallback drops the extension and truncates names whose own
    text ends in ``_<something>``; it is kept as-is for compatibility with
    objects written before the metadata convention.
    """
    original_name = (metadata or {}).get(ORIGINAL_FILENAME_METADATA_KEY)
    if original_name is not None:
        return decode_original_filename(original_name)

    last_underscore_index = key.rfind("_")
    fallback_name = key[:last_underscore_index] if last_underscore_index > 0 else key
    logger.warning(f"No {ORIGINAL_FILENAME_METADATA_KEY} metadata on {key}, using fallback name {fallback_name}")
    return fallback_name
