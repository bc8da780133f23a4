# textify/core/processing.py
"""Binary/text classification and content loading for candidate files."""
import codecs
from pathlib import Path
from typing import Optional

import structlog

from textify.config.settings import DEFAULT_ENCODING, DEFAULT_SNIFF_BYTES

log = structlog.get_logger(__name__)


def looks_binary(head: bytes, encoding: str = DEFAULT_ENCODING, complete: bool = False) -> bool:
    """
    Classifies a file from its leading bytes.

    `head` is binary if it contains a NUL byte or does not decode under
    `encoding`. When `complete` is False the head is a prefix of a longer file,
    so a multi-byte sequence cut off at the end is not counted against it.
    Empty input is text.
    """
    if not head:
        return False
    if b"\x00" in head:
        return True
    decoder = codecs.getincrementaldecoder(encoding)(errors="strict")
    try:
        decoder.decode(head, final=complete)
    except UnicodeDecodeError:
        return True
    return False


def load_text_content(
    file_path: Path, encoding: str = DEFAULT_ENCODING, sniff_bytes: int = DEFAULT_SNIFF_BYTES
) -> Optional[bytes]:
    """
    Returns the raw bytes of a text file, or None if the file is binary or
    cannot be read. Read failures (permissions, file deleted mid-walk) are
    logged and absorbed.
    """
    try:
        with file_path.open("rb") as f_obj:
            head = f_obj.read(sniff_bytes)
            rest = f_obj.read()
    except OSError as e:
        log.warning("file_read_failed_skipped", path=str(file_path), error=str(e))
        return None

    if looks_binary(head, encoding, complete=not rest):
        log.debug("binary_file_skipped", path=str(file_path))
        return None
    return head + rest
