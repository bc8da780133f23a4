# textify/core/counting.py
from pathlib import Path
import tiktoken  # type: ignore
import structlog

from textify.exceptions import OutputError, TokenizerError

log = structlog.get_logger(__name__)

DEFAULT_TOKEN_ENCODING = "cl100k_base"


def count_words_in_file(file_path: Path) -> int:
    """Counts whitespace-separated words, streaming the file line by line."""
    count = 0
    try:
        with file_path.open("r", encoding="utf-8", errors="replace") as f_obj:
            for line in f_obj:
                count += len(line.split())
    except OSError as e:
        raise OutputError(f"could not read '{file_path}' for word count: {e}") from e
    log.debug("words_counted", path=str(file_path), count=count)
    return count


def count_tokens_in_file(file_path: Path, encoding: str = DEFAULT_TOKEN_ENCODING) -> int:
    try:
        text = file_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise OutputError(f"could not read '{file_path}' for token count: {e}") from e
    try:
        encoder = tiktoken.get_encoding(encoding)
        count = len(encoder.encode(text, disallowed_special=()))
    except Exception as e:
        raise TokenizerError(f"token counting with encoding '{encoding}' failed: {e}") from e
    log.debug("tokens_counted", path=str(file_path), encoding=encoding, count=count)
    return count
