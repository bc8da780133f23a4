from pathlib import Path
from typing import BinaryIO, IO
import structlog

from textify.exceptions import OutputError

log = structlog.get_logger(__name__)

SEPARATOR = "-" * 50
HEADER_PREFIX = "FILE: "


def format_file_header(relative_path: str) -> bytes:
    # separator, "FILE: <path>", separator, blank line.
    header = f"{SEPARATOR}\n{HEADER_PREFIX}{relative_path}\n{SEPARATOR}\n\n"
    return header.encode("utf-8")


def write_file_record(stream: BinaryIO, relative_path: str, content: bytes) -> int:
    # appends one file block and flushes; returns the number of bytes written.
    block = format_file_header(relative_path) + content + b"\n\n"
    try:
        stream.write(block)
        stream.flush()
    except OSError as e:
        raise OutputError(f"failed to write '{relative_path}' to output: {e}") from e
    return len(block)


def open_output_file(output_file_path: Path) -> IO[bytes]:
    # creates (or truncates) the output document.
    log.info("opening_output_file", path=str(output_file_path))
    try:
        output_file_path.parent.mkdir(parents=True, exist_ok=True)
        return output_file_path.open("wb")
    except OSError as e:
        raise OutputError(f"failed to create output file '{output_file_path}': {e}") from e
