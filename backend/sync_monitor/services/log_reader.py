# sync_monitor/services/log_reader.py
"""
Bounded reads of log files.

Log files in the catalog may be up to 50 MB, so the tail view never loads a
large file into memory. Small files (<= 8 KB) are read whole; larger ones are
read backwards from EOF in 4 KB chunks until enough line breaks were seen to
cover the requested number of lines.

These helpers do no access control: callers must validate the path against
the log catalog first (see `LogCatalog.tail`).
"""

from __future__ import annotations

import os
import re
from typing import BinaryIO, Iterator, List, Optional

WHOLE_FILE_LIMIT = 8192
CHUNK_SIZE = 4096
DOWNLOAD_CHUNK_SIZE = 8192

# Accept both "\n" and "\r\n" line endings
_LINE_BREAK = re.compile(r"\r?\n")


def last_lines(text: str, max_lines: int) -> str:
    """
    Return the last `max_lines` lines of `text`, joined with "\\n".

    The empty piece produced by a terminating newline is not counted as a
    line, so a file written as K newline-terminated lines yields exactly
    those K lines back.
    """
    rows = _LINE_BREAK.split(text)
    if len(rows) > 1 and rows[-1] == "":
        rows.pop()
    return "\n".join(rows[-max_lines:])


def _read_whole(fh: BinaryIO) -> bytes:
    return fh.read()


def _read_backwards(fh: BinaryIO, size: int, max_lines: int, chunk_size: int = CHUNK_SIZE) -> bytes:
    """
    Read chunks from the end of `fh` until `max_lines` complete lines are
    covered or the start of the file is reached.

    A line is complete once the line break before it is in the buffer. The
    break terminating the file's last line does not start a new line, so it
    is not counted.
    """
    chunks: List[bytes] = []
    position = size
    breaks = 0

    while position > 0 and breaks < max_lines:
        read_size = min(chunk_size, position)
        position -= read_size

        fh.seek(position)
        chunk = fh.read(read_size)
        if len(chunk) != read_size:
            # Truncated or rotated underneath us
            raise OSError(f"short read at offset {position}: expected {read_size}, got {len(chunk)}")

        breaks += chunk.count(b"\n")
        if not chunks and chunk.endswith(b"\n"):
            breaks -= 1

        chunks.append(chunk)

    chunks.reverse()
    return b"".join(chunks)


def read_tail_text(path: str, max_lines: int) -> str:
    """
    Read the last `max_lines` lines of the file at `path`.

    Raises:
        OSError: on any failure to stat, open or read the file.
    """
    size = os.path.getsize(path)
    if size == 0:
        return ""

    with open(path, "rb") as fh:
        if size <= WHOLE_FILE_LIMIT:
            data = _read_whole(fh)
        else:
            data = _read_backwards(fh, size, max_lines)

    # Decode once after accumulation so chunk boundaries can't split a character
    return last_lines(data.decode("utf-8", errors="replace"), max_lines)


def iter_file_chunks(
    fh: BinaryIO,
    chunk_size: int = DOWNLOAD_CHUNK_SIZE,
    limit: Optional[int] = None,
) -> Iterator[bytes]:
    """
    Yield the contents of an already open binary file in fixed-size chunks,
    closing it when done (for downloads).

    With `limit`, stop after that many bytes so a log that keeps growing
    can't overrun an already-sent Content-Length.
    """
    remaining = limit
    try:
        while remaining is None or remaining > 0:
            size = chunk_size if remaining is None else min(chunk_size, remaining)
            buf = fh.read(size)
            if not buf:
                break
            if remaining is not None:
                remaining -= len(buf)
            yield buf
    finally:
        fh.close()
