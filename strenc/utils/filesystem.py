# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Safe filesystem operations for StrEnc.

Persisted encoders must never be left half-written, because a truncated
dictionary would load as a different vocabulary. Writes therefore go to a
temporary file in the target's directory and are renamed into place; rename
on the same filesystem is atomic on POSIX.
"""

import tempfile
from pathlib import Path
from typing import IO


def _write_atomically(target_path: Path, payload: object, mode: str, encoding: str | None) -> None:
    target_path.parent.mkdir(parents=True, exist_ok=True)

    # delete=False: the file has to outlive close() so it can be renamed.
    temp_file: IO = tempfile.NamedTemporaryFile(
        mode=mode,
        encoding=encoding,
        dir=str(target_path.parent),
        prefix=".strenc_tmp_",
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(temp_file.name)

    try:
        temp_file.write(payload)
        temp_file.flush()
        temp_file.close()
        temp_path.replace(target_path)
    except BaseException:
        temp_file.close()
        if temp_path.exists():
            temp_path.unlink()
        raise


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write text to a file atomically.

    Either the target ends up with the full new content or it keeps its old
    content. A crash mid-write leaves at most a stray `.strenc_tmp_*` file.

    Raises:
        OSError: If the write or rename fails.
    """
    _write_atomically(target_path, content, "w", encoding)


def atomic_write_bytes(target_path: Path, data: bytes) -> None:
    """Binary twin of atomic_write."""
    _write_atomically(target_path, data, "wb", None)


def safe_read(file_path: Path, encoding: str = "utf-8") -> str:
    """
    Read a text file with proper error context.

    Raises:
        FileNotFoundError: If the path doesn't exist.
        IsADirectoryError: If the path is a directory.
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    if not file_path.is_file():
        raise IsADirectoryError(f"Expected a file, got a directory: {file_path}")
    return file_path.read_text(encoding=encoding)
