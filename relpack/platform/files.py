"""Filesystem helpers."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

__all__ = ["atomic_copy"]


def atomic_copy(src: Path, dest: Path) -> Path:
    """Copy src to dest atomically using temp file + replace.

    Only file contents and permission bits are copied, not timestamps, so
    repeated copies of the same input are byte-identical. A copy that is
    interrupted leaves at most a hidden ``.<name>.*.tmp`` file, never a
    truncated file under ``dest``.

    Raises:
        OSError: On any filesystem failure.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{dest.name}.",
        suffix=".tmp",
        dir=str(dest.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "wb") as handle, src.open("rb") as source:
            shutil.copyfileobj(source, handle)
            handle.flush()
            os.fsync(handle.fileno())
        shutil.copymode(src, tmp_path)
        os.replace(tmp_path, dest)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)

    return dest
