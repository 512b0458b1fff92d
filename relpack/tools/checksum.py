"""SHA-256 helpers for pinned downloads."""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from pathlib import Path

from relpack.core.result import Err, Ok, Result

__all__ = ["ChecksumMismatch", "sha256_file", "verify_sha256"]


@dataclass(frozen=True, slots=True)
class ChecksumMismatch:
    path: Path
    expected: str
    actual: str

    def __str__(self) -> str:
        return f"sha256 mismatch for {self.path.name}: expected {self.expected}, got {self.actual}"


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def verify_sha256(path: Path, expected: str) -> Result[str, ChecksumMismatch]:
    """Compare the SHA-256 of path against expected (hex, any case).

    Returns:
        Ok(actual digest) on match, Err(ChecksumMismatch) otherwise.
    """
    expected = expected.strip().lower()
    actual = sha256_file(path)
    if not hmac.compare_digest(actual, expected):
        return Err(ChecksumMismatch(path=path, expected=expected, actual=actual))
    return Ok(actual)
