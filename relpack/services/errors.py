"""Packaging error taxonomy.

One dataclass per pipeline step. Each carries a human-readable message and,
where there is one, the underlying tool or library error.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relpack.platform.process import ProcessError
from relpack.tools.extract import ExtractError
from relpack.tools.http import HttpError


@dataclass(frozen=True, slots=True)
class BuildError:
    message: str
    cause: ProcessError | None = None

    @property
    def step(self) -> str:
        return "build"


@dataclass(frozen=True, slots=True)
class DownloadError:
    message: str
    cause: HttpError | None = None

    @property
    def step(self) -> str:
        return "download"


@dataclass(frozen=True, slots=True)
class IntegrityError:
    message: str
    expected: str
    actual: str

    @property
    def step(self) -> str:
        return "verify"


@dataclass(frozen=True, slots=True)
class ExtractionError:
    message: str
    cause: ExtractError | None = None

    @property
    def step(self) -> str:
        return "extract"


@dataclass(frozen=True, slots=True)
class CopyError:
    """Writing the bundle failed.

    Attributes:
        message: What went wrong.
        path: File being written when it failed, if any.
        cause: OS error text.
        written: Bundle files already in place (not rolled back).
    """

    message: str
    path: Path | None = None
    cause: str | None = None
    written: tuple[str, ...] = ()

    @property
    def step(self) -> str:
        return "copy"


PackagingError = BuildError | DownloadError | IntegrityError | ExtractionError | CopyError
