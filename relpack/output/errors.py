"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relpack.core.errors import ErrorCode
from relpack.output.console import Style
from relpack.services.errors import (
    BuildError,
    CopyError,
    DownloadError,
    ExtractionError,
    IntegrityError,
    PackagingError,
)

if TYPE_CHECKING:
    from relpack.output.console import ConsoleProtocol

__all__ = ["print_packaging_error", "packaging_error_exit_code"]


def print_packaging_error(error: PackagingError, console: ConsoleProtocol) -> None:
    """Print a packaging error with the failing step and its cause."""
    console.error(f"{error.step} failed: {error.message}")
    match error:
        case BuildError(cause=cause) if cause is not None:
            # Build tool stderr is shown verbatim
            if cause.stderr:
                console.print(cause.stderr.rstrip("\n"), Style.DIM)
        case DownloadError(cause=cause) if cause is not None and cause.status:
            console.print(f"HTTP status: {cause.status}", Style.DIM)
        case IntegrityError(expected=expected, actual=actual):
            console.print(f"expected sha256: {expected}", Style.DIM)
            console.print(f"actual sha256:   {actual}", Style.DIM)
            console.print("the archive was not used", Style.DIM)
        case ExtractionError(cause=cause) if cause is not None:
            console.print(f"archive: {cause.archive.name}", Style.DIM)
        case CopyError(cause=cause, written=written):
            if cause:
                console.print(cause, Style.DIM)
            if written:
                console.print(
                    f"already written (not rolled back): {', '.join(written)}", Style.DIM
                )
        case _:
            pass
    console.warning("bundle is incomplete")


def packaging_error_exit_code(error: PackagingError) -> int:
    """Get exit code for a packaging error."""
    match error:
        case BuildError():
            return int(ErrorCode.BUILD_ERROR)
        case DownloadError():
            return int(ErrorCode.DOWNLOAD_ERROR)
        case IntegrityError():
            return int(ErrorCode.INTEGRITY_ERROR)
        case ExtractionError():
            return int(ErrorCode.EXTRACTION_ERROR)
        case CopyError():
            return int(ErrorCode.COPY_ERROR)
