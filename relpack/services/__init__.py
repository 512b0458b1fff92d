"""Packaging pipeline."""

from .errors import (
    BuildError,
    CopyError,
    DownloadError,
    ExtractionError,
    IntegrityError,
    PackagingError,
)
from .packager import Bundle, BundleFile, Packager

__all__ = [
    "BuildError",
    "Bundle",
    "BundleFile",
    "CopyError",
    "DownloadError",
    "ExtractionError",
    "IntegrityError",
    "Packager",
    "PackagingError",
]
