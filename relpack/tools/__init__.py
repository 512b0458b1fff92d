"""Dependency fetching: HTTP, download, checksum, extraction."""

from .checksum import ChecksumMismatch, sha256_file, verify_sha256
from .download import Downloader, DownloadResult
from .extract import ExtractError, Extractor, ExtractResult
from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient

__all__ = [
    "ChecksumMismatch",
    "DownloadResult",
    "Downloader",
    "ExtractError",
    "ExtractResult",
    "Extractor",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "sha256_file",
    "verify_sha256",
]
