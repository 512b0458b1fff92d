"""Dependency archive download into a scratch directory.

The downloader never writes outside its scratch directory, so a failed or
interrupted download cannot leave anything in the bundle.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from relpack.core.result import Err, Ok, Result
from relpack.tools.http import HttpError

if TYPE_CHECKING:
    from relpack.tools.http import HttpClient

__all__ = ["Downloader", "DownloadResult"]


@dataclass(frozen=True, slots=True)
class DownloadResult:
    """Result of a download operation.

    Attributes:
        path: Path to the downloaded file
        size: File size in bytes
    """

    path: Path
    size: int


class Downloader:
    """Downloads URLs into a scratch directory.

    Usage:
        downloader = Downloader(http_client, scratch_dir)
        result = downloader.download(url)
        if is_ok(result):
            print(f"Downloaded to: {result.value.path}")
    """

    def __init__(self, http: HttpClient, dest_dir: Path) -> None:
        self._http = http
        self._dest_dir = dest_dir

    @property
    def dest_dir(self) -> Path:
        return self._dest_dir

    def dest_path(self, url: str) -> Path:
        """Scratch path for URL, named after the last URL path segment."""
        filename = Path(urlparse(url).path).name or "download"
        return self._dest_dir / filename

    def download(self, url: str) -> Result[DownloadResult, HttpError]:
        """Download file from URL.

        Args:
            url: URL to download

        Returns:
            Ok with DownloadResult, or Err with HttpError
        """
        dest = self.dest_path(url)
        self._dest_dir.mkdir(parents=True, exist_ok=True)

        try:
            result = self._http.download(url, dest)
        except BaseException:
            dest.unlink(missing_ok=True)
            raise

        if isinstance(result, Err):
            # Clean up partial download
            dest.unlink(missing_ok=True)
            return result

        return Ok(DownloadResult(path=dest, size=dest.stat().st_size))
